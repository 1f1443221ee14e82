# arb_sync/translator_azure.py
from __future__ import annotations
import os, logging
from typing import Any, List

import requests

from .errors import ConfigError, OracleFailure, RateLimited
from .translator_base import Translator

AZURE_ENDPOINT = "https://api.cognitive.microsofttranslator.com"
AZURE_API_VERSION = "3.0"
KEY_ENV = "AZURE_TRANSLATOR_KEY"

def read_api_key(secret_path: str | None = None) -> str:
    key = os.getenv(KEY_ENV, "").strip()
    if key:
        return key
    if secret_path and os.path.exists(secret_path):
        with open(secret_path, "r", encoding="utf-8") as f:
            key = f.read().strip()
    if not key:
        raise ConfigError(f"{KEY_ENV} is not set and no key found in {secret_path}")
    return key

def _texts_from_response(data: Any) -> List[str]:
    # [{"translations": [{"text": "...", "to": "fr"}]}, ...]
    if not isinstance(data, list):
        raise OracleFailure(f"Unexpected response: {str(data)[:200]}")
    out: List[str] = []
    for item in data:
        try:
            out.append(str(item["translations"][0]["text"]))
        except (KeyError, IndexError, TypeError):
            raise OracleFailure(f"Unexpected response item: {str(item)[:200]}")
    return out

class AzureTranslator(Translator):
    def __init__(self, api_key: str, region: str = "westeurope", endpoint: str = AZURE_ENDPOINT, timeout: int = 90, logger: logging.Logger | None = None):
        self.api_key = api_key
        self.region = region
        self.url = endpoint.rstrip("/") + "/translate"
        self.timeout = timeout
        self.logger = logger or logging.getLogger("arb-sync")

    def translate(self, from_locale: str, to_locale: str, texts: List[str]) -> List[str]:
        if not texts:
            return []
        headers = {
            "Ocp-Apim-Subscription-Key": self.api_key,
            "Ocp-Apim-Subscription-Region": self.region,
            "Content-Type": "application/json",
        }
        params = {"api-version": AZURE_API_VERSION, "from": from_locale, "to": to_locale}
        body = [{"text": t} for t in texts]
        try:
            resp = requests.post(self.url, headers=headers, params=params, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise OracleFailure(f"Request to translator failed: {e}") from e
        if resp.status_code == 429:
            raise RateLimited(body=resp.text[:200])
        if not 200 <= resp.status_code < 300:
            self.logger.debug(f"Translator error body: {resp.text[:500]}")
            raise OracleFailure(f"HTTP {resp.status_code}: {resp.text[:200]}")
        try:
            data = resp.json()
        except ValueError as e:
            raise OracleFailure(f"Response is not JSON: {resp.text[:200]}") from e
        return _texts_from_response(data)
