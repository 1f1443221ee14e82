# arb_sync/config.py
from __future__ import annotations
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError
from .locales import DEFAULT_SOURCE_LOCALE, DEFAULT_TARGET_LOCALES

_NUMERIC_FIELDS = (
    ("batch_size", int),
    ("max_retries", int),
    ("backoff_base_delay", float),
    ("batch_delay", float),
    ("cost_per_million", float),
)

@dataclass
class SyncConfig:
    db_path: str = "db/phrases.sqlite"
    input_path: str = "input/phrases.json"
    output_dir: str = "output"
    locales: List[str] = field(default_factory=lambda: list(DEFAULT_TARGET_LOCALES))
    source_locale: str = DEFAULT_SOURCE_LOCALE

    batch_size: int = 100
    max_retries: int = 3
    backoff_base_delay: float = 10.0   # seconds; doubles per rate-limited attempt
    batch_delay: float = 3.0           # seconds between chunks
    metadata_prefix: str = "@"

    azure_endpoint: str = "https://api.cognitive.microsofttranslator.com"
    azure_region: str = "westeurope"
    secret_path: str = "config/secret.txt"
    cost_per_million: float = 10.0

    validate: bool = True
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        # YAML and env-style values may arrive as strings ("100", "3.0")
        for name, kind in _NUMERIC_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool):
                raise ConfigError(f"{name} must be a number, got {value!r}")
            try:
                setattr(self, name, kind(value))
            except (TypeError, ValueError):
                raise ConfigError(f"{name} must be a number, got {value!r}") from None
        if self.batch_size < 1:
            raise ConfigError("batch_size must be >= 1")
        if self.max_retries < 1:
            raise ConfigError("max_retries must be >= 1")
        if not self.metadata_prefix:
            raise ConfigError("metadata_prefix must not be empty")

def load_config(path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> SyncConfig:
    """
    Build a SyncConfig from an optional YAML file plus explicit overrides
    (CLI flags); None-valued overrides are ignored.
    """
    data: Dict[str, Any] = {}
    if path:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read config {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{path}: top level must be a mapping")
    for k, v in (overrides or {}).items():
        if v is not None:
            data[k] = v
    known = {f.name for f in fields(SyncConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")
    if isinstance(data.get("locales"), str):
        data["locales"] = [s.strip() for s in data["locales"].split(",") if s.strip()]
    return SyncConfig(**data)
