from __future__ import annotations
import json
import os
import re
from collections import OrderedDict
from typing import Any, Dict, List, Mapping, Optional

from .utils import load_text, save_text

METADATA_PREFIX = "@"
BUNDLE_PREFIX = "app_"
BUNDLE_SUFFIX = ".arb"

SCRIPT_SUBTAG_RE = re.compile(r"^[A-Za-z]{4}$")


def is_metadata_key(key: str, prefix: str = METADATA_PREFIX) -> bool:
    return key.startswith(prefix)


def strip_metadata(mapping: Mapping[str, Any], prefix: str = METADATA_PREFIX) -> Dict[str, str]:
    return OrderedDict((k, str(v)) for k, v in mapping.items() if not is_metadata_key(k, prefix))


def parse_arb(text: str) -> Dict[str, Any]:
    data = json.loads(text, object_pairs_hook=OrderedDict)
    if not isinstance(data, dict):
        raise ValueError("ARB content must be a JSON object")
    return data


def dump_arb(mapping: Mapping[str, str], prefix: str = METADATA_PREFIX) -> str:
    return json.dumps(strip_metadata(mapping, prefix), ensure_ascii=False, indent=2) + "\n"


def load_arb(path: str, prefix: str = METADATA_PREFIX) -> Dict[str, str]:
    return strip_metadata(parse_arb(load_text(path)), prefix)


def save_arb(path: str, mapping: Mapping[str, str], prefix: str = METADATA_PREFIX) -> None:
    save_text(path, dump_arb(mapping, prefix))


# ---------------- phrase list (diff source) ----------------

def arb_to_phrase_list(mapping: Mapping[str, Any], prefix: str = METADATA_PREFIX) -> List[Dict[str, str]]:
    return [{k: v} for k, v in strip_metadata(mapping, prefix).items()]


def phrases_from_list(items: List[Any], prefix: str = METADATA_PREFIX) -> Dict[str, str]:
    """[{key: value}, ...] -> ordered mapping; a repeated key keeps its last value."""
    out: Dict[str, str] = OrderedDict()
    for i, item in enumerate(items):
        if not isinstance(item, dict) or len(item) != 1:
            raise ValueError(f"Phrase entry {i} is not a single-entry object: {str(item)[:80]}")
        (key, value), = item.items()
        if is_metadata_key(key, prefix):
            continue
        out[key] = str(value)
    return out


def load_phrase_list(path: str, prefix: str = METADATA_PREFIX) -> Dict[str, str]:
    data = json.loads(load_text(path))
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON array of single-entry objects")
    return phrases_from_list(data, prefix)


def save_phrase_list(path: str, mapping: Mapping[str, Any], prefix: str = METADATA_PREFIX) -> int:
    items = arb_to_phrase_list(mapping, prefix)
    save_text(path, json.dumps(items, ensure_ascii=False, indent=4) + "\n")
    return len(items)


# ---------------- file naming ----------------

def normalize_locale_for_filename(locale: str) -> str:
    """zh-Hans -> zh, pt-pt -> pt_PT, fr -> fr (script subtags are dropped)."""
    parts = locale.replace("_", "-").split("-")
    out = [parts[0].lower()]
    for p in parts[1:]:
        if SCRIPT_SUBTAG_RE.match(p):
            continue
        out.append(p.upper() if len(p) == 2 else p)
    return "_".join(out)


def bundle_filename(locale: str) -> str:
    return f"{BUNDLE_PREFIX}{normalize_locale_for_filename(locale)}{BUNDLE_SUFFIX}"


def error_filename(locale: str) -> str:
    return f"{BUNDLE_PREFIX}errors_{normalize_locale_for_filename(locale)}.json"


def locale_from_filename(path: str) -> Optional[str]:
    name = os.path.basename(path)
    if not (name.startswith(BUNDLE_PREFIX) and name.endswith(BUNDLE_SUFFIX)):
        return None
    return name[len(BUNDLE_PREFIX):-len(BUNDLE_SUFFIX)] or None
