from __future__ import annotations
import re
import unicodedata
from typing import Any, List, Mapping, Optional
from dataclasses import dataclass

# ICU/ARB placeholders: {name}, {count, plural, ...}
PLACEHOLDER_RE = re.compile(r"\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*[,}]")

@dataclass
class ValidationIssue:
    kind: str
    detail: str
    key: str
    source: str
    target: str
    locale: str

def strip_zero_width(s: str) -> str:
    # Remove all Unicode "format" controls (category Cf), e.g. ZWSP, ZWNJ, ZWJ, BOM
    return "".join(ch for ch in s if unicodedata.category(ch) != "Cf")

def clean_text(s: Optional[Any], case_insensitive: bool = False) -> Optional[str]:
    if not isinstance(s, str):
        return None
    s = unicodedata.normalize("NFKC", s)
    s = strip_zero_width(s)
    s = " ".join(s.split())
    if case_insensitive:
        s = s.casefold()
    return s or None

def check_passthrough(key: str, src: str, tgt: str, locale: str) -> List[ValidationIssue]:
    """A target equal to its source is usually text the provider passed through untranslated."""
    a, b = clean_text(src, case_insensitive=True), clean_text(tgt, case_insensitive=True)
    if a is None or b is None or a != b:
        return []
    # nothing to translate in numbers, placeholders and punctuation
    if not any(ch.isalpha() for ch in PLACEHOLDER_RE.sub("", a)):
        return []
    return [ValidationIssue("passthrough", "Translation equals source text", key, src, tgt, locale)]

def check_placeholder_parity(key: str, src: str, tgt: str, locale: str) -> List[ValidationIssue]:
    src_ph = sorted(set(PLACEHOLDER_RE.findall(src)))
    tgt_ph = sorted(set(PLACEHOLDER_RE.findall(tgt)))
    if src_ph != tgt_ph:
        return [ValidationIssue("placeholder_parity", f"Placeholders {src_ph} became {tgt_ph}", key, src, tgt, locale)]
    return []

def validate_translations(sources: Mapping[str, str], translated: Mapping[str, str], locale: str) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    for key, tgt in translated.items():
        src = sources.get(key)
        if src is None:
            continue
        issues.extend(check_passthrough(key, src, tgt, locale))
        issues.extend(check_placeholder_parity(key, src, tgt, locale))
    return issues
