from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional, Tuple

from .errors import ManualTargetNotFound
from .models import Provenance, Translation
from .store import PhraseStore


@dataclass
class MarkReport:
    locale: str
    marked: List[str] = field(default_factory=list)
    not_found: List[str] = field(default_factory=list)


class OverrideGuard:
    """Keeps human-corrected translations out of the automatic sync path."""

    def __init__(self, store: PhraseStore, logger: logging.Logger | None = None) -> None:
        self.store = store
        self.logger = logger or logging.getLogger("arb-sync")

    def is_manual(self, key: str, locale: str) -> bool:
        return self.store.is_manual(key, locale)

    def split_protected(
        self,
        locale: str,
        entries: Iterable[Tuple[str, str]],
        existing: Optional[Mapping[str, Translation]] = None,
    ) -> Tuple[List[Tuple[str, str]], List[str]]:
        """(entries safe to overwrite, keys held back as manual) for one locale."""
        if existing is None:
            existing = self.store.get_translations_for_locale(locale)
        free: List[Tuple[str, str]] = []
        protected: List[str] = []
        for key, value in entries:
            t = existing.get(key)
            if t is not None and t.is_manual:
                protected.append(key)
            else:
                free.append((key, value))
        return free, protected

    def mark_manual(self, key: str, locale: str) -> Translation:
        # only an existing translation has a value worth protecting
        existing = self.store.get_translation(key, locale)
        if existing is None:
            raise ManualTargetNotFound(key, locale)
        manual = existing.as_manual()
        self.store.save_translation(manual)
        return manual

    def mark_many(self, locale: str, keys: Iterable[str]) -> MarkReport:
        report = MarkReport(locale)
        for key in keys:
            try:
                self.mark_manual(key, locale)
            except ManualTargetNotFound:
                self.logger.warning(f"Translation not found: {locale}/{key}")
                report.not_found.append(key)
                continue
            self.logger.info(f"Marked as manual: {locale}/{key}")
            report.marked.append(key)
        return report

    def set_manual_value(self, key: str, locale: str, value: str) -> Translation:
        """Store an operator-corrected value; it is protected from then on."""
        t = Translation(phrase_key=key, locale=locale, value=value, provenance=Provenance.MANUAL)
        self.store.save_translation(t)
        return t
