# arb_sync/sync.py
from __future__ import annotations
import logging
import os
import time
from collections import OrderedDict
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional

from .arb import bundle_filename, error_filename, normalize_locale_for_filename, save_arb
from .batcher import Entry, translate_batches
from .config import SyncConfig
from .cost_tracker import CostTracker
from .diff import compute_delta, missing_for_locale
from .errors import StorageError
from .models import Provenance, SourcePhrase, Translation, utcnow
from .override import OverrideGuard
from .store import PhraseStore
from .translator_base import Translator
from .utils import save_json
from .validators import validate_translations


class SyncState(str, Enum):
    INIT = "init"
    DIFFING = "diffing"
    NO_CHANGES = "no_changes"
    TRANSLATING = "translating"
    MERGING = "merging"
    DONE = "done"


@dataclass
class LocaleReport:
    locale: str
    requested: int = 0
    translated: int = 0
    failed: List[str] = field(default_factory=list)
    skipped_manual: List[str] = field(default_factory=list)
    issues: int = 0
    bundle_size: int = 0
    bundle_path: Optional[str] = None
    aborted: bool = False
    error: Optional[str] = None


@dataclass
class SyncReport:
    phrases_in: int = 0
    phrases_diffed: int = 0
    forced: bool = False
    no_changes: bool = False
    state: SyncState = SyncState.INIT
    locales: Dict[str, LocaleReport] = field(default_factory=OrderedDict)
    source_chars: int = 0
    est_cost_usd: float = 0.0

    def to_dict(self) -> dict:
        d = asdict(self)
        d["state"] = self.state.value
        return d


class SyncOrchestrator:
    """
    Incremental sync of the source phrase set into every target locale.

    The delta against the stored source phrases is computed once per run and
    committed before any locale is processed. Locales then run one after the
    other; every successful chunk is persisted as soon as it returns, so a killed
    run keeps whatever was already translated.
    """

    def __init__(
        self,
        store: PhraseStore,
        translator: Translator,
        config: SyncConfig,
        *,
        sleep: Callable[[float], None] = time.sleep,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.translator = translator
        self.config = config
        self.sleep = sleep
        self.logger = logger or logging.getLogger("arb-sync")
        self.guard = OverrideGuard(store, logger=self.logger)
        self.cost = CostTracker(config.cost_per_million)
        self.state = SyncState.INIT

    def _enter(self, state: SyncState) -> None:
        self.logger.debug(f"state {self.state.value} -> {state.value}")
        self.state = state

    # ----------------- main pipeline -----------------

    def run(self, incoming: Mapping[str, str], force: bool = False, fill_missing: bool = False) -> SyncReport:
        self._enter(SyncState.INIT)
        report = SyncReport(phrases_in=len(incoming), forced=force)
        self.logger.info(f"Loaded {len(incoming)} source phrases")
        stored = self.store.get_all_source_phrases()

        self._enter(SyncState.DIFFING)
        delta = compute_delta(incoming, stored, force_all=force)
        report.phrases_diffed = len(delta)

        if not delta and not fill_missing:
            self._enter(SyncState.NO_CHANGES)
            report.no_changes = True
            self.logger.info("No changes detected. All phrases are up to date!")
            self._enter(SyncState.DONE)
            report.state = self.state
            return report

        if delta:
            self.logger.info(f"Found {len(delta)} phrase(s) that need translation")
            for key, _ in delta:
                self.logger.debug(f"  - {key}")
            now = utcnow()
            changed = [SourcePhrase(k, v, now) for k, v in delta]
            self.store.save_source_phrases(changed)
            stored.update((p.key, p) for p in changed)
            self.logger.info("Updated phrase store")

        self._enter(SyncState.TRANSLATING)
        for locale in self.config.locales:
            lr = LocaleReport(locale)
            report.locales[locale] = lr
            try:
                self._sync_locale(locale, incoming, delta, stored, lr)
            except (StorageError, OSError) as e:
                lr.aborted = True
                lr.error = str(e)
                self.logger.error(f"=== Locale {locale} aborted: {e}")

        self._enter(SyncState.DONE)
        report.state = self.state
        report.source_chars = self.cost.source_chars
        report.est_cost_usd = self.cost.est_cost_usd
        self._log_summary(report)
        save_json(os.path.join(self.config.output_dir, "run_report.json"), report.to_dict())
        return report

    def _sync_locale(
        self,
        locale: str,
        incoming: Mapping[str, str],
        delta: List[Entry],
        sources: Mapping[str, SourcePhrase],
        lr: LocaleReport,
    ) -> None:
        cfg = self.config
        self.logger.info(f"=== Locale {locale} ===")
        existing = self.store.get_translations_for_locale(locale)

        # keys this locale never got, or still holds for an older source value
        delta_keys = {k for k, _ in delta}
        work = list(delta) + missing_for_locale(incoming, existing, sources, skip=delta_keys)

        to_translate, lr.skipped_manual = self.guard.split_protected(locale, work, existing)
        lr.requested = len(to_translate)
        if lr.skipped_manual:
            self.logger.info(f"  Skipped {len(lr.skipped_manual)} manual translation(s)")

        def persist(pairs: List[Entry]) -> None:
            now = utcnow()
            self.store.save_translations([
                Translation(phrase_key=k, locale=locale, value=v, provenance=Provenance.AUTOMATIC, last_updated=now)
                for k, v in pairs
            ])
            lr.translated += len(pairs)

        merged: Dict[str, str] = {}
        if to_translate:
            result = translate_batches(
                self.translator, cfg.source_locale, locale, to_translate, cfg.batch_size,
                max_retries=cfg.max_retries, base_delay=cfg.backoff_base_delay,
                batch_delay=cfg.batch_delay, sleep=self.sleep, on_batch=persist,
                cost=self.cost, logger=self.logger,
            )
            merged = result.merged
            lr.failed = list(result.failed_keys)
        else:
            self.logger.info("  No new phrases to translate")

        self._write_errors(locale, lr.failed)

        if cfg.validate and merged:
            issues = validate_translations(incoming, merged, locale)
            lr.issues = len(issues)
            if issues:
                path = os.path.join(cfg.output_dir, f"validation_{normalize_locale_for_filename(locale)}.json")
                save_json(path, [i.__dict__ for i in issues])
                self.logger.warning(f"  Validation issues for {locale}: {len(issues)} (see {path})")

        self._enter(SyncState.MERGING)
        bundle = self.build_bundle(locale, incoming)
        lr.bundle_path = os.path.join(cfg.output_dir, bundle_filename(locale))
        save_arb(lr.bundle_path, bundle, cfg.metadata_prefix)
        lr.bundle_size = len(bundle)
        self.logger.info(f"  Done: {lr.translated} translated, {len(lr.failed)} failed, bundle {lr.bundle_path}")
        self._enter(SyncState.TRANSLATING)

    def build_bundle(self, locale: str, order: Mapping[str, str] | None = None) -> Dict[str, str]:
        """Every stored translation of the locale, source order first."""
        stored = self.store.get_translations_for_locale(locale)
        bundle: Dict[str, str] = OrderedDict()
        for key in (order or {}):
            if key in stored:
                bundle[key] = stored[key].value
        for key, t in stored.items():
            if key not in bundle:
                bundle[key] = t.value
        return bundle

    def _write_errors(self, locale: str, failed: List[str]) -> None:
        path = os.path.join(self.config.output_dir, error_filename(locale))
        if failed:
            save_json(path, failed)
            self.logger.error(f"  Failed: {len(failed)} key(s), written to {path}")
        elif os.path.exists(path):
            os.remove(path)

    def _log_summary(self, report: SyncReport) -> None:
        translated = sum(lr.translated for lr in report.locales.values())
        failed = sum(len(lr.failed) for lr in report.locales.values())
        aborted = [lr.locale for lr in report.locales.values() if lr.aborted]
        self.logger.info(
            f"Synced {report.phrases_diffed} changed phrase(s) into {len(report.locales)} locale(s): "
            f"{translated} translated, {failed} failed"
        )
        if aborted:
            self.logger.error(f"Aborted locales: {', '.join(aborted)}")
        self.logger.info(f"Estimated cost: ${report.est_cost_usd:.2f} for {report.source_chars} source chars")
