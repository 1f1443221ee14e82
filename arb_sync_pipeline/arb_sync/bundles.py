from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .arb import bundle_filename, load_arb, locale_from_filename, normalize_locale_for_filename, save_arb
from .models import Provenance, SourcePhrase, Translation, utcnow
from .store import PhraseStore


@dataclass
class ImportReport:
    source_phrases: int = 0
    translations: int = 0
    manual_preserved: int = 0
    files: int = 0
    skipped: List[str] = field(default_factory=list)


def _arb_files(folder: str) -> List[str]:
    return sorted(os.path.join(folder, n) for n in os.listdir(folder) if n.endswith(".arb"))


def import_folder(
    store: PhraseStore,
    folder: str,
    source_locale: str = "en",
    locales: Optional[Iterable[str]] = None,
    metadata_prefix: str = "@",
    logger: logging.Logger | None = None,
) -> ImportReport:
    """
    Seed the store from a folder of app_<locale>.arb bundles.

    The source-locale bundle becomes the source phrase set; every other bundle is
    imported as automatic translations. Keys already marked manual keep their value.
    `locales` maps filename suffixes back to provider codes (zh -> zh-Hans).
    """
    logger = logger or logging.getLogger("arb-sync")
    if not os.path.isdir(folder):
        raise FileNotFoundError(f"Folder {folder} does not exist")
    files = _arb_files(folder)
    if not files:
        raise FileNotFoundError(f"No ARB files found in {folder}")

    code_for: Dict[str, str] = {normalize_locale_for_filename(l): l for l in (locales or [])}
    src_suffix = normalize_locale_for_filename(source_locale)
    report = ImportReport()
    now = utcnow()

    src_path = next((p for p in files if locale_from_filename(p) == src_suffix), None)
    if src_path is None:
        logger.warning(f"Source bundle for {source_locale} not found in {folder}; no source phrases imported")
    else:
        phrases = load_arb(src_path, metadata_prefix)
        store.save_source_phrases([SourcePhrase(k, v, now) for k, v in phrases.items()])
        report.source_phrases = len(phrases)
        logger.info(f"Imported {len(phrases)} source phrases from {os.path.basename(src_path)}")

    for path in files:
        name = os.path.basename(path)
        suffix = locale_from_filename(path)
        if suffix is None or "error" in name or suffix == src_suffix:
            report.skipped.append(name)
            continue
        locale = code_for.get(suffix, suffix)
        values = load_arb(path, metadata_prefix)
        if not values:
            logger.warning(f"Skipping {name} (empty file)")
            report.skipped.append(name)
            continue
        existing = store.get_translations_for_locale(locale)
        batch: List[Translation] = []
        preserved = 0
        for key, value in values.items():
            prev = existing.get(key)
            if prev is not None and prev.is_manual:
                preserved += 1
                continue
            batch.append(Translation(key, locale, value, Provenance.AUTOMATIC, now))
        store.save_translations(batch)
        report.translations += len(batch)
        report.manual_preserved += preserved
        report.files += 1
        logger.info(f"Imported {locale}: {len(batch)} translations" + (f" (preserved {preserved} manual)" if preserved else ""))
    return report


def export_bundles(
    store: PhraseStore,
    output_dir: str,
    locales: Optional[Iterable[str]] = None,
    metadata_prefix: str = "@",
    logger: logging.Logger | None = None,
) -> Dict[str, str]:
    """Write app_<locale>.arb from the store; locales without translations are skipped."""
    logger = logger or logging.getLogger("arb-sync")
    written: Dict[str, str] = {}
    for locale in (locales if locales is not None else store.locales()):
        translations = store.get_translations_for_locale(locale)
        if not translations:
            logger.info(f"Skipping {locale} (no translations in store)")
            continue
        path = os.path.join(output_dir, bundle_filename(locale))
        save_arb(path, {k: t.value for k, t in translations.items()}, metadata_prefix)
        logger.info(f"Exported {locale}: {len(translations)} translations -> {path}")
        written[locale] = path
    return written
