# arb_sync/cli.py
from __future__ import annotations
import argparse
import sys
from typing import List, Optional

from .arb import load_phrase_list, parse_arb, save_phrase_list
from .bundles import export_bundles, import_folder
from .config import SyncConfig, load_config
from .errors import ArbSyncError
from .logger import setup_logger
from .override import OverrideGuard
from .store import PhraseStore
from .sync import SyncOrchestrator
from .translator_azure import AzureTranslator, read_api_key
from .utils import load_text

def build_config(args: argparse.Namespace) -> SyncConfig:
    overrides = {
        "db_path": args.db,
        "output_dir": getattr(args, "output", None),
        "input_path": getattr(args, "input", None),
        "locales": getattr(args, "locales", None),
        "source_locale": getattr(args, "source_locale", None),
        "batch_size": getattr(args, "batch_size", None),
        "max_retries": getattr(args, "max_retries", None),
        "log_level": args.log_level,
    }
    if getattr(args, "no_validate", False):
        overrides["validate"] = False
    return load_config(args.config, overrides)

def cmd_sync(args: argparse.Namespace) -> int:
    cfg = build_config(args)
    logger = setup_logger(cfg.log_level)
    logger.info("Starting incremental translation...")
    incoming = load_phrase_list(cfg.input_path, cfg.metadata_prefix)
    translator = AzureTranslator(read_api_key(cfg.secret_path), region=cfg.azure_region, endpoint=cfg.azure_endpoint, logger=logger)
    with PhraseStore(cfg.db_path) as store:
        report = SyncOrchestrator(store, translator, cfg, logger=logger).run(
            incoming, force=args.force, fill_missing=args.fill_missing,
        )
    failed = any(lr.failed or lr.aborted for lr in report.locales.values())
    return 2 if failed else 0

def cmd_mark_manual(args: argparse.Namespace) -> int:
    cfg = build_config(args)
    logger = setup_logger(cfg.log_level)
    with PhraseStore(cfg.db_path) as store:
        report = OverrideGuard(store, logger=logger).mark_many(args.locale, args.keys)
    logger.info(f"Marked as manual: {len(report.marked)}; not found: {len(report.not_found)}")
    return 1 if report.not_found else 0

def cmd_import(args: argparse.Namespace) -> int:
    cfg = build_config(args)
    logger = setup_logger(cfg.log_level)
    with PhraseStore(cfg.db_path) as store:
        report = import_folder(store, args.folder, cfg.source_locale, cfg.locales, cfg.metadata_prefix, logger=logger)
    logger.info(
        f"Source phrases: {report.source_phrases}; files: {report.files}; "
        f"translations: {report.translations}; manual preserved: {report.manual_preserved}"
    )
    return 0

def cmd_export(args: argparse.Namespace) -> int:
    cfg = build_config(args)
    logger = setup_logger(cfg.log_level)
    with PhraseStore(cfg.db_path) as store:
        written = export_bundles(store, cfg.output_dir, None if args.all_locales else cfg.locales, cfg.metadata_prefix, logger=logger)
    logger.info(f"Files exported: {len(written)}")
    return 0

def cmd_arb_to_json(args: argparse.Namespace) -> int:
    logger = setup_logger(args.log_level or "INFO")
    n = save_phrase_list(args.output_json, parse_arb(load_text(args.arb)))
    logger.info(f"Converted {n} phrases -> {args.output_json}")
    return 0

def make_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="arb-sync", description="Keep ARB translation bundles in sync with the source phrases")
    ap.add_argument("--config", default=None, help="YAML config file")
    ap.add_argument("--db", default=None, help="Phrase store path (sqlite)")
    ap.add_argument("--log-level", default=None)
    sub = ap.add_subparsers(dest="cmd", required=True)

    s = sub.add_parser("sync", help="Translate new or changed phrases and rewrite bundles")
    s.add_argument("--input", default=None, help="Phrase list JSON ([{key: value}, ...])")
    s.add_argument("--output", default=None)
    s.add_argument("--locales", nargs="+", default=None)
    s.add_argument("--source-locale", default=None)
    s.add_argument("--batch-size", type=int, default=None)
    s.add_argument("--max-retries", type=int, default=None)
    s.add_argument("--force", action="store_true", help="Re-translate every phrase")
    s.add_argument("--fill-missing", action="store_true",
                   help="Also run when nothing changed, translating keys a locale is still missing.")
    s.add_argument("--no-validate", action="store_true")
    s.set_defaults(func=cmd_sync)

    m = sub.add_parser("mark-manual", help="Protect translations from being overwritten")
    m.add_argument("locale")
    m.add_argument("keys", nargs="+")
    m.set_defaults(func=cmd_mark_manual)

    i = sub.add_parser("import", help="Seed the store from a folder of app_<locale>.arb files")
    i.add_argument("folder")
    i.add_argument("--source-locale", default=None)
    i.set_defaults(func=cmd_import)

    e = sub.add_parser("export", help="Write app_<locale>.arb files from the store")
    e.add_argument("output", nargs="?", default=None)
    e.add_argument("--all-locales", action="store_true", help="Export every locale in the store")
    e.set_defaults(func=cmd_export)

    c = sub.add_parser("arb-to-json", help="Convert an ARB file into a phrase list")
    c.add_argument("arb")
    c.add_argument("output_json")
    c.set_defaults(func=cmd_arb_to_json)
    return ap

def main(argv: Optional[List[str]] = None) -> int:
    args = make_parser().parse_args(argv)
    try:
        return args.func(args)
    except (ArbSyncError, OSError, ValueError) as e:
        setup_logger(args.log_level or "INFO").error(str(e))
        return 1

if __name__ == "__main__":
    sys.exit(main())
