from __future__ import annotations
import os
import sqlite3
from collections import OrderedDict
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from .errors import StorageError
from .models import Provenance, SourcePhrase, Translation

SCHEMA = '''
CREATE TABLE IF NOT EXISTS source_phrases (
  key TEXT NOT NULL PRIMARY KEY,
  value TEXT NOT NULL,
  last_updated TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS translations (
  locale TEXT NOT NULL,
  phrase_key TEXT NOT NULL,
  value TEXT NOT NULL,
  provenance TEXT NOT NULL CHECK (provenance IN ('automatic', 'manual')),
  last_updated TEXT NOT NULL,
  PRIMARY KEY (locale, phrase_key)
);
'''

# ON CONFLICT keeps the rowid, so first-insertion order survives updates
UPSERT_PHRASE = (
    "INSERT INTO source_phrases (key, value, last_updated) VALUES (?, ?, ?) "
    "ON CONFLICT(key) DO UPDATE SET value=excluded.value, last_updated=excluded.last_updated"
)
UPSERT_TRANSLATION = (
    "INSERT INTO translations (locale, phrase_key, value, provenance, last_updated) "
    "VALUES (?, ?, ?, ?, ?) "
    "ON CONFLICT(locale, phrase_key) DO UPDATE SET value=excluded.value, "
    "provenance=excluded.provenance, last_updated=excluded.last_updated"
)


def _row_to_translation(locale: str, row) -> Translation:
    key, value, provenance, last_updated = row
    return Translation(
        phrase_key=key,
        locale=locale,
        value=value,
        provenance=Provenance(provenance),
        last_updated=datetime.fromisoformat(last_updated),
    )


class PhraseStore:
    """
    Durable phrase and translation tables in one SQLite file.

    Source phrases live in one table; translations are keyed by (locale, phrase_key)
    so every locale's rows form its own sub-table. Each mutating call runs in a single
    transaction and is committed before it returns.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        try:
            parent = os.path.dirname(path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            self.conn = sqlite3.connect(path)
            self.conn.execute("PRAGMA journal_mode=WAL;")
            self.conn.executescript(SCHEMA)
            self.conn.commit()
        except (sqlite3.Error, OSError) as e:
            raise StorageError(f"Cannot open phrase store {path}: {e}") from e

    def __enter__(self) -> "PhraseStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ---------------- source phrases ----------------

    def get_all_source_phrases(self) -> Dict[str, SourcePhrase]:
        try:
            cur = self.conn.execute("SELECT key, value, last_updated FROM source_phrases ORDER BY rowid")
            rows = cur.fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed reading source phrases: {e}") from e
        return OrderedDict(
            (key, SourcePhrase(key, value, datetime.fromisoformat(ts))) for key, value, ts in rows
        )

    def save_source_phrases(self, phrases: Iterable[SourcePhrase]) -> None:
        rows = [(p.key, p.value, p.last_updated.isoformat()) for p in phrases]
        if not rows:
            return
        try:
            with self.conn:
                self.conn.executemany(UPSERT_PHRASE, rows)
        except sqlite3.Error as e:
            raise StorageError(f"Failed saving {len(rows)} source phrase(s): {e}") from e

    # ---------------- translations ----------------

    def get_translation(self, key: str, locale: str) -> Optional[Translation]:
        try:
            cur = self.conn.execute(
                "SELECT phrase_key, value, provenance, last_updated FROM translations "
                "WHERE locale=? AND phrase_key=?",
                (locale, key),
            )
            row = cur.fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed reading translation {locale}/{key}: {e}") from e
        return _row_to_translation(locale, row) if row else None

    def is_manual(self, key: str, locale: str) -> bool:
        t = self.get_translation(key, locale)
        return t is not None and t.is_manual

    def save_translation(self, translation: Translation) -> None:
        self.save_translations([translation])

    def save_translations(self, translations: Iterable[Translation]) -> None:
        by_locale: Dict[str, List[tuple]] = OrderedDict()
        for t in translations:
            by_locale.setdefault(t.locale, []).append(
                (t.locale, t.phrase_key, t.value, t.provenance.value, t.last_updated.isoformat())
            )
        for locale, rows in by_locale.items():
            try:
                with self.conn:
                    self.conn.executemany(UPSERT_TRANSLATION, rows)
            except sqlite3.Error as e:
                raise StorageError(f"Failed saving {len(rows)} translation(s) for {locale}: {e}") from e

    def get_translations_for_locale(self, locale: str) -> Dict[str, Translation]:
        try:
            cur = self.conn.execute(
                "SELECT phrase_key, value, provenance, last_updated FROM translations "
                "WHERE locale=? ORDER BY rowid",
                (locale,),
            )
            rows = cur.fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed reading translations for {locale}: {e}") from e
        return OrderedDict((row[0], _row_to_translation(locale, row)) for row in rows)

    def locales(self) -> List[str]:
        try:
            cur = self.conn.execute("SELECT DISTINCT locale FROM translations ORDER BY locale")
            return [r[0] for r in cur.fetchall()]
        except sqlite3.Error as e:
            raise StorageError(f"Failed listing locales: {e}") from e

    def close(self) -> None:
        self.conn.close()
