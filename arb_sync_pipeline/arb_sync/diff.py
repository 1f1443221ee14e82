from __future__ import annotations
from typing import Collection, List, Mapping, Optional, Tuple

from .models import SourcePhrase, Translation

Entry = Tuple[str, str]


def compute_delta(
    incoming: Mapping[str, str],
    stored: Mapping[str, SourcePhrase],
    force_all: bool = False,
) -> List[Entry]:
    """
    Entries of `incoming` that are new or whose value differs from `stored`,
    in the iteration order of `incoming`. With force_all every entry is returned.
    """
    if force_all:
        return list(incoming.items())
    delta: List[Entry] = []
    for key, value in incoming.items():
        prev = stored.get(key)
        if prev is None or prev.value != value:
            delta.append((key, value))
    return delta


def missing_for_locale(
    incoming: Mapping[str, str],
    existing: Mapping[str, Translation],
    sources: Optional[Mapping[str, SourcePhrase]] = None,
    skip: Collection[str] = (),
) -> List[Entry]:
    """
    Incoming entries a locale still needs: no stored translation at all, or an
    automatic translation older than its source phrase (a re-translation that
    failed or was never reached). Manual translations never count as stale.
    """
    out: List[Entry] = []
    for key, value in incoming.items():
        if key in skip:
            continue
        t = existing.get(key)
        if t is None:
            out.append((key, value))
            continue
        src = (sources or {}).get(key)
        if src is not None and not t.is_manual and t.last_updated < src.last_updated:
            out.append((key, value))
    return out
