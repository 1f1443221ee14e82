from __future__ import annotations
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .cost_tracker import CostTracker
from .errors import OracleFailure, RateLimited, ShapeMismatch
from .translator_base import Translator

Entry = Tuple[str, str]

DEFAULT_BATCH_SIZE = 100
DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 10.0
DEFAULT_BATCH_DELAY = 3.0


@dataclass
class BatchResult:
    merged: Dict[str, str] = field(default_factory=dict)
    failed_keys: List[str] = field(default_factory=list)
    batches: int = 0
    failed_batches: int = 0


def chunked(entries: Sequence[Entry], size: int) -> List[List[Entry]]:
    if size < 1:
        raise ValueError("batch size must be >= 1")
    return [list(entries[i:i + size]) for i in range(0, len(entries), size)]


def translate_with_retry(
    translator: Translator,
    from_locale: str,
    to_locale: str,
    texts: List[str],
    *,
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay: float = DEFAULT_BASE_DELAY,
    sleep: Callable[[float], None] = time.sleep,
    logger: logging.Logger | None = None,
) -> List[str]:
    """
    Call the translator at most `max_retries` times while it reports RateLimited,
    waiting base_delay * 2**n between attempts. Re-raises RateLimited once the
    attempts are used up; the caller decides whether to cool down afterwards.
    """
    logger = logger or logging.getLogger("arb-sync")
    attempt = 0
    while True:
        try:
            return translator.translate(from_locale, to_locale, texts)
        except RateLimited:
            wait = base_delay * (2 ** attempt)
            attempt += 1
            if attempt >= max_retries:
                logger.warning(f"Max retries ({max_retries}) reached for rate limit")
                raise
            logger.warning(f"Rate limited. Waiting {wait:.0f}s before retry {attempt}/{max_retries}...")
            sleep(wait)


def translate_batches(
    translator: Translator,
    from_locale: str,
    to_locale: str,
    entries: Sequence[Entry],
    batch_size: int = DEFAULT_BATCH_SIZE,
    *,
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay: float = DEFAULT_BASE_DELAY,
    batch_delay: float = DEFAULT_BATCH_DELAY,
    sleep: Callable[[float], None] = time.sleep,
    on_batch: Optional[Callable[[List[Entry]], None]] = None,
    cost: CostTracker | None = None,
    logger: logging.Logger | None = None,
) -> BatchResult:
    """
    Translate (key, value) entries chunk by chunk.

    A chunk that fails (rate limit exhausted, provider error, wrong result count)
    adds its keys to `failed_keys` and the loop moves on. `on_batch` receives the
    translated (key, value) pairs of each successful chunk; whatever it raises
    propagates to the caller.
    """
    logger = logger or logging.getLogger("arb-sync")
    result = BatchResult()
    chunks = chunked(entries, batch_size)

    for n, chunk in enumerate(chunks, 1):
        keys = [k for k, _ in chunk]
        texts = [v for _, v in chunk]
        result.batches += 1
        pause = batch_delay
        logger.info(f"  {to_locale}: batch {n}/{len(chunks)} ({len(chunk)} phrases)")
        try:
            out = translate_with_retry(
                translator, from_locale, to_locale, texts,
                max_retries=max_retries, base_delay=base_delay, sleep=sleep, logger=logger,
            )
            if cost is not None:
                cost.add(sum(len(t) for t in texts), sum(len(t) for t in out))
            if len(out) != len(texts):
                raise ShapeMismatch(len(texts), len(out))
        except RateLimited:
            logger.error(f"  {to_locale}: rate limit exceeded on batch {n} after retries")
            result.failed_keys.extend(keys)
            result.failed_batches += 1
            # the provider window needs longer than the regular pause to reset
            pause = base_delay * (2 ** (max_retries - 1))
        except OracleFailure as e:
            logger.error(f"  {to_locale}: error on batch {n}: {e}")
            result.failed_keys.extend(keys)
            result.failed_batches += 1
        else:
            pairs = list(zip(keys, out))
            result.merged.update(pairs)
            if on_batch is not None:
                on_batch(pairs)

        if n < len(chunks):
            sleep(pause)

    return result
