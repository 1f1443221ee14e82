import logging
import sys
from typing import IO, Optional, Union

LOGGER_NAME = "arb-sync"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(level: Union[str, int, None]) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level or "INFO").upper())
    # unknown names come back as "Level <name>"
    return value if isinstance(value, int) else logging.INFO


def setup_logger(level: Union[str, int, None] = "INFO", stream: Optional[IO[str]] = None) -> logging.Logger:
    """
    The package logger with a single console handler. Calling it again only
    changes the level, so every CLI command can call it with its own setting.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolve_level(level))
    if not logger.handlers:
        h = logging.StreamHandler(stream or sys.stdout)
        h.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        logger.addHandler(h)
    return logger
