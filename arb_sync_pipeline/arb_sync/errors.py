from __future__ import annotations


class ArbSyncError(Exception):
    """Base class for everything this package raises on purpose."""


class ConfigError(ArbSyncError):
    pass


class StorageError(ArbSyncError):
    """Durable state could not be read or written."""


class OracleFailure(ArbSyncError):
    """The translation service did not return a usable result."""


class RateLimited(OracleFailure):
    def __init__(self, message: str = "Rate limit exceeded (429)", body: str = "") -> None:
        super().__init__(message)
        self.body = body


class ShapeMismatch(OracleFailure):
    def __init__(self, expected: int, got: int) -> None:
        super().__init__(f"Expected {expected} translations, got {got}")
        self.expected = expected
        self.got = got


class ManualTargetNotFound(ArbSyncError):
    def __init__(self, key: str, locale: str) -> None:
        super().__init__(f"No translation for '{key}' in locale {locale}")
        self.key = key
        self.locale = locale
