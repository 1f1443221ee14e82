from __future__ import annotations
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Provenance(str, Enum):
    AUTOMATIC = "automatic"
    MANUAL = "manual"

    @classmethod
    def _missing_(cls, value):
        # rows exported by the older tool carry the provider name instead
        if isinstance(value, str):
            tag = value.strip().lower()
            if tag == "azure":
                return cls.AUTOMATIC
            for member in cls:
                if member.value == tag:
                    return member
        return None


@dataclass(frozen=True)
class SourcePhrase:
    key: str
    value: str
    last_updated: datetime


@dataclass(frozen=True)
class Translation:
    phrase_key: str
    locale: str
    value: str
    provenance: Provenance = Provenance.AUTOMATIC
    last_updated: datetime = field(default_factory=utcnow)

    @property
    def is_manual(self) -> bool:
        return self.provenance is Provenance.MANUAL

    def as_manual(self) -> "Translation":
        return replace(self, provenance=Provenance.MANUAL, last_updated=utcnow())
