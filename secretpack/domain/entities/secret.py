"""
Domain entities for versioned secrets.
Zero external dependencies: pure Python dataclasses only.

A SecretId names one key inside one service; the service is the unit the blob
backend stores and versions. Per-key versions live in MetadataRecord and are
independent of the backend's own version identifiers.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class SecretId:
    service: str
    key: str


@dataclass(frozen=True)
class MetadataRecord:
    """Bookkeeping for one key as of one write."""

    created: datetime
    created_by: str
    version: int


@dataclass(frozen=True)
class SecretMetadata:
    key: str
    version: int
    created: datetime
    created_by: str


@dataclass(frozen=True)
class Secret:
    value: Optional[str]
    meta: SecretMetadata


class ChangeEventType(str, Enum):
    CREATED = "created"
    UPDATED = "updated"

    @classmethod
    def for_version(cls, version: int) -> "ChangeEventType":
        return cls.CREATED if version == 1 else cls.UPDATED


@dataclass(frozen=True)
class ChangeEvent:
    type: ChangeEventType
    time: datetime
    user: str
    version: int


@dataclass(frozen=True)
class RawSecret:
    key: str
    value: str
