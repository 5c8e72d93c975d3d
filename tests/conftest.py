"""
Shared test fixtures.

InMemoryBlobStore stands in for the blob-versioning backend: it keeps every
stored payload as a separate snapshot with its own opaque version id, enforces
the expected-version hook, and lets tests inject duplicate or empty snapshots.
"""

from __future__ import annotations

import itertools
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from secretpack.application.services.versioned_secret_store import VersionedSecretStore
from secretpack.domain.errors import ConcurrentModificationError, ServiceNotFoundError
from secretpack.domain.ports.blob_store_port import BlobSnapshot, IBlobStore
from secretpack.domain.ports.identity_port import IIdentityResolver

PRINCIPAL = "arn:aws:iam::123456789012:user/alice"


class InMemoryBlobStore(IBlobStore):
    def __init__(self) -> None:
        self.blobs: dict[str, list[tuple[str, str]]] = {}
        self.calls: list[str] = []

    def create_blob(self, name, payload):
        self.calls.append("create_blob")
        if name in self.blobs:
            raise RuntimeError(f"blob {name!r} already exists")
        self.blobs[name] = [(uuid.uuid4().hex, payload)]

    def store_version(self, name, payload, expected_version_id=None):
        self.calls.append("store_version")
        if name not in self.blobs:
            raise ServiceNotFoundError(name)
        current_id = self.blobs[name][-1][0]
        if expected_version_id is not None and expected_version_id != current_id:
            raise ConcurrentModificationError(name, expected_version_id, current_id)
        self.blobs[name].append((uuid.uuid4().hex, payload))

    def get_current(self, name):
        if name not in self.blobs:
            raise ServiceNotFoundError(name)
        version_id, payload = self.blobs[name][-1]
        return BlobSnapshot(version_id=version_id, payload=payload)

    def get_version(self, name, version_id):
        for vid, payload in self.blobs[name]:
            if vid == version_id:
                return BlobSnapshot(version_id=vid, payload=payload)
        raise KeyError(version_id)

    def list_version_ids(self, name, include_deprecated=False):
        if name not in self.blobs:
            raise ServiceNotFoundError(name)
        # Newest first, the opposite of insertion order.
        return [vid for vid, _ in reversed(self.blobs[name])]

    def append_raw(self, name, payload):
        """Append a snapshot without going through the store."""
        self.blobs.setdefault(name, []).append((uuid.uuid4().hex, payload))


class FixedIdentity(IIdentityResolver):
    def __init__(self, principal: str = PRINCIPAL) -> None:
        self.principal = principal

    def current_principal(self) -> str:
        return self.principal


class StepClock:
    """Returns a strictly increasing UTC time on every call."""

    def __init__(self) -> None:
        self._start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self._ticks = itertools.count()

    def __call__(self) -> datetime:
        return self._start + timedelta(minutes=next(self._ticks))


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def identity() -> FixedIdentity:
    return FixedIdentity()


@pytest.fixture
def store(blob_store, identity) -> VersionedSecretStore:
    return VersionedSecretStore(blob_store, identity, clock=StepClock())
