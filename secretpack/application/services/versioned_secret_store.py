"""
Application service: per-key versioned secrets on top of a whole-blob store.

Every key of a service is packed into a single blob (see container_codec).
Writes and deletes are read-modify-write cycles that produce a new blob
snapshot; reads of older versions and history are derived by scanning the
backend's snapshots (see history_projection).

The blob store and identity resolver are injected; no boto3 or other external
library is imported here.

Concurrency: the read and the store of a write are not atomic. The version id
observed on read is passed to IBlobStore.store_version so a backend that can
compare-and-swap rejects a stale write; a backend that cannot will let the
last writer win.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from datetime import datetime, timezone
from typing import Optional

from secretpack.application.services.container_codec import (
    METADATA_KEY,
    SecretContainer,
    decode_container,
    decode_metadata,
    embed_metadata,
)
from secretpack.application.services.history_projection import project_key_history
from secretpack.domain.entities.secret import (
    ChangeEvent,
    MetadataRecord,
    RawSecret,
    Secret,
    SecretId,
    SecretMetadata,
)
from secretpack.domain.errors import (
    InvalidSecretIdError,
    SecretNotFoundError,
    ServiceNotFoundError,
    UnsupportedOperationError,
)
from secretpack.domain.ports.blob_store_port import IBlobStore
from secretpack.domain.ports.identity_port import IIdentityResolver
from secretpack.domain.ports.secret_store_port import LATEST_VERSION, ISecretStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VersionedSecretStore(ISecretStore):
    """Implements ISecretStore over any IBlobStore."""

    def __init__(
        self,
        blob_store: IBlobStore,
        identity: IIdentityResolver,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """
        Args:
            blob_store: IBlobStore implementation (e.g. SecretsManagerBlobStore).
            identity:   IIdentityResolver used to attribute writes.
            clock:      Returns the current UTC time; overridable for tests.
        """
        self._blobs = blob_store
        self._identity = identity
        self._clock = clock

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def write(self, secret_id: SecretId, value: str) -> None:
        """Write *value* as the next version of the key.

        An empty *value* deletes the key instead. A service that does not
        exist yet is created by its first write.
        """
        if not value:
            self._remove_key(secret_id)
            return
        if secret_id.key == METADATA_KEY:
            raise InvalidSecretIdError(f"{METADATA_KEY!r} is reserved")

        must_create = False
        base_version_id: Optional[str] = None
        try:
            snapshot = self._blobs.get_current(secret_id.service)
        except ServiceNotFoundError:
            must_create = True
            container: SecretContainer = {}
        else:
            base_version_id = snapshot.version_id
            container = decode_container(snapshot.payload) if snapshot.payload else {}

        principal = self._identity.current_principal()

        metadata = decode_metadata(container)
        current = metadata.get(secret_id.key)
        version = current.version + 1 if current else 1
        metadata[secret_id.key] = MetadataRecord(
            created=self._clock().astimezone(timezone.utc),
            created_by=principal,
            version=version,
        )
        container[secret_id.key] = value
        payload = embed_metadata(container, metadata)

        if must_create:
            logger.info("Creating service %r with key %r", secret_id.service, secret_id.key)
            self._blobs.create_blob(secret_id.service, payload)
        else:
            logger.debug(
                "Writing %s/%s version %d", secret_id.service, secret_id.key, version
            )
            self._blobs.store_version(
                secret_id.service, payload, expected_version_id=base_version_id
            )

    def delete(self, secret_id: SecretId) -> None:
        self.write(secret_id, "")

    def _remove_key(self, secret_id: SecretId) -> None:
        snapshot = self._blobs.get_current(secret_id.service)
        if not snapshot.payload:
            raise SecretNotFoundError(f"service {secret_id.service!r} is empty")

        container = decode_container(snapshot.payload)
        if secret_id.key == METADATA_KEY or secret_id.key not in container:
            raise SecretNotFoundError(
                f"key {secret_id.key!r} not found in service {secret_id.service!r}"
            )
        del container[secret_id.key]

        metadata = decode_metadata(container)
        metadata.pop(secret_id.key, None)
        payload = embed_metadata(container, metadata)

        logger.info("Deleting key %r from service %r", secret_id.key, secret_id.service)
        self._blobs.store_version(
            secret_id.service, payload, expected_version_id=snapshot.version_id
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def read(self, secret_id: SecretId, version: int = LATEST_VERSION) -> Secret:
        if version == LATEST_VERSION:
            return self._read_latest(secret_id)
        return self._read_version(secret_id, version)

    def _read_latest(self, secret_id: SecretId) -> Secret:
        container = self._read_current(secret_id.service)
        value = container.get(secret_id.key)
        record = decode_metadata(container).get(secret_id.key)
        if secret_id.key == METADATA_KEY or value is None or record is None:
            raise SecretNotFoundError(
                f"key {secret_id.key!r} not found in service {secret_id.service!r}"
            )
        return Secret(value=value, meta=_to_metadata(secret_id.key, record))

    def _read_version(self, secret_id: SecretId, version: int) -> Secret:
        for container in self._iter_snapshots(secret_id.service):
            record = decode_metadata(container).get(secret_id.key)
            if record is None or record.version != version:
                continue
            value = container.get(secret_id.key)
            if value is None:
                break
            return Secret(value=value, meta=_to_metadata(secret_id.key, record))

        raise SecretNotFoundError(
            f"version {version} of key {secret_id.key!r} not found "
            f"in service {secret_id.service!r}"
        )

    def history(self, secret_id: SecretId) -> list[ChangeEvent]:
        events = project_key_history(self._iter_snapshots(secret_id.service), secret_id.key)
        if not events:
            raise SecretNotFoundError(
                f"no history for key {secret_id.key!r} in service {secret_id.service!r}"
            )
        return events

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list(self, service: str, include_values: bool = False) -> list[Secret]:
        """Return every key that has both a value and a metadata record.

        Keys without metadata are skipped rather than failing the listing.
        """
        container = self._read_current(service)
        metadata = decode_metadata(container)

        secrets = []
        for key in sorted(container):
            if key == METADATA_KEY:
                continue
            record = metadata.get(key)
            if record is None:
                logger.warning("Skipping %s/%s: no metadata record", service, key)
                continue
            secrets.append(
                Secret(
                    value=container[key] if include_values else None,
                    meta=_to_metadata(key, record),
                )
            )
        return secrets

    def list_raw(self, service: str) -> list[RawSecret]:
        container = self._read_current(service)
        return [
            RawSecret(key=key, value=value)
            for key, value in sorted(container.items())
            if key != METADATA_KEY
        ]

    def list_services(self, service: str, include_secret_name: bool = False) -> list[str]:
        raise UnsupportedOperationError(
            "listing services is not implemented for the blob-versioning backend"
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _read_current(self, service: str) -> SecretContainer:
        snapshot = self._blobs.get_current(service)
        if not snapshot.payload:
            raise SecretNotFoundError(f"service {service!r} is empty")
        return decode_container(snapshot.payload)

    def _iter_snapshots(self, service: str) -> Iterator[SecretContainer]:
        """Yield each non-empty, non-deprecated snapshot of the service, decoded."""
        version_ids = self._blobs.list_version_ids(service, include_deprecated=False)
        logger.debug("Scanning %d snapshots of %r", len(version_ids), service)
        for version_id in version_ids:
            snapshot = self._blobs.get_version(service, version_id)
            if not snapshot.payload:
                continue
            yield decode_container(snapshot.payload)


def _to_metadata(key: str, record: MetadataRecord) -> SecretMetadata:
    return SecretMetadata(
        key=key,
        version=record.version,
        created=record.created,
        created_by=record.created_by,
    )
