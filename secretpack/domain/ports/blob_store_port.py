"""
Port (interface) for blob-versioning backends.
Infrastructure adapters (e.g. SecretsManagerBlobStore) must implement this interface.

The backend knows nothing about keys: it stores whole string payloads under a
name and keeps an opaque, backend-assigned version identifier per payload.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class BlobSnapshot:
    version_id: Optional[str]
    payload: str


class IBlobStore(ABC):
    @abstractmethod
    def create_blob(self, name: str, payload: str) -> None:
        """Create a new blob. Fails if a blob with that name already exists."""
        ...

    @abstractmethod
    def store_version(
        self,
        name: str,
        payload: str,
        expected_version_id: Optional[str] = None,
    ) -> None:
        """Append a new current version of an existing blob.

        Args:
            name:                Blob name.
            payload:             Full replacement payload.
            expected_version_id: Version id the caller based this payload on.
                                 Backends able to compare-and-swap raise
                                 ConcurrentModificationError on mismatch;
                                 others may ignore it.
        """
        ...

    @abstractmethod
    def get_current(self, name: str) -> BlobSnapshot:
        """Return the current payload.

        Raises:
            ServiceNotFoundError: if no blob with that name exists.
        """
        ...

    @abstractmethod
    def get_version(self, name: str, version_id: str) -> BlobSnapshot:
        """Return the payload stored under a specific backend version id."""
        ...

    @abstractmethod
    def list_version_ids(self, name: str, include_deprecated: bool = False) -> list[str]:
        """Return backend version ids for the blob, in no guaranteed order."""
        ...
