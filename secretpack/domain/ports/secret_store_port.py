"""
Port (interface) for versioned key-value secret stores.
Implementations (e.g. VersionedSecretStore) must implement this interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from secretpack.domain.entities.secret import ChangeEvent, RawSecret, Secret, SecretId

LATEST_VERSION = -1


class ISecretStore(ABC):
    @abstractmethod
    def write(self, secret_id: SecretId, value: str) -> None:
        """Write *value* as the next version of the key. An empty value deletes it."""
        ...

    @abstractmethod
    def read(self, secret_id: SecretId, version: int = LATEST_VERSION) -> Secret:
        """Read the key at *version*, or the latest when version is -1.

        Raises:
            SecretNotFoundError: if the key (or that version of it) does not exist.
        """
        ...

    @abstractmethod
    def delete(self, secret_id: SecretId) -> None: ...

    @abstractmethod
    def list(self, service: str, include_values: bool = False) -> list[Secret]: ...

    @abstractmethod
    def list_raw(self, service: str) -> list[RawSecret]: ...

    @abstractmethod
    def history(self, secret_id: SecretId) -> list[ChangeEvent]: ...

    @abstractmethod
    def list_services(self, service: str, include_secret_name: bool = False) -> list[str]: ...
