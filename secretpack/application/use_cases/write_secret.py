"""
Use-case: write a new version of a secret.
Depends only on Domain ports and entities; no infrastructure imports.
"""

from secretpack.application.use_cases.validation import make_secret_id
from secretpack.domain.entities.secret import SecretId
from secretpack.domain.ports.secret_store_port import ISecretStore


class WriteSecretUseCase:
    def __init__(self, store: ISecretStore) -> None:
        self._store = store

    def execute(self, service: str, key: str, value: str) -> SecretId:
        """Write *value* under *service*/*key* (key lower-cased).

        Raises:
            InvalidSecretIdError: if the service or key name is invalid.
            ValueError: if *value* is empty; use DeleteSecretUseCase to delete.
            Any exception propagated from the ISecretStore on backend failure.
        """
        secret_id = make_secret_id(service, key)
        if not value:
            raise ValueError("value must be a non-empty string")
        self._store.write(secret_id, value)
        return secret_id
