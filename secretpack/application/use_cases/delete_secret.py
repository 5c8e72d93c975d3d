"""
Use-case: delete a key from a service.
"""

from secretpack.application.use_cases.validation import make_secret_id
from secretpack.domain.ports.secret_store_port import ISecretStore


class DeleteSecretUseCase:
    def __init__(self, store: ISecretStore) -> None:
        self._store = store

    def execute(self, service: str, key: str) -> None:
        """Raises SecretNotFoundError if the service or key does not exist."""
        self._store.delete(make_secret_id(service, key))
