"""
Use-case: list the secrets of a service with their metadata.
"""

from secretpack.application.use_cases.validation import validate_service
from secretpack.domain.entities.secret import Secret
from secretpack.domain.ports.secret_store_port import ISecretStore


class ListSecretsUseCase:
    def __init__(self, store: ISecretStore) -> None:
        self._store = store

    def execute(self, service: str, include_values: bool = False) -> list[Secret]:
        return self._store.list(validate_service(service), include_values)
