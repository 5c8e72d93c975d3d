"""
Use-case: the change history of one secret, oldest version first.
"""

from secretpack.application.use_cases.validation import make_secret_id
from secretpack.domain.entities.secret import ChangeEvent
from secretpack.domain.ports.secret_store_port import ISecretStore


class SecretHistoryUseCase:
    def __init__(self, store: ISecretStore) -> None:
        self._store = store

    def execute(self, service: str, key: str) -> list[ChangeEvent]:
        return self._store.history(make_secret_id(service, key))
