"""
Use-case: read the latest or a historical version of a secret.
Depends only on Domain ports and entities; no infrastructure imports.
"""

from secretpack.application.use_cases.validation import make_secret_id, validate_version
from secretpack.domain.entities.secret import Secret
from secretpack.domain.ports.secret_store_port import LATEST_VERSION, ISecretStore


class ReadSecretUseCase:
    def __init__(self, store: ISecretStore) -> None:
        self._store = store

    def execute(self, service: str, key: str, version: int = LATEST_VERSION) -> Secret:
        """Read *service*/*key* at *version* (-1 for the latest).

        Raises:
            InvalidSecretIdError: on a bad name or version.
            SecretNotFoundError: if the key, or that version of it, does not exist.
        """
        return self._store.read(make_secret_id(service, key), validate_version(version))
