"""
Use-case: export the raw key/value pairs of one or more services.

Uses ISecretStore.list_raw, so keys with missing or damaged metadata are still
exported. Environment-style names upper-case the key and replace '-' and '.'
with '_'.
"""

import os
from collections.abc import Iterable, MutableMapping

from secretpack.application.use_cases.validation import validate_service
from secretpack.domain.ports.secret_store_port import ISecretStore


def env_var_name(key: str) -> str:
    return key.upper().replace("-", "_").replace(".", "_")


class ExportSecretsUseCase:
    def __init__(self, store: ISecretStore) -> None:
        self._store = store

    def as_dict(self, service: str) -> dict[str, str]:
        return {raw.key: raw.value for raw in self._store.list_raw(validate_service(service))}

    def as_environment(self, services: Iterable[str]) -> dict[str, str]:
        """Merge *services* in order into environment-style names.

        A key present in several services takes the value of the last one.
        """
        merged: dict[str, str] = {}
        for service in services:
            for key, value in self.as_dict(service).items():
                merged[env_var_name(key)] = value
        return merged

    def load_into_env(
        self,
        services: Iterable[str],
        environ: MutableMapping[str, str] | None = None,
    ) -> list[str]:
        """Inject the merged secrets of *services* into *environ* (os.environ).

        Returns the variable names that were set.
        """
        target = os.environ if environ is None else environ
        exported = self.as_environment(services)
        target.update(exported)
        return sorted(exported)
