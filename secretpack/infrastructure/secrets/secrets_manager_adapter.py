"""
Infrastructure adapter: AWS Secrets Manager → IBlobStore.

One Secrets Manager secret holds one service blob in its SecretString.
Secrets Manager's own VersionIds are the blob version ids; they carry no
meaning for per-key versions.

Secrets Manager deprecates any version that carries no staging label, and
ListSecretVersionIds(IncludeDeprecated=False) skips deprecated versions. Each
stored version therefore also gets one label from a fixed ring
(SECRETPACK_HISTORY_0 .. SECRETPACK_HISTORY_<n-1>), taking the slot after the
one on the current version. History and historical reads see the last
history_labels versions plus the AWSPREVIOUS one; older snapshots are
deprecated. With history_labels=0 only AWSCURRENT and AWSPREVIOUS remain.

ResourceNotFoundException is the only botocore error translated (into
ServiceNotFoundError); every other ClientError propagates unchanged.
"""

import logging
import os
from typing import Any, Optional

import boto3
from botocore.exceptions import ClientError

from secretpack.domain.errors import ConcurrentModificationError, ServiceNotFoundError
from secretpack.domain.ports.blob_store_port import BlobSnapshot, IBlobStore

logger = logging.getLogger(__name__)

_NOT_FOUND = "ResourceNotFoundException"
_CURRENT_STAGE = "AWSCURRENT"

HISTORY_LABEL_PREFIX = "SECRETPACK_HISTORY_"
# Secrets Manager allows 20 staging labels per secret, two of them AWSCURRENT/AWSPREVIOUS.
MAX_HISTORY_LABELS = 18


def history_label(slot: int) -> str:
    return f"{HISTORY_LABEL_PREFIX}{slot}"


class SecretsManagerBlobStore(IBlobStore):
    """Stores service blobs as AWS Secrets Manager secret versions."""

    def __init__(
        self,
        client: Any = None,
        region: str | None = None,
        verify_expected_version: bool = False,
        history_labels: int = MAX_HISTORY_LABELS,
    ) -> None:
        """
        Args:
            client:                  Pre-built boto3 "secretsmanager" client. Built
                                     from the default session when omitted.
            region:                  Region for the default client.
            verify_expected_version: Compare the AWSCURRENT version id against the
                                     caller's expected id before storing. Secrets
                                     Manager has no conditional put, so this narrows
                                     the race window without closing it.
            history_labels:          Size of the history label ring, 0 to 18.
        """
        if not 0 <= history_labels <= MAX_HISTORY_LABELS:
            raise ValueError(
                f"history_labels must be between 0 and {MAX_HISTORY_LABELS}, got {history_labels}"
            )
        self._client = client or boto3.client(
            "secretsmanager",
            region_name=region or os.environ.get("AWS_DEFAULT_REGION", "us-east-1"),
        )
        self._verify_expected_version = verify_expected_version
        self._history_labels = history_labels

    def create_blob(self, name: str, payload: str) -> None:
        logger.debug("CreateSecret %s", name)
        response = self._client.create_secret(Name=name, SecretString=payload)
        if self._history_labels:
            self._client.update_secret_version_stage(
                SecretId=name,
                VersionStage=history_label(0),
                MoveToVersionId=response["VersionId"],
            )

    def store_version(
        self,
        name: str,
        payload: str,
        expected_version_id: Optional[str] = None,
    ) -> None:
        verify = self._verify_expected_version and expected_version_id is not None
        stages: dict[str, list[str]] = {}
        if verify or self._history_labels:
            stages = self._version_stages(name)

        if verify:
            actual = _current_version_id(stages)
            if actual != expected_version_id:
                raise ConcurrentModificationError(name, expected_version_id, actual)

        version_stages = [_CURRENT_STAGE]
        if self._history_labels:
            version_stages.append(self._next_history_label(stages))

        logger.debug("PutSecretValue %s stages=%s", name, version_stages)
        self._client.put_secret_value(
            SecretId=name,
            SecretString=payload,
            VersionStages=version_stages,
        )

    def get_current(self, name: str) -> BlobSnapshot:
        return self._get(name)

    def get_version(self, name: str, version_id: str) -> BlobSnapshot:
        return self._get(name, version_id)

    def list_version_ids(self, name: str, include_deprecated: bool = False) -> list[str]:
        paginator = self._client.get_paginator("list_secret_version_ids")
        pages = paginator.paginate(SecretId=name, IncludeDeprecated=include_deprecated)
        try:
            return [
                version["VersionId"]
                for page in pages
                for version in page.get("Versions", [])
            ]
        except ClientError as exc:
            _raise_not_found(exc, name)
            raise

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _get(self, name: str, version_id: Optional[str] = None) -> BlobSnapshot:
        kwargs = {"SecretId": name}
        if version_id is not None:
            kwargs["VersionId"] = version_id

        logger.debug("GetSecretValue %s version=%s", name, version_id or _CURRENT_STAGE)
        try:
            response = self._client.get_secret_value(**kwargs)
        except ClientError as exc:
            _raise_not_found(exc, name)
            raise

        # Binary secrets have no SecretString; they are not service blobs.
        return BlobSnapshot(
            version_id=response.get("VersionId"),
            payload=response.get("SecretString") or "",
        )

    def _version_stages(self, name: str) -> dict[str, list[str]]:
        try:
            response = self._client.describe_secret(SecretId=name)
        except ClientError as exc:
            _raise_not_found(exc, name)
            raise
        return response.get("VersionIdsToStages", {})

    def _next_history_label(self, stages: dict[str, list[str]]) -> str:
        current_id = _current_version_id(stages)
        for stage in stages.get(current_id, []):
            slot = stage[len(HISTORY_LABEL_PREFIX):]
            if stage.startswith(HISTORY_LABEL_PREFIX) and slot.isdigit():
                return history_label((int(slot) + 1) % self._history_labels)
        return history_label(0)


def _current_version_id(stages: dict[str, list[str]]) -> Optional[str]:
    for version_id, labels in stages.items():
        if _CURRENT_STAGE in labels:
            return version_id
    return None


def _raise_not_found(exc: ClientError, name: str) -> None:
    if exc.response.get("Error", {}).get("Code") == _NOT_FOUND:
        raise ServiceNotFoundError(name) from exc
