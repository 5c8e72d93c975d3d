"""Tests for the Secrets Manager blob store and STS identity adapters."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from secretpack.domain.errors import ConcurrentModificationError, ServiceNotFoundError
from secretpack.domain.ports.blob_store_port import BlobSnapshot
from secretpack.infrastructure.identity.sts_identity_adapter import StsIdentityResolver
from secretpack.infrastructure.secrets.secrets_manager_adapter import SecretsManagerBlobStore


def _client_error(code, operation="GetSecretValue"):
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def blob_store(client):
    return SecretsManagerBlobStore(client=client)


class TestGetCurrent:
    def test_returns_snapshot(self, client, blob_store):
        client.get_secret_value.return_value = {"VersionId": "v1", "SecretString": '{"a":"1"}'}

        assert blob_store.get_current("app") == BlobSnapshot(version_id="v1", payload='{"a":"1"}')
        client.get_secret_value.assert_called_once_with(SecretId="app")

    def test_binary_secret_is_empty_payload(self, client, blob_store):
        client.get_secret_value.return_value = {"VersionId": "v1", "SecretBinary": b"\x00"}
        assert blob_store.get_current("app").payload == ""

    def test_not_found_is_translated(self, client, blob_store):
        error = _client_error("ResourceNotFoundException")
        client.get_secret_value.side_effect = error

        with pytest.raises(ServiceNotFoundError) as exc_info:
            blob_store.get_current("app")
        assert exc_info.value.service == "app"
        assert exc_info.value.__cause__ is error

    def test_other_client_errors_propagate(self, client, blob_store):
        error = _client_error("AccessDeniedException")
        client.get_secret_value.side_effect = error

        with pytest.raises(ClientError) as exc_info:
            blob_store.get_current("app")
        assert exc_info.value is error


def test_get_version_passes_version_id(client, blob_store):
    client.get_secret_value.return_value = {"VersionId": "v7", "SecretString": "{}"}
    assert blob_store.get_version("app", "v7").version_id == "v7"
    client.get_secret_value.assert_called_once_with(SecretId="app", VersionId="v7")


class TestCreateBlob:
    def test_labels_first_version_with_first_history_slot(self, client, blob_store):
        client.create_secret.return_value = {"VersionId": "v1"}

        blob_store.create_blob("app", "{}")

        client.create_secret.assert_called_once_with(Name="app", SecretString="{}")
        client.update_secret_version_stage.assert_called_once_with(
            SecretId="app", VersionStage="SECRETPACK_HISTORY_0", MoveToVersionId="v1"
        )

    def test_no_label_when_ring_disabled(self, client):
        SecretsManagerBlobStore(client=client, history_labels=0).create_blob("app", "{}")
        client.update_secret_version_stage.assert_not_called()


class TestStoreVersion:
    def test_puts_current_version_with_next_history_label(self, client, blob_store):
        client.describe_secret.return_value = {
            "VersionIdsToStages": {
                "v0": ["AWSPREVIOUS", "SECRETPACK_HISTORY_0"],
                "v1": ["AWSCURRENT", "SECRETPACK_HISTORY_1"],
            }
        }

        blob_store.store_version("app", '{"a":"1"}', expected_version_id="v1")

        client.put_secret_value.assert_called_once_with(
            SecretId="app",
            SecretString='{"a":"1"}',
            VersionStages=["AWSCURRENT", "SECRETPACK_HISTORY_2"],
        )

    def test_history_label_wraps_around(self, client):
        client.describe_secret.return_value = {
            "VersionIdsToStages": {"v9": ["AWSCURRENT", "SECRETPACK_HISTORY_2"]}
        }
        store = SecretsManagerBlobStore(client=client, history_labels=3)

        store.store_version("app", "{}")

        _, kwargs = client.put_secret_value.call_args
        assert kwargs["VersionStages"] == ["AWSCURRENT", "SECRETPACK_HISTORY_0"]

    def test_unlabelled_current_version_starts_at_first_slot(self, client, blob_store):
        client.describe_secret.return_value = {"VersionIdsToStages": {"v1": ["AWSCURRENT"]}}

        blob_store.store_version("app", "{}")

        _, kwargs = client.put_secret_value.call_args
        assert kwargs["VersionStages"] == ["AWSCURRENT", "SECRETPACK_HISTORY_0"]

    def test_ring_disabled_puts_current_only(self, client):
        store = SecretsManagerBlobStore(client=client, history_labels=0)

        store.store_version("app", "{}", expected_version_id="v1")

        client.describe_secret.assert_not_called()
        client.put_secret_value.assert_called_once_with(
            SecretId="app", SecretString="{}", VersionStages=["AWSCURRENT"]
        )

    def test_ring_size_is_bounded(self, client):
        with pytest.raises(ValueError, match="history_labels"):
            SecretsManagerBlobStore(client=client, history_labels=19)

    def test_verified_match(self, client):
        client.describe_secret.return_value = {
            "VersionIdsToStages": {"v0": ["AWSPREVIOUS"], "v1": ["AWSCURRENT"]}
        }
        store = SecretsManagerBlobStore(client=client, verify_expected_version=True)

        store.store_version("app", "{}", expected_version_id="v1")
        client.put_secret_value.assert_called_once()
        client.describe_secret.assert_called_once_with(SecretId="app")

    def test_verified_mismatch(self, client):
        client.describe_secret.return_value = {"VersionIdsToStages": {"v2": ["AWSCURRENT"]}}
        store = SecretsManagerBlobStore(client=client, verify_expected_version=True)

        with pytest.raises(ConcurrentModificationError) as exc_info:
            store.store_version("app", "{}", expected_version_id="v1")
        assert exc_info.value.actual == "v2"
        client.put_secret_value.assert_not_called()

    def test_put_errors_propagate(self, client, blob_store):
        client.describe_secret.return_value = {"VersionIdsToStages": {"v1": ["AWSCURRENT"]}}
        client.put_secret_value.side_effect = _client_error("LimitExceededException", "PutSecretValue")
        with pytest.raises(ClientError):
            blob_store.store_version("app", "{}")


class TestListVersionIds:
    def test_follows_all_pages(self, client, blob_store):
        paginator = client.get_paginator.return_value
        paginator.paginate.return_value = [
            {"Versions": [{"VersionId": "v1"}, {"VersionId": "v2"}]},
            {"Versions": [{"VersionId": "v3"}]},
            {},
        ]

        assert blob_store.list_version_ids("app") == ["v1", "v2", "v3"]
        client.get_paginator.assert_called_once_with("list_secret_version_ids")
        paginator.paginate.assert_called_once_with(SecretId="app", IncludeDeprecated=False)

    def test_not_found(self, client, blob_store):
        def pages():
            raise _client_error("ResourceNotFoundException", "ListSecretVersionIds")
            yield  # pragma: no cover

        client.get_paginator.return_value.paginate.return_value = pages()
        with pytest.raises(ServiceNotFoundError):
            blob_store.list_version_ids("app")


def test_sts_identity_returns_arn():
    sts = MagicMock()
    sts.get_caller_identity.return_value = {
        "UserId": "AIDA",
        "Account": "123456789012",
        "Arn": "arn:aws:iam::123456789012:user/alice",
    }
    assert StsIdentityResolver(client=sts).current_principal() == "arn:aws:iam::123456789012:user/alice"


def test_sts_errors_propagate():
    sts = MagicMock()
    sts.get_caller_identity.side_effect = _client_error("ExpiredToken", "GetCallerIdentity")
    with pytest.raises(ClientError):
        StsIdentityResolver(client=sts).current_principal()
