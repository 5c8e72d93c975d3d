"""
Composition Root for the AWS-backed secret store.

Wires the Secrets Manager blob store and the STS identity resolver into
VersionedSecretStore. This is the only place boto3 sessions and clients are
built; the application layer receives them through its ports.

Usage:
    from secretpack.infrastructure.entrypoints.store_factory import build_secret_store_from_env
    store = build_secret_store_from_env()
"""

import boto3
from botocore.config import Config
from dotenv import load_dotenv

from secretpack.application.services.versioned_secret_store import VersionedSecretStore
from secretpack.infrastructure.config import SecretStoreSettings
from secretpack.infrastructure.identity.sts_identity_adapter import StsIdentityResolver
from secretpack.infrastructure.secrets.secrets_manager_adapter import SecretsManagerBlobStore


def build_secret_store(
    settings: SecretStoreSettings,
    session: boto3.session.Session | None = None,
) -> VersionedSecretStore:
    """Build a VersionedSecretStore backed by AWS Secrets Manager and STS.

    Args:
        settings: Region, retry and endpoint configuration.
        session:  boto3 session to build clients from (a new default session
                  when omitted).
    """
    session = session or boto3.session.Session()
    client_config = Config(
        region_name=settings.region,
        retries={"max_attempts": settings.retries, "mode": "standard"},
    )

    secretsmanager = session.client(
        "secretsmanager",
        config=client_config,
        endpoint_url=settings.endpoint_url,
    )
    sts = session.client(
        "sts",
        config=client_config,
        endpoint_url=settings.endpoint_url,
    )

    return VersionedSecretStore(
        blob_store=SecretsManagerBlobStore(
            client=secretsmanager,
            verify_expected_version=settings.verify_expected_version,
            history_labels=settings.history_labels,
        ),
        identity=StsIdentityResolver(client=sts),
    )


def build_secret_store_from_env() -> VersionedSecretStore:
    """Load .env, read SecretStoreSettings from the environment, build the store."""
    load_dotenv()
    return build_secret_store(SecretStoreSettings.from_env())
