"""
Input validation shared by the secret use cases.
Depends only on Domain entities and errors.
"""

import re

from secretpack.application.services.container_codec import METADATA_KEY
from secretpack.domain.entities.secret import SecretId
from secretpack.domain.errors import InvalidSecretIdError
from secretpack.domain.ports.secret_store_port import LATEST_VERSION

_NAME_RE = re.compile(r"[\w\-.]+")


def validate_service(service: str) -> str:
    if not service or not _NAME_RE.fullmatch(service):
        raise InvalidSecretIdError(
            f"invalid service name {service!r}: only letters, digits, '_', '-' and '.' are allowed"
        )
    return service


def validate_key(key: str) -> str:
    """Return the normalized (lower-cased) key name."""
    if not key or not _NAME_RE.fullmatch(key):
        raise InvalidSecretIdError(
            f"invalid key name {key!r}: only letters, digits, '_', '-' and '.' are allowed"
        )
    normalized = key.lower()
    if normalized == METADATA_KEY:
        raise InvalidSecretIdError(f"{METADATA_KEY!r} is reserved")
    return normalized


def make_secret_id(service: str, key: str) -> SecretId:
    return SecretId(service=validate_service(service), key=validate_key(key))


def validate_version(version: int) -> int:
    if isinstance(version, bool) or not isinstance(version, int):
        raise InvalidSecretIdError(f"version must be an integer, got {version!r}")
    if version != LATEST_VERSION and version < 1:
        raise InvalidSecretIdError(f"version must be -1 (latest) or >= 1, got {version}")
    return version
