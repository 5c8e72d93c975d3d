"""
Domain error taxonomy shared by ports, services and adapters.

Callers branch on SecretNotFoundError versus everything else; backend
transport and authorization errors are never wrapped in these types.
"""


class SecretStoreError(Exception):
    """Base class for errors raised by the secret store itself."""


class SecretNotFoundError(SecretStoreError):
    def __init__(self, message: str = "secret not found") -> None:
        super().__init__(message)


class ServiceNotFoundError(SecretNotFoundError):
    """The blob backing a service does not exist in the backend."""

    def __init__(self, service: str) -> None:
        super().__init__(f"service not found: {service!r}")
        self.service = service


class MalformedContainerError(SecretStoreError):
    """A blob payload or its embedded metadata did not decode."""


class EncodingFailureError(SecretStoreError):
    """A container or metadata document could not be serialized."""


class UnsupportedOperationError(SecretStoreError):
    """Permanent capability gap of a backend; never worth retrying."""


class ConcurrentModificationError(SecretStoreError):
    def __init__(self, service: str, expected: str | None, actual: str | None) -> None:
        super().__init__(
            f"service {service!r} changed since it was read "
            f"(expected version {expected!r}, found {actual!r})"
        )
        self.service = service
        self.expected = expected
        self.actual = actual


class InvalidSecretIdError(ValueError):
    """A service name, key name or version number failed validation."""
