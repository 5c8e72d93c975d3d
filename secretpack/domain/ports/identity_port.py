"""
Port (interface) for caller identity resolution.
Infrastructure adapters (e.g. StsIdentityResolver) must implement this interface.
"""

from abc import ABC, abstractmethod


class IIdentityResolver(ABC):
    @abstractmethod
    def current_principal(self) -> str:
        """Return a stable identifier for the calling principal (e.g. an ARN)."""
        ...
