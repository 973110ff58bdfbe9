"""
Base class for keyring backends.

A dispatch layer picks one concrete keyring (platform keychain, encrypted
file, ...) and talks to it only through this interface.
"""
from abc import ABC, abstractmethod


class AbstractKeyring(ABC):
    """Abstract base class for secret storage backends."""

    name: str = "base"

    @classmethod
    def is_available(cls) -> bool:
        """Check if this backend can be used on the current system."""
        return True

    @abstractmethod
    def get(self, namespace: str, key: str) -> str:
        """Retrieve a secret. Raises SecretNotFound if not stored."""

    @abstractmethod
    def set(self, namespace: str, key: str, secret: str) -> None:
        """Store a secret, replacing any previous value."""

    @abstractmethod
    def delete(self, namespace: str, key: str) -> None:
        """Delete a secret. Raises SecretNotFound if not stored."""
