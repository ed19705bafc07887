"""
Abstract base class for scrape token secret stores.
"""
from abc import ABC, abstractmethod
from typing import Optional


class SecretStoreError(Exception):
    """Raised when a secret store cannot answer a lookup"""
    pass


class AbstractSecretStore(ABC):
    """Read-only source of per-tag scrape tokens"""

    backend: str = "abstract"

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to the secret store"""
        raise NotImplementedError("Subclass must implement connect()")

    @abstractmethod
    def health_check(self) -> bool:
        """Check if the secret store is reachable"""
        raise NotImplementedError("Subclass must implement health_check()")

    @abstractmethod
    def close(self) -> None:
        """Close the connection"""
        raise NotImplementedError("Subclass must implement close()")

    @abstractmethod
    def get_token(self, tag: str) -> Optional[str]:
        """
        Return the scrape token configured for ``tag``, or None for unknown tags.

        Raises:
            SecretStoreError: If the store cannot be queried
        """
        raise NotImplementedError("Subclass must implement get_token()")
