"""Abstract base class for secret-store backends."""

from abc import ABC, abstractmethod
from typing import Optional

from core.secrets.exceptions import SecretStoreUnavailableError

ENCODING = "utf-8"
# Round-trips arbitrary bytes through str without loss.
ERRORS = "surrogateescape"


class SecretBackend(ABC):
    """
    Abstract base class that all secret-store backends must implement.

    A backend addresses one opaque blob per identifier (the app name).
    Implementations:
    - libsecret's secret-tool executable
    - the keyring package
    """

    @abstractmethod
    def lookup(self, identifier: str) -> Optional[str]:
        """
        Retrieve the blob stored under an identifier.

        Args:
            identifier: The app name the blob is stored under

        Returns:
            The stored content, or None if absent or the lookup failed

        Raises:
            SecretStoreUnavailableError: If the store tool is missing
        """
        pass

    @abstractmethod
    def store(self, identifier: str, label: str, content: str) -> bool:
        """
        Store a blob under an identifier.

        Args:
            identifier: The app name to store under
            label: Human-readable label shown by keyring managers
            content: The blob to store

        Returns:
            True if the store tool reported success, False otherwise
        """
        pass

    @abstractmethod
    def delete(self, identifier: str) -> bool:
        """Remove the blob stored under an identifier."""
        pass

    @abstractmethod
    def health_check(self) -> bool:
        """
        Check if the store tool is available.

        Returns:
            True if healthy, False otherwise
        """
        pass

    def require_available(self) -> None:
        """
        Raise SecretStoreUnavailableError unless health_check passes.
        """
        if not self.health_check():
            raise SecretStoreUnavailableError(self.unavailable_message())

    def unavailable_message(self) -> str:
        return f"{type(self).__name__} is not available"
