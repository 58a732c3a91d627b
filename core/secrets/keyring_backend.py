"""Backend built on the keyring package."""

import logging
from typing import Optional

import keyring
from keyring.backends import fail
from keyring.errors import KeyringError, PasswordDeleteError

from core.secrets.base import SecretBackend
from core.secrets.registry import register_backend

logger = logging.getLogger(__name__)


@register_backend("keyring")
class KeyringSecretBackend(SecretBackend):
    """
    Uses the OS keyring through the ``keyring`` package.

    Each app's blob is the password of ``(service, identifier)``. The
    keyring API has no per-entry label, so the label is only logged.
    """

    def __init__(self, service: str = "vaultsh"):
        """
        Args:
            service: Service name every entry is stored under
        """
        self.service = service

    def lookup(self, identifier: str) -> Optional[str]:
        try:
            return keyring.get_password(self.service, identifier)
        except KeyringError as e:
            logger.debug(f"keyring lookup for '{identifier}' failed: {e}")
            return None

    def store(self, identifier: str, label: str, content: str) -> bool:
        try:
            keyring.set_password(self.service, identifier, content)
        except KeyringError as e:
            logger.warning(f"keyring store for '{identifier}' failed: {e}")
            return False
        logger.debug(f"Stored '{label}' under service '{self.service}'")
        return True

    def delete(self, identifier: str) -> bool:
        try:
            keyring.delete_password(self.service, identifier)
        except PasswordDeleteError:
            return False
        return True

    def health_check(self) -> bool:
        """A keyring is usable unless only the fail backend was found."""
        return not isinstance(keyring.get_keyring(), fail.Keyring)

    def unavailable_message(self) -> str:
        return (
            "No usable keyring backend found. Install a keyring provider "
            "(e.g. gnome-keyring or KWallet) or configure one for the keyring package."
        )
