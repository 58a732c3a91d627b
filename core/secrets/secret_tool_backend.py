"""libsecret secret-tool backend."""

import logging
import shutil
import subprocess
from typing import Optional

from core.secrets.base import ENCODING, ERRORS, SecretBackend
from core.secrets.exceptions import SecretStoreUnavailableError
from core.secrets.registry import register_backend

logger = logging.getLogger(__name__)

INSTALL_HINTS = (
    "  Fedora/RHEL: sudo dnf install libsecret-tools\n"
    "  Ubuntu/Debian: sudo apt install libsecret-tools\n"
    "  Arch: sudo pacman -S libsecret"
)


@register_backend("secret-tool")
class SecretToolBackend(SecretBackend):
    """
    Stores one blob per app in the desktop keyring through secret-tool.

    Entries are addressed by the attribute pair ``<attribute> <identifier>``:

        secret-tool lookup app myproject
        secret-tool store --label "Secrets for myproject" app myproject
        secret-tool clear app myproject
    """

    def __init__(self, executable: str = "secret-tool", attribute: str = "app"):
        """
        Args:
            executable: Name or path of the secret-tool binary
            attribute: Attribute name the identifier is stored under
        """
        self.executable = executable
        self.attribute = attribute

    def _run(self, *args: str, content: Optional[str] = None):
        """Run secret-tool, feeding content on stdin when given."""
        cmd = [self.executable, *args]
        try:
            return subprocess.run(
                cmd,
                input=content.encode(ENCODING, ERRORS) if content is not None else None,
                stdin=subprocess.DEVNULL if content is None else None,
                capture_output=True,
            )
        except FileNotFoundError as e:
            raise SecretStoreUnavailableError(self.unavailable_message()) from e

    def lookup(self, identifier: str) -> Optional[str]:
        proc = self._run("lookup", self.attribute, identifier)
        if proc.returncode != 0:
            logger.debug(
                f"secret-tool lookup for '{identifier}' exited {proc.returncode}"
            )
            return None
        return proc.stdout.decode(ENCODING, ERRORS)

    def store(self, identifier: str, label: str, content: str) -> bool:
        proc = self._run(
            "store", "--label", label, self.attribute, identifier, content=content
        )
        if proc.returncode != 0:
            # stderr never contains the secret itself
            stderr = proc.stderr.decode(ENCODING, "replace").strip()
            logger.warning(f"secret-tool store failed ({proc.returncode}): {stderr}")
            return False
        return True

    def delete(self, identifier: str) -> bool:
        proc = self._run("clear", self.attribute, identifier)
        return proc.returncode == 0

    def health_check(self) -> bool:
        """Check the secret-tool binary is on PATH."""
        return shutil.which(self.executable) is not None

    def unavailable_message(self) -> str:
        return (
            f"{self.executable} not found. Please install libsecret-tools:\n"
            f"{INSTALL_HINTS}"
        )
