"""Secret resolver - decides where the secrets blob comes from."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, TextIO, Union

# Import backends to trigger registration
from core.secrets import keyring_backend, secret_tool_backend  # noqa: F401
from core.secrets.capture import capture_secrets
from core.secrets.exceptions import (
    KeyringRetrieveError,
    KeyringStoreError,
    NoSecretsProvidedError,
    SecretBackendError,
)
from core.secrets.registry import get_backend

logger = logging.getLogger(__name__)

SOURCE_KEYRING = "keyring"
SOURCE_CAPTURED = "captured"


def has_content(blob: Optional[str]) -> bool:
    """A blob counts only if it holds something besides whitespace."""
    return bool(blob) and bool(blob.strip())


def line_count(blob: str) -> int:
    return len(blob.splitlines())


def label_for(identifier: str) -> str:
    return f"Secrets for {identifier}"


@dataclass(frozen=True)
class UseExistingFile:
    """A secrets file already exists locally and is used as-is."""

    path: Path


@dataclass(frozen=True)
class Loaded:
    """A blob fetched from the keyring, possibly after capturing it first."""

    blob: str
    source: str = SOURCE_KEYRING

    @property
    def line_count(self) -> int:
        return line_count(self.blob)


ResolvedSecrets = Union[UseExistingFile, Loaded]


class SecretResolver:
    """
    Resolves the secrets for one app.

    Order:
        1. existing local file (no keyring contact)
        2. keyring entry for the app
        3. interactive capture, stored in the keyring and re-fetched

    Usage:
        resolver = SecretResolver(backend="secret-tool")
        resolved = resolver.resolve(Path(".env"), "myproject")
    """

    def __init__(
        self,
        backend: str = "secret-tool",
        reporter: Optional[Callable[[str], None]] = None,
        input_stream: Optional[TextIO] = None,
        **backend_config,
    ):
        self.backend_type = backend
        self.backend = self._create_backend(backend, backend_config)
        self.reporter = reporter or (lambda message: None)
        self.input_stream = input_stream
        logger.debug(f"Initialized SecretResolver with backend: {backend}")

    def _create_backend(self, backend: str, config: dict):
        """Create backend using registry."""
        try:
            backend_cls = get_backend(backend)
            return backend_cls(**config)
        except KeyError as e:
            raise SecretBackendError(str(e.args[0]))
        except TypeError as e:
            # Unexpected option in backend config
            raise SecretBackendError(f"Backend '{backend}' config error: {e}")

    def resolve(self, local_path: Path, identifier: str) -> ResolvedSecrets:
        """
        Decide where the secrets for identifier come from.

        Args:
            local_path: Secrets file that short-circuits the keyring if present
            identifier: App name the keyring entry is stored under

        Returns:
            UseExistingFile or Loaded

        Raises:
            SecretStoreUnavailableError: If the store tool is missing
            NoSecretsProvidedError: If capture yields nothing
            KeyringStoreError: If storing the captured blob fails
            KeyringRetrieveError: If the stored blob cannot be read back
        """
        local_path = Path(local_path)
        if local_path.is_file():
            logger.info(f"Using existing local file {local_path}")
            return UseExistingFile(local_path)

        self.backend.require_available()

        blob = self.fetch(identifier)
        if blob is not None:
            logger.info(f"Loaded secrets for '{identifier}' from keyring")
            return Loaded(blob, SOURCE_KEYRING)

        self.reporter(f"⚠ No secrets found for app='{identifier}' in keyring.")
        return self.capture_and_store(identifier)

    def fetch(self, identifier: str) -> Optional[str]:
        """Look up identifier; None unless the lookup returned content."""
        blob = self.backend.lookup(identifier)
        return blob if has_content(blob) else None

    def capture_and_store(self, identifier: str) -> Loaded:
        """
        Capture a blob interactively, store it, and read it back.

        The returned blob is the re-fetched one, never the captured buffer.
        """
        captured = capture_secrets(self.input_stream, self.reporter)
        if not has_content(captured):
            raise NoSecretsProvidedError("No secrets provided. Aborting.")

        label = label_for(identifier)
        if not self.backend.store(identifier, label, captured):
            raise KeyringStoreError("Failed to store secrets in keyring. Aborting.")

        blob = self.fetch(identifier)
        if blob is None:
            raise KeyringRetrieveError(
                "Failed to retrieve secrets from keyring. Aborting."
            )

        logger.info(f"Stored secrets for '{identifier}' as '{label}'")
        return Loaded(blob, SOURCE_CAPTURED)

    def health_check(self) -> bool:
        """Check if backend is healthy."""
        return self.backend.health_check()
