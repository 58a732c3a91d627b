"""Secret-store access and resolution."""

# Public API
from core.secrets.resolver import Loaded, SecretResolver, UseExistingFile
from core.secrets.exceptions import (
    KeyringRetrieveError,
    KeyringStoreError,
    NoSecretsProvidedError,
    SecretBackendError,
    SecretStoreUnavailableError,
    VaultError,
)
from core.secrets.registry import available_backends, get_backend, register_backend

__all__ = [
    "SecretResolver",
    "Loaded",
    "UseExistingFile",
    "VaultError",
    "SecretStoreUnavailableError",
    "NoSecretsProvidedError",
    "KeyringStoreError",
    "KeyringRetrieveError",
    "SecretBackendError",
    "register_backend",
    "get_backend",
    "available_backends",
]
