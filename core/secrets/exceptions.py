"""Custom exceptions for secret loading and exposure."""

EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_MISSING_DEPENDENCY = 127


class VaultError(Exception):
    """Base exception for every failure that aborts an invocation."""

    exit_code = EXIT_FAILURE


class NoCommandProvidedError(VaultError):
    """Raised when no child command was given."""

    exit_code = EXIT_USAGE


class SecretStoreUnavailableError(VaultError):
    """Raised when the platform secret-store tool is not installed."""

    exit_code = EXIT_MISSING_DEPENDENCY


class NoSecretsProvidedError(VaultError):
    """Raised when interactive capture yields empty input."""

    pass


class KeyringStoreError(VaultError):
    """Raised when storing secrets in the keyring fails."""

    pass


class KeyringRetrieveError(VaultError):
    """Raised when the confirmatory re-fetch from the keyring fails."""

    pass


class SecretBackendError(VaultError):
    """Raised when there's an issue with the secret backend itself."""

    pass


class HandleModeUnsupportedError(VaultError):
    """Raised when the platform offers no path-addressable pipe."""

    pass


class CommandLaunchError(VaultError):
    """Raised when the child command cannot be started."""

    def __init__(self, message: str, exit_code: int = EXIT_FAILURE):
        super().__init__(message)
        self.exit_code = exit_code


class SecretsFileWriteError(VaultError):
    """Raised when the secrets file cannot be created."""

    pass
