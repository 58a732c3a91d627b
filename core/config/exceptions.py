"""Configuration-related exceptions."""

from core.secrets.exceptions import VaultError


class ConfigError(VaultError):
    """Base exception for config errors."""

    pass


class ConfigParseError(ConfigError):
    """Raised when a config file has invalid YAML."""

    pass


class ConfigValidationError(ConfigError):
    """Raised when config fails validation."""

    pass
