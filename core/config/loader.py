"""Configuration loader - merges defaults, YAML files, env vars and CLI options."""

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

import yaml

from core.config.exceptions import ConfigParseError, ConfigValidationError
from core.config.merger import merge_layers
from core.config.settings import VaultConfig
from core.exposure.materializer import MODES

logger = logging.getLogger(__name__)

USER_CONFIG = Path("vaultsh") / "config.yaml"
PROJECT_CONFIG = ".vaultsh.yaml"

KNOWN_KEYS = {"file", "app", "mode", "backend", "env_var", "keep_suffix", "backends"}
STRING_KEYS = ("file", "app", "mode", "backend", "env_var", "keep_suffix")

ENV_OVERRIDES = {
    "VAULTSH_FILE": "file",
    "VAULTSH_APP": "app",
    "VAULTSH_MODE": "mode",
    "VAULTSH_BACKEND": "backend",
}


class ConfigLoader:
    """
    Builds a VaultConfig from layered sources.

    Load order (later wins):
        1. built-in defaults
        2. $XDG_CONFIG_HOME/vaultsh/config.yaml (user)
        3. .vaultsh.yaml in the working directory (project)
        4. VAULTSH_* environment variables
        5. explicit overrides (CLI options; None means unset)

    Usage:
        loader = ConfigLoader()
        config = loader.load({"mode": "handle"})
    """

    def __init__(
        self,
        cwd: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.cwd = Path(cwd) if cwd else Path.cwd()
        self.environ = os.environ if environ is None else environ

    @property
    def user_config_path(self) -> Path:
        base = self.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
        return Path(base) / USER_CONFIG

    @property
    def project_config_path(self) -> Path:
        return self.cwd / PROJECT_CONFIG

    def defaults(self) -> dict:
        return {
            "file": ".env",
            "app": self.cwd.name,
            "mode": "file",
            "backend": "secret-tool",
            "env_var": "SECRETS_FILE",
            "keep_suffix": ".keep",
            "backends": {},
        }

    def _load_yaml(self, path: Path) -> dict:
        """Load a YAML mapping if the file exists, otherwise {}."""
        if not path.is_file():
            return {}

        try:
            with open(path) as f:
                content = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigParseError(f"Invalid YAML in {path}: {e}")

        if not isinstance(content, dict):
            raise ConfigParseError(f"Expected a mapping at the top of {path}")

        logger.debug(f"Loaded config: {path}")
        return content

    def _from_environ(self) -> dict:
        return {
            key: self.environ[name]
            for name, key in ENV_OVERRIDES.items()
            if self.environ.get(name)
        }

    def _validate(self, merged: dict) -> None:
        unknown = set(merged) - KNOWN_KEYS
        if unknown:
            raise ConfigValidationError(
                f"Unknown config keys: {', '.join(sorted(unknown))}"
            )

        for key in STRING_KEYS:
            value = merged[key]
            if not isinstance(value, str) or not value:
                raise ConfigValidationError(f"'{key}' must be a non-empty string")

        if merged["mode"] not in MODES:
            raise ConfigValidationError(
                f"Invalid mode '{merged['mode']}'. Expected one of: {', '.join(MODES)}"
            )

        backends = merged["backends"]
        if not isinstance(backends, dict) or not all(
            isinstance(options, dict) for options in backends.values()
        ):
            raise ConfigValidationError(
                "'backends' must map backend names to option mappings"
            )

    def load(self, overrides: Optional[dict] = None) -> VaultConfig:
        """
        Load the configuration for one invocation.

        Args:
            overrides: Highest-priority values, typically from CLI options

        Returns:
            VaultConfig with an absolute secrets_file

        Raises:
            ConfigParseError: A config file is not a valid YAML mapping
            ConfigValidationError: Unknown keys or invalid values
        """
        merged = merge_layers(
            self.defaults(),
            self._load_yaml(self.user_config_path),
            self._load_yaml(self.project_config_path),
            self._from_environ(),
            overrides or {},
        )
        self._validate(merged)

        secrets_file = Path(merged["file"]).expanduser()
        if not secrets_file.is_absolute():
            secrets_file = self.cwd / secrets_file

        config = VaultConfig(
            secrets_file=secrets_file,
            app_name=merged["app"],
            mode=merged["mode"],
            backend=merged["backend"],
            env_var=merged["env_var"],
            keep_suffix=merged["keep_suffix"],
            backend_options=dict(merged["backends"].get(merged["backend"], {})),
        )
        logger.debug(
            f"Config: app='{config.app_name}' file={config.secrets_file} "
            f"mode={config.mode} backend={config.backend}"
        )
        return config
