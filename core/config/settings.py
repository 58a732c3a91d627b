"""Invocation configuration."""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class VaultConfig:
    """
    Everything one invocation needs, built once by ConfigLoader.

    Attributes:
        secrets_file: Absolute path of the secrets file
        app_name: Keyring identifier
        mode: 'file' or 'handle'
        backend: Registered secret-store backend name
        env_var: Variable that carries the artifact path to the child
        keep_suffix: Suffix of the keep marker next to secrets_file
        backend_options: Keyword arguments for the backend class
    """

    secrets_file: Path
    app_name: str
    mode: str = "file"
    backend: str = "secret-tool"
    env_var: str = "SECRETS_FILE"
    keep_suffix: str = ".keep"
    backend_options: dict = field(default_factory=dict)

    @property
    def keep_marker(self) -> Path:
        return Path(f"{self.secrets_file}{self.keep_suffix}")

    @property
    def use_handle(self) -> bool:
        return self.mode == "handle"
