"""Exposure materializer - turns resolved secrets into a readable path."""

import logging
import os
from pathlib import Path
from typing import Callable, Optional

from core.exposure.artifacts import (
    ExistingFileArtifact,
    ExposureArtifact,
    FileArtifact,
    HandleArtifact,
    pipe_writer,
)
from core.secrets.base import ENCODING, ERRORS
from core.secrets.exceptions import HandleModeUnsupportedError, SecretsFileWriteError
from core.secrets.resolver import Loaded, ResolvedSecrets, UseExistingFile

logger = logging.getLogger(__name__)

MODE_FILE = "file"
MODE_HANDLE = "handle"
MODES = (MODE_FILE, MODE_HANDLE)

FILE_PERMISSIONS = 0o600
FD_DIR = "/dev/fd"
# O_EXCL refuses any existing entry, dangling symlinks included.
WRITE_FLAGS = os.O_WRONLY | os.O_CREAT | os.O_EXCL | getattr(os, "O_NOFOLLOW", 0)


def handle_mode_supported(fd_dir: str = FD_DIR) -> bool:
    """True if pipes can be addressed by path on this platform."""
    return hasattr(os, "pipe") and os.path.isdir(fd_dir)


def write_secrets_file(path: Path, blob: str) -> None:
    """
    Create path with owner-only permissions and write blob verbatim.

    Fails with FileExistsError if anything, a dangling symlink included,
    already occupies path. A partially written file is removed before the
    error propagates.
    """
    fd = os.open(path, WRITE_FLAGS, FILE_PERMISSIONS)
    try:
        # O_CREAT mode is filtered by umask
        os.fchmod(fd, FILE_PERMISSIONS)
        with os.fdopen(fd, "w", encoding=ENCODING, errors=ERRORS, newline="") as f:
            fd = None
            f.write(blob)
    except BaseException:
        if fd is not None:
            os.close(fd)
        Path(path).unlink(missing_ok=True)
        raise


class ExposureMaterializer:
    """
    Produces the one ExposureArtifact of an invocation.

    Modes:
        file   - write the blob to secrets_file (0600), delete it afterwards
        handle - feed the blob through a pipe exposed as /dev/fd/N

    Usage:
        materializer = ExposureMaterializer(Path(".env"))
        with materializer.expose(resolved, "file") as artifact:
            run(..., artifact.path)
    """

    def __init__(
        self,
        secrets_file: Path,
        keep_suffix: str = ".keep",
        reporter: Optional[Callable[[str], None]] = None,
        fd_dir: str = FD_DIR,
    ):
        self.secrets_file = Path(secrets_file)
        self.keep_suffix = keep_suffix
        self.reporter = reporter
        self.fd_dir = fd_dir

    def expose(self, resolved: ResolvedSecrets, mode: str = MODE_FILE) -> ExposureArtifact:
        """
        Materialize resolved secrets.

        Args:
            resolved: Result of SecretResolver.resolve
            mode: 'file' or 'handle'

        Returns:
            The artifact; its path goes to the child, its cleanup() to a
            guaranteed-exit handler.

        Raises:
            ValueError: Unknown mode
            HandleModeUnsupportedError: Handle mode without /dev/fd
            SecretsFileWriteError: The secrets file cannot be created
        """
        if mode not in MODES:
            raise ValueError(f"Unknown mode '{mode}'. Expected one of: {', '.join(MODES)}")

        if isinstance(resolved, UseExistingFile):
            return ExistingFileArtifact(resolved.path)

        if not isinstance(resolved, Loaded):
            raise TypeError(f"Cannot expose {resolved!r}")

        if mode == MODE_HANDLE:
            return self._expose_handle(resolved.blob)
        return self._expose_file(resolved.blob)

    def _expose_file(self, blob: str) -> FileArtifact:
        try:
            write_secrets_file(self.secrets_file, blob)
        except FileExistsError as e:
            raise SecretsFileWriteError(
                f"Cannot write secrets to {self.secrets_file}: something already "
                "exists there (a broken symlink?). Remove it or choose another --file."
            ) from e
        except OSError as e:
            raise SecretsFileWriteError(
                f"Cannot write secrets to {self.secrets_file}: {e.strerror or e}"
            ) from e
        logger.info(f"Wrote secrets to {self.secrets_file}")
        return FileArtifact(self.secrets_file, self.keep_suffix, self.reporter)

    def _expose_handle(self, blob: str) -> HandleArtifact:
        if not handle_mode_supported(self.fd_dir):
            raise HandleModeUnsupportedError(
                f"Handle mode needs {self.fd_dir}, which this platform lacks. "
                "Run without --use-fd."
            )
        read_fd, write_fd = os.pipe()
        try:
            writer = pipe_writer(write_fd, blob.encode(ENCODING, ERRORS))
        except BaseException:
            os.close(read_fd)
            os.close(write_fd)
            raise
        artifact = HandleArtifact(read_fd, writer, self.fd_dir)
        logger.info(f"Exposing secrets through {artifact.path}")
        return artifact
