"""Artifacts through which a child process reads the secrets."""

import logging
import os
import threading
from pathlib import Path
from typing import Callable, Optional, Tuple

logger = logging.getLogger(__name__)

# How long cleanup waits for a handle writer that the reader abandoned.
WRITER_JOIN_TIMEOUT = 1.0


class ExposureArtifact:
    """
    Base class for the single path handed to the child process.

    Use as a context manager, or call cleanup() directly. cleanup() runs
    its action once; later calls do nothing.
    """

    def __init__(self, path: str):
        self.path = path
        self._cleaned = False

    @property
    def pass_fds(self) -> Tuple[int, ...]:
        """Descriptors the child must inherit for path to resolve."""
        return ()

    @property
    def cleaned(self) -> bool:
        return self._cleaned

    def cleanup(self) -> None:
        if self._cleaned:
            return
        self._cleaned = True
        self._release()

    def _release(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.cleanup()
        return False

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path={self.path!r})"


class ExistingFileArtifact(ExposureArtifact):
    """A file the operator already had. Never deleted."""

    def __init__(self, path: Path):
        super().__init__(str(Path(path).resolve()))


class FileArtifact(ExposureArtifact):
    """
    A secrets file written by this run, mode 0600.

    Deleted on cleanup unless a keep marker (path + suffix) exists at
    that moment.
    """

    def __init__(
        self,
        path: Path,
        keep_suffix: str = ".keep",
        reporter: Optional[Callable[[str], None]] = None,
    ):
        super().__init__(str(path))
        self.file_path = Path(path)
        self.keep_marker = Path(f"{path}{keep_suffix}")
        self.reporter = reporter or (lambda message: None)

    def _release(self) -> None:
        if self.keep_marker.exists():
            logger.info(f"Keep marker {self.keep_marker} found, leaving {self.path}")
            return
        if not self.file_path.is_file():
            return
        self.file_path.unlink()
        logger.info(f"Deleted {self.path}")
        self.reporter(f"✓ {self.file_path.name} deleted after run")


class HandleArtifact(ExposureArtifact):
    """
    Read end of an anonymous pipe, addressed as /dev/fd/N.

    A background thread feeds the blob into the write end and closes it,
    so the reader sees EOF after exactly one full read. Nothing ever
    appears in a directory.
    """

    def __init__(self, read_fd: int, writer: threading.Thread, fd_dir: str = "/dev/fd"):
        super().__init__(f"{fd_dir}/{read_fd}")
        self.read_fd = read_fd
        self.writer = writer

    @property
    def pass_fds(self) -> Tuple[int, ...]:
        return (self.read_fd,)

    def _release(self) -> None:
        # Closing the read end makes a writer stuck on a full pipe fail
        # with EPIPE instead of blocking forever.
        os.close(self.read_fd)
        self.writer.join(WRITER_JOIN_TIMEOUT)
        if self.writer.is_alive():
            logger.warning("Pipe writer still running after the read end closed")
        logger.debug(f"Closed {self.path}")


def pipe_writer(write_fd: int, data: bytes) -> threading.Thread:
    """
    Start a daemon thread that writes data to write_fd, then closes it.

    A reader that goes away early only costs a debug message.
    """

    def _write():
        try:
            with os.fdopen(write_fd, "wb") as pipe:
                pipe.write(data)
        except BrokenPipeError:
            logger.debug("Reader closed the pipe before consuming all secrets")

    thread = threading.Thread(target=_write, name="secrets-pipe-writer", daemon=True)
    thread.start()
    return thread
