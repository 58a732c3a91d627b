"""Exposure of resolved secrets to a child process."""

from core.exposure.artifacts import (
    ExistingFileArtifact,
    ExposureArtifact,
    FileArtifact,
    HandleArtifact,
)
from core.exposure.materializer import (
    MODE_FILE,
    MODE_HANDLE,
    MODES,
    ExposureMaterializer,
    handle_mode_supported,
)

__all__ = [
    "ExposureMaterializer",
    "ExposureArtifact",
    "ExistingFileArtifact",
    "FileArtifact",
    "HandleArtifact",
    "MODE_FILE",
    "MODE_HANDLE",
    "MODES",
    "handle_mode_supported",
]
