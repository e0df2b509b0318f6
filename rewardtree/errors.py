"""
Errors raised by the artifact pipeline.

Every error carries the path (or file name) being processed when it was
raised. None of them are retried: a failed cycle has to be recomputed from
scratch, and files already written are left on disk.
"""

from __future__ import annotations

from pathlib import Path


class ArtifactError(Exception):
    """Base class for artifact pipeline failures."""

    def __init__(self, message: str, path: Path | str | None = None):
        super().__init__(message)
        self.path = path


class ReadError(ArtifactError):
    """An artifact could not be read from disk."""


class DeserializationError(ArtifactError):
    """An on-disk artifact is malformed."""


class SerializationError(ArtifactError):
    """A payload could not be rendered to its canonical bytes."""


class CompressionError(ArtifactError):
    """Compressing or decompressing an artifact failed."""


class IdentifierError(ArtifactError):
    """A content identifier could not be computed."""


class WriteError(ArtifactError):
    """An artifact could not be written to disk."""
