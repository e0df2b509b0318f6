"""
Local artifact files.

`LocalFile` binds a serializable payload to one path on disk. The path is
fixed at construction; the payload is shared with the caller and may still
be mutated (e.g. CID injection) up to the point it is serialized.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Generic, Protocol, TypeVar

from .cid import ContentId, single_file_dir_cid
from .compression import COMPRESSED_EXTENSION, compress
from .errors import (
    CompressionError,
    DeserializationError,
    IdentifierError,
    ReadError,
    SerializationError,
    WriteError,
)
from .models import (
    PerformanceFile,
    RewardsFile,
    deserialize_performance_file,
    deserialize_rewards_file,
)

logger = logging.getLogger(__name__)


class Serializable(Protocol):
    """Anything that renders itself to canonical bytes."""

    def serialize(self) -> bytes:
        ...


T = TypeVar("T", bound=Serializable)


def _write_bytes(path: Path, data: bytes) -> None:
    try:
        path.write_bytes(data)
    except OSError as e:
        raise WriteError(f"Error writing file to {path}: {e}", path) from e


class LocalFile(Generic[T]):
    """
    A rewards file or minipool performance file on local disk.

    Creating the wrapper does not touch the filesystem; `write` and
    `create_compressed_file_and_cid` do.
    """

    def __init__(self, payload: T, path: Path | str):
        self._payload = payload
        self._path = Path(path)

    @property
    def impl(self) -> T:
        """The wrapped payload."""
        return self._payload

    @property
    def path(self) -> Path:
        return self._path

    @property
    def file_name(self) -> str:
        return self._path.name

    def serialize(self) -> bytes:
        try:
            return self._payload.serialize()
        except SerializationError as e:
            e.path = self._path
            raise
        except (AttributeError, TypeError, ValueError) as e:
            raise SerializationError(f"Error serializing {self.file_name}: {e}", self._path) from e

    def write(self) -> bytes:
        """Serialize the payload, overwrite the file at `path`, return the bytes written."""
        data = self.serialize()
        _write_bytes(self._path, data)
        logger.debug("Wrote %d bytes to %s", len(data), self._path)
        return data

    def create_compressed_file_and_cid(self) -> tuple[Path, ContentId]:
        """
        Write a zstd-compressed copy next to the plain file and identify it.

        The CID is computed over the compressed bytes, as the entry
        `<file_name>.zst` of a single-file directory, since only the
        compressed form is distributed.

        Returns:
            (compressed file path, CID of the compressed file)
        """
        data = self.serialize()

        compressed_path = self._path.with_name(self._path.name + COMPRESSED_EXTENSION)
        try:
            compressed = compress(data)
        except CompressionError as e:
            e.path = compressed_path
            raise

        try:
            cid = single_file_dir_cid(compressed, compressed_path.name)
        except ValueError as e:
            raise IdentifierError(f"Error calculating CID for {compressed_path.name}: {e}", compressed_path) from e

        _write_bytes(compressed_path, compressed)
        logger.debug("Wrote %d compressed bytes to %s", len(compressed), compressed_path)
        return compressed_path, cid


LocalRewardsFile = LocalFile[RewardsFile]
LocalPerformanceFile = LocalFile[PerformanceFile]


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise ReadError(f"Error reading file from {path}: {e}", path) from e


def read_local_rewards_file(path: Path | str) -> LocalRewardsFile:
    """Read an existing rewards file from disk and wrap it."""
    path = Path(path)
    try:
        rewards_file = deserialize_rewards_file(_read_bytes(path))
    except DeserializationError as e:
        raise DeserializationError(f"Error unmarshaling rewards file from {path}: {e}", path) from e
    return LocalFile(rewards_file, path)


def read_local_performance_file(path: Path | str) -> LocalPerformanceFile:
    """Read an existing minipool performance file from disk and wrap it."""
    path = Path(path)
    try:
        performance_file = deserialize_performance_file(_read_bytes(path))
    except DeserializationError as e:
        raise DeserializationError(f"Error unmarshaling performance file from {path}: {e}", path) from e
    return LocalFile(performance_file, path)
