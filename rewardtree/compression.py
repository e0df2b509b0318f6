"""
Deterministic zstd compression for distributable artifacts.

The compression profile is pinned: independent nodes computing the same
cycle must produce byte-identical compressed files, and zstd output depends
on every tunable (level, checksum flag, content-size flag, threading).
"""

from __future__ import annotations

import zstandard

from .errors import CompressionError

COMPRESSED_EXTENSION = ".zst"

COMPRESSION_LEVEL = 19


def _compressor() -> zstandard.ZstdCompressor:
    return zstandard.ZstdCompressor(
        level=COMPRESSION_LEVEL,
        write_checksum=False,
        write_content_size=True,
        write_dict_id=False,
        threads=0,
    )


def compress(data: bytes) -> bytes:
    """Compress `data` with the pinned profile."""
    try:
        return _compressor().compress(data)
    except zstandard.ZstdError as e:
        raise CompressionError(f"zstd compression failed: {e}") from e


def decompress(data: bytes) -> bytes:
    """Inverse of `compress`."""
    try:
        return zstandard.ZstdDecompressor().decompress(data)
    except zstandard.ZstdError as e:
        raise CompressionError(f"zstd decompression failed: {e}") from e
