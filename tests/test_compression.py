from __future__ import annotations

import pytest

from rewardtree.compression import COMPRESSED_EXTENSION, compress, decompress
from rewardtree.errors import CompressionError

ZSTD_MAGIC = b"\x28\xb5\x2f\xfd"


def test_roundtrip() -> None:
    data = b'{"index":5,"nodeRewards":{}}' * 200
    assert decompress(compress(data)) == data


def test_compress_is_deterministic() -> None:
    data = bytes(range(256)) * 64
    assert compress(data) == compress(data)


def test_output_is_a_zstd_frame() -> None:
    compressed = compress(b"hello hello hello hello")
    assert compressed.startswith(ZSTD_MAGIC)


def test_compresses_repetitive_data() -> None:
    data = b"0x1111000000000000000000000000000000000001" * 1000
    assert len(compress(data)) < len(data) // 10


def test_decompress_rejects_garbage() -> None:
    with pytest.raises(CompressionError):
        decompress(b"definitely not zstd")


def test_extension() -> None:
    assert COMPRESSED_EXTENSION == ".zst"
