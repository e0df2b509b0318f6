"""
Offline IPFS content identifiers.

Computes the CID an IPFS node would assign to a file added with

    ipfs add --wrap-with-directory --cid-version=1 --raw-leaves \\
        --chunker=size-1048576

i.e. the CID of a freshly created directory whose only entry is the file.
No IPFS node is contacted; the UnixFS and dag-pb encodings are reproduced
here byte for byte:

- the file is cut into fixed 1 MiB chunks stored as raw blocks,
- chunks are arranged in a balanced DAG of at most 1024 links per node,
- a single-chunk file is just its raw leaf,
- internal file nodes and the directory are dag-pb blocks,
- every block is hashed with sha2-256 and addressed with a CIDv1.

This module intentionally avoids third-party dependencies.
"""

from __future__ import annotations

import base64
import hashlib
from dataclasses import dataclass


RAW_CODEC = 0x55
DAG_PB_CODEC = 0x70
SHA2_256 = 0x12

CHUNK_SIZE = 1024 * 1024
MAX_LINKS = 1024

# UnixFS Data.DataType
UNIXFS_DIRECTORY = 1
UNIXFS_FILE = 2

_MULTIBASE_BASE32 = "b"


def encode_varint(value: int) -> bytes:
    """Encode an unsigned LEB128 varint (protobuf / multiformats style)."""
    if value < 0:
        raise ValueError("varint must be non-negative")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_varint(data: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode a varint at `offset`; returns (value, next_offset)."""
    value = 0
    shift = 0
    while True:
        if offset >= len(data):
            raise ValueError("truncated varint")
        byte = data[offset]
        offset += 1
        value |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return value, offset
        shift += 7


@dataclass(frozen=True)
class ContentId:
    """
    A CIDv1 over a sha2-256 multihash.

    The string form is multibase base32 (lowercase, unpadded, `b` prefix),
    which is what IPFS prints for CIDv1.
    """

    version: int
    codec: int
    digest: bytes

    @classmethod
    def for_block(cls, codec: int, block: bytes) -> "ContentId":
        return cls(1, codec, hashlib.sha256(block).digest())

    @classmethod
    def parse(cls, text: str) -> "ContentId":
        """Parse the base32 string form of a CIDv1."""
        if not text.startswith(_MULTIBASE_BASE32):
            raise ValueError(f"Unsupported multibase prefix in CID: {text!r}")
        body = text[1:].upper()
        try:
            raw = base64.b32decode(body + "=" * (-len(body) % 8))
        except ValueError as e:
            raise ValueError(f"Invalid base32 in CID: {text!r}") from e

        version, offset = decode_varint(raw)
        if version != 1:
            raise ValueError(f"Unsupported CID version: {version}")
        codec, offset = decode_varint(raw, offset)
        hash_code, offset = decode_varint(raw, offset)
        length, offset = decode_varint(raw, offset)
        digest = raw[offset:]
        if hash_code != SHA2_256 or len(digest) != length or length != 32:
            raise ValueError(f"Unsupported multihash in CID: {text!r}")
        return cls(version, codec, digest)

    def multihash(self) -> bytes:
        return encode_varint(SHA2_256) + encode_varint(len(self.digest)) + self.digest

    def to_bytes(self) -> bytes:
        """Binary CID: version, codec, multihash."""
        return encode_varint(self.version) + encode_varint(self.codec) + self.multihash()

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def __str__(self) -> str:
        encoded = base64.b32encode(self.to_bytes()).decode("ascii")
        return _MULTIBASE_BASE32 + encoded.lower().rstrip("=")


# -----------------------------------------------------------------------------
# Protobuf encoding (dag-pb and UnixFS)
# -----------------------------------------------------------------------------


def _varint_field(number: int, value: int) -> bytes:
    return encode_varint(number << 3) + encode_varint(value)


def _bytes_field(number: int, value: bytes) -> bytes:
    return encode_varint((number << 3) | 2) + encode_varint(len(value)) + value


def encode_unixfs_data(
    data_type: int,
    file_size: int | None = None,
    block_sizes: list[int] | None = None,
) -> bytes:
    """Encode a UnixFS `Data` message (fields in field-number order)."""
    out = _varint_field(1, data_type)
    if file_size is not None:
        out += _varint_field(3, file_size)
    for size in block_sizes or []:
        out += _varint_field(4, size)
    return out


def encode_pb_node(links: list[tuple[ContentId, str, int]], data: bytes) -> bytes:
    """
    Encode a dag-pb `PBNode`.

    Links come before Data; each link always carries Hash, Name and Tsize,
    even when Name is empty.
    """
    out = bytearray()
    for cid, name, tsize in links:
        link = _bytes_field(1, cid.to_bytes()) + _bytes_field(2, name.encode("utf-8")) + _varint_field(3, tsize)
        out += _bytes_field(2, link)
    out += _bytes_field(1, data)
    return bytes(out)


def encode_directory(entries: list[tuple[str, ContentId, int]]) -> bytes:
    """Encode a basic (non-sharded) UnixFS directory; entries are (name, cid, tsize)."""
    links = [(cid, name, tsize) for name, cid, tsize in sorted(entries, key=lambda e: e[0])]
    return encode_pb_node(links, encode_unixfs_data(UNIXFS_DIRECTORY))


# -----------------------------------------------------------------------------
# Balanced file layout
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class _DagNode:
    cid: ContentId
    tsize: int  # encoded size of this block plus everything below it
    file_size: int  # file bytes covered by this node


class _Chunker:
    def __init__(self, data: bytes):
        self._data = data
        self._offset = 0

    def done(self) -> bool:
        return self._offset >= len(self._data)

    def next_leaf(self) -> _DagNode:
        chunk = self._data[self._offset : self._offset + CHUNK_SIZE]
        self._offset += len(chunk)
        return _DagNode(ContentId.for_block(RAW_CODEC, chunk), len(chunk), len(chunk))


def _file_node(children: list[_DagNode]) -> _DagNode:
    sizes = [c.file_size for c in children]
    data = encode_unixfs_data(UNIXFS_FILE, sum(sizes), sizes)
    block = encode_pb_node([(c.cid, "", c.tsize) for c in children], data)
    return _DagNode(
        ContentId.for_block(DAG_PB_CODEC, block),
        len(block) + sum(c.tsize for c in children),
        sum(sizes),
    )


def _fill(chunker: _Chunker, children: list[_DagNode], depth: int) -> None:
    while len(children) < MAX_LINKS and not chunker.done():
        if depth == 1:
            children.append(chunker.next_leaf())
        else:
            grandchildren: list[_DagNode] = []
            _fill(chunker, grandchildren, depth - 1)
            children.append(_file_node(grandchildren))


def _build_file(data: bytes) -> _DagNode:
    chunker = _Chunker(data)
    root = chunker.next_leaf()
    depth = 1
    while not chunker.done():
        children = [root]
        _fill(chunker, children, depth)
        root = _file_node(children)
        depth += 1
    return root


# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------


def raw_cid(data: bytes) -> ContentId:
    """CID of `data` as a single raw block."""
    return ContentId.for_block(RAW_CODEC, data)


def file_cid(data: bytes) -> ContentId:
    """CID of `data` added as a UnixFS file (no wrapping directory)."""
    return _build_file(data).cid


def single_file_dir_cid(data: bytes, filename: str) -> ContentId:
    """
    CID of a new directory holding `data` as its only entry, named `filename`.

    Args:
        data: File contents
        filename: Entry name inside the directory (a base name, no slashes)

    Returns:
        CIDv1 (dag-pb) of the wrapping directory
    """
    if not filename or "/" in filename:
        raise ValueError(f"Invalid directory entry name: {filename!r}")

    node = _build_file(data)
    block = encode_directory([(filename, node.cid, node.tsize)])
    return ContentId.for_block(DAG_PB_CODEC, block)
