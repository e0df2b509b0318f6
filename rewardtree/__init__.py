"""
rewardtree - content-addressed reward cycle artifacts.

Writes the rewards file and minipool performance file of a reward cycle,
optionally zstd-compressed, and computes the IPFS CIDs independent nodes
use to agree on them.
"""

__version__ = "0.1.0"

from .artifacts import SENTINEL_CID, save_json_artifacts
from .cid import ContentId, single_file_dir_cid
from .compression import COMPRESSED_EXTENSION, compress, decompress
from .config import RewardsConfig, load_config
from .errors import (
    ArtifactError,
    CompressionError,
    DeserializationError,
    IdentifierError,
    ReadError,
    SerializationError,
    WriteError,
)
from .files import LocalFile, read_local_performance_file, read_local_rewards_file
from .models import MinipoolPerformance, PerformanceFile, RewardsFile

__all__ = [
    "__version__",
    # Orchestration
    "SENTINEL_CID",
    "save_json_artifacts",
    # Identifiers and compression
    "ContentId",
    "single_file_dir_cid",
    "COMPRESSED_EXTENSION",
    "compress",
    "decompress",
    # Config
    "RewardsConfig",
    "load_config",
    # Errors
    "ArtifactError",
    "CompressionError",
    "DeserializationError",
    "IdentifierError",
    "ReadError",
    "SerializationError",
    "WriteError",
    # Files and payloads
    "LocalFile",
    "read_local_performance_file",
    "read_local_rewards_file",
    "MinipoolPerformance",
    "PerformanceFile",
    "RewardsFile",
]
