"""
Saving the JSON artifacts of a reward cycle.

The minipool performance file is always written first: its CID is embedded
in the rewards file, so the rewards file may only be serialized once that
field holds its final value. The order below is load-bearing. Do not
reorder, parallelize, or re-serialize the rewards file after it is written.
"""

from __future__ import annotations

import logging
import threading
import weakref

from .cid import ContentId, single_file_dir_cid
from .config import RewardsConfig
from .errors import IdentifierError
from .files import LocalFile
from .models import PerformanceFile, RewardsFile

logger = logging.getLogger(__name__)

# Written into the rewards file instead of a performance file CID on
# untrusted runs. Wire-visible; must stay exactly this string.
SENTINEL_CID = "---"

# Entries disappear once no run holds the lock.
_cycle_locks: weakref.WeakValueDictionary = weakref.WeakValueDictionary()
_cycle_locks_guard = threading.Lock()


def _cycle_lock(network: str, index: int) -> threading.Lock:
    with _cycle_locks_guard:
        lock = _cycle_locks.get((network, index))
        if lock is None:
            lock = threading.Lock()
            _cycle_locks[(network, index)] = lock
        return lock


def _plain_cid(local_file: LocalFile, data: bytes) -> ContentId:
    try:
        return single_file_dir_cid(data, local_file.file_name)
    except ValueError as e:
        raise IdentifierError(
            f"Error calculating CID for saved file {local_file.path}: {e}", local_file.path
        ) from e


def save_json_artifacts(
    config: RewardsConfig,
    rewards_file: RewardsFile,
    node_trusted: bool,
) -> tuple[ContentId, dict[str, ContentId]]:
    """
    Write the performance file and the rewards file for one cycle.

    Trusted (oDAO) nodes also write zstd-compressed copies, and the CID of
    the compressed performance file is recorded in the rewards file before
    the rewards file is serialized. Untrusted nodes only need the inflated
    files and always record the `---` sentinel instead.

    Args:
        config: Provides the canonical artifact paths
        rewards_file: Rewards payload carrying its performance file
        node_trusted: Whether this node publishes compressed artifacts

    Returns:
        (CID of the plain rewards file, map of file name -> CID in write order)

    Raises:
        ArtifactError: any serialization, compression, CID or write failure.
            Files already written are left in place.
    """
    index = rewards_file.index
    performance_file: PerformanceFile | None = rewards_file.performance_file
    if performance_file is None:
        raise ValueError(f"Rewards file for cycle {index} has no minipool performance file attached")

    with _cycle_lock(config.network, index):
        cids: dict[str, ContentId] = {}

        performance = LocalFile(performance_file, config.minipool_performance_path(index))
        data = performance.write()
        cids[performance.file_name] = _plain_cid(performance, data)
        logger.info("Saved minipool performance file to %s", performance.path)

        if node_trusted:
            compressed_path, cid = performance.create_compressed_file_and_cid()
            cids[compressed_path.name] = cid
            rewards_file.set_performance_file_cid(str(cid))
            logger.info("Saved compressed minipool performance file to %s (%s)", compressed_path, cid)
        else:
            rewards_file.set_performance_file_cid(SENTINEL_CID)

        rewards = LocalFile(rewards_file, config.rewards_tree_path(index))
        data = rewards.write()
        primary_cid = _plain_cid(rewards, data)
        cids[rewards.file_name] = primary_cid
        logger.info("Saved rewards file to %s (%s)", rewards.path, primary_cid)

        if node_trusted:
            compressed_path, cid = rewards.create_compressed_file_and_cid()
            cids[compressed_path.name] = cid
            logger.info("Saved compressed rewards file to %s (%s)", compressed_path, cid)

    return primary_cid, cids
