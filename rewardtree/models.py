"""
Rewards file and minipool performance file payloads.

Both payloads render to canonical JSON: compact separators, fixed field
order, map keys sorted, token amounts as quoted decimal strings and
timestamps as RFC 3339 UTC. Identical payload state always produces
identical bytes, which is what makes the content identifiers agree across
independent nodes.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .errors import DeserializationError, SerializationError

REWARDS_FILE_VERSION = 3

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _as_utc(value: Any) -> Any:
    if not isinstance(value, datetime):
        return value
    if value.tzinfo is None:
        # Naive timestamps are taken as UTC, never as local time.
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _format_time(value: datetime) -> str:
    return _as_utc(value).isoformat().replace("+00:00", "Z")


def _parse_time(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _check_index(index: Any) -> None:
    if isinstance(index, bool) or not isinstance(index, int) or index < 0:
        raise ValueError(f"Reward cycle index must be a non-negative integer, got {index!r}")


def _canonical_json(payload: Any) -> bytes:
    try:
        return json.dumps(payload.to_dict(), separators=(",", ":"), allow_nan=False).encode("utf-8")
    except (AttributeError, TypeError, ValueError) as e:
        raise SerializationError(f"Payload is not serializable: {e}") from e


def _load_json(data: bytes | str) -> dict[str, Any]:
    try:
        parsed = json.loads(data)
    except (UnicodeDecodeError, ValueError) as e:
        raise DeserializationError(f"Invalid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise DeserializationError("Expected a JSON object at the top level")
    return parsed


# -----------------------------------------------------------------------------
# Rewards file
# -----------------------------------------------------------------------------


@dataclass
class TotalRewards:
    """Cycle-wide reward totals (wei)."""

    protocol_dao_rpl: int = 0
    total_collateral_rpl: int = 0
    total_oracle_dao_rpl: int = 0
    total_smoothing_pool_eth: int = 0
    pool_staker_smoothing_pool_eth: int = 0
    node_operator_smoothing_pool_eth: int = 0
    total_node_weight: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "protocolDaoRpl": str(self.protocol_dao_rpl),
            "totalCollateralRpl": str(self.total_collateral_rpl),
            "totalOracleDaoRpl": str(self.total_oracle_dao_rpl),
            "totalSmoothingPoolEth": str(self.total_smoothing_pool_eth),
            "poolStakerSmoothingPoolEth": str(self.pool_staker_smoothing_pool_eth),
            "nodeOperatorSmoothingPoolEth": str(self.node_operator_smoothing_pool_eth),
            "totalNodeWeight": str(self.total_node_weight),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TotalRewards":
        return cls(
            protocol_dao_rpl=int(data["protocolDaoRpl"]),
            total_collateral_rpl=int(data["totalCollateralRpl"]),
            total_oracle_dao_rpl=int(data["totalOracleDaoRpl"]),
            total_smoothing_pool_eth=int(data["totalSmoothingPoolEth"]),
            pool_staker_smoothing_pool_eth=int(data["poolStakerSmoothingPoolEth"]),
            node_operator_smoothing_pool_eth=int(data["nodeOperatorSmoothingPoolEth"]),
            total_node_weight=int(data["totalNodeWeight"]),
        )


@dataclass
class NetworkRewardsInfo:
    """Rewards paid out on one network (layer)."""

    collateral_rpl: int = 0
    oracle_dao_rpl: int = 0
    smoothing_pool_eth: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "collateralRpl": str(self.collateral_rpl),
            "oracleDaoRpl": str(self.oracle_dao_rpl),
            "smoothingPoolEth": str(self.smoothing_pool_eth),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NetworkRewardsInfo":
        return cls(
            collateral_rpl=int(data["collateralRpl"]),
            oracle_dao_rpl=int(data["oracleDaoRpl"]),
            smoothing_pool_eth=int(data["smoothingPoolEth"]),
        )


@dataclass
class NodeRewardsInfo:
    """Rewards owed to one node, with its merkle proof."""

    reward_network: int = 0
    collateral_rpl: int = 0
    oracle_dao_rpl: int = 0
    smoothing_pool_eth: int = 0
    merkle_proof: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rewardNetwork": self.reward_network,
            "collateralRpl": str(self.collateral_rpl),
            "oracleDaoRpl": str(self.oracle_dao_rpl),
            "smoothingPoolEth": str(self.smoothing_pool_eth),
            "merkleProof": list(self.merkle_proof),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NodeRewardsInfo":
        return cls(
            reward_network=int(data["rewardNetwork"]),
            collateral_rpl=int(data["collateralRpl"]),
            oracle_dao_rpl=int(data["oracleDaoRpl"]),
            smoothing_pool_eth=int(data["smoothingPoolEth"]),
            merkle_proof=[str(p) for p in data.get("merkleProof") or []],
        )


@dataclass
class RewardsFile:
    """
    Rewards distribution file for one reward cycle.

    `performance_file_cid` is written into the header by the artifact
    orchestrator before this file is serialized. `performance_file` is the
    companion payload; it travels with the rewards file but is not part of
    its encoding.
    """

    index: int
    network: str
    rewards_file_version: int = REWARDS_FILE_VERSION
    ruleset_version: int = 0
    start_time: datetime = _EPOCH
    end_time: datetime = _EPOCH
    consensus_start_block: int = 0
    consensus_end_block: int = 0
    execution_start_block: int = 0
    execution_end_block: int = 0
    intervals_passed: int = 1
    merkle_root: str = ""
    performance_file_cid: str = ""
    total_rewards: TotalRewards = field(default_factory=TotalRewards)
    network_rewards: dict[int, NetworkRewardsInfo] = field(default_factory=dict)
    node_rewards: dict[str, NodeRewardsInfo] = field(default_factory=dict)
    performance_file: PerformanceFile | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        _check_index(self.index)
        self.start_time = _as_utc(self.start_time)
        self.end_time = _as_utc(self.end_time)

    def set_performance_file_cid(self, cid: str) -> None:
        self.performance_file_cid = cid

    def to_dict(self) -> dict[str, Any]:
        return {
            "rewardsFileVersion": self.rewards_file_version,
            "rulesetVersion": self.ruleset_version,
            "index": self.index,
            "network": self.network,
            "startTime": _format_time(self.start_time),
            "endTime": _format_time(self.end_time),
            "consensusStartBlock": self.consensus_start_block,
            "consensusEndBlock": self.consensus_end_block,
            "executionStartBlock": self.execution_start_block,
            "executionEndBlock": self.execution_end_block,
            "intervalsPassed": self.intervals_passed,
            "merkleRoot": self.merkle_root,
            "minipoolPerformanceFileCID": self.performance_file_cid,
            "totalRewards": self.total_rewards.to_dict(),
            # JSON object keys are strings; order by the string form.
            "networkRewards": {
                str(k): self.network_rewards[k].to_dict() for k in sorted(self.network_rewards, key=str)
            },
            "nodeRewards": {k: self.node_rewards[k].to_dict() for k in sorted(self.node_rewards)},
        }

    def serialize(self) -> bytes:
        return _canonical_json(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RewardsFile":
        return cls(
            index=data["index"],
            network=str(data["network"]),
            rewards_file_version=int(data["rewardsFileVersion"]),
            ruleset_version=int(data["rulesetVersion"]),
            start_time=_parse_time(data["startTime"]),
            end_time=_parse_time(data["endTime"]),
            consensus_start_block=int(data["consensusStartBlock"]),
            consensus_end_block=int(data["consensusEndBlock"]),
            execution_start_block=int(data["executionStartBlock"]),
            execution_end_block=int(data["executionEndBlock"]),
            intervals_passed=int(data["intervalsPassed"]),
            merkle_root=str(data["merkleRoot"]),
            performance_file_cid=str(data["minipoolPerformanceFileCID"]),
            total_rewards=TotalRewards.from_dict(data["totalRewards"]),
            network_rewards={
                int(k): NetworkRewardsInfo.from_dict(v) for k, v in (data.get("networkRewards") or {}).items()
            },
            node_rewards={k: NodeRewardsInfo.from_dict(v) for k, v in (data.get("nodeRewards") or {}).items()},
        )


# -----------------------------------------------------------------------------
# Minipool performance file
# -----------------------------------------------------------------------------


@dataclass
class MinipoolPerformance:
    """Attestation performance of one minipool over the cycle."""

    successful_attestations: int = 0
    missed_attestations: int = 0
    participation_rate: float = 0.0
    missing_attestation_slots: list[int] = field(default_factory=list)
    eth_earned: int = 0
    bonus_eth_earned: int = 0

    def __post_init__(self) -> None:
        self.missing_attestation_slots = sorted(self.missing_attestation_slots)

    def to_dict(self) -> dict[str, Any]:
        return {
            "successfulAttestations": self.successful_attestations,
            "missedAttestations": self.missed_attestations,
            "participationRate": self.participation_rate,
            "missingAttestationSlots": sorted(self.missing_attestation_slots),
            "ethEarned": str(self.eth_earned),
            "bonusEthEarned": str(self.bonus_eth_earned),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MinipoolPerformance":
        return cls(
            successful_attestations=int(data["successfulAttestations"]),
            missed_attestations=int(data["missedAttestations"]),
            participation_rate=float(data["participationRate"]),
            missing_attestation_slots=[int(s) for s in data.get("missingAttestationSlots") or []],
            eth_earned=int(data["ethEarned"]),
            bonus_eth_earned=int(data.get("bonusEthEarned", 0)),
        )


@dataclass
class PerformanceFile:
    """Per-minipool performance for one reward cycle. No outbound references."""

    index: int
    network: str
    rewards_file_version: int = REWARDS_FILE_VERSION
    ruleset_version: int = 0
    start_time: datetime = _EPOCH
    end_time: datetime = _EPOCH
    consensus_start_block: int = 0
    consensus_end_block: int = 0
    execution_start_block: int = 0
    execution_end_block: int = 0
    minipool_performance: dict[str, MinipoolPerformance] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _check_index(self.index)
        self.start_time = _as_utc(self.start_time)
        self.end_time = _as_utc(self.end_time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rewardsFileVersion": self.rewards_file_version,
            "rulesetVersion": self.ruleset_version,
            "index": self.index,
            "network": self.network,
            "startTime": _format_time(self.start_time),
            "endTime": _format_time(self.end_time),
            "consensusStartBlock": self.consensus_start_block,
            "consensusEndBlock": self.consensus_end_block,
            "executionStartBlock": self.execution_start_block,
            "executionEndBlock": self.execution_end_block,
            "minipoolPerformance": {
                k: self.minipool_performance[k].to_dict() for k in sorted(self.minipool_performance)
            },
        }

    def serialize(self) -> bytes:
        return _canonical_json(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PerformanceFile":
        return cls(
            index=data["index"],
            network=str(data["network"]),
            rewards_file_version=int(data["rewardsFileVersion"]),
            ruleset_version=int(data["rulesetVersion"]),
            start_time=_parse_time(data["startTime"]),
            end_time=_parse_time(data["endTime"]),
            consensus_start_block=int(data["consensusStartBlock"]),
            consensus_end_block=int(data["consensusEndBlock"]),
            execution_start_block=int(data["executionStartBlock"]),
            execution_end_block=int(data["executionEndBlock"]),
            minipool_performance={
                k: MinipoolPerformance.from_dict(v) for k, v in (data.get("minipoolPerformance") or {}).items()
            },
        )


# -----------------------------------------------------------------------------
# Deserialization
# -----------------------------------------------------------------------------


def deserialize_rewards_file(data: bytes | str) -> RewardsFile:
    """Parse a serialized rewards file."""
    try:
        return RewardsFile.from_dict(_load_json(data))
    except DeserializationError:
        raise
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise DeserializationError(f"Malformed rewards file: {e!r}") from e


def deserialize_performance_file(data: bytes | str) -> PerformanceFile:
    """Parse a serialized minipool performance file."""
    try:
        return PerformanceFile.from_dict(_load_json(data))
    except DeserializationError:
        raise
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise DeserializationError(f"Malformed performance file: {e!r}") from e
