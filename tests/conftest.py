"""Pytest configuration and fixtures."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

import pytest

from rewardtree.config import RewardsConfig
from rewardtree.models import (
    MinipoolPerformance,
    NetworkRewardsInfo,
    NodeRewardsInfo,
    PerformanceFile,
    RewardsFile,
    TotalRewards,
)

START = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
END = datetime(2024, 3, 29, 12, 0, 0, tzinfo=timezone.utc)


def _performance_file(index: int) -> PerformanceFile:
    return PerformanceFile(
        index=index,
        network="holesky",
        ruleset_version=9,
        start_time=START,
        end_time=END,
        consensus_start_block=1000,
        consensus_end_block=2000,
        execution_start_block=5000,
        execution_end_block=6000,
        minipool_performance={
            "0xbbbb000000000000000000000000000000000002": MinipoolPerformance(
                successful_attestations=6300,
                missed_attestations=2,
                participation_rate=0.9996826,
                missing_attestation_slots=[1500, 1200],
                eth_earned=41_000_000_000_000_000,
                bonus_eth_earned=1_000_000_000_000_000,
            ),
            "0xaaaa000000000000000000000000000000000001": MinipoolPerformance(
                successful_attestations=6302,
                participation_rate=1.0,
                eth_earned=42_000_000_000_000_000,
            ),
        },
    )


def _rewards_file(index: int) -> RewardsFile:
    return RewardsFile(
        index=index,
        network="holesky",
        ruleset_version=9,
        start_time=START,
        end_time=END,
        consensus_start_block=1000,
        consensus_end_block=2000,
        execution_start_block=5000,
        execution_end_block=6000,
        merkle_root="0x" + "ab" * 32,
        total_rewards=TotalRewards(
            protocol_dao_rpl=10**21,
            total_collateral_rpl=7 * 10**21,
            total_oracle_dao_rpl=10**21,
            total_smoothing_pool_eth=83 * 10**15,
            pool_staker_smoothing_pool_eth=40 * 10**15,
            node_operator_smoothing_pool_eth=43 * 10**15,
            total_node_weight=12345,
        ),
        network_rewards={
            0: NetworkRewardsInfo(collateral_rpl=7 * 10**21, oracle_dao_rpl=10**21, smoothing_pool_eth=43 * 10**15),
        },
        node_rewards={
            "0x2222000000000000000000000000000000000002": NodeRewardsInfo(
                collateral_rpl=3 * 10**21,
                smoothing_pool_eth=20 * 10**15,
                merkle_proof=["0x" + "01" * 32],
            ),
            "0x1111000000000000000000000000000000000001": NodeRewardsInfo(
                collateral_rpl=4 * 10**21,
                oracle_dao_rpl=10**21,
                smoothing_pool_eth=23 * 10**15,
                merkle_proof=["0x" + "02" * 32],
            ),
        },
        performance_file=_performance_file(index),
    )


@pytest.fixture
def make_rewards_file() -> Callable[[int], RewardsFile]:
    """Factory for a fully populated rewards file with its performance file attached."""
    return _rewards_file


@pytest.fixture
def make_performance_file() -> Callable[[int], PerformanceFile]:
    """Factory for a standalone minipool performance file."""
    return _performance_file


@pytest.fixture
def rewards_config(tmp_path) -> RewardsConfig:
    """Config pointing at a temp data dir with the rewards-trees folder created."""
    config = RewardsConfig(data_path=tmp_path / "data", network="holesky")
    config.ensure_dirs()
    return config
