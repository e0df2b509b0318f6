"""
Configuration and canonical artifact paths.

A config file is TOML with a single `[rewards]` table:

    [rewards]
    data_path = "/srv/rocketpool/data"
    network = "mainnet"

Relative `data_path` values are resolved against the config file's
directory. `REWARDTREE_DATA_PATH` in the environment overrides `data_path`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DATA_PATH_ENV = "REWARDTREE_DATA_PATH"

REWARDS_TREES_FOLDER = "rewards-trees"
REWARDS_TREE_FILENAME_FORMAT = "rp-rewards-{network}-{index}{ext}"
MINIPOOL_PERFORMANCE_FILENAME_FORMAT = "rp-minipool-performance-{network}-{index}{ext}"

REWARDS_EXTENSION_JSON = ".json"

NETWORKS = frozenset({"mainnet", "holesky", "hoodi", "devnet"})


@dataclass(frozen=True)
class RewardsConfig:
    """Where reward artifacts live and which network they belong to."""

    data_path: Path
    network: str = "mainnet"
    rewards_extension: str = REWARDS_EXTENSION_JSON

    def __post_init__(self) -> None:
        if self.network not in NETWORKS:
            raise ValueError(f"Unknown network: {self.network!r} (expected one of {sorted(NETWORKS)})")
        if not self.rewards_extension.startswith("."):
            raise ValueError(f"rewards_extension must start with '.', got {self.rewards_extension!r}")

    @property
    def rewards_trees_dir(self) -> Path:
        return Path(self.data_path) / REWARDS_TREES_FOLDER

    def rewards_tree_path(self, index: int) -> Path:
        name = REWARDS_TREE_FILENAME_FORMAT.format(network=self.network, index=index, ext=self.rewards_extension)
        return self.rewards_trees_dir / name

    def minipool_performance_path(self, index: int) -> Path:
        name = MINIPOOL_PERFORMANCE_FILENAME_FORMAT.format(
            network=self.network, index=index, ext=REWARDS_EXTENSION_JSON
        )
        return self.rewards_trees_dir / name

    def ensure_dirs(self) -> Path:
        """Create the rewards-trees directory if needed and return it."""
        self.rewards_trees_dir.mkdir(parents=True, exist_ok=True)
        return self.rewards_trees_dir


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def load_config(path: Path) -> RewardsConfig:
    """
    Load a RewardsConfig from TOML.

    Raises:
        ValueError: if the file is missing required values or has invalid ones
    """
    import tomllib

    data = tomllib.loads(path.read_text(encoding="utf-8"))
    section = _coerce_dict(data.get("rewards"))

    raw_data_path = os.environ.get(DATA_PATH_ENV) or str(section.get("data_path", "")).strip()
    if not raw_data_path:
        raise ValueError("rewards.data_path is required")
    data_path = Path(raw_data_path).expanduser()
    if not data_path.is_absolute():
        data_path = (path.parent / data_path).resolve()

    network = str(section.get("network", "mainnet")).strip() or "mainnet"
    extension = str(section.get("rewards_extension", REWARDS_EXTENSION_JSON)).strip() or REWARDS_EXTENSION_JSON

    return RewardsConfig(data_path=data_path, network=network, rewards_extension=extension)
