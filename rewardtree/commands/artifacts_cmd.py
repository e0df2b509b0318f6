"""Artifact CLI commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from ..artifacts import save_json_artifacts
from ..cid import single_file_dir_cid
from ..compression import COMPRESSED_EXTENSION, compress
from ..config import RewardsConfig
from ..errors import ArtifactError
from ..files import read_local_performance_file, read_local_rewards_file


def run_cid(
    file_path: Path,
    *,
    name: str | None = None,
    compressed: bool = False,
    output_json: bool = False,
) -> int:
    """Print the single-file-directory CID of a file (and of its zstd copy)."""
    err = Console(stderr=True)
    try:
        data = file_path.read_bytes()
    except OSError as e:
        err.print(f"Error reading {file_path}: {e}", style="bold red")
        return 1

    entry_name = name or file_path.name
    try:
        cids = {entry_name: str(single_file_dir_cid(data, entry_name))}
    except ValueError as e:
        err.print(f"Error calculating CID for {file_path}: {e}", style="bold red")
        return 1

    if compressed:
        try:
            compressed_data = compress(data)
        except ArtifactError as e:
            err.print(f"Error compressing {file_path}: {e}", style="bold red")
            return 1
        compressed_name = entry_name + COMPRESSED_EXTENSION
        cids[compressed_name] = str(single_file_dir_cid(compressed_data, compressed_name))

    if output_json:
        print(json.dumps(cids, indent=2))
    else:
        for entry, cid in cids.items():
            print(f"{cid}  {entry}")
    return 0


def run_save(
    config: RewardsConfig,
    rewards_path: Path,
    performance_path: Path,
    *,
    trusted: bool = False,
    output_json: bool = False,
) -> int:
    """Load a rewards file and its performance file, then save the cycle's artifacts."""
    console = Console()
    err = Console(stderr=True)

    try:
        rewards_file = read_local_rewards_file(rewards_path).impl
        performance_file = read_local_performance_file(performance_path).impl
    except ArtifactError as e:
        err.print(str(e), style="bold red")
        return 1

    if rewards_file.index != performance_file.index:
        err.print(
            f"Index mismatch: rewards file is cycle {rewards_file.index}, "
            f"performance file is cycle {performance_file.index}",
            style="bold red",
        )
        return 1

    for payload_name, payload in (("rewards", rewards_file), ("performance", performance_file)):
        if payload.network != config.network:
            err.print(
                f"Network mismatch: {payload_name} file is for {payload.network}, "
                f"configured network is {config.network}",
                style="bold red",
            )
            return 1

    rewards_file.performance_file = performance_file
    config.ensure_dirs()
    try:
        primary, cids = save_json_artifacts(config, rewards_file, trusted)
    except ArtifactError as e:
        err.print(f"Saving artifacts for cycle {rewards_file.index} failed: {e}", style="bold red")
        return 1

    if output_json:
        out: dict[str, Any] = {
            "index": rewards_file.index,
            "trusted": trusted,
            "primary_cid": str(primary),
            "cids": {k: str(v) for k, v in cids.items()},
        }
        print(json.dumps(out, indent=2))
        return 0

    table = Table(title=f"Reward cycle {rewards_file.index} artifacts")
    table.add_column("file", style="cyan", no_wrap=True)
    table.add_column("cid", style="magenta")
    for file_name, cid in cids.items():
        table.add_row(file_name, str(cid))
    console.print(table)
    console.print(f"Primary CID: [bold]{primary}[/bold]")
    return 0


def run_inspect(file_path: Path, *, output_json: bool = False) -> int:
    """Show the header of a rewards file on disk."""
    console = Console()
    err = Console(stderr=True)

    try:
        local = read_local_rewards_file(file_path)
    except ArtifactError as e:
        err.print(str(e), style="bold red")
        return 1

    rewards_file = local.impl
    encoded = rewards_file.to_dict()
    header = {
        "index": rewards_file.index,
        "network": rewards_file.network,
        "rewardsFileVersion": rewards_file.rewards_file_version,
        "rulesetVersion": rewards_file.ruleset_version,
        "startTime": encoded["startTime"],
        "endTime": encoded["endTime"],
        "intervalsPassed": rewards_file.intervals_passed,
        "merkleRoot": rewards_file.merkle_root,
        "minipoolPerformanceFileCID": rewards_file.performance_file_cid,
        "nodes": len(rewards_file.node_rewards),
        "cid": str(single_file_dir_cid(local.path.read_bytes(), local.file_name)),
    }

    if output_json:
        print(json.dumps(header, indent=2))
        return 0

    table = Table(title=local.file_name, show_header=False)
    table.add_column("field", style="cyan", no_wrap=True)
    table.add_column("value")
    for key, value in header.items():
        table.add_row(key, str(value))
    console.print(table)
    return 0
