from __future__ import annotations

import json
from pathlib import Path

from rewardtree.cid import single_file_dir_cid
from rewardtree.commands.artifacts_cmd import run_cid, run_inspect, run_save
from rewardtree.compression import compress
from rewardtree.config import RewardsConfig
from rewardtree.files import LocalFile


def _write_inputs(tmp_path: Path, rewards_file, performance_file) -> tuple[Path, Path]:
    inputs = tmp_path / "inputs"
    inputs.mkdir()
    rewards = LocalFile(rewards_file, inputs / "rewards.json")
    perf = LocalFile(performance_file, inputs / "perf.json")
    rewards.write()
    perf.write()
    return rewards.path, perf.path


def test_cid_command(tmp_path: Path, capsys) -> None:
    target = tmp_path / "file.json"
    target.write_bytes(b'{"index":1}')

    assert run_cid(target, compressed=True, output_json=True) == 0
    out = json.loads(capsys.readouterr().out)

    assert out["file.json"] == str(single_file_dir_cid(b'{"index":1}', "file.json"))
    assert out["file.json.zst"] == str(single_file_dir_cid(compress(b'{"index":1}'), "file.json.zst"))


def test_cid_command_custom_name(tmp_path: Path, capsys) -> None:
    target = tmp_path / "file.json"
    target.write_bytes(b"abc")

    assert run_cid(target, name="other.json") == 0
    out = capsys.readouterr().out

    assert out.strip() == f"{single_file_dir_cid(b'abc', 'other.json')}  other.json"


def test_cid_command_missing_file(tmp_path: Path, capsys) -> None:
    assert run_cid(tmp_path / "missing.json") == 1
    assert "Error reading" in capsys.readouterr().err


def test_save_command_trusted(tmp_path: Path, make_rewards_file, make_performance_file, capsys) -> None:
    rewards_path, perf_path = _write_inputs(tmp_path, make_rewards_file(5), make_performance_file(5))
    config = RewardsConfig(data_path=tmp_path / "data", network="holesky")

    assert run_save(config, rewards_path, perf_path, trusted=True, output_json=True) == 0
    out = json.loads(capsys.readouterr().out)

    assert out["index"] == 5
    assert out["trusted"] is True
    assert list(out["cids"]) == [
        "rp-minipool-performance-holesky-5.json",
        "rp-minipool-performance-holesky-5.json.zst",
        "rp-rewards-holesky-5.json",
        "rp-rewards-holesky-5.json.zst",
    ]
    assert out["primary_cid"] == out["cids"]["rp-rewards-holesky-5.json"]
    assert config.rewards_tree_path(5).exists()


def test_save_command_table_output(tmp_path: Path, make_rewards_file, make_performance_file, capsys) -> None:
    rewards_path, perf_path = _write_inputs(tmp_path, make_rewards_file(7), make_performance_file(7))
    config = RewardsConfig(data_path=tmp_path / "data", network="holesky")

    assert run_save(config, rewards_path, perf_path) == 0
    out = capsys.readouterr().out

    assert "Primary CID" in out
    assert not (config.rewards_trees_dir / "rp-rewards-holesky-7.json.zst").exists()


def test_save_command_index_mismatch(tmp_path: Path, make_rewards_file, make_performance_file, capsys) -> None:
    rewards_path, perf_path = _write_inputs(tmp_path, make_rewards_file(5), make_performance_file(6))
    config = RewardsConfig(data_path=tmp_path / "data", network="holesky")

    assert run_save(config, rewards_path, perf_path) == 1
    assert "Index mismatch" in capsys.readouterr().err
    assert not config.rewards_trees_dir.exists()


def test_save_command_malformed_input(tmp_path: Path, capsys) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text("{", encoding="utf-8")
    config = RewardsConfig(data_path=tmp_path / "data", network="holesky")

    assert run_save(config, bad, bad) == 1
    assert "Error unmarshaling rewards file" in capsys.readouterr().err


def test_inspect_command(tmp_path: Path, make_rewards_file, capsys) -> None:
    rewards_file = make_rewards_file(3)
    rewards_file.set_performance_file_cid("---")
    local = LocalFile(rewards_file, tmp_path / "rp-rewards-holesky-3.json")
    data = local.write()

    assert run_inspect(local.path, output_json=True) == 0
    out = json.loads(capsys.readouterr().out)

    assert out["index"] == 3
    assert out["minipoolPerformanceFileCID"] == "---"
    assert out["nodes"] == 2
    assert out["cid"] == str(single_file_dir_cid(data, "rp-rewards-holesky-3.json"))


def test_inspect_command_missing_file(tmp_path: Path, capsys) -> None:
    assert run_inspect(tmp_path / "nope.json") == 1
    assert "Error reading" in capsys.readouterr().err


def test_cid_command_rejects_nested_name(tmp_path: Path, capsys) -> None:
    target = tmp_path / "file.json"
    target.write_bytes(b"abc")

    assert run_cid(target, name="a/b") == 1
    captured = capsys.readouterr()
    assert "Error calculating CID" in captured.err
    assert captured.out == ""


def test_save_command_network_mismatch(tmp_path: Path, make_rewards_file, make_performance_file, capsys) -> None:
    rewards_path, perf_path = _write_inputs(tmp_path, make_rewards_file(5), make_performance_file(5))
    config = RewardsConfig(data_path=tmp_path / "data", network="mainnet")

    assert run_save(config, rewards_path, perf_path, trusted=True) == 1
    assert "Network mismatch" in capsys.readouterr().err
    assert not config.rewards_trees_dir.exists()
