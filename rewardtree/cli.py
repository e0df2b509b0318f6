"""CLI entrypoint for rewardtree."""

import logging
import sys
from pathlib import Path

import click

from . import __version__
from .config import RewardsConfig, load_config


@click.group()
@click.version_option(__version__, prog_name="rewardtree")
@click.option("--verbose", is_flag=True, help="Log pipeline steps to stderr")
def cli(verbose: bool) -> None:
    """rewardtree - content-addressed reward cycle artifacts.

    Save rewards and minipool performance files, and compute the IPFS CIDs
    used to reach consensus on them.
    """
    if verbose:
        from rich.logging import RichHandler

        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(show_path=False)],
        )


@cli.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--name", type=str, default=None, help="Directory entry name (defaults to the file's name)")
@click.option("--compressed", is_flag=True, help="Also compute the CID of the zstd-compressed file")
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
def cid(file_path: Path, name: str | None, compressed: bool, output_json: bool) -> None:
    """Compute the single-file-directory CID of FILE_PATH."""
    from .commands.artifacts_cmd import run_cid

    sys.exit(run_cid(file_path, name=name, compressed=compressed, output_json=output_json))


@cli.command()
@click.argument("rewards_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("performance_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="TOML config with a [rewards] table",
)
@click.option(
    "--data-path",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Data directory (used when --config is not given)",
)
@click.option(
    "--network",
    type=click.Choice(["mainnet", "holesky", "hoodi", "devnet"]),
    default="mainnet",
    show_default=True,
    help="Network name used in artifact file names (used when --config is not given)",
)
@click.option("--trusted", is_flag=True, help="Also write zstd-compressed copies (oDAO nodes)")
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
def save(
    rewards_path: Path,
    performance_path: Path,
    config_path: Path | None,
    data_path: Path | None,
    network: str,
    trusted: bool,
    output_json: bool,
) -> None:
    """Save the artifacts of a reward cycle from existing JSON files.

    Examples:

        rewardtree save rewards.json performance.json --data-path ./data

        rewardtree save rewards.json performance.json --config rewardtree.toml --trusted
    """
    from .commands.artifacts_cmd import run_save

    if config_path is not None:
        try:
            config = load_config(config_path)
        except ValueError as e:
            raise click.ClickException(str(e))
    elif data_path is not None:
        config = RewardsConfig(data_path=data_path, network=network)
    else:
        raise click.UsageError("Pass --config or --data-path.")

    sys.exit(run_save(config, rewards_path, performance_path, trusted=trusted, output_json=output_json))


@cli.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
def inspect(file_path: Path, output_json: bool) -> None:
    """Show the header of a rewards file."""
    from .commands.artifacts_cmd import run_inspect

    sys.exit(run_inspect(file_path, output_json=output_json))


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
