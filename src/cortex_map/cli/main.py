"""
CLI interface for CorteX Map using Click.
"""

import sys
from pathlib import Path
from typing import Any

import click

from ..shared.config import load_config
from ..shared.exceptions import CortexMapError
from ..shared.logging import get_logger, level_for_flags, setup_logging
from .output import create_output_manager


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--quiet", "-q", is_flag=True, help="Enable quiet mode")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="TOML configuration file with a [cortex_map] table",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also write log records to this file",
)
@click.pass_context
def cli(
    ctx: Any, verbose: bool, quiet: bool, config_path: Path | None, log_file: Path | None
) -> None:
    """CorteX Map - Build, lay out and export reconnaissance relationship graphs."""
    ctx.ensure_object(dict)

    ctx.obj["global_flags"] = {"verbose": verbose, "quiet": quiet}

    setup_logging(level_for_flags(verbose, quiet), log_file=log_file)
    ctx.obj["logger"] = get_logger()
    ctx.obj["output"] = create_output_manager(quiet=quiet, verbose=verbose)

    try:
        ctx.obj["config"] = load_config(config_path)
    except CortexMapError as e:
        ctx.obj["output"].error(str(e))
        sys.exit(1)


def _register_commands() -> None:
    """Register all CLI commands."""
    from .commands.export import export
    from .commands.graph import graph

    cli.add_command(graph)
    cli.add_command(export)


_register_commands()


def main():
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
