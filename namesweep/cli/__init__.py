#!/usr/bin/env python3
"""
Namesweep CLI
-------------

Command-line interface for scanning a corpus for references to an
entity's name and applying reviewed rename patches.

Workflow:
1. scan  → list every reference (optionally save the scan as YAML)
2. edit a decisions file for the matches that need a verdict
3. apply → preview the patch plan (dry run), then write it with --apply

Usage:
    # List references with surrounding text
    namesweep scan world/ npc-7 --show-context

    # Preview, then apply, a rename
    namesweep apply world/ npc-7 "Ice Widow"
    namesweep apply world/ npc-7 "Ice Widow" --decisions decisions.yaml --apply
"""
from __future__ import annotations

import click
from pathlib import Path
from typing import Optional

from namesweep.core.cli import setup_logger
from namesweep.core.config import DEFAULT_CONFIG, RenameConfig
from namesweep.core.logging_manager import handle_cli_error
from namesweep.core.paths import LOG_DIR


@click.group()
@click.option(
    "--log-dir",
    type=click.Path(),
    default=str(LOG_DIR),
    help="Directory for log files",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML file overriding scan settings",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, log_dir: str, config_path: Optional[str], verbose: bool) -> None:
    """Namesweep: entity rename scanning and patching"""
    ctx.ensure_object(dict)
    ctx.obj["log_dir"] = Path(log_dir)
    ctx.obj["verbose"] = verbose
    ctx.obj["logger"] = setup_logger(Path(log_dir), "rename", verbose=verbose)

    try:
        ctx.obj["config"] = (
            RenameConfig.from_yaml(Path(config_path)) if config_path else DEFAULT_CONFIG
        )
    except Exception as e:
        handle_cli_error(ctx, e, "load_config", {"config": config_path})


# Import and register commands from submodules
from .rename import scan, apply  # noqa: E402

cli.add_command(scan)
cli.add_command(apply)


if __name__ == "__main__":
    cli(obj={})
