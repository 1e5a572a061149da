"""
vaultsync plan - preview what a sync would upload and delete.
"""

import asyncio
from pathlib import Path

import typer

from vaultsync.cli.common import (
    ConfigOption,
    EndpointOption,
    VaultOption,
    VerboseOption,
    console,
    init_logging,
    load_cli_config,
)
from vaultsync.exceptions import VaultSyncError
from vaultsync.sync.runner import run_sync
from vaultsync.utils.display import print_report
from vaultsync.utils.logging import get_logger

logger = get_logger("vaultsync.cli.plan")

app = typer.Typer(name="plan", help="Preview the reconciliation plan", invoke_without_command=True)


@app.callback()
def plan(
    ctx: typer.Context,
    config_path: Path | None = ConfigOption,
    vault: Path | None = VaultOption,
    endpoint: str | None = EndpointOption,
    verbose: bool = VerboseOption,
) -> None:
    """
    Scan the vault and the remote listing and show the planned changes.

    Equivalent to ``vaultsync sync --dry-run``.
    """
    if ctx.invoked_subcommand is not None:
        return

    config = load_cli_config(config_path, vault=vault, endpoint=endpoint)
    init_logging(config, verbose)

    try:
        report = asyncio.run(run_sync(config, dry_run=True))
    except VaultSyncError as e:
        logger.error(f"Planning failed: {e.message}")
        console.print(f"[red]Planning failed:[/red] {e.message}")
        return
    except Exception as e:
        logger.error(f"Planning failed: {e}", exc_info=True)
        console.print(f"[red]Planning failed:[/red] {e}")
        return

    print_report(report, console)
