"""
vaultsync sync - reconcile the local vault into the remote store.
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

logger = get_logger("vaultsync.cli.sync")

app = typer.Typer(name="sync", help="Sync the local vault to the remote store", invoke_without_command=True)


@app.callback()
def sync(
    ctx: typer.Context,
    dry_run: bool = typer.Option(False, "--dry-run", help="Plan only; do not upload or delete anything"),
    config_path: Path | None = ConfigOption,
    vault: Path | None = VaultOption,
    endpoint: str | None = EndpointOption,
    verbose: bool = VerboseOption,
) -> None:
    """
    Upload new and changed files, then delete remote files with no local counterpart.

    Failures are reported per file; the next run retries whatever did not land.
    """
    if ctx.invoked_subcommand is not None:
        return

    config = load_cli_config(config_path, vault=vault, endpoint=endpoint)
    init_logging(config, verbose)

    try:
        report = asyncio.run(run_sync(config, dry_run=dry_run))
    except VaultSyncError as e:
        logger.error(f"Sync failed: {e.message}")
        console.print(f"[red]Sync failed:[/red] {e.message}")
        return
    except Exception as e:
        logger.error(f"Sync failed: {e}", exc_info=True)
        console.print(f"[red]Sync failed:[/red] {e}")
        return

    print_report(report, console)
