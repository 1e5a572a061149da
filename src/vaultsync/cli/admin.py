"""
Administrative commands: delete-prefix and delete-all.
"""

import asyncio
from pathlib import Path

import typer

from vaultsync.cli.common import ConfigOption, EndpointOption, VerboseOption, console, init_logging, load_cli_config
from vaultsync.exceptions import VaultSyncError
from vaultsync.sync.runner import build_client, delete_prefix
from vaultsync.utils.display import failures_table
from vaultsync.utils.logging import get_logger

logger = get_logger("vaultsync.cli.admin")


def delete_prefix_command(
    prefix: str = typer.Argument(..., help="Key prefix to delete, e.g. 'blog/'"),
    config_path: Path | None = ConfigOption,
    endpoint: str | None = EndpointOption,
    verbose: bool = VerboseOption,
) -> None:
    """
    Delete every remote file whose key starts with PREFIX.
    """
    if not prefix:
        console.print("[red]Refusing to delete with an empty prefix; use delete-all[/red]")
        raise typer.Exit(1)

    config = load_cli_config(config_path, endpoint=endpoint, require_vault=False)
    init_logging(config, verbose)

    async def _run():
        async with build_client(config) as client:
            return await delete_prefix(client, prefix, max_concurrency=config.delete_concurrency)

    try:
        outcomes = asyncio.run(_run())
    except VaultSyncError as e:
        logger.error(f"Delete failed: {e.message}")
        console.print(f"[red]Delete failed:[/red] {e.message}")
        return

    failures = [o for o in outcomes if not o.ok]
    console.print(f"Deleted {len(outcomes) - len(failures)}/{len(outcomes)} files under '{prefix}'")
    if failures:
        console.print(failures_table("Deletion failures", failures))


def delete_all_command(
    yes: bool = typer.Option(False, "--yes", help="Confirm deletion of every remote file"),
    config_path: Path | None = ConfigOption,
    endpoint: str | None = EndpointOption,
    verbose: bool = VerboseOption,
) -> None:
    """
    Delete every file in the remote store.
    """
    if not yes:
        console.print("[yellow]This deletes every remote file. Re-run with --yes to confirm.[/yellow]")
        raise typer.Exit(1)

    config = load_cli_config(config_path, endpoint=endpoint, require_vault=False)
    init_logging(config, verbose)

    async def _run():
        async with build_client(config) as client:
            return await client.delete_all()

    try:
        result = asyncio.run(_run())
    except VaultSyncError as e:
        logger.error(f"Delete-all failed: {e.message}")
        console.print(f"[red]Delete-all failed:[/red] {e.message}")
        return

    console.print(result.get("message", "Deleted all files"))
    if result.get("failed"):
        console.print(f"[red]{len(result['failed'])} file(s) could not be deleted[/red]")
