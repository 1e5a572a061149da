"""
vaultsync serve - run the storage facade.

Serves an object store over HTTP with the endpoints the sync client uses:
- GET /api/list - Paginated inventory
- POST /api/sync - Batch upload
- GET|PUT|DELETE /files/{path} - Single object access
- DELETE /api/delete-all - Remove every object
- GET /health - Health check
"""

from pathlib import Path

import typer

from vaultsync.cli.common import console
from vaultsync.service.server import run_storage_service
from vaultsync.storage import FilesystemObjectStore, MemoryObjectStore
from vaultsync.utils.logging import setup_logging

app = typer.Typer(name="serve", help="Run the storage facade service", invoke_without_command=True)


@app.callback()
def serve(
    ctx: typer.Context,
    root: Path | None = typer.Option(None, "--root", help="Directory to store objects in", show_default=False),
    memory: bool = typer.Option(False, "--memory", help="Keep objects in memory (lost on exit)"),
    host: str = typer.Option("127.0.0.1", help="Host to bind to"),
    port: int = typer.Option(8787, help="Port to bind to"),
    delete_concurrency: int = typer.Option(8, "--delete-concurrency", help="Parallel deletions for delete-all"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """
    Run the storage facade backed by a directory (--root) or memory (--memory).
    """
    if ctx.invoked_subcommand is not None:
        return

    if (root is None) == (not memory):
        console.print("[red]Specify exactly one of --root or --memory[/red]")
        raise typer.Exit(1)

    setup_logging("DEBUG" if verbose else "INFO")
    store = MemoryObjectStore() if memory else FilesystemObjectStore(root)
    run_storage_service(store, host=host, port=port, delete_concurrency=delete_concurrency)
