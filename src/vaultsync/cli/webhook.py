"""
vaultsync webhook - run the webhook trigger service.
"""

from pathlib import Path

import typer

from vaultsync.cli.common import ConfigOption, VerboseOption, init_logging, load_cli_config
from vaultsync.service.webhook import run_webhook_service

app = typer.Typer(name="webhook", help="Run the webhook trigger service", invoke_without_command=True)


@app.callback()
def webhook(
    ctx: typer.Context,
    host: str = typer.Option("127.0.0.1", help="Host to bind to"),
    port: int = typer.Option(3001, envvar="WEBHOOK_PORT", help="Port to bind to"),
    config_path: Path | None = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """
    Listen for POST /webhook/sync and run a sync for each trigger.

    When SYNC_TOKEN is set, requests must send it in the Authorization header.
    """
    if ctx.invoked_subcommand is not None:
        return

    config = load_cli_config(config_path)
    init_logging(config, verbose)
    run_webhook_service(config, host=host, port=port)
