"""
Helpers shared by the CLI commands.
"""

import logging
from pathlib import Path

import typer
from rich.console import Console

from vaultsync.config.loader import SyncConfig, load_config
from vaultsync.exceptions import ConfigurationError
from vaultsync.utils.logging import setup_logging_from_config

console = Console()

ConfigOption = typer.Option(
    None, "--config", "-c", help="YAML config file (default: $VAULTSYNC_CONFIG)", show_default=False
)
VaultOption = typer.Option(None, "--vault", help="Vault root (overrides VAULT_PATH)", show_default=False)
EndpointOption = typer.Option(
    None, "--endpoint", help="Remote endpoint URL (overrides REMOTE_ENDPOINT)", show_default=False
)
VerboseOption = typer.Option(False, "--verbose", "-v", help="Verbose output")


def load_cli_config(
    config_path: Path | None,
    *,
    vault: Path | None = None,
    endpoint: str | None = None,
    require_vault: bool = True,
    require_endpoint: bool = True,
) -> SyncConfig:
    """
    Load configuration, apply command-line overrides and validate.

    Exits with status 1 on configuration errors.
    """
    try:
        config = load_config(config_path, require_vault=False, require_endpoint=False)
        overrides = {}
        if vault is not None:
            overrides["vault_root"] = vault.expanduser()
        if endpoint:
            overrides["remote_endpoint"] = endpoint
        if overrides:
            config = config.with_overrides(**overrides)
        config.validate(require_vault=require_vault, require_endpoint=require_endpoint)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e.message}")
        raise typer.Exit(1) from e
    return config


def init_logging(config: SyncConfig, verbose: bool = False) -> logging.Logger:
    logging_config = dict(config.logging)
    if verbose:
        logging_config["level"] = "DEBUG"
    return setup_logging_from_config({"logging": logging_config}, base_dir=Path.cwd())
