"""
Main CLI entry point.
"""

import typer

from vaultsync import __version__
from vaultsync.cli import admin, plan, serve, sync, webhook


def version_callback(value: bool):
    """Callback to display version and exit."""
    if value:
        typer.echo(f"vaultsync version {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="vaultsync",
    help="vaultsync - one-way sync of a notes vault into a remote object store",
    add_completion=True,
)

# Register subcommands
app.add_typer(sync.app, name="sync")
app.add_typer(plan.app, name="plan")
app.add_typer(serve.app, name="serve")
app.add_typer(webhook.app, name="webhook")
app.command(name="delete-prefix")(admin.delete_prefix_command)
app.command(name="delete-all")(admin.delete_all_command)


@app.callback(invoke_without_command=True)
def entrypoint(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
):
    """
    vaultsync - one-way sync of a notes vault into a remote object store.

    Run 'vaultsync <command> --help' for help on a specific command.
    """
    if ctx.invoked_subcommand is None:
        if not version:
            typer.echo(ctx.get_help())
            raise typer.Exit()


def main():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
