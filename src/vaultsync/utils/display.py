"""
Rich rendering of plans and sync reports for the CLI.
"""

from rich.console import Console
from rich.table import Table

from vaultsync.sync.types import ItemOutcome, ReconciliationPlan, SyncReport


def plan_table(plan: ReconciliationPlan) -> Table:
    table = Table(title=f"Plan ({plan.total} changes)", show_header=True)
    table.add_column("Action", style="bold")
    table.add_column("Key", style="cyan")
    table.add_column("Size", justify="right", style="dim")

    for file in plan.uploads:
        table.add_row("[green]upload[/green]", file.relative_path, str(file.size_bytes))
    for key in plan.deletions:
        table.add_row("[red]delete[/red]", key, "-")
    return table


def failures_table(title: str, outcomes: list[ItemOutcome]) -> Table:
    table = Table(title=title, show_header=True)
    table.add_column("Key", style="cyan")
    table.add_column("Error", style="red")
    for outcome in outcomes:
        table.add_row(outcome.key, outcome.error_detail or "")
    return table


def print_plan(plan: ReconciliationPlan, console: Console | None = None) -> None:
    console = console or Console()
    if plan.in_sync:
        console.print("[green]Remote store is in sync; nothing to do[/green]")
        return
    console.print(plan_table(plan))


def print_report(report: SyncReport, console: Console | None = None) -> None:
    """Print the summary of a sync run: counts, then failure tables."""
    console = console or Console()

    if report.dry_run:
        console.print(
            f"\n[bold blue]Dry run[/bold blue] [dim]({report.scanned} local, {report.remote_count} remote)[/dim]"
        )
        print_plan(report.plan, console)
        return

    summary = Table(title="Sync summary", show_header=True)
    summary.add_column("", style="bold")
    summary.add_column("Succeeded", justify="right", style="green")
    summary.add_column("Failed", justify="right", style="red")
    summary.add_row("Uploads", str(report.uploaded), str(len(report.upload_failures)))
    summary.add_row("Deletions", str(report.deleted), str(len(report.deletion_failures)))
    console.print(summary)

    if report.oversized:
        console.print(f"[yellow]Skipped {len(report.oversized)} oversized file(s)[/yellow]")
    if report.upload_failures:
        console.print(failures_table("Upload failures", report.upload_failures))
    if report.deletion_failures:
        console.print(failures_table("Deletion failures", report.deletion_failures))
    if report.ok:
        console.print("[green]Sync completed successfully[/green]")
