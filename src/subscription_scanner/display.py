"""Rich-based display functions for Subscription Scanner."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .models import AccountStatus, ConnectedAccount, Subscription, SyncReport

console = Console()


def _status_color(status: AccountStatus) -> str:
    if status == AccountStatus.ACTIVE:
        return "green"
    if status == AccountStatus.EXPIRED:
        return "yellow"
    return "red"


def display_sync_report(report: SyncReport) -> None:
    """Display per-account sync counts and any errors."""
    table = Table(title="Sync Results")
    table.add_column("Provider")
    table.add_column("Found", justify="right")
    table.add_column("Added", justify="right")
    table.add_column("Errors")

    for result in report.results:
        errors = "\n".join(result.errors)
        table.add_row(
            result.provider,
            str(result.found),
            f"[green]{result.added}[/green]" if result.added else "0",
            f"[red]{errors}[/red]" if errors else "",
        )

    if report.results:
        console.print(table)
    console.print(Panel(report.message, title="Summary"))


def display_accounts(accounts: list[ConnectedAccount]) -> None:
    """Display connected accounts with their last sync state."""
    table = Table(title="Connected Accounts")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Provider")
    table.add_column("Email")
    table.add_column("Status")
    table.add_column("Last sync")
    table.add_column("Result")

    for account in accounts:
        color = _status_color(account.status)
        table.add_row(
            str(account.id),
            account.provider.value,
            account.email,
            f"[{color}]{account.status.value}[/{color}]",
            account.last_sync_at.strftime("%Y-%m-%d %H:%M") if account.last_sync_at else "never",
            account.sync_status,
        )

    console.print(table)


def display_subscriptions(subscriptions: list[Subscription]) -> None:
    """Display stored subscriptions, soonest renewal first."""
    dated = sorted((s for s in subscriptions if s.next_billing_date), key=lambda s: s.next_billing_date)
    rows = dated + [s for s in subscriptions if not s.next_billing_date]

    table = Table(title="Subscriptions")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Name")
    table.add_column("Cost", justify="right")
    table.add_column("Cycle")
    table.add_column("Next billing")
    table.add_column("Source")

    for idx, sub in enumerate(rows, start=1):
        table.add_row(
            str(idx),
            sub.name,
            f"{sub.cost} {sub.currency}",
            sub.billing_cycle.value.lower(),
            sub.next_billing_date.strftime("%Y-%m-%d") if sub.next_billing_date else "-",
            sub.source.value.lower(),
        )

    console.print(table)
    console.print(Panel(f"Total subscriptions: {len(rows)}", title="Summary"))
