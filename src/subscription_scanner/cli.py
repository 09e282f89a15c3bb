"""CLI entry point for Subscription Scanner."""

from __future__ import annotations

import json
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from .auth import authorize_account
from .constants import DEFAULT_USER_ID
from .display import console, display_accounts, display_subscriptions, display_sync_report
from .gmail_client import GmailProvider
from .models import ProviderKind
from .store import SubscriptionStore
from .sync import sync_all


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
        force=True,
    )
    # googleapiclient is chatty at INFO
    logging.getLogger("googleapiclient").setLevel(logging.WARNING)


@click.group()
@click.version_option(version="0.1.0", prog_name="subscription-scanner")
@click.option("--db", "db_path", default=None, type=click.Path(dir_okay=False), help="SQLite database path.")
@click.option("--user", "user_id", default=DEFAULT_USER_ID, show_default=True, help="Local user id.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, db_path: str | None, user_id: str, verbose: bool) -> None:
    """Subscription Scanner - find recurring subscriptions in your mailbox."""
    _configure_logging(verbose)
    ctx.obj = {"db_path": db_path, "user_id": user_id}


@cli.command()
@click.pass_obj
def connect(obj: dict) -> None:
    """Link a Gmail account through the OAuth browser flow."""
    try:
        account = authorize_account(obj["user_id"])
    except FileNotFoundError as e:
        raise click.ClickException(str(e)) from e

    with SubscriptionStore(db_path=obj["db_path"]) as store:
        store.ensure_default_categories(obj["user_id"])
        store.add_account(account)

    console.print(f"[green]Connected {account.email} (id {account.id}).[/green]")


@cli.command()
@click.pass_obj
def accounts(obj: dict) -> None:
    """List connected accounts."""
    with SubscriptionStore(db_path=obj["db_path"]) as store:
        rows = store.list_accounts(obj["user_id"])

    if not rows:
        console.print("[dim]No connected accounts. Run 'connect' first.[/dim]")
        return
    display_accounts(rows)


@cli.command()
@click.argument("account_id", type=int)
@click.pass_obj
def disconnect(obj: dict, account_id: int) -> None:
    """Remove a connected account."""
    with SubscriptionStore(db_path=obj["db_path"]) as store:
        account = store.get_account(account_id)
        if account is None or account.user_id != obj["user_id"]:
            raise click.ClickException(f"No connected account with id {account_id}.")
        store.delete_account(account_id)

    console.print(f"[green]Disconnected {account.email}.[/green]")


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print the raw sync report as JSON.")
@click.pass_obj
def sync(obj: dict, as_json: bool) -> None:
    """Scan every active account for subscription emails."""
    providers = {ProviderKind.GMAIL: GmailProvider()}

    with SubscriptionStore(db_path=obj["db_path"]) as store:
        store.ensure_default_categories(obj["user_id"])
        report = sync_all(obj["user_id"], providers, store)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return
    display_sync_report(report)


@cli.command()
@click.pass_obj
def subscriptions(obj: dict) -> None:
    """List stored subscriptions."""
    with SubscriptionStore(db_path=obj["db_path"]) as store:
        rows = store.list_subscriptions(obj["user_id"])

    if not rows:
        console.print("[dim]No subscriptions yet. Run 'sync' first.[/dim]")
        return
    display_subscriptions(rows)
