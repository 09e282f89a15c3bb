"""Tests for the CLI module."""

import json

from click.testing import CliRunner

from subscription_scanner import cli as cli_module
from subscription_scanner.cli import cli
from subscription_scanner.models import AccountStatus, ConnectedAccount, ProviderKind
from subscription_scanner.store import SubscriptionStore


def _db_args(tmp_path):
    return ["--db", str(tmp_path / "subscriptions.db")]


def test_cli_help():
    """CLI --help should work and show commands."""
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    for command in ("connect", "accounts", "disconnect", "sync", "subscriptions"):
        assert command in result.output


def test_cli_version():
    """CLI --version should show version."""
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_connect_no_credentials(tmp_path, monkeypatch):
    """Connect without an OAuth client file should show a clear error."""
    import subscription_scanner.auth as auth_module

    monkeypatch.setattr(auth_module, "CREDENTIALS_PATH", tmp_path / "nonexistent.json")
    monkeypatch.setattr(auth_module, "CONFIG_DIR", tmp_path)

    runner = CliRunner()
    result = runner.invoke(cli, [*_db_args(tmp_path), "connect"])
    assert result.exit_code != 0
    assert "Credentials file not found" in result.output


def test_accounts_empty(tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli, [*_db_args(tmp_path), "accounts"])
    assert result.exit_code == 0
    assert "No connected accounts" in result.output


def test_subscriptions_empty(tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli, [*_db_args(tmp_path), "subscriptions"])
    assert result.exit_code == 0
    assert "No subscriptions yet" in result.output


def test_sync_without_accounts_json(tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli, [*_db_args(tmp_path), "sync", "--json"])
    assert result.exit_code == 0
    assert json.loads(result.output) == {
        "message": "No active email accounts connected",
        "results": [],
    }


def test_disconnect_unknown_account(tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli, [*_db_args(tmp_path), "disconnect", "42"])
    assert result.exit_code != 0
    assert "No connected account with id 42" in result.output


def test_sync_then_list(tmp_path, monkeypatch, provider):
    db_path = tmp_path / "subscriptions.db"
    with SubscriptionStore(db_path=db_path) as store:
        store.add_account(
            ConnectedAccount(
                user_id="local",
                provider=ProviderKind.GMAIL,
                email="me@example.com",
                credentials={"token": "token", "refresh_token": "refresh"},
                status=AccountStatus.ACTIVE,
            )
        )

    monkeypatch.setattr(cli_module, "GmailProvider", lambda: provider)

    runner = CliRunner()
    result = runner.invoke(cli, [*_db_args(tmp_path), "sync"])
    assert result.exit_code == 0
    assert "Scanned 1 account(s): found 2, added 2" in result.output

    result = runner.invoke(cli, [*_db_args(tmp_path), "subscriptions"])
    assert result.exit_code == 0
    assert "Netflix" in result.output
    assert "Total subscriptions: 2" in result.output

    result = runner.invoke(cli, [*_db_args(tmp_path), "accounts"])
    assert result.exit_code == 0
    assert "Connected Accounts" in result.output


def test_disconnect(tmp_path):
    db_path = tmp_path / "subscriptions.db"
    with SubscriptionStore(db_path=db_path) as store:
        account = store.add_account(
            ConnectedAccount(user_id="local", provider=ProviderKind.GMAIL, email="me@example.com")
        )

    runner = CliRunner()
    result = runner.invoke(cli, [*_db_args(tmp_path), "disconnect", str(account.id)])
    assert result.exit_code == 0
    assert "Disconnected me@example.com" in result.output

    with SubscriptionStore(db_path=db_path) as store:
        assert store.list_accounts("local") == []
