"""Tests for syncing all accounts of a user."""

import pytest

from subscription_scanner.models import AccountStatus, ConnectedAccount, ProviderKind
from subscription_scanner.sync import sync_all

from conftest import NOW, USER_ID


def _add_account(store, email, provider=ProviderKind.GMAIL, status=AccountStatus.ACTIVE):
    return store.add_account(
        ConnectedAccount(
            user_id=USER_ID,
            provider=provider,
            email=email,
            credentials={"token": "token", "refresh_token": "refresh"},
            status=status,
        )
    )


def test_sync_aggregates_accounts(account, provider, store):
    report = sync_all(USER_ID, {ProviderKind.GMAIL: provider}, store, now=NOW)

    assert len(report.results) == 1
    result = report.results[0]
    assert result.provider == "Gmail"
    assert (result.found, result.added, result.errors) == (2, 2, [])
    assert report.message == "Scanned 1 account(s): found 2, added 2"


def test_broken_account_does_not_stop_others(store, provider):
    _add_account(store, "work@example.com", provider=ProviderKind.OUTLOOK)
    _add_account(store, "me@example.com")

    report = sync_all(USER_ID, {ProviderKind.GMAIL: provider}, store, now=NOW)

    assert [r.provider for r in report.results] == ["OUTLOOK", "Gmail"]
    outlook, gmail = report.results
    assert (outlook.found, outlook.added) == (0, 0)
    assert outlook.errors == ["No mailbox provider available for OUTLOOK"]
    assert gmail.added == 2


def test_exception_inside_scan_becomes_error_entry(account, store):
    class ExplodingProvider:
        label = "Gmail"

        def search(self, account, query, page_size):
            return ["m1"]

        def fetch(self, account, message_id):
            raise RuntimeError("never reached")

        def refresh_token(self, account):
            raise RuntimeError("never reached")

    def broken_names(user_id):
        raise RuntimeError("database is locked")

    store.get_subscription_names = broken_names

    report = sync_all(USER_ID, {ProviderKind.GMAIL: ExplodingProvider()}, store, now=NOW)

    [result] = report.results
    assert (result.provider, result.found, result.added) == ("Gmail", 0, 0)
    assert result.errors == ["database is locked"]


def test_inactive_accounts_are_skipped(store, provider):
    _add_account(store, "old@example.com", status=AccountStatus.EXPIRED)
    _add_account(store, "gone@example.com", status=AccountStatus.REVOKED)

    report = sync_all(USER_ID, {ProviderKind.GMAIL: provider}, store, now=NOW)

    assert report.results == []
    assert report.message == "No active email accounts connected"
    assert provider.search_calls == []


def test_report_to_dict(account, provider, store):
    report = sync_all(USER_ID, {ProviderKind.GMAIL: provider}, store, now=NOW)

    assert report.to_dict() == {
        "message": "Scanned 1 account(s): found 2, added 2",
        "results": [{"provider": "Gmail", "found": 2, "added": 2, "errors": []}],
    }


def test_failure_loading_accounts_propagates(store, provider):
    def broken(user_id):
        raise RuntimeError("cannot reach database")

    store.get_active_accounts = broken

    with pytest.raises(RuntimeError, match="cannot reach database"):
        sync_all(USER_ID, {ProviderKind.GMAIL: provider}, store, now=NOW)
