"""Shared fixtures for tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from subscription_scanner.models import AccountStatus, ConnectedAccount, ProviderKind, RawMessage
from subscription_scanner.store import SubscriptionStore

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)
USER_ID = "user-1"


class FakeProvider:
    """In-memory mailbox provider.

    Every search query returns every message id, so the same message
    shows up under several queries.
    """

    label = "Gmail"

    def __init__(self, messages=None):
        self.messages = {m.message_id: m for m in messages or []}
        self.failing_queries: set[str] = set()
        self.failing_fetches: set[str] = set()
        self.refresh_error: Exception | None = None
        self.refreshed_info = {
            "token": "new-token",
            "refresh_token": "refresh",
            "expiry": "2026-10-17T13:00:00Z",
        }
        self.search_calls: list[str] = []
        self.fetch_calls: list[str] = []
        self.refresh_calls = 0

    def search(self, account, query, page_size):
        self.search_calls.append(query)
        if query in self.failing_queries:
            raise RuntimeError("quota exceeded")
        return list(self.messages)[:page_size]

    def fetch(self, account, message_id):
        self.fetch_calls.append(message_id)
        if message_id in self.failing_fetches:
            raise RuntimeError("backend error")
        return self.messages[message_id]

    def refresh_token(self, account):
        self.refresh_calls += 1
        if self.refresh_error is not None:
            raise self.refresh_error
        return dict(self.refreshed_info)


def make_message(message_id, sender, subject, body, date=None) -> RawMessage:
    return RawMessage(
        message_id=message_id,
        sender=sender,
        subject=subject,
        body=body,
        date=date or datetime(2026, 9, 20, tzinfo=timezone.utc),
    )


@pytest.fixture
def netflix_message() -> RawMessage:
    return make_message(
        "msg-netflix",
        "Netflix <billing@netflix.com>",
        "Your Netflix receipt",
        "Total: $15.99",
    )


@pytest.fixture
def acme_message() -> RawMessage:
    return make_message(
        "msg-acme",
        "Acme Billing <noreply@acme.io>",
        "Your annual Acme Pro subscription renewed",
        "₹4999/year",
        date=datetime(2026, 3, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def order_message() -> RawMessage:
    return make_message(
        "msg-order",
        "Shop <orders@shop.example>",
        "Your order receipt",
        "Order #88212",
    )


@pytest.fixture
def provider(netflix_message, acme_message, order_message) -> FakeProvider:
    return FakeProvider([netflix_message, acme_message, order_message])


@pytest.fixture
def store(tmp_path):
    with SubscriptionStore(db_path=tmp_path / "subscriptions.db") as s:
        s.ensure_default_categories(USER_ID)
        yield s


@pytest.fixture
def account(store) -> ConnectedAccount:
    return store.add_account(
        ConnectedAccount(
            user_id=USER_ID,
            provider=ProviderKind.GMAIL,
            email="me@example.com",
            credentials={"token": "token", "refresh_token": "refresh"},
            token_expiry=NOW + timedelta(hours=1),
            status=AccountStatus.ACTIVE,
        )
    )
