"""SQLite store for connected accounts, categories and subscriptions."""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

from subscription_scanner import constants
from subscription_scanner.models import (
    AccountStatus,
    BillingCycle,
    Category,
    ConnectedAccount,
    DataSource,
    ProviderKind,
    Subscription,
    SubscriptionStatus,
)

_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS connected_accounts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    provider TEXT NOT NULL,
    email TEXT NOT NULL,
    credentials_json TEXT,
    token_expiry TEXT,
    status TEXT NOT NULL,
    last_sync_at TEXT,
    sync_status TEXT
);

CREATE TABLE IF NOT EXISTS categories (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    UNIQUE (user_id, name)
);

CREATE TABLE IF NOT EXISTS subscriptions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    cost TEXT NOT NULL,
    currency TEXT NOT NULL,
    billing_cycle TEXT NOT NULL,
    status TEXT NOT NULL,
    start_date TEXT NOT NULL,
    next_billing_date TEXT,
    source TEXT NOT NULL,
    source_id TEXT,
    category_id INTEGER,
    notes TEXT,
    created_at TEXT NOT NULL,
    FOREIGN KEY (category_id) REFERENCES categories(id),
    UNIQUE (user_id, source_id)
);
"""


def _dt(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class SubscriptionStore:
    """Persistent SQLite store.

    Uniqueness of (user_id, source_id) is enforced by the schema so that
    concurrent scans of the same account cannot persist a message twice.
    """

    def __init__(self, db_path: Path | None = None) -> None:
        self.db_path = Path(db_path or constants.DB_PATH)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self.db_path))
        self._conn.row_factory = sqlite3.Row
        self._create_tables()

    def _create_tables(self) -> None:
        self._conn.executescript(_CREATE_TABLES_SQL)

    # --- connected accounts ---

    def add_account(self, account: ConnectedAccount) -> ConnectedAccount:
        """Insert a connected account and assign its id."""
        with self._conn:
            cursor = self._conn.execute(
                "INSERT INTO connected_accounts (user_id, provider, email, credentials_json, "
                "token_expiry, status, last_sync_at, sync_status) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    account.user_id,
                    account.provider.value,
                    account.email,
                    json.dumps(account.credentials),
                    _dt(account.token_expiry),
                    account.status.value,
                    _dt(account.last_sync_at),
                    account.sync_status,
                ),
            )
        account.id = cursor.lastrowid
        return account

    def update_account(self, account: ConnectedAccount) -> None:
        """Write back status, credentials and sync metadata."""
        with self._conn:
            self._conn.execute(
                "UPDATE connected_accounts SET credentials_json = ?, token_expiry = ?, status = ?, "
                "last_sync_at = ?, sync_status = ? WHERE id = ?",
                (
                    json.dumps(account.credentials),
                    _dt(account.token_expiry),
                    account.status.value,
                    _dt(account.last_sync_at),
                    account.sync_status,
                    account.id,
                ),
            )

    def get_account(self, account_id: int) -> ConnectedAccount | None:
        row = self._conn.execute(
            "SELECT * FROM connected_accounts WHERE id = ?", (account_id,)
        ).fetchone()
        return self._account_from_row(row) if row else None

    def list_accounts(self, user_id: str) -> list[ConnectedAccount]:
        rows = self._conn.execute(
            "SELECT * FROM connected_accounts WHERE user_id = ? ORDER BY id", (user_id,)
        ).fetchall()
        return [self._account_from_row(r) for r in rows]

    def get_active_accounts(self, user_id: str) -> list[ConnectedAccount]:
        """Return the user's ACTIVE connected accounts."""
        rows = self._conn.execute(
            "SELECT * FROM connected_accounts WHERE user_id = ? AND status = ? ORDER BY id",
            (user_id, AccountStatus.ACTIVE.value),
        ).fetchall()
        return [self._account_from_row(r) for r in rows]

    def delete_account(self, account_id: int) -> bool:
        with self._conn:
            cursor = self._conn.execute(
                "DELETE FROM connected_accounts WHERE id = ?", (account_id,)
            )
        return cursor.rowcount > 0

    @staticmethod
    def _account_from_row(row: sqlite3.Row) -> ConnectedAccount:
        return ConnectedAccount(
            id=row["id"],
            user_id=row["user_id"],
            provider=ProviderKind(row["provider"]),
            email=row["email"],
            credentials=json.loads(row["credentials_json"] or "{}"),
            token_expiry=_parse_dt(row["token_expiry"]),
            status=AccountStatus(row["status"]),
            last_sync_at=_parse_dt(row["last_sync_at"]),
            sync_status=row["sync_status"] or "",
        )

    # --- categories ---

    def ensure_default_categories(self, user_id: str) -> None:
        """Seed the default category set for a user (idempotent)."""
        with self._conn:
            self._conn.executemany(
                "INSERT OR IGNORE INTO categories (user_id, name) VALUES (?, ?)",
                [(user_id, name) for name in constants.DEFAULT_CATEGORIES],
            )

    def get_categories(self, user_id: str) -> list[Category]:
        rows = self._conn.execute(
            "SELECT * FROM categories WHERE user_id = ? ORDER BY id", (user_id,)
        ).fetchall()
        return [Category(id=r["id"], user_id=r["user_id"], name=r["name"]) for r in rows]

    # --- subscriptions ---

    def create_subscription(self, sub: Subscription) -> Subscription:
        """Insert a subscription.

        Raises sqlite3.IntegrityError when the user already has a
        subscription with the same source_id.
        """
        with self._conn:
            cursor = self._conn.execute(
                "INSERT INTO subscriptions (user_id, name, cost, currency, billing_cycle, status, "
                "start_date, next_billing_date, source, source_id, category_id, notes, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    sub.user_id,
                    sub.name,
                    str(sub.cost),
                    sub.currency,
                    sub.billing_cycle.value,
                    sub.status.value,
                    _dt(sub.start_date),
                    _dt(sub.next_billing_date),
                    sub.source.value,
                    sub.source_id,
                    sub.category_id,
                    sub.notes,
                    datetime.now(timezone.utc).isoformat(),
                ),
            )
        sub.id = cursor.lastrowid
        return sub

    def list_subscriptions(self, user_id: str) -> list[Subscription]:
        rows = self._conn.execute(
            "SELECT * FROM subscriptions WHERE user_id = ? ORDER BY id", (user_id,)
        ).fetchall()
        return [
            Subscription(
                id=r["id"],
                user_id=r["user_id"],
                name=r["name"],
                cost=Decimal(r["cost"]),
                currency=r["currency"],
                billing_cycle=BillingCycle(r["billing_cycle"]),
                status=SubscriptionStatus(r["status"]),
                start_date=_parse_dt(r["start_date"]),
                next_billing_date=_parse_dt(r["next_billing_date"]),
                source=DataSource(r["source"]),
                source_id=r["source_id"],
                category_id=r["category_id"],
                notes=r["notes"] or "",
            )
            for r in rows
        ]

    def get_subscription_names(self, user_id: str) -> list[str]:
        rows = self._conn.execute(
            "SELECT name FROM subscriptions WHERE user_id = ?", (user_id,)
        ).fetchall()
        return [r["name"] for r in rows]

    def get_source_ids(self, user_id: str) -> set[str]:
        """Return the message identifiers already linked to a subscription."""
        rows = self._conn.execute(
            "SELECT source_id FROM subscriptions WHERE user_id = ? AND source_id IS NOT NULL",
            (user_id,),
        ).fetchall()
        return {r["source_id"] for r in rows}

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    # --- context manager ---

    def __enter__(self) -> SubscriptionStore:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        self.close()
