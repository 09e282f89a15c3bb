"""Data models for Subscription Scanner."""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, field
from datetime import datetime
from decimal import Decimal


class ProviderKind(str, enum.Enum):
    GMAIL = "GMAIL"
    OUTLOOK = "OUTLOOK"


class AccountStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    REVOKED = "REVOKED"


class BillingCycle(str, enum.Enum):
    FREE = "FREE"
    TRIAL = "TRIAL"
    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    BIANNUAL = "BIANNUAL"
    YEARLY = "YEARLY"
    LIFETIME = "LIFETIME"
    CUSTOM = "CUSTOM"


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"
    TRIAL = "TRIAL"
    PENDING = "PENDING"


class DataSource(str, enum.Enum):
    MANUAL = "MANUAL"
    EMAIL = "EMAIL"
    BROWSER = "BROWSER"
    BANK_IMPORT = "BANK_IMPORT"
    PLAID = "PLAID"
    API = "API"


@dataclass
class ConnectedAccount:
    """A mailbox the user authorized us to read."""

    user_id: str
    provider: ProviderKind
    email: str
    credentials: dict = field(default_factory=dict)  # opaque authorized-user info
    token_expiry: datetime | None = None
    status: AccountStatus = AccountStatus.ACTIVE
    last_sync_at: datetime | None = None
    sync_status: str = ""
    id: int | None = None


@dataclass
class RawMessage:
    """A single fetched message. Never persisted."""

    message_id: str
    sender: str  # Full From header value
    subject: str
    body: str  # Decoded text/plain parts, joined
    date: datetime


@dataclass(frozen=True)
class ServiceMatch:
    """A recognized service name with an optional category name."""

    name: str
    category: str | None = None


@dataclass
class ExtractedSubscription:
    """Candidate subscription inferred from one message."""

    name: str
    cost: Decimal
    currency: str
    billing_cycle: BillingCycle
    sender: str
    subject: str
    message_date: datetime
    message_id: str
    category: str | None = None


@dataclass
class Subscription:
    """A persisted subscription record."""

    user_id: str
    name: str
    cost: Decimal
    currency: str
    billing_cycle: BillingCycle
    start_date: datetime
    next_billing_date: datetime | None = None
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    source: DataSource = DataSource.MANUAL
    source_id: str | None = None
    category_id: int | None = None
    notes: str = ""
    id: int | None = None


@dataclass
class Category:
    id: int
    user_id: str
    name: str


@dataclass
class ScanResult:
    """Tally for one connected account scan."""

    found: int = 0
    added: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class AccountSyncResult:
    provider: str
    found: int = 0
    added: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class SyncReport:
    """Result of syncing every active account of a user."""

    message: str
    results: list[AccountSyncResult] = field(default_factory=list)

    @property
    def total_found(self) -> int:
        return sum(r.found for r in self.results)

    @property
    def total_added(self) -> int:
        return sum(r.added for r in self.results)

    def to_dict(self) -> dict:
        """Caller-facing shape: {message, results: [{provider, found, added, errors}]}."""
        return {
            "message": self.message,
            "results": [asdict(r) for r in self.results],
        }
