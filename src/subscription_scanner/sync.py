"""Sync every active connected account of a user."""

from __future__ import annotations

import logging
from datetime import datetime

from .models import AccountSyncResult, ProviderKind, SyncReport
from .scanner import scan_account

logger = logging.getLogger(__name__)


def sync_all(
    user_id: str,
    providers: dict[ProviderKind, object],
    store,
    now: datetime | None = None,
) -> SyncReport:
    """Scan each ACTIVE account in turn and aggregate the results.

    A failure in one account becomes a zero-count entry carrying the error
    message; it never stops the remaining accounts.  Failing to load the
    accounts at all propagates.
    """
    accounts = store.get_active_accounts(user_id)
    results: list[AccountSyncResult] = []

    for account in accounts:
        provider = providers.get(account.provider)
        label = getattr(provider, "label", account.provider.value)
        try:
            if provider is None:
                raise LookupError(f"No mailbox provider available for {account.provider.value}")
            scan = scan_account(account, provider, store, now=now)
        except Exception as exc:
            logger.exception("Scan error for %s account %s", account.provider.value, account.email)
            results.append(
                AccountSyncResult(provider=label, found=0, added=0, errors=[str(exc) or "Unknown error"])
            )
            continue
        results.append(
            AccountSyncResult(provider=label, found=scan.found, added=scan.added, errors=scan.errors)
        )

    report = SyncReport(message="", results=results)
    if not accounts:
        report.message = "No active email accounts connected"
    else:
        report.message = (
            f"Scanned {len(accounts)} account(s): "
            f"found {report.total_found}, added {report.total_added}"
        )
    return report
