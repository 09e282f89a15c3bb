"""Scan orchestration - search a mailbox, extract subscriptions, persist them."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from .auth import CredentialError, credential_expiry
from .billing import ensure_utc, project_next_billing
from .constants import SEARCH_PAGE_SIZE, SEARCH_QUERIES
from .directory import category_for
from .extractors import detect_billing_cycle, detect_currency, extract_price
from .identifier import identify_service
from .models import (
    AccountStatus,
    ConnectedAccount,
    DataSource,
    ExtractedSubscription,
    RawMessage,
    ScanResult,
    Subscription,
    SubscriptionStatus,
)

logger = logging.getLogger(__name__)


def normalize_name(name: str) -> str:
    """Dedup key for service names."""
    return name.strip().lower()


def extract_subscription(
    message: RawMessage,
    known_names: set[str],
) -> ExtractedSubscription | None:
    """Run one message through the extraction pipeline.

    Returns None as soon as a step comes up empty: no service identified,
    service already known, or no plausible price.
    """
    service = identify_service(message.sender, message.subject, message.body)
    if service is None:
        return None
    if normalize_name(service.name) in known_names:
        return None

    full_text = f"{message.subject}\n{message.body}"
    price = extract_price(full_text)
    if price is None:
        return None

    return ExtractedSubscription(
        name=service.name,
        cost=price,
        currency=detect_currency(full_text),
        billing_cycle=detect_billing_cycle(full_text),
        sender=message.sender,
        subject=message.subject,
        message_date=message.date,
        message_id=message.message_id,
        category=service.category,
    )


def ensure_fresh_credentials(account: ConnectedAccount, provider, now: datetime) -> bool:
    """Refresh an expired token once before any search is issued.

    Returns True when the credentials were refreshed.  Raises
    CredentialError when the account has no credentials or the refresh
    fails.
    """
    if not account.credentials:
        raise CredentialError("No access token available")
    if account.token_expiry is None or ensure_utc(account.token_expiry) > now:
        return False
    try:
        info = provider.refresh_token(account)
    except Exception as exc:
        logger.warning("Token refresh failed for %s: %s", account.email, exc)
        raise CredentialError("Token expired and refresh failed") from exc
    account.credentials = info
    account.token_expiry = credential_expiry(info)
    return True


def collect_candidates(
    account: ConnectedAccount,
    provider,
    known_names: set[str],
    processed_ids: set[str],
    result: ScanResult,
) -> list[ExtractedSubscription]:
    """Search every query and extract at most one candidate per service."""
    candidates: list[ExtractedSubscription] = []
    seen_ids = set(processed_ids)

    for query in SEARCH_QUERIES:
        try:
            message_ids = provider.search(account, query, SEARCH_PAGE_SIZE)
        except Exception as exc:
            logger.warning("Search failed for %r: %s", query, exc)
            result.errors.append(f"Search failed: {query[:30]}...")
            continue

        for message_id in message_ids:
            if message_id in seen_ids:
                continue
            seen_ids.add(message_id)

            try:
                message = provider.fetch(account, message_id)
            except Exception as exc:
                logger.warning("Fetch failed for message %s: %s", message_id, exc)
                result.errors.append(f"Fetch failed: {message_id}")
                continue

            try:
                candidate = extract_subscription(message, known_names)
            except Exception:
                logger.debug("Skipping message %s", message_id, exc_info=True)
                continue
            if candidate is None:
                continue

            known_names.add(normalize_name(candidate.name))
            candidates.append(candidate)
            result.found += 1

    return candidates


def to_subscription(
    user_id: str,
    candidate: ExtractedSubscription,
    category_ids: dict[str, int],
    now: datetime,
) -> Subscription:
    """Build the persisted record for a candidate."""
    category_name = candidate.category or category_for(candidate.name)
    category_id = category_ids.get(category_name.lower()) if category_name else None
    return Subscription(
        user_id=user_id,
        name=candidate.name,
        cost=candidate.cost,
        currency=candidate.currency,
        billing_cycle=candidate.billing_cycle,
        start_date=candidate.message_date,
        next_billing_date=project_next_billing(candidate.message_date, candidate.billing_cycle, now),
        status=SubscriptionStatus.ACTIVE,
        source=DataSource.EMAIL,
        source_id=candidate.message_id,
        category_id=category_id,
        notes=f"Imported from email: {candidate.subject}",
    )


def scan_account(
    account: ConnectedAccount,
    provider,
    store,
    now: datetime | None = None,
) -> ScanResult:
    """Scan one connected account and persist newly found subscriptions.

    Credential failures mark the account EXPIRED and are reported in the
    result rather than raised.
    """
    now = ensure_utc(now) if now is not None else datetime.now(timezone.utc)
    result = ScanResult()

    try:
        refreshed = ensure_fresh_credentials(account, provider, now)
    except CredentialError as exc:
        account.status = AccountStatus.EXPIRED
        store.update_account(account)
        result.errors.append(str(exc))
        return result
    if refreshed:
        store.update_account(account)

    known_names = {normalize_name(n) for n in store.get_subscription_names(account.user_id)}
    processed_ids = set(store.get_source_ids(account.user_id))
    category_ids = {c.name.lower(): c.id for c in store.get_categories(account.user_id)}

    logger.info("Scanning %s (%d known subscriptions)", account.email, len(known_names))
    candidates = collect_candidates(account, provider, known_names, processed_ids, result)

    for candidate in candidates:
        try:
            store.create_subscription(to_subscription(account.user_id, candidate, category_ids, now))
        except Exception as exc:
            logger.warning("Failed to create subscription %s: %s", candidate.name, exc)
            result.errors.append(f"Failed to create: {candidate.name}")
            continue
        result.added += 1

    account.last_sync_at = now
    account.sync_status = f"Found {result.found}, Added {result.added}"
    store.update_account(account)
    logger.info("Scan of %s done: %s", account.email, account.sync_status)

    return result
