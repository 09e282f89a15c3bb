"""Next billing date projection."""

from __future__ import annotations

import calendar
from datetime import datetime, timedelta, timezone

from .models import BillingCycle

# (days, months) added per billing period; anything unlisted bills monthly.
CYCLE_INCREMENTS = {
    BillingCycle.WEEKLY: (7, 0),
    BillingCycle.MONTHLY: (0, 1),
    BillingCycle.QUARTERLY: (0, 3),
    BillingCycle.YEARLY: (0, 12),
}
DEFAULT_INCREMENT = (0, 1)


def ensure_utc(dt: datetime) -> datetime:
    """Force a datetime into UTC without altering instant."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def add_months(dt: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the target month's length."""
    month_index = dt.month - 1 + months
    year = dt.year + month_index // 12
    month = month_index % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def advance(start: datetime, cycle: BillingCycle | str | None, periods: int) -> datetime:
    """Return start moved forward by a whole number of billing periods."""
    days, months = CYCLE_INCREMENTS.get(_as_cycle(cycle), DEFAULT_INCREMENT)
    return add_months(start + timedelta(days=days * periods), months * periods)


def project_next_billing(
    start: datetime,
    cycle: BillingCycle | str | None,
    now: datetime | None = None,
) -> datetime:
    """Return the first billing date strictly after now.

    Each candidate steps one period from the previous one, so a day clamped
    at a short month stays clamped and re-projecting from one period before
    the result lands on the same date.
    """
    start = ensure_utc(start)
    now = ensure_utc(now) if now is not None else datetime.now(timezone.utc)

    candidate = start
    while candidate <= now:
        candidate = advance(candidate, cycle, 1)
    return candidate


def _as_cycle(cycle: BillingCycle | str | None) -> BillingCycle | None:
    if cycle is None or isinstance(cycle, BillingCycle):
        return cycle
    try:
        return BillingCycle(cycle)
    except ValueError:
        return None
