"""Tests for next billing date projection."""

from datetime import datetime, timezone

import pytest

from subscription_scanner.billing import add_months, advance, project_next_billing
from subscription_scanner.models import BillingCycle

from conftest import NOW


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "cycle, start, expected",
    [
        (BillingCycle.WEEKLY, utc(2026, 10, 1), utc(2026, 10, 22)),
        (BillingCycle.MONTHLY, utc(2026, 1, 15), utc(2026, 11, 15)),
        (BillingCycle.QUARTERLY, utc(2026, 1, 15), utc(2027, 1, 15)),
        (BillingCycle.YEARLY, utc(2020, 3, 1), utc(2027, 3, 1)),
        (BillingCycle.CUSTOM, utc(2026, 9, 20), utc(2026, 10, 20)),
        (BillingCycle.BIWEEKLY, utc(2026, 9, 20), utc(2026, 10, 20)),
        (None, utc(2026, 9, 20), utc(2026, 10, 20)),
    ],
)
def test_project_next_billing(cycle, start, expected):
    assert project_next_billing(start, cycle, now=NOW) == expected


def test_future_start_is_kept():
    start = utc(2026, 12, 1)
    assert project_next_billing(start, BillingCycle.MONTHLY, now=NOW) == start


def test_start_equal_to_now_moves_forward():
    """The projected date must be strictly after now."""
    assert project_next_billing(NOW, BillingCycle.WEEKLY, now=NOW) == utc(2026, 10, 24, 12)


def test_month_end_day_stays_clamped():
    """Once a short month clamps the day, later periods keep the clamped day."""
    now = utc(2026, 3, 1)
    projected = project_next_billing(utc(2026, 1, 31), BillingCycle.MONTHLY, now=now)
    assert projected == utc(2026, 3, 28)
    assert project_next_billing(advance(projected, BillingCycle.MONTHLY, -1), BillingCycle.MONTHLY, now=now) == projected


def test_naive_start_is_treated_as_utc():
    assert project_next_billing(datetime(2026, 9, 20), "MONTHLY", now=NOW) == utc(2026, 10, 20)


def test_unknown_cycle_string_bills_monthly():
    assert project_next_billing(utc(2026, 9, 20), "FORTNIGHTLY", now=NOW) == utc(2026, 10, 20)


@pytest.mark.parametrize("cycle", list(BillingCycle))
@pytest.mark.parametrize(
    "start",
    [
        utc(2001, 1, 28),
        utc(2024, 1, 29),
        utc(2024, 2, 29),
        utc(2025, 2, 28),
        utc(2025, 8, 30),
        utc(2026, 1, 31),
        utc(2026, 5, 31, 23, 30),
        utc(2026, 10, 17, 11, 59),
    ],
)
def test_always_after_now_and_stable(cycle, start):
    projected = project_next_billing(start, cycle, now=NOW)
    assert projected > NOW
    # Re-projecting from one period earlier lands on the same date.
    assert project_next_billing(advance(projected, cycle, -1), cycle, now=NOW) == projected


def test_add_months_clamps_and_wraps_years():
    assert add_months(utc(2024, 1, 31), 1) == utc(2024, 2, 29)
    assert add_months(utc(2026, 11, 30), 3) == utc(2027, 2, 28)
    assert add_months(utc(2026, 1, 15), -1) == utc(2025, 12, 15)
