"""Price, currency and billing cycle extraction from message text."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

from .constants import (
    CURRENCY_CODES,
    CURRENCY_MARKERS,
    CURRENCY_SYMBOLS,
    DEFAULT_CURRENCY,
    MAX_PLAUSIBLE_PRICE,
    MIN_PLAUSIBLE_PRICE,
    PRICE_LABELS,
    QUARTERLY_KEYWORDS,
    WEEKLY_KEYWORDS,
    YEARLY_KEYWORDS,
)
from .models import BillingCycle

# Comma-grouped thousands with an optional ".dd" fraction, or up to five
# integer digits with an optional two-digit fraction; never a fragment of a
# longer number.
_GROUPED = r"\d{1,3}(?:,\d{3})+(?:\.\d{2})?"
_NUMBER = rf"(?<!\d)(?<!\d[.,])({_GROUPED}|\d{{1,5}}(?:[.,]\d{{2}})?)(?!\d)(?![.,]\d)"
_GROUPED_RE = re.compile(_GROUPED)
# Rs. 499, Rs 499, Rs499
_RUPEES = r"\bRs\.?(?=\s*\d)"
_RUPEES_RE = re.compile(_RUPEES)
_CODES = "|".join(CURRENCY_CODES)
_SYMBOL = f"[{re.escape(CURRENCY_SYMBOLS)}]"
_LABELS = "|".join(PRICE_LABELS)
_CADENCE = r"(?:per\s+month|/\s*month|monthly|per\s+year|/\s*year|yearly|annually)"

PRICE_PATTERNS = [
    # $15.99, USD 15.99, Rs. 499, 15,99 EUR, 9.99€
    re.compile(
        rf"(?:(?:{_CODES})\s*{_SYMBOL}?|{_SYMBOL}|{_RUPEES})\s*{_NUMBER}"
        rf"|{_NUMBER}\s*(?:{_CODES}|[€£])"
    ),
    # Total: 15.99, Amount charged 15.99
    re.compile(rf"(?:{_LABELS})[:.]?\s*(?:{_SYMBOL}|(?:{_CODES}))?\s*{_NUMBER}", re.IGNORECASE),
    # 15.99 per month, 120/year
    re.compile(rf"{_NUMBER}\s*{_CADENCE}", re.IGNORECASE),
]


def _to_amount(raw: str) -> Decimal | None:
    if _GROUPED_RE.fullmatch(raw):
        raw = raw.replace(",", "")
    try:
        return Decimal(raw.replace(",", "."))
    except InvalidOperation:
        return None


def is_plausible_price(amount: Decimal) -> bool:
    """Reject stray numbers such as years, order numbers or page counts."""
    return MIN_PLAUSIBLE_PRICE <= amount <= MAX_PLAUSIBLE_PRICE


def extract_price(text: str) -> Decimal | None:
    """Return the first plausible monetary amount in text, or None.

    Pattern families are tried in order (currency-adjacent, label-prefixed,
    cadence-suffixed); within a family every match is considered in order.
    """
    if not text:
        return None
    for pattern in PRICE_PATTERNS:
        for match in pattern.finditer(text):
            raw = next((g for g in match.groups() if g), None)
            if raw is None:
                continue
            amount = _to_amount(raw)
            if amount is not None and is_plausible_price(amount):
                return amount
    return None


def detect_currency(text: str) -> str:
    """Return an ISO currency code for text, defaulting to USD."""
    text = text or ""
    for code, markers in CURRENCY_MARKERS:
        if any(marker in text for marker in markers):
            return code
        if code == "INR" and _RUPEES_RE.search(text):
            return code
    return DEFAULT_CURRENCY


def detect_billing_cycle(text: str) -> BillingCycle:
    """Return the billing cycle named in text, defaulting to monthly."""
    lower = (text or "").lower()
    if any(k in lower for k in YEARLY_KEYWORDS):
        return BillingCycle.YEARLY
    if any(k in lower for k in QUARTERLY_KEYWORDS):
        return BillingCycle.QUARTERLY
    if any(k in lower for k in WEEKLY_KEYWORDS):
        return BillingCycle.WEEKLY
    return BillingCycle.MONTHLY
