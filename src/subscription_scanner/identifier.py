"""Identify which service a billing message belongs to."""

from __future__ import annotations

import re

from .constants import SERVICE_NAME_MAX_LENGTH, SERVICE_NAME_MIN_LENGTH
from .directory import lookup_service
from .models import ServiceMatch

SUBJECT_PATTERNS = [
    # "Your Acme Pro subscription", "Acme receipt"
    re.compile(r"(?:your\s+)?(\w+(?:\s+\w+)?)\s+(?:subscription|receipt|invoice|payment)", re.IGNORECASE),
    # "Receipt for Acme", "Invoice from Acme Corp"
    re.compile(r"(?:receipt|invoice|payment)\s+(?:for|from)\s+(\w+(?:\s+\w+)?)", re.IGNORECASE),
    # "Thank you for your Acme Premium"
    re.compile(
        r"(?:thank\s+you\s+for\s+(?:your\s+)?)?(\w+(?:\s+\w+)?)\s+(?:premium|pro|plus)",
        re.IGNORECASE,
    ),
]


def name_from_subject(subject: str) -> str | None:
    """Pull a free-text product name out of a billing subject line."""
    for pattern in SUBJECT_PATTERNS:
        match = pattern.search(subject or "")
        if match and match.group(1):
            name = match.group(1).strip()
            if SERVICE_NAME_MIN_LENGTH <= len(name) <= SERVICE_NAME_MAX_LENGTH:
                return name
    return None


def identify_service(from_address: str, subject: str, body: str) -> ServiceMatch | None:
    """Return the service a message is billing for, or None.

    Known senders come from the service directory and carry a category.
    Anything else falls back to the subject line and has no category.
    """
    known = lookup_service(from_address, subject, body)
    if known is not None:
        return known

    name = name_from_subject(subject)
    if name is None:
        return None
    return ServiceMatch(name=name)
