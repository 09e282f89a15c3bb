"""Lookup of known billing senders in the static service directory."""

from __future__ import annotations

import re

from .constants import KNOWN_SERVICES
from .models import ServiceMatch


def _leading_label(domain: str) -> str:
    """Return the first label of a domain, e.g. 'netflix' for 'netflix.com'."""
    return domain.split(".")[0]


# Body mentions are a weak signal: only whole-word hits on the leading label
# of a registrable domain count.  Sub-domain labels such as "cloud" or
# "azure" are product words, not brand names, and are matched by sender only.
_BODY_PATTERNS = {
    domain: re.compile(rf"\b{re.escape(_leading_label(domain))}\b")
    for domain in KNOWN_SERVICES
    if domain.count(".") == 1
}


def lookup_service(from_address: str, subject: str, body: str) -> ServiceMatch | None:
    """Match a message against the service directory.

    A directory key matches when the domain appears in the sender address
    or the subject.  Only when no entry matches that way is the body
    searched for the leading label of each registrable domain.  The
    first matching entry wins.
    """
    lower_from = (from_address or "").lower()
    lower_subject = (subject or "").lower()
    lower_body = (body or "").lower()

    for domain, service in KNOWN_SERVICES.items():
        if domain in lower_from or domain in lower_subject:
            return service

    if lower_body:
        for domain, service in KNOWN_SERVICES.items():
            pattern = _BODY_PATTERNS.get(domain)
            if pattern is not None and pattern.search(lower_body):
                return service
    return None


def category_for(name: str) -> str | None:
    """Return the directory category for a canonical service name."""
    for service in KNOWN_SERVICES.values():
        if service.name == name:
            return service.category
    return None
