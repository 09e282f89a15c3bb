"""Gmail mailbox provider: search, fetch and token refresh."""

from __future__ import annotations

import base64
import binascii
import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from .auth import credentials_for, refresh_credentials
from .billing import ensure_utc
from .constants import RETRY_ATTEMPTS, RETRY_MAX_WAIT
from .models import ConnectedAccount, RawMessage

logger = logging.getLogger(__name__)


def _is_retryable_http_error(exc: BaseException) -> bool:
    return isinstance(exc, HttpError) and exc.resp.status in (429, 500, 503)


_retry_transient = retry(
    retry=retry_if_exception(_is_retryable_http_error),
    wait=wait_exponential(multiplier=1, min=1, max=RETRY_MAX_WAIT),
    stop=stop_after_attempt(RETRY_ATTEMPTS),
    reraise=True,
)


def _decode_part_data(data: str) -> str:
    """Decode a base64url body part, tolerating missing padding."""
    padded = data + "=" * (-len(data) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded)
    except (binascii.Error, ValueError):
        return ""
    return raw.decode("utf-8", errors="replace")


def extract_plain_text(part: dict) -> str:
    """Flatten a Gmail payload into the text of its text/plain parts.

    Multipart payloads are walked recursively; any other part type
    contributes nothing.
    """
    if not part:
        return ""
    data = part.get("body", {}).get("data")
    if part.get("mimeType") == "text/plain" and data:
        return _decode_part_data(data)
    children = part.get("parts") or []
    return "\n".join(extract_plain_text(child) for child in children)


def _parse_date_header(value: str) -> datetime:
    """Parse an RFC 2822 Date header; fall back to now when unparseable."""
    if value:
        try:
            return ensure_utc(parsedate_to_datetime(value))
        except (TypeError, ValueError):
            logger.debug("Unparseable Date header %r", value)
    return datetime.now(timezone.utc)


def message_from_payload(message_id: str, response: dict) -> RawMessage:
    """Build a RawMessage from a messages.get(format='full') response."""
    payload = response.get("payload", {})
    headers = {}
    for h in payload.get("headers", []):
        headers[h["name"].lower()] = h["value"]

    return RawMessage(
        message_id=message_id,
        sender=headers.get("from", ""),
        subject=headers.get("subject", ""),
        body=extract_plain_text(payload),
        date=_parse_date_header(headers.get("date", "")),
    )


class GmailProvider:
    """Mailbox provider backed by the Gmail API.

    One API service object is built per connected account and reused
    until its credentials are refreshed.
    """

    label = "Gmail"

    def __init__(self, build_service=None) -> None:
        self._build_service = build_service or self._default_build
        self._services: dict = {}

    @staticmethod
    def _default_build(account: ConnectedAccount):
        return build("gmail", "v1", credentials=credentials_for(account), cache_discovery=False)

    def _service(self, account: ConnectedAccount):
        key = account.id or account.email
        if key not in self._services:
            self._services[key] = self._build_service(account)
        return self._services[key]

    @_retry_transient
    def search(self, account: ConnectedAccount, query: str, page_size: int) -> list[str]:
        """Return up to page_size message IDs matching a Gmail search query."""
        resp = (
            self._service(account)
            .users()
            .messages()
            .list(userId="me", q=query, maxResults=page_size, fields="messages/id")
            .execute()
        )
        return [m["id"] for m in resp.get("messages", []) if m.get("id")]

    @_retry_transient
    def fetch(self, account: ConnectedAccount, message_id: str) -> RawMessage:
        """Fetch and decode a full message."""
        resp = (
            self._service(account)
            .users()
            .messages()
            .get(userId="me", id=message_id, format="full")
            .execute()
        )
        return message_from_payload(message_id, resp)

    def refresh_token(self, account: ConnectedAccount) -> dict:
        """Refresh the account's OAuth token and return the new credential info."""
        info = refresh_credentials(account)
        self._services.pop(account.id or account.email, None)
        return info
