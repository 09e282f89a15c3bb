"""OAuth helpers for linking and refreshing Gmail accounts."""

from __future__ import annotations

import json
from datetime import datetime

from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

from subscription_scanner.billing import ensure_utc
from subscription_scanner.constants import CONFIG_DIR, CREDENTIALS_PATH, SCOPES
from subscription_scanner.models import AccountStatus, ConnectedAccount, ProviderKind


class CredentialError(Exception):
    """A connected account's credentials are missing or cannot be refreshed."""


def credential_expiry(info: dict) -> datetime | None:
    """Return the expiry stored in authorized-user info as an aware UTC datetime."""
    value = (info or {}).get("expiry")
    if not value:
        return None
    return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))


def credentials_for(account: ConnectedAccount) -> Credentials:
    """Build google-auth credentials from a connected account."""
    if not account.credentials:
        raise CredentialError(f"No access token available for {account.email}")
    return Credentials.from_authorized_user_info(account.credentials, SCOPES)


def refresh_credentials(account: ConnectedAccount) -> dict:
    """Refresh an account's access token.

    Returns the new authorized-user info.  Raises CredentialError when the
    account has no refresh token or Google rejects the refresh.
    """
    creds = credentials_for(account)
    if not creds.refresh_token:
        raise CredentialError(f"No refresh token available for {account.email}")
    try:
        creds.refresh(Request())
    except (RefreshError, TransportError) as exc:
        raise CredentialError(f"Token refresh failed for {account.email}: {exc}") from exc
    return json.loads(creds.to_json())


def authorize_account(user_id: str) -> ConnectedAccount:
    """Run the OAuth browser flow and return a new Gmail connected account.

    Requires the OAuth client file at CREDENTIALS_PATH.
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    if not CREDENTIALS_PATH.exists():
        raise FileNotFoundError(
            f"Credentials file not found at {CREDENTIALS_PATH}.\n"
            "Download your OAuth client credentials from the Google Cloud Console "
            "and save them as:\n"
            f"  {CREDENTIALS_PATH}"
        )
    flow = InstalledAppFlow.from_client_secrets_file(str(CREDENTIALS_PATH), SCOPES)
    creds = flow.run_local_server(port=0)

    service = build("gmail", "v1", credentials=creds, cache_discovery=False)
    profile = service.users().getProfile(userId="me").execute()

    info = json.loads(creds.to_json())
    return ConnectedAccount(
        user_id=user_id,
        provider=ProviderKind.GMAIL,
        email=profile["emailAddress"],
        credentials=info,
        token_expiry=credential_expiry(info),
        status=AccountStatus.ACTIVE,
    )
