"""Authentication helpers for the Gmail and Sheets APIs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import Resource, build

from .config import Settings
from .constants import CONFIG_DIR, CREDENTIALS_PATH, SCOPES, TOKEN_PATH, TOKEN_URI
from .errors import TokenRefreshError, Unauthorized
from .models import Session

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Authenticated API clients used by one request."""

    gmail: Resource
    sheets: Resource


def _naive_utc(value: datetime | None) -> datetime | None:
    # google-auth compares expiry against a naive UTC timestamp
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def credentials_from_session(session: Session, settings: Settings) -> Credentials:
    """Build API credentials for a validated session, refreshing them if expired.

    Expiry is compared as timezone-aware datetimes, never as raw numbers.
    """
    creds = Credentials(
        token=session.access_token,
        refresh_token=session.refresh_token,
        token_uri=TOKEN_URI,
        client_id=settings.client_id,
        client_secret=settings.client_secret,
        scopes=SCOPES,
        expiry=_naive_utc(session.expires_at),
    )

    if not session.is_expired():
        return creds

    if not (session.refresh_token and settings.client_id and settings.client_secret):
        raise Unauthorized("Session expired.")

    try:
        creds.refresh(Request())
    except RefreshError as exc:
        raise TokenRefreshError("Failed to refresh access token.") from exc

    logger.info("Access token refreshed.")
    return creds


def build_services(creds: Credentials) -> Services:
    return Services(
        gmail=build("gmail", "v1", credentials=creds, cache_discovery=False),
        sheets=build("sheets", "v4", credentials=creds, cache_discovery=False),
    )


def services_for_session(session: Session, settings: Settings) -> Services:
    return build_services(credentials_from_session(session, settings))


def load_local_session() -> Session:
    """Return a session for the local user of the CLI.

    Loads cached token from TOKEN_PATH if available.  When the token is
    expired it is silently refreshed.  If no token exists, an OAuth
    browser flow is launched (requires credentials.json at
    CREDENTIALS_PATH).
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    creds: Credentials | None = None

    if TOKEN_PATH.exists():
        creds = Credentials.from_authorized_user_file(str(TOKEN_PATH), SCOPES)

    if creds and creds.expired and creds.refresh_token:
        creds.refresh(Request())
    elif not creds or not creds.valid:
        if not CREDENTIALS_PATH.exists():
            raise FileNotFoundError(
                f"Credentials file not found at {CREDENTIALS_PATH}.\n"
                "Download your OAuth client credentials from the Google Cloud Console "
                "and save them as:\n"
                f"  {CREDENTIALS_PATH}"
            )
        flow = InstalledAppFlow.from_client_secrets_file(str(CREDENTIALS_PATH), SCOPES)
        creds = flow.run_local_server(port=0)

    TOKEN_PATH.write_text(creds.to_json())

    expires_at = creds.expiry.replace(tzinfo=timezone.utc) if creds.expiry else None
    return Session(
        access_token=creds.token,
        refresh_token=creds.refresh_token,
        expires_at=expires_at,
    )


def local_settings(settings: Settings) -> Settings:
    """Fill in the OAuth client id and secret from the cached token, if unset."""
    if settings.client_id and settings.client_secret:
        return settings
    if not TOKEN_PATH.exists():
        return settings
    creds = Credentials.from_authorized_user_file(str(TOKEN_PATH), SCOPES)
    return replace(
        settings,
        client_id=settings.client_id or creds.client_id,
        client_secret=settings.client_secret or creds.client_secret,
    )


def check_auth() -> bool:
    """Test whether authentication is working.

    Returns True when the Gmail API can be reached, False otherwise.
    Prints human-readable status messages.
    """
    from .gmail_client import get_profile_email

    try:
        session = load_local_session()
        services = services_for_session(session, local_settings(Settings.from_env()))
        print(f"Authenticated as {get_profile_email(services.gmail)}")
        return True
    except FileNotFoundError as exc:
        print(f"Authentication failed: {exc}")
        return False
    except Exception as exc:  # noqa: BLE001
        print(f"Authentication failed: {exc}")
        return False
