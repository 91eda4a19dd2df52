"""Gmail API client functions for sending messages."""

from __future__ import annotations

import logging

from googleapiclient.errors import HttpError

from .errors import UpstreamMailFailure

logger = logging.getLogger(__name__)


def send_raw_message(service, raw: str) -> str:
    """Send an encoded message as the authenticated user and return its Gmail id.

    The request is made exactly once; a rejected send is never retried.
    """
    try:
        sent = service.users().messages().send(userId="me", body={"raw": raw}).execute()
    except HttpError as exc:
        raise UpstreamMailFailure(f"Gmail rejected the message (HTTP {exc.resp.status}).") from exc

    message_id = sent.get("id", "")
    logger.info("Message %s sent.", message_id)
    return message_id


def get_profile_email(service) -> str:
    profile = service.users().getProfile(userId="me").execute()
    return profile["emailAddress"]
