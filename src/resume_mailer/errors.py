"""Exception types raised by Resume Mailer.

Every error carries the HTTP status the request handlers answer with, so the
handler layer can turn any of them into a response without a lookup table.
"""

from __future__ import annotations


class ResumeMailerError(Exception):
    """Base class for all Resume Mailer errors."""

    status = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigError(ResumeMailerError):
    """Invalid or missing configuration."""


class Unauthorized(ResumeMailerError):
    """No valid session for the request."""

    status = 401


class MethodNotAllowed(ResumeMailerError):
    status = 405


class BadRequest(ResumeMailerError):
    """The submitted form is incomplete or invalid."""

    status = 400


class PayloadTooLarge(BadRequest):
    status = 413


class TokenRefreshError(ResumeMailerError):
    """The access token was expired and could not be refreshed."""


class UpstreamMailFailure(ResumeMailerError):
    """The Gmail API rejected the send."""


class UpstreamLogFailure(ResumeMailerError):
    """Reading from or writing to the sheet log failed."""
