"""Data models for Resume Mailer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from .constants import STATUS_SENT


@dataclass
class Attachment:
    """A binary file attached to an outgoing email."""

    filename: str
    data: bytes


@dataclass
class EmailRequest:
    """One job-application email, built per request and discarded after send."""

    recipient: str
    subject: str
    body: str
    attachment: Attachment


@dataclass
class LogRow:
    """A record of one send, in sheet column order."""

    recipient: str
    subject: str
    timestamp: str  # ISO 8601
    status: str

    @classmethod
    def sent(cls, recipient: str, subject: str, now: datetime | None = None) -> LogRow:
        now = now or datetime.now(timezone.utc)
        return cls(recipient, subject, now.isoformat(), STATUS_SENT)

    def as_values(self) -> list[str]:
        return [self.recipient, self.subject, self.timestamp, self.status]


@dataclass
class SentEmail:
    """A single row of the send log, as shown in the history table."""

    id: int
    to_email: str
    subject: str
    timestamp: str
    status: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "toEmail": self.to_email,
            "subject": self.subject,
            "date": self.timestamp,
            "timestamp": self.timestamp,
            "status": self.status,
        }


@dataclass
class Session:
    """An authenticated user session, handed explicitly to the handlers."""

    access_token: str
    refresh_token: str | None = None
    expires_at: datetime | None = None  # timezone-aware
    email: str | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return self.expires_at <= now


@dataclass
class UploadedFile:
    """A file as handed over by a multipart form parser."""

    original_filename: str
    filepath: str | None
    size: int | None = None


@dataclass
class SendOutcome:
    """Result of a send: the primary outcome plus the best-effort log outcome."""

    message_id: str
    log_error: Exception | None = None
    headers_rewritten: bool = False

    @property
    def logged(self) -> bool:
        return self.log_error is None


@dataclass
class Response:
    """A status code and JSON-serialisable body."""

    status: int
    body: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300
