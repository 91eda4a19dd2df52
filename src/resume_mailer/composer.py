"""Build multipart MIME messages and encode them for the Gmail API."""

from __future__ import annotations

import base64

from .constants import DEFAULT_BOUNDARY
from .models import EmailRequest

_CRLF = "\r\n"


def build_mime_message(
    recipient: str,
    subject: str,
    body: str,
    attachment_bytes: bytes,
    attachment_filename: str,
    boundary: str = DEFAULT_BOUNDARY,
) -> bytes:
    """Return a multipart/mixed message with a text body and one attachment.

    The layout is fixed: top-level headers, a text/plain part holding ``body``
    verbatim, an application/octet-stream part holding ``attachment_bytes`` as
    unwrapped standard base64, and the closing boundary line.
    """
    encoded_attachment = base64.b64encode(attachment_bytes).decode("ascii")

    lines = [
        f'Content-Type: multipart/mixed; boundary="{boundary}"',
        "MIME-Version: 1.0",
        f"To: {recipient}",
        f"Subject: {subject}",
        "",
        # Body
        f"--{boundary}",
        'Content-Type: text/plain; charset="UTF-8"',
        "MIME-Version: 1.0",
        "Content-Transfer-Encoding: 7bit",
        "",
        body,
        "",
        # Attachment
        f"--{boundary}",
        f'Content-Type: application/octet-stream; name="{attachment_filename}"',
        "MIME-Version: 1.0",
        "Content-Transfer-Encoding: base64",
        f'Content-Disposition: attachment; filename="{attachment_filename}"',
        "",
        encoded_attachment,
        f"--{boundary}--",
    ]
    return _CRLF.join(lines).encode("utf-8")


def encode_transport(message: bytes) -> str:
    """Encode a raw message as unpadded base64url, as ``users.messages.send`` expects."""
    return base64.urlsafe_b64encode(message).decode("ascii").rstrip("=")


def decode_transport(payload: str) -> bytes:
    """Inverse of :func:`encode_transport`."""
    padding = "=" * (-len(payload) % 4)
    return base64.urlsafe_b64decode(payload + padding)


def compose(
    recipient: str,
    subject: str,
    body: str,
    attachment_bytes: bytes,
    attachment_filename: str,
    boundary: str = DEFAULT_BOUNDARY,
) -> str:
    """Build the MIME message and return its transport payload."""
    message = build_mime_message(
        recipient,
        subject,
        body,
        attachment_bytes,
        attachment_filename,
        boundary=boundary,
    )
    return encode_transport(message)


def compose_request(request: EmailRequest, boundary: str = DEFAULT_BOUNDARY) -> str:
    return compose(
        request.recipient,
        request.subject,
        request.body,
        request.attachment.data,
        request.attachment.filename,
        boundary=boundary,
    )
