"""Request handlers for sending an application and reading the send history.

The handlers take an already-validated :class:`~resume_mailer.models.Session`
(or ``None`` when the caller has none) and the parsed form, and return a
:class:`~resume_mailer.models.Response`. They do not know about any web
framework; the CLI and any HTTP layer call them the same way.
"""

from __future__ import annotations

import logging
import os
import re
from datetime import datetime
from typing import Callable, Mapping, Sequence, Union

from .auth import Services, services_for_session
from .composer import compose_request
from .config import Settings
from .constants import EMAIL_PATTERN
from .errors import (
    BadRequest,
    MethodNotAllowed,
    PayloadTooLarge,
    ResumeMailerError,
    Unauthorized,
    UpstreamMailFailure,
)
from .gmail_client import send_raw_message
from .models import Attachment, EmailRequest, LogRow, Response, SendOutcome, Session, UploadedFile
from .sheet_log import SheetLog

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(EMAIL_PATTERN)

FieldValue = Union[str, Sequence[str], None]
FileValue = Union[UploadedFile, Sequence[UploadedFile], None]
ServicesFactory = Callable[[Session, Settings], Services]


def _first(value):
    """Multipart parsers may hand back a list for any field; use the first item."""
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def is_valid_email(address: str | None) -> bool:
    return bool(address) and _EMAIL_RE.match(address) is not None


def parse_send_form(
    fields: Mapping[str, FieldValue],
    files: Mapping[str, FileValue],
    max_bytes: int,
) -> EmailRequest:
    """Turn parsed multipart fields and files into an :class:`EmailRequest`.

    Raises :class:`BadRequest` (or :class:`PayloadTooLarge`) for anything the
    user must fix, and :class:`ResumeMailerError` if the uploaded file cannot
    be read back.
    """
    resume = _first(files.get("resume"))
    if resume is None:
        raise BadRequest("No resume file uploaded.")

    if not resume.filepath:
        raise BadRequest("Resume filepath is undefined.")

    size = resume.size
    if size is None:
        try:
            size = os.path.getsize(resume.filepath)
        except OSError:
            size = None
    if size is not None and size > max_bytes:
        raise PayloadTooLarge(f"Resume file exceeds the {max_bytes // (1024 * 1024)} MB limit.")

    try:
        with open(resume.filepath, "rb") as f:
            data = f.read()
    except OSError as exc:
        raise ResumeMailerError("Failed to read resume file.") from exc

    to_email = _first(fields.get("toEmail"))
    if not is_valid_email(to_email):
        raise BadRequest("Invalid email address.")

    filename = resume.original_filename or os.path.basename(resume.filepath)
    return EmailRequest(
        recipient=to_email,
        subject=_first(fields.get("subject")) or "",
        body=_first(fields.get("message")) or "",
        attachment=Attachment(filename=filename, data=data),
    )


def send_application(
    services: Services,
    request: EmailRequest,
    settings: Settings,
    now: datetime | None = None,
) -> SendOutcome:
    """Compose and send ``request``, then record it in the sheet log.

    A mail failure propagates and nothing is logged. A log failure is
    recorded on the outcome and never undoes or hides the successful send.
    """
    if f"--{settings.boundary}" in request.body:
        raise BadRequest("Message contains the reserved MIME boundary marker.")

    raw = compose_request(request, boundary=settings.boundary)
    message_id = send_raw_message(services.gmail, raw)
    logger.info("Email sent to %s.", request.recipient)

    outcome = SendOutcome(message_id=message_id)
    try:
        log = SheetLog(services.sheets, settings.require_spreadsheet_id(), settings.sheet_name)
        outcome.headers_rewritten = log.append_record(
            LogRow.sent(request.recipient, request.subject, now=now)
        )
    except Exception as exc:  # noqa: BLE001
        logger.exception("Error logging email to Google Sheets")
        outcome.log_error = exc
    return outcome


def handle_send(
    method: str,
    session: Session | None,
    fields: Mapping[str, FieldValue],
    files: Mapping[str, FileValue],
    settings: Settings,
    services_factory: ServicesFactory = services_for_session,
    now: datetime | None = None,
) -> tuple[Response, SendOutcome | None]:
    """Handle one send request.

    Returns the response and, when the mail went out, the send outcome so the
    caller can see whether logging succeeded.
    """
    try:
        if method.upper() != "POST":
            raise MethodNotAllowed("Method Not Allowed")
        if session is None:
            raise Unauthorized("Unauthorized")

        settings.require_spreadsheet_id()
        request = parse_send_form(fields, files, settings.max_resume_bytes)
        logger.debug("Parsed send request for %s (%s).", request.recipient, request.attachment.filename)

        services = services_factory(session, settings)
        outcome = send_application(services, request, settings, now=now)
    except ResumeMailerError as exc:
        logger.error("%s", exc.message)
        return Response(exc.status, {"error": _public_message(exc)}), None
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error in send handler")
        return Response(500, {"error": "An unexpected error occurred."}), None

    return Response(200, {"success": True}), outcome


def handle_history(
    session: Session | None,
    settings: Settings,
    services_factory: ServicesFactory = services_for_session,
) -> Response:
    """Return every row of the send log as ``{"emails": [...]}``."""
    if session is None:
        return Response(401, {"error": "Unauthorized"})

    try:
        services = services_factory(session, settings)
        log = SheetLog(services.sheets, settings.require_spreadsheet_id(), settings.sheet_name)
        entries = log.read_history()
    except Unauthorized as exc:
        return Response(exc.status, {"error": exc.message})
    except Exception as exc:  # noqa: BLE001
        logger.exception("Error fetching emails")
        return Response(500, {"success": False, "error": str(exc)})

    if not entries:
        return Response(200, {"error": "No emails found"})
    return Response(200, {"emails": [e.to_dict() for e in entries]})


def _public_message(exc: ResumeMailerError) -> str:
    if isinstance(exc, UpstreamMailFailure):
        return "Failed to send email."
    return exc.message
