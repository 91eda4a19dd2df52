"""CLI entry point for Resume Mailer."""

from __future__ import annotations

import json
import os

import click

from .auth import check_auth, load_local_session, local_settings
from .config import Settings
from .display import (
    configure_logging,
    create_status,
    display_history,
    display_message_preview,
    display_send_result,
)
from .errors import ConfigError, ResumeMailerError
from .handlers import handle_history, handle_send
from .models import SentEmail, Session, UploadedFile
from .sheet_log import drop_header_entry


def _settings() -> Settings:
    try:
        return Settings.from_env()
    except ConfigError as e:
        raise click.ClickException(e.message) from e


def _session() -> Session:
    try:
        return load_local_session()
    except FileNotFoundError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.version_option(version="0.1.0", prog_name="resume-mailer")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """Resume Mailer - send job applications from Gmail and keep a log in Google Sheets."""
    configure_logging(verbose)


@cli.command()
@click.option("--to", "to_email", required=True, help="Recruiter's email address.")
@click.option("-s", "--subject", required=True, help="Email subject.")
@click.option("-m", "--message", default=None, help="Message body.")
@click.option(
    "--message-file",
    type=click.File("r", encoding="utf-8"),
    default=None,
    help="Read the message body from a file ('-' for stdin).",
)
@click.option(
    "-r",
    "--resume",
    "resume_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Resume file to attach (.pdf, .doc, .docx).",
)
@click.option("--dry-run", is_flag=True, help="Print the composed message instead of sending it.")
def send(
    to_email: str,
    subject: str,
    message: str | None,
    message_file,
    resume_path: str,
    dry_run: bool,
) -> None:
    """Send an application email with your resume attached and log it."""
    if message is None and message_file is None:
        raise click.UsageError("Provide --message or --message-file.")
    body = message if message is not None else message_file.read()

    settings = _settings()
    fields = {"toEmail": to_email, "subject": subject, "message": body}
    files = {
        "resume": UploadedFile(
            original_filename=os.path.basename(resume_path),
            filepath=resume_path,
        )
    }

    if dry_run:
        from .composer import compose_request, decode_transport
        from .handlers import parse_send_form

        try:
            request = parse_send_form(fields, files, settings.max_resume_bytes)
        except ResumeMailerError as e:
            raise click.ClickException(e.message) from e
        display_message_preview(decode_transport(compose_request(request, settings.boundary)))
        return

    session = _session()
    settings = local_settings(settings)

    with create_status("Sending email"):
        response, outcome = handle_send("POST", session, fields, files, settings)

    display_send_result(response, outcome)
    if not response.ok:
        raise SystemExit(1)


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print the raw response as JSON.")
def history(as_json: bool) -> None:
    """Show the emails recorded in the sheet log."""
    settings = _settings()
    session = _session()

    with create_status("Reading sheet log"):
        response = handle_history(session, local_settings(settings))

    if as_json:
        click.echo(json.dumps(response.body, indent=2))
        if not response.ok:
            raise SystemExit(1)
        return

    if not response.ok:
        raise click.ClickException(str(response.body.get("error")))

    entries = [
        SentEmail(
            id=e["id"],
            to_email=e["toEmail"],
            subject=e["subject"],
            timestamp=e["timestamp"],
            status=e["status"],
        )
        for e in response.body.get("emails", [])
    ]
    display_history(drop_header_entry(entries))


@cli.command()
def auth() -> None:
    """Test Gmail and Sheets authentication."""
    if not check_auth():
        raise SystemExit(1)
