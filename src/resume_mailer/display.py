"""Rich-based display functions for Resume Mailer."""

from __future__ import annotations

import logging
from datetime import datetime

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.status import Status
from rich.table import Table
from rich.text import Text

from .constants import STATUS_SENT
from .models import Response, SendOutcome, SentEmail

console = Console()


def configure_logging(verbose: bool = False) -> None:
    """Route the package loggers through Rich on the shared console."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=verbose)],
        force=True,
    )
    # googleapiclient is chatty at DEBUG
    logging.getLogger("googleapiclient").setLevel(logging.WARNING)


def _local_time(timestamp: str) -> str:
    """Render an ISO 8601 timestamp in local time, or return it unchanged."""
    try:
        parsed = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return timestamp
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.strftime("%Y-%m-%d %H:%M:%S")


def _status_color(status: str) -> str:
    return "green" if status == STATUS_SENT else "yellow"


def display_history(entries: list[SentEmail]) -> None:
    """Display the send log as a table."""
    if not entries:
        console.print("[dim]No emails sent yet.[/dim]")
        return

    table = Table(title="Sent Emails")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Recruiter's Email")
    table.add_column("Subject")
    table.add_column("Timestamp")
    table.add_column("Status")

    for entry in entries:
        color = _status_color(entry.status)
        table.add_row(
            str(entry.id),
            entry.to_email,
            entry.subject,
            _local_time(entry.timestamp),
            f"[{color}]{entry.status}[/{color}]",
        )

    console.print(table)
    console.print(Panel(f"Total emails: {len(entries)}", title="Summary"))


def display_send_result(response: Response, outcome: SendOutcome | None) -> None:
    """Show the outcome of a send, including a warning if it was not logged."""
    if not response.ok:
        error = escape(str(response.body.get("error")))
        console.print(
            Panel(
                f"[bold red]{error}[/bold red]",
                title="Error",
            )
        )
        return

    lines = ["[bold green]Email sent successfully![/bold green]"]
    if outcome is not None:
        lines.append(f"[dim]Message id: {outcome.message_id}[/dim]")
        if outcome.headers_rewritten:
            lines.append("[dim]Sheet header row was repaired.[/dim]")
        if not outcome.logged:
            lines.append(f"[yellow]Not recorded in the sheet log: {escape(str(outcome.log_error))}[/yellow]")
    console.print(Panel("\n".join(lines), title="Success"))


def display_message_preview(message: bytes) -> None:
    """Print a composed MIME message without sending it."""
    console.print(Panel(Text(message.decode("utf-8", errors="replace").replace("\r\n", "\n")), title="Dry run"))


def create_status(description: str) -> Status:
    """Create a spinner shown while waiting on the Google APIs."""
    return console.status(f"[bold blue]{description}")
