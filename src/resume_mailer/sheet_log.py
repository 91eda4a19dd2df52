"""The Google Sheet used as a send log: header self-healing, append, history."""

from __future__ import annotations

import logging

from .constants import DEFAULT_SHEET_NAME, DESIRED_HEADERS, LOG_COLUMNS
from .models import LogRow, SentEmail
from .sheets_client import append_rows, read_all_rows, read_range, write_range

logger = logging.getLogger(__name__)


class SheetLog:
    """Append-only log of sent emails backed by one sheet tab.

    The first row of the tab is treated as a header that must equal
    ``headers`` exactly. It is re-read and, if needed, rewritten before every
    append, so a freshly created tab or a manually edited header heals itself.

    The read-compare-write sequence is not atomic. Two concurrent appends may
    both rewrite the header, or one may append between another's read and
    write. Nothing here serialises writers.
    """

    def __init__(
        self,
        service,
        spreadsheet_id: str,
        sheet_name: str = DEFAULT_SHEET_NAME,
        headers: list[str] | None = None,
    ) -> None:
        self.service = service
        self.spreadsheet_id = spreadsheet_id
        self.sheet_name = sheet_name
        self.headers = list(headers or DESIRED_HEADERS)

    @property
    def header_range(self) -> str:
        return f"{self.sheet_name}!1:1"

    @property
    def append_range(self) -> str:
        return f"{self.sheet_name}!{LOG_COLUMNS}"

    # --- header reconciliation ---

    def read_headers(self) -> list[str]:
        """Return the current first row, or ``[]`` for an empty tab."""
        rows = read_range(self.service, self.spreadsheet_id, self.header_range)
        return list(rows[0]) if rows else []

    def headers_match(self, current: list[str]) -> bool:
        return len(current) == len(self.headers) and all(
            have == want for have, want in zip(current, self.headers)
        )

    def write_headers(self) -> None:
        """Overwrite the first row with the desired headers."""
        write_range(self.service, self.spreadsheet_id, self.header_range, [self.headers])
        logger.info("Headers written to %s.", self.header_range)

    def append_record(self, row: LogRow) -> bool:
        """Repair the header row if needed, then append ``row``.

        Returns True when the header row had to be rewritten. Any API failure
        propagates as :class:`~resume_mailer.errors.UpstreamLogFailure`.
        """
        current = self.read_headers()
        rewritten = not self.headers_match(current)
        if rewritten:
            logger.warning("Header row %r does not match %r, rewriting.", current, self.headers)
            self.write_headers()

        append_rows(self.service, self.spreadsheet_id, self.append_range, [row.as_values()])
        logger.info("Logged send to %s in %s.", row.recipient, self.sheet_name)
        return rewritten

    # --- read path ---

    def read_history(self) -> list[SentEmail]:
        """Return every row of the tab, zero-indexed, header row included."""
        rows = read_all_rows(self.service, self.spreadsheet_id, self.sheet_name)
        entries: list[SentEmail] = []
        for idx, row in enumerate(rows):
            cells = list(row) + [""] * (len(DESIRED_HEADERS) - len(row))
            entries.append(
                SentEmail(
                    id=idx,
                    to_email=cells[0],
                    subject=cells[1],
                    timestamp=cells[2],
                    status=cells[3],
                )
            )
        return entries


def drop_header_entry(entries: list[SentEmail], headers: list[str] | None = None) -> list[SentEmail]:
    """Remove the header row from a history listing, if it is the first entry."""
    headers = list(headers or DESIRED_HEADERS)
    if entries:
        first = entries[0]
        if [first.to_email, first.subject, first.timestamp, first.status] == headers:
            return entries[1:]
    return entries
