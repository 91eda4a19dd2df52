"""Google Sheets API client functions for reading and writing value ranges."""

from __future__ import annotations

from googleapiclient.errors import HttpError
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from .constants import HISTORY_RETRY_ATTEMPTS, HISTORY_RETRY_STATUSES
from .errors import UpstreamLogFailure


def _is_retryable_http_error(exc: BaseException) -> bool:
    return isinstance(exc, HttpError) and exc.resp.status in HISTORY_RETRY_STATUSES


def _values(service):
    return service.spreadsheets().values()


def _get_values(service, spreadsheet_id: str, range_: str) -> list[list[str]]:
    resp = _values(service).get(spreadsheetId=spreadsheet_id, range=range_).execute()
    return resp.get("values", [])


def read_range(service, spreadsheet_id: str, range_: str) -> list[list[str]]:
    """Return the rows in ``range_``; an empty range yields ``[]``."""
    try:
        return _get_values(service, spreadsheet_id, range_)
    except HttpError as exc:
        raise UpstreamLogFailure(f"Could not read {range_} (HTTP {exc.resp.status}).") from exc


def write_range(service, spreadsheet_id: str, range_: str, rows: list[list[str]]) -> None:
    """Overwrite ``range_`` with ``rows``."""
    try:
        _values(service).update(
            spreadsheetId=spreadsheet_id,
            range=range_,
            valueInputOption="RAW",
            body={"values": rows},
        ).execute()
    except HttpError as exc:
        raise UpstreamLogFailure(f"Could not write {range_} (HTTP {exc.resp.status}).") from exc


def append_rows(service, spreadsheet_id: str, range_: str, rows: list[list[str]]) -> None:
    """Insert ``rows`` after the existing data in ``range_``, never overwriting."""
    try:
        _values(service).append(
            spreadsheetId=spreadsheet_id,
            range=range_,
            valueInputOption="RAW",
            insertDataOption="INSERT_ROWS",
            body={"values": rows},
        ).execute()
    except HttpError as exc:
        raise UpstreamLogFailure(f"Could not append to {range_} (HTTP {exc.resp.status}).") from exc


@retry(
    retry=retry_if_exception(_is_retryable_http_error),
    wait=wait_exponential(multiplier=1, min=1, max=60),
    stop=stop_after_attempt(HISTORY_RETRY_ATTEMPTS),
    reraise=True,
)
def _get_values_with_retry(service, spreadsheet_id: str, range_: str) -> list[list[str]]:
    return _get_values(service, spreadsheet_id, range_)


def read_all_rows(service, spreadsheet_id: str, sheet_name: str) -> list[list[str]]:
    """Read every row of a sheet tab, retrying transient API errors.

    Only used by the read-only history path; writes are never retried.
    """
    try:
        return _get_values_with_retry(service, spreadsheet_id, sheet_name)
    except HttpError as exc:
        raise UpstreamLogFailure(f"Could not read {sheet_name} (HTTP {exc.resp.status}).") from exc
