"""Tests for the sheet log: header reconciliation, append and history."""

import pytest
from conftest import FakeSheetsService, make_http_error

from resume_mailer import sheets_client
from resume_mailer.constants import DESIRED_HEADERS
from resume_mailer.errors import UpstreamLogFailure
from resume_mailer.models import LogRow
from resume_mailer.sheet_log import SheetLog, drop_header_entry

ROW = LogRow("a@b.com", "Job Application", "2024-05-01T10:00:00+00:00", "Sent")


def _log(sheets: FakeSheetsService) -> SheetLog:
    return SheetLog(sheets, "sheet-123")


def test_empty_log_gets_headers_then_row():
    """An empty tab gets the header row written before the record is appended."""
    sheets = FakeSheetsService()
    rewritten = _log(sheets).append_record(ROW)

    assert rewritten is True
    assert sheets.rows == [DESIRED_HEADERS, ROW.as_values()]
    assert [c[0] for c in sheets.calls] == ["get", "update", "append"]


@pytest.mark.parametrize(
    "first_row",
    [
        ["Recruiter Email", "Subject", "Timestamp"],
        ["Recruiter Email", "Subject", "Timestamp", "Status", "Extra"],
        ["Subject", "Recruiter Email", "Timestamp", "Status"],
        ["recruiter email", "Subject", "Timestamp", "Status"],
        ["old@x.com", "Old subject", "2023-01-01", "Sent"],
    ],
)
def test_mismatched_headers_are_overwritten(first_row):
    """Any first row that is not exactly the header list is replaced, not merged."""
    sheets = FakeSheetsService([first_row, ["someone@x.com", "S", "T", "Sent"]])
    rewritten = _log(sheets).append_record(ROW)

    assert rewritten is True
    assert sheets.rows[0] == DESIRED_HEADERS
    assert sheets.rows[-1] == ROW.as_values()


def test_matching_headers_skip_the_write():
    sheets = FakeSheetsService([DESIRED_HEADERS])
    rewritten = _log(sheets).append_record(ROW)

    assert rewritten is False
    assert "update" not in [c[0] for c in sheets.calls]
    assert sheets.rows == [DESIRED_HEADERS, ROW.as_values()]


@pytest.mark.parametrize(
    "rows",
    [
        [],
        [DESIRED_HEADERS],
        [DESIRED_HEADERS, ["x@y.com", "S", "T", "Sent"]],
        [["wrong"], ["x@y.com", "S", "T", "Sent"]],
    ],
)
def test_append_adds_exactly_one_row(rows):
    sheets = FakeSheetsService(rows)
    before = max(len(rows), 1)
    _log(sheets).append_record(ROW)
    assert len(sheets.rows) == before + 1


def test_append_uses_insert_rows_and_ranges():
    sheets = FakeSheetsService([DESIRED_HEADERS])
    _log(sheets).append_record(ROW)

    assert sheets.calls == [("get", "Sheet1!1:1"), ("append", "Sheet1!A:D")]
    assert sheets.append_options == [("RAW", "INSERT_ROWS")]


def test_custom_sheet_name():
    sheets = FakeSheetsService()
    SheetLog(sheets, "sheet-123", sheet_name="Applications").append_record(ROW)
    assert ("update", "Applications!1:1") in sheets.calls


@pytest.mark.parametrize("method", ["get", "update", "append"])
def test_api_failures_propagate(method):
    sheets = FakeSheetsService()
    sheets.fail(method, make_http_error(403))

    with pytest.raises(UpstreamLogFailure):
        _log(sheets).append_record(ROW)


def test_header_failure_stops_before_append():
    sheets = FakeSheetsService()
    sheets.fail("update", make_http_error(500))

    with pytest.raises(UpstreamLogFailure):
        _log(sheets).append_record(ROW)
    assert "append" not in [c[0] for c in sheets.calls]


def test_read_history_zero_indexes_all_rows():
    sheets = FakeSheetsService(
        [DESIRED_HEADERS, ["a@b.com", "Job", "2024-05-01T10:00:00Z", "Sent"], ["c@d.com", "Hi"]]
    )
    entries = _log(sheets).read_history()

    assert [e.id for e in entries] == [0, 1, 2]
    assert entries[1].to_email == "a@b.com"
    assert entries[1].to_dict() == {
        "id": 1,
        "toEmail": "a@b.com",
        "subject": "Job",
        "date": "2024-05-01T10:00:00Z",
        "timestamp": "2024-05-01T10:00:00Z",
        "status": "Sent",
    }
    # short rows are padded
    assert entries[2].timestamp == ""
    assert entries[2].status == ""


def test_read_history_empty():
    assert _log(FakeSheetsService()).read_history() == []


def test_read_history_retries_transient_errors(monkeypatch):
    from tenacity import wait_none

    monkeypatch.setattr(
        sheets_client,
        "_get_values_with_retry",
        sheets_client._get_values_with_retry.retry_with(wait=wait_none()),
    )
    sheets = FakeSheetsService([DESIRED_HEADERS])
    sheets.fail("get", make_http_error(503), make_http_error(429))

    entries = _log(sheets).read_history()
    assert len(entries) == 1
    assert len(sheets.calls) == 3


def test_read_history_does_not_retry_client_errors():
    sheets = FakeSheetsService([DESIRED_HEADERS])
    sheets.fail("get", make_http_error(404))

    with pytest.raises(UpstreamLogFailure):
        _log(sheets).read_history()
    assert len(sheets.calls) == 1


def test_drop_header_entry():
    sheets = FakeSheetsService([DESIRED_HEADERS, ["a@b.com", "Job", "T", "Sent"]])
    entries = drop_header_entry(_log(sheets).read_history())
    assert [e.to_email for e in entries] == ["a@b.com"]

    no_header = FakeSheetsService([["a@b.com", "Job", "T", "Sent"]])
    assert len(drop_header_entry(_log(no_header).read_history())) == 1
