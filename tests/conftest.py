"""Shared fixtures for tests."""

from __future__ import annotations

import pytest
from googleapiclient.errors import HttpError
from httplib2 import Response as HttpResponse

from resume_mailer.auth import Services
from resume_mailer.config import Settings
from resume_mailer.models import Session, UploadedFile


def make_http_error(status: int) -> HttpError:
    return HttpError(HttpResponse({"status": status}), b'{"error": {"message": "boom"}}')


class _Call:
    """Mimics a googleapiclient HttpRequest: ``execute()`` runs the action."""

    def __init__(self, action):
        self._action = action

    def execute(self):
        return self._action()


class FakeValues:
    """In-memory stand-in for ``spreadsheets().values()``."""

    def __init__(self, sheet: FakeSheetsService) -> None:
        self.sheet = sheet

    def get(self, spreadsheetId: str, range: str):
        def _get():
            self.sheet.calls.append(("get", range))
            self.sheet._maybe_fail("get")
            if range.endswith("!1:1"):
                rows = self.sheet.rows[:1]
            else:
                rows = self.sheet.rows
            return {"values": [list(r) for r in rows]} if rows else {}

        return _Call(_get)

    def update(self, spreadsheetId: str, range: str, valueInputOption: str, body: dict):
        def _update():
            self.sheet.calls.append(("update", range))
            self.sheet._maybe_fail("update")
            new_row = list(body["values"][0])
            if self.sheet.rows:
                self.sheet.rows[0] = new_row
            else:
                self.sheet.rows.append(new_row)
            return {"updatedRows": 1}

        return _Call(_update)

    def append(
        self,
        spreadsheetId: str,
        range: str,
        valueInputOption: str,
        insertDataOption: str,
        body: dict,
    ):
        def _append():
            self.sheet.calls.append(("append", range))
            self.sheet.append_options.append((valueInputOption, insertDataOption))
            self.sheet._maybe_fail("append")
            self.sheet.rows.extend(list(r) for r in body["values"])
            return {"updates": {"updatedRows": len(body["values"])}}

        return _Call(_append)


class FakeSheetsService:
    """Fake Sheets API with one tab held as a list of rows."""

    def __init__(self, rows: list[list[str]] | None = None) -> None:
        self.rows: list[list[str]] = [list(r) for r in (rows or [])]
        self.calls: list[tuple[str, str]] = []
        self.append_options: list[tuple[str, str]] = []
        self.failures: dict[str, list[Exception]] = {}

    def fail(self, method: str, *errors: Exception) -> None:
        """Queue errors raised by the next calls to ``method``."""
        self.failures.setdefault(method, []).extend(errors)

    def _maybe_fail(self, method: str) -> None:
        queued = self.failures.get(method)
        if queued:
            raise queued.pop(0)

    def spreadsheets(self):
        return self

    def values(self):
        return FakeValues(self)


class FakeGmailService:
    """Fake Gmail API recording every raw message sent."""

    def __init__(self) -> None:
        self.sent: list[str] = []
        self.error: Exception | None = None

    def users(self):
        return self

    def messages(self):
        return self

    def send(self, userId: str, body: dict):
        def _send():
            if self.error is not None:
                raise self.error
            self.sent.append(body["raw"])
            return {"id": f"msg-{len(self.sent)}"}

        return _Call(_send)

    def getProfile(self, userId: str):
        return _Call(lambda: {"emailAddress": "me@example.com"})


@pytest.fixture
def sheets() -> FakeSheetsService:
    return FakeSheetsService()


@pytest.fixture
def gmail() -> FakeGmailService:
    return FakeGmailService()


@pytest.fixture
def services(gmail: FakeGmailService, sheets: FakeSheetsService) -> Services:
    return Services(gmail=gmail, sheets=sheets)


@pytest.fixture
def settings() -> Settings:
    return Settings(spreadsheet_id="sheet-123", client_id="cid", client_secret="secret")


@pytest.fixture
def session() -> Session:
    return Session(access_token="access", refresh_token="refresh", email="me@example.com")


@pytest.fixture
def resume_file(tmp_path) -> UploadedFile:
    path = tmp_path / "upload_abc123.pdf"
    path.write_bytes(bytes([0x25, 0x50, 0x44, 0x46]))
    return UploadedFile(original_filename="resume.pdf", filepath=str(path), size=4)


@pytest.fixture
def send_fields() -> dict:
    return {"toEmail": "a@b.com", "subject": "Job Application", "message": "Hello"}
