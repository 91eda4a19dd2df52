"""Environment-driven settings."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Mapping

from .constants import DEFAULT_BOUNDARY, DEFAULT_SHEET_NAME, MAX_BOUNDARY_LENGTH, MAX_RESUME_BYTES
from .errors import ConfigError

_BASE64_ONLY_RE = re.compile(r"^[A-Za-z0-9+/=]*$")


def validate_boundary(boundary: str) -> str:
    """Check that a MIME boundary can never appear inside base64 output.

    The attachment is written as unwrapped base64, so a boundary made only of
    base64 characters could in principle be reproduced by the payload.
    """
    if not boundary:
        raise ConfigError("MIME boundary must not be empty.")
    if len(boundary) > MAX_BOUNDARY_LENGTH:
        raise ConfigError(f"MIME boundary must be at most {MAX_BOUNDARY_LENGTH} characters.")
    if _BASE64_ONLY_RE.match(boundary):
        raise ConfigError(
            "MIME boundary must contain at least one character outside the "
            "base64 alphabet (e.g. '_' or '-')."
        )
    return boundary


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the send and history flows."""

    spreadsheet_id: str | None = None
    sheet_name: str = DEFAULT_SHEET_NAME
    client_id: str | None = None
    client_secret: str | None = None
    boundary: str = DEFAULT_BOUNDARY
    max_resume_bytes: int = MAX_RESUME_BYTES

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ

        raw_max = env.get("RESUME_MAILER_MAX_RESUME_BYTES")
        try:
            max_bytes = int(raw_max) if raw_max else MAX_RESUME_BYTES
        except ValueError as exc:
            raise ConfigError(
                f"RESUME_MAILER_MAX_RESUME_BYTES must be an integer, got {raw_max!r}."
            ) from exc

        return cls(
            spreadsheet_id=env.get("RESUME_MAILER_SPREADSHEET_ID") or None,
            sheet_name=env.get("RESUME_MAILER_SHEET_NAME") or DEFAULT_SHEET_NAME,
            client_id=env.get("GOOGLE_CLIENT_ID") or None,
            client_secret=env.get("GOOGLE_CLIENT_SECRET") or None,
            boundary=validate_boundary(env.get("RESUME_MAILER_BOUNDARY") or DEFAULT_BOUNDARY),
            max_resume_bytes=max_bytes,
        )

    def require_spreadsheet_id(self) -> str:
        if not self.spreadsheet_id:
            raise ConfigError(
                "No spreadsheet configured. Set RESUME_MAILER_SPREADSHEET_ID to the "
                "ID of the Google Sheet used as the send log."
            )
        return self.spreadsheet_id
