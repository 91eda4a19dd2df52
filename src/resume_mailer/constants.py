"""Constants for Resume Mailer."""

from pathlib import Path

# --- Config paths ---
CONFIG_DIR = Path.home() / ".resume-mailer"
CREDENTIALS_PATH = CONFIG_DIR / "credentials.json"
TOKEN_PATH = CONFIG_DIR / "token.json"

# --- Google APIs ---
SCOPES = [
    "https://www.googleapis.com/auth/gmail.compose",  # send + getProfile
    "https://www.googleapis.com/auth/spreadsheets",
]
TOKEN_URI = "https://oauth2.googleapis.com/token"

# --- Sheet log ---
DEFAULT_SHEET_NAME = "Sheet1"
LOG_COLUMNS = "A:D"
DESIRED_HEADERS = ["Recruiter Email", "Subject", "Timestamp", "Status"]
STATUS_SENT = "Sent"

# --- History read retries (read path only) ---
HISTORY_RETRY_ATTEMPTS = 5
HISTORY_RETRY_STATUSES = (429, 500, 503)

# --- MIME ---
# Must contain a character outside the base64 alphabet, see config.validate_boundary.
DEFAULT_BOUNDARY = "__MY_BOUNDARY__"
MAX_BOUNDARY_LENGTH = 70  # RFC 2046

# --- Upload ---
MAX_RESUME_BYTES = 10 * 1024 * 1024  # 10 MB
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
