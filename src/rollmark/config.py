"""Configuration management for rollmark."""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _parse_cors_origins() -> list[str]:
    """Parse CORS origins from environment variable."""
    cors_env = os.getenv("CORS_ALLOW_ORIGINS")
    if cors_env:
        return cors_env.split(",")
    return ["*"]


def _parse_sentinel() -> int | float | str:
    """Parse the attendance sentinel, keeping numbers numeric."""
    raw = os.getenv("ATTENDANCE_SENTINEL", "1").strip()
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        return raw


class Settings(BaseModel):
    """Application settings."""

    # Server settings
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8000"))
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"

    # CORS settings (comma-separated list of allowed origins, or * for all)
    cors_allow_origins: list[str] = _parse_cors_origins()

    # Row 1 marker text that opens the section / lecture areas (case-insensitive)
    section_marker: str = os.getenv("SECTION_MARKER", "attendance section")
    lecture_marker: str = os.getenv("LECTURE_MARKER", "attendance lecture")

    # Column role heuristics
    name_likeness_threshold: float = float(os.getenv("NAME_LIKENESS_THRESHOLD", "0.5"))
    id_likeness_threshold: float = float(os.getenv("ID_LIKENESS_THRESHOLD", "0.5"))
    scan_window_rows: int = int(os.getenv("SCAN_WINDOW_ROWS", "50"))
    loose_scan_rows: int = int(os.getenv("LOOSE_SCAN_ROWS", "50"))
    name_scan_columns: int = int(os.getenv("NAME_SCAN_COLUMNS", "10"))
    first_data_row: int = int(os.getenv("FIRST_DATA_ROW", "2"))
    header_scan_last_row: int = int(os.getenv("HEADER_SCAN_LAST_ROW", "5"))
    fallback_id_column: int = int(os.getenv("FALLBACK_ID_COLUMN", "2"))
    min_id_length: int = int(os.getenv("MIN_ID_LENGTH", "6"))

    # Values written by the applier
    attendance_sentinel: int | float | str = _parse_sentinel()
    highlight_enabled: bool = os.getenv("HIGHLIGHT_ENABLED", "true").lower() == "true"
    highlight_color: str = os.getenv("HIGHLIGHT_COLOR", "FFFF00")

    # Editor sessions kept by the API
    session_ttl_seconds: int = int(os.getenv("SESSION_TTL_SECONDS", "1800"))
    max_upload_bytes: int = int(os.getenv("MAX_UPLOAD_BYTES", str(20 * 1024 * 1024)))

    # Manual fix search
    search_result_limit: int = int(os.getenv("SEARCH_RESULT_LIMIT", "30"))

    # Optional default workbook for the CLI
    default_workbook: Optional[str] = os.getenv("ROLLMARK_WORKBOOK")


settings = Settings()
