"""Student identifier normalization and shape checks."""

import math
import re
from typing import Any, Optional

from .config import settings

DIGITS_RE = re.compile(r"[0-9]+")


def normalize_id(value: Any) -> Optional[str]:
    """Normalize a raw identifier value.

    Numbers are truncated to integers, text is trimmed and loses one trailing
    ``.0`` (spreadsheets often store ids as floats).
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float) and math.isfinite(value):
        return str(math.trunc(value))
    cleaned = str(value).strip()
    if cleaned.endswith(".0"):
        cleaned = cleaned[:-2]
    return cleaned


def is_id_token(text: Optional[str], min_length: Optional[int] = None) -> bool:
    """True when text is all ASCII digits and at least ``min_length`` long."""
    if not text:
        return False
    if min_length is None:
        min_length = settings.min_id_length
    return DIGITS_RE.fullmatch(text) is not None and len(text) >= min_length


def email_username(text: str) -> Optional[str]:
    """Return the part before ``@`` for email-shaped text."""
    if "@" not in text:
        return None
    return text.split("@")[0]


def looks_like_id(value: Any, min_length: Optional[int] = None) -> bool:
    """True for long digit strings and for emails with such a username."""
    normalized = normalize_id(value)
    if not normalized:
        return False
    username = email_username(normalized)
    if username is not None:
        return is_id_token(username, min_length)
    return is_id_token(normalized, min_length)


def extract_target_id(value: Any, target_ids: Optional[set[str]]) -> Optional[str]:
    """Return the id in ``value`` that belongs to ``target_ids``, if any."""
    if not target_ids:
        return None
    normalized = normalize_id(value)
    if not normalized:
        return None
    username = email_username(normalized)
    if username is not None and username in target_ids:
        return username
    if normalized in target_ids:
        return normalized
    return None


def extract_row_id(
    value: Any,
    target_ids: Optional[set[str]] = None,
    min_length: Optional[int] = None,
) -> Optional[str]:
    """Extract a row's student id.

    With target ids only members are returned; without them any id-shaped
    value (or email username) is accepted.
    """
    if target_ids:
        return extract_target_id(value, target_ids)
    normalized = normalize_id(value)
    if not normalized:
        return None
    username = email_username(normalized)
    candidate = username if username is not None else normalized
    if is_id_token(candidate, min_length):
        return candidate
    return None
