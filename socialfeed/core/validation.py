"""Input helpers shared by the request schemas."""

import re
from typing import Optional
from urllib.parse import urlparse

CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]{3,30}$")

MAX_URL_LENGTH = 500


def strip_control_chars(value):
    """Remove null bytes and control characters; tabs and newlines are kept."""
    if isinstance(value, str):
        return CONTROL_CHARS.sub("", value)
    return value


def clean_text(value):
    value = strip_control_chars(value)
    if isinstance(value, str):
        return value.strip()
    return value


def validate_http_url(value: Optional[str], label: str) -> Optional[str]:
    if value is None or value == "":
        return None
    if len(value) > MAX_URL_LENGTH:
        raise ValueError(f"{label} must not exceed {MAX_URL_LENGTH} characters")
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"{label} must be a valid URL")
    return value
