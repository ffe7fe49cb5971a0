"""Input validation helpers for operator-supplied registration fields."""
from __future__ import annotations
import re
from typing import Optional
from urllib.parse import urlparse

from appreg.config.settings import (
    DEFAULT_APP_NAME,
    DEFAULT_REDIRECT_URI_MARKER,
    DEFAULT_SECRET_VALIDITY_DAYS,
    redirect_uri_example,
)

# Largest lifetime a 32-bit signed day count can hold.
MAX_SECRET_VALIDITY_DAYS = 2**31 - 1

_DAYS_PATTERN = re.compile(r"[+-]?[0-9]+")


def normalize_app_name(raw: Optional[str], default: str = DEFAULT_APP_NAME) -> str:
    """Return the trimmed application name, or the default when blank.

    Args:
        raw: Raw operator input
        default: Name used when the input is blank

    Returns:
        Application display name
    """
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def is_absolute_uri(value: str) -> bool:
    """True when the value has both a scheme and a network location."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc)


def validate_redirect_uri(
    raw: Optional[str],
    marker: str = DEFAULT_REDIRECT_URI_MARKER,
    example: Optional[str] = None,
) -> str:
    """Validate a web redirect URI for the registered callback route.

    Args:
        raw: Raw operator input
        marker: Path fragment every accepted URI must contain
        example: URI quoted in the error message (built from the marker if omitted)

    Returns:
        Trimmed redirect URI

    Raises:
        ValueError: If the URI is blank, not absolute, or lacks the marker
    """
    value = (raw or "").strip()
    if not value:
        raise ValueError("Redirect URI is required.")

    if not is_absolute_uri(value) or marker not in value:
        raise ValueError(f"Invalid format. Example: {example or redirect_uri_example(marker)}")

    return value


def parse_secret_validity_days(raw: Optional[str], default: int = DEFAULT_SECRET_VALIDITY_DAYS) -> int:
    """Parse the secret lifetime in days.

    Only plain decimal digits with an optional sign are read. Anything else,
    and any value outside 1..MAX_SECRET_VALIDITY_DAYS, quietly resolves to
    the default.
    """
    if raw is None:
        return default
    text = raw.strip()
    if not _DAYS_PATTERN.fullmatch(text):
        return default
    days = int(text)
    return days if 0 < days <= MAX_SECRET_VALIDITY_DAYS else default
