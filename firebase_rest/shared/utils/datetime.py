"""
UTC datetime utilities for Firestore timestamps.

All datetime values produced by this library are timezone-aware UTC.
Firestore timestamps travel as RFC3339 strings with a trailing "Z".
"""

import re
from datetime import UTC, datetime

# Firestore may send up to nanosecond precision; Python keeps microseconds.
_FRACTION_RE = re.compile(r"\.(\d+)")


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, treats it as local time and converts to UTC
    - If aware, converts to UTC

    Args:
        dt: A datetime that may be naive or aware

    Returns:
        UTC-aware datetime or None
    """
    if dt is None:
        return None

    # astimezone() interprets a naive datetime as local time
    return dt.astimezone(UTC)


def format_timestamp(dt: datetime) -> str:
    """
    Render a datetime as an RFC3339 UTC timestamp string.

    Args:
        dt: Naive (local) or aware datetime

    Returns:
        String like "2024-01-02T03:04:05.123456Z"

    Raises:
        ValueError: If dt is not a datetime
    """
    if not isinstance(dt, datetime):
        raise ValueError(f"Timestamp must be a datetime, got {type(dt).__name__}")
    return dt.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def parse_timestamp(value: str) -> datetime:
    """
    Parse an RFC3339 timestamp string into an aware UTC datetime.

    Fractional seconds beyond microseconds are truncated.

    Args:
        value: Timestamp string, e.g. "2024-01-02T03:04:05.123456789Z"

    Returns:
        UTC-aware datetime

    Raises:
        ValueError: If the string is not a valid timestamp
    """
    if not isinstance(value, str):
        raise ValueError(f"Timestamp must be a string, got {type(value).__name__}")
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, count=1)
    parsed = datetime.fromisoformat(text.replace("Z", "+00:00").replace("z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)
