"""Utilities for timestamp parsing/formatting on the JSON boundary.

The backend emits ISO-8601 timestamps and uses the zero time
``0001-01-01T00:00:00Z`` for "never". These helpers are best-effort and do not
raise; callers should expect `None` when no usable value is available.
"""

from __future__ import annotations

from datetime import datetime, timezone

from loguru import logger

ZERO_TIME_PREFIX = "0001-01-01"


def parse_iso_datetime(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp; None for empty, zero or invalid values."""
    if not value:
        return None
    text = str(value).strip()
    if not text or text.startswith(ZERO_TIME_PREFIX):
        return None
    # fromisoformat does not accept a trailing Z before 3.11
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    # Trim sub-microsecond precision (Go emits nanoseconds)
    if "." in text:
        head, _, tail = text.partition(".")
        rest = tail.lstrip("0123456789")
        digits = tail[: len(tail) - len(rest)]
        text = f"{head}.{digits[:6].ljust(6, '0')}{rest}"
    try:
        return datetime.fromisoformat(text)
    except ValueError as ex:
        logger.debug("Invalid timestamp {!r}: {}", value, ex)
        return None


def format_iso_datetime(dt: datetime | None) -> str:
    """Format a datetime as ISO-8601; the zero time when None."""
    if dt is None:
        return f"{ZERO_TIME_PREFIX}T00:00:00Z"
    if dt.tzinfo is None:
        return dt.isoformat()
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
