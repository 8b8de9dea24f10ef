"""UTC timestamp helpers used in reports, payload metadata and run results."""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_iso_datetime(iso_string: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp to a UTC datetime.

    Accepts a ``Z`` suffix, fractional seconds and numeric offsets
    (``2025-11-04T10:30:00.123-04:00``).

    Args:
        iso_string: Timestamp text, or None

    Returns:
        UTC-aware datetime, or None if the input is empty or unparseable

    Example:
        >>> parse_iso_datetime("2025-11-04T12:00:00-05:00").hour
        17
    """
    if not iso_string or not iso_string.strip():
        return None

    cleaned = iso_string.strip()
    if cleaned.endswith("Z"):
        cleaned = cleaned[:-1] + "+00:00"

    try:
        return ensure_utc(datetime.fromisoformat(cleaned))
    except ValueError:
        return None


def format_timestamp(dt: datetime) -> str:
    """Format a datetime as ISO 8601 UTC with a ``Z`` suffix, to the second.

    Example:
        >>> format_timestamp(datetime(2025, 11, 4, 12, 0, 0, tzinfo=timezone.utc))
        '2025-11-04T12:00:00Z'
    """
    return ensure_utc(dt).strftime("%Y-%m-%dT%H:%M:%SZ")
