"""Datetime utilities for common operations."""

from datetime import datetime, timezone
from typing import Optional


def now() -> datetime:
    """Get current datetime in UTC."""
    return datetime.now(timezone.utc)


def as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Attach UTC to a naive datetime.

    Some backends hand timestamps back without tzinfo even for
    ``DateTime(timezone=True)`` columns; everything stored here is UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def isoformat(dt: Optional[datetime]) -> Optional[str]:
    """ISO-8601 string in UTC, or None."""
    normalized = as_utc(dt)
    return normalized.isoformat() if normalized else None


def from_unix_timestamp(timestamp: int) -> datetime:
    """
    Convert Unix timestamp to datetime.

    Args:
        timestamp: Unix timestamp

    Returns:
        Datetime in UTC
    """
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)
