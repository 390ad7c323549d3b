"""
Time utilities for signature timestamps and wall-clock comparisons.

The oracle stamps every signature with nanoseconds since the epoch; all
freshness decisions compare that against UTC wall-clock time.
"""

from datetime import datetime, timezone
from typing import Any, Optional

NANOS_PER_SECOND = 1_000_000_000


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def from_nanoseconds(value: Any) -> Optional[datetime]:
    """
    Convert a nanosecond epoch timestamp into a UTC datetime.

    Args:
        value: Integer, float or numeric string in nanoseconds

    Returns:
        UTC datetime, or None when the value is missing or not numeric
    """
    if value is None or isinstance(value, bool):
        return None

    try:
        nanos = int(value)
    except (TypeError, ValueError):
        return None

    try:
        return datetime.fromtimestamp(nanos / NANOS_PER_SECOND, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def age_seconds(ts: datetime, now: Optional[datetime] = None) -> float:
    """
    Seconds elapsed between a timestamp and now.

    Args:
        ts: Timestamp to measure (naive values are taken as UTC)
        now: Reference instant, defaults to current wall-clock time

    Returns:
        Age in seconds (negative when ts lies in the future)
    """
    if now is None:
        now = utc_now()

    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    return (now - ts).total_seconds()
