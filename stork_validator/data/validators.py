"""
Local validation of signed price points.

``validate_data_point`` is a pure predicate: it never performs I/O and
never raises, so it can be exercised against a fixed reference instant.
"""

from datetime import datetime
from typing import Optional

from ..utils.time import age_seconds, utc_now
from .models import SignedDataPoint

FRESHNESS_WINDOW_SECONDS = 60 * 60


def missing_fields(data_point: SignedDataPoint) -> list[str]:
    """Names of required fields that are absent on a data point."""
    missing = []
    if not data_point.msg_hash:
        missing.append("msg_hash")
    if data_point.price is None:
        missing.append("price")
    if data_point.timestamp is None:
        missing.append("timestamp")
    return missing


def validate_data_point(
    data_point: SignedDataPoint,
    now: Optional[datetime] = None,
    freshness_seconds: float = FRESHNESS_WINDOW_SECONDS,
) -> bool:
    """
    Decide whether a signed price point is valid.

    Args:
        data_point: Point to judge
        now: Reference instant, defaults to wall-clock time
        freshness_seconds: Maximum accepted signature age

    Returns:
        False when a required field is missing or the signature is older
        than the freshness window, True otherwise
    """
    if missing_fields(data_point):
        return False

    if now is None:
        now = utc_now()

    return age_seconds(data_point.timestamp, now) <= freshness_seconds
