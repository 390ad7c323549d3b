"""
Parsers for oracle API payloads.

The signed prices endpoint returns a mapping of asset key to an entry
holding the price and a ``timestamped_signature`` block with the message
hash and a nanosecond timestamp.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

import orjson

from ..utils.time import from_nanoseconds
from .models import SignedDataPoint


class ParseError(Exception):
    """Raised when an API payload cannot be parsed."""
    pass


def parse_json_payload(raw_data: Union[str, bytes]) -> dict[str, Any]:
    """
    Parse a raw JSON response body into a dictionary.

    Args:
        raw_data: Response body

    Returns:
        Parsed dictionary

    Raises:
        ParseError: If the body is not a JSON object
    """
    try:
        payload = orjson.loads(raw_data)
    except orjson.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise ParseError(f"Expected JSON object, got {type(payload).__name__}")

    return payload


def parse_price(value: Any) -> Optional[Decimal]:
    """Parse a price field, returning None for missing or non-numeric values."""
    if value is None or value == "" or isinstance(value, bool):
        return None

    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None

    if not price.is_finite():
        return None
    return price


def parse_signed_price(asset: str, entry: Any) -> SignedDataPoint:
    """
    Parse one asset entry into a SignedDataPoint.

    Missing sub-fields become None so that the entry still yields a
    (negative) verdict instead of failing the whole batch.
    """
    if not isinstance(entry, dict):
        return SignedDataPoint(asset=asset, msg_hash=None, price=None, timestamp=None, payload={})

    signature = entry.get("timestamped_signature")
    if not isinstance(signature, dict):
        signature = {}

    return SignedDataPoint(
        asset=asset,
        msg_hash=signature.get("msg_hash") or None,
        price=parse_price(entry.get("price")),
        timestamp=from_nanoseconds(signature.get("timestamp")),
        payload=entry,
    )


def parse_signed_prices(data: Any) -> list[SignedDataPoint]:
    """
    Parse the ``data`` mapping of the signed prices endpoint.

    Args:
        data: Mapping of asset key to signed price entry

    Returns:
        Data points in the order the service listed them

    Raises:
        ParseError: If data is not a mapping
    """
    if data is None:
        return []

    if not isinstance(data, dict):
        raise ParseError(f"Signed prices must be a mapping, got {type(data).__name__}")

    return [parse_signed_price(asset, entry) for asset, entry in data.items()]
