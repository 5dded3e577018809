"""
Helper utilities
"""
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from dateutil import parser as date_parser


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a Shopify timestamp into a naive UTC datetime.

    Shopify sends ISO 8601 strings with the shop's offset
    (e.g. "2024-01-01T10:00:00-05:00"); anything else dateutil can read
    (e.g. "Tue, 02 Jan 2024 10:00:00 -0500") is accepted too. Naive inputs
    are assumed UTC. Raises ValueError on unparseable strings.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        try:
            dt = date_parser.isoparse(value)
        except ValueError:
            dt = date_parser.parse(value)
    else:
        raise ValueError(f"Unsupported timestamp: {value!r}")

    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def money_str(value: Any) -> Optional[str]:
    """Keep money as a decimal string; numbers are converted without float rounding."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("Expected a monetary amount, got a boolean")
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float, Decimal)):
        try:
            return str(Decimal(str(value)))
        except InvalidOperation as e:
            raise ValueError(f"Invalid amount: {value!r}") from e
    raise ValueError(f"Invalid amount: {value!r}")


def join_tags(value: Any) -> Optional[str]:
    """Shopify REST sends tags comma-joined; GraphQL-shaped payloads send a list."""
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return ", ".join(str(tag) for tag in value)
    return str(value)
