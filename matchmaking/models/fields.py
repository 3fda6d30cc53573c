"""Lenient field types for documents written by older clients.

Legacy rows store dates as strings or BSON dates, timestamps as either epoch
milliseconds or BSON dates, and numbers as strings. These validators coerce
what they can and fall back to empty values instead of rejecting the row.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Annotated, Any, Optional

from pydantic.functional_validators import BeforeValidator


def parse_lenient_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc)
        return parsed.replace(tzinfo=None)
    return None


def to_epoch_ms(value: Any) -> int:
    """Epoch milliseconds for ints, floats, datetimes and ISO strings; 0 otherwise.

    Naive datetimes are UTC, which is how pymongo decodes BSON dates.
    """

    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    parsed = parse_lenient_datetime(value)
    if parsed is None:
        return 0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


def _lenient_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


LenientDatetime = Annotated[Optional[datetime], BeforeValidator(parse_lenient_datetime)]
LenientNumber = Annotated[Optional[float], BeforeValidator(_lenient_number)]
LenientTimestamp = Annotated[int, BeforeValidator(to_epoch_ms)]

__all__ = [
    "LenientDatetime",
    "LenientNumber",
    "LenientTimestamp",
    "parse_lenient_datetime",
    "to_epoch_ms",
]
