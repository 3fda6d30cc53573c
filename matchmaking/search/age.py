"""Translate age bounds into date-of-birth bounds and compute calendar ages."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

MIN_SEARCH_AGE = 18
MAX_SEARCH_AGE = 80


class DobRange(BaseModel):
    """Inclusive date-of-birth window; either side may be open."""

    model_config = ConfigDict(frozen=True)

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @property
    def is_bounded(self) -> bool:
        return self.start is not None or self.end is not None

    def contains(self, dob: datetime) -> bool:
        if self.start is not None and dob < self.start:
            return False
        if self.end is not None and dob > self.end:
            return False
        return True

    def as_query(self) -> Dict[str, Any]:
        clause: Dict[str, Any] = {"$exists": True, "$ne": None}
        if self.start is not None:
            clause["$gte"] = self.start
        if self.end is not None:
            clause["$lte"] = self.end
        return clause


def _today() -> date:
    return date.today()


def _as_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).date()
        except ValueError:
            return None
    return None


def years_before(day: date, years: int) -> date:
    """Shift ``day`` back by whole years; Feb 29 falls back to Feb 28."""

    try:
        return day.replace(year=day.year - years)
    except ValueError:
        return day.replace(year=day.year - years, day=28)


def age_range_to_dob_range(
    min_age: Optional[int] = None,
    max_age: Optional[int] = None,
    as_of: Optional[date] = None,
) -> DobRange:
    """Return the date-of-birth window of people aged ``min_age..max_age``.

    ``max_age`` bounds the earliest birthdate: the day after the person would
    turn ``max_age + 1``. ``min_age`` bounds the latest birthdate: the end of
    the day they turned ``min_age``. Both bounds are inclusive.
    """

    today = _as_date(as_of) if as_of is not None else _today()
    if today is None:
        raise ValueError("as_of must be a date")

    start: Optional[datetime] = None
    end: Optional[datetime] = None
    if max_age is not None:
        earliest = years_before(today, int(max_age) + 1) + timedelta(days=1)
        start = datetime.combine(earliest, time.min)
    if min_age is not None:
        latest = years_before(today, int(min_age))
        end = datetime.combine(latest, time.max)
    return DobRange(start=start, end=end)


def compute_age(dob: Any, as_of: Optional[date] = None) -> Optional[int]:
    """Whole calendar years between ``dob`` and ``as_of``; None if dob is unusable."""

    born = _as_date(dob)
    if born is None:
        return None
    today = _as_date(as_of) if as_of is not None else _today()
    if today is None:
        return None
    age = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        age -= 1
    return age


__all__ = [
    "DobRange",
    "MAX_SEARCH_AGE",
    "MIN_SEARCH_AGE",
    "age_range_to_dob_range",
    "compute_age",
    "years_before",
]
