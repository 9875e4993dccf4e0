from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from enum import IntEnum
from typing import Iterator, Optional, Union

from ..core.constants import ISO_DATE_FORMAT
from ..core.exceptions import InvalidDate

_ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")

DateLike = Union[str, date]


class Weekday(IntEnum):
    """Calendar weekday numbered Sunday-first (0=Sun .. 6=Sat)."""

    SUN = 0
    MON = 1
    TUE = 2
    WED = 3
    THU = 4
    FRI = 5
    SAT = 6

    @classmethod
    def of(cls, value: date) -> "Weekday":
        # date.weekday() is Monday-first.
        return cls((value.weekday() + 1) % 7)

    @property
    def day_key(self) -> Optional[str]:
        """Timetable key for this weekday; Sunday has none."""
        if self is Weekday.SUN:
            return None
        return self.name.lower()


def parse_iso_date(value: DateLike) -> date:
    """Parse YYYY-MM-DD string into date.

    ``date`` instances pass through unchanged; ``datetime`` is rejected so a
    timestamp is never silently truncated. Surrounding whitespace is rejected.
    """
    if isinstance(value, datetime):
        raise InvalidDate(f"Expected a calendar date, got timestamp {value.isoformat()}")
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _ISO_DATE_RE.fullmatch(value):
        raise InvalidDate(f"Invalid date {value!r} (expected YYYY-MM-DD)")
    try:
        return datetime.strptime(value, ISO_DATE_FORMAT).date()
    except ValueError:
        raise InvalidDate(f"Invalid date {value!r} (expected YYYY-MM-DD)")


def parse_optional_date(value: Optional[DateLike]) -> Optional[date]:
    if value is None or value == "":
        return None
    return parse_iso_date(value)


def format_iso_date(value: date) -> str:
    return value.strftime(ISO_DATE_FORMAT)


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every calendar date in [start, end]; nothing when start > end."""
    current = start
    step = timedelta(days=1)
    while current <= end:
        yield current
        current += step


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def today_local() -> date:
    return now_local().date()


def epoch_millis(value: datetime) -> int:
    return int(value.timestamp() * 1000)
