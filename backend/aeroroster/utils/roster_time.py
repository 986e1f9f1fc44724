# backend/aeroroster/utils/roster_time.py
"""
Time and date helpers for roster rules.

Times travel as ``HH:MM`` or ``HH:MM:SS`` (24-hour) strings and dates as
``YYYY-MM-DD``. Everything here is pure and side-effect free.
"""

from datetime import date, datetime, time
import re
from typing import Iterable, List, Optional, Union

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

WEEKDAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

TimeLike = Union[str, time]


def _parse_time_parts(value: Optional[str]) -> Optional[tuple[int, int, int]]:
    if not value:
        return None

    match = _TIME_RE.match(value.strip())
    if not match:
        return None

    hours = int(match.group(1))
    minutes = int(match.group(2))
    seconds = int(match.group(3)) if match.group(3) else 0

    if not 0 <= hours <= 23:
        return None
    if not 0 <= minutes <= 59:
        return None
    if not 0 <= seconds <= 59:
        return None

    return hours, minutes, seconds


def parse_time_to_minutes(value: Optional[TimeLike]) -> Optional[int]:
    """
    Convert a time-of-day to minutes since midnight.

    Seconds are accepted but ignored. Returns None for anything unparseable.

    >>> parse_time_to_minutes("09:30")
    570
    """
    if isinstance(value, time):
        return value.hour * 60 + value.minute

    parts = _parse_time_parts(value)
    if parts is None:
        return None
    hours, minutes, _ = parts
    return hours * 60 + minutes


def parse_time(value: Optional[TimeLike]) -> Optional[time]:
    """Parse a time string into ``datetime.time`` (second precision)."""
    if isinstance(value, time):
        return value.replace(microsecond=0)

    parts = _parse_time_parts(value)
    if parts is None:
        return None
    return time(*parts)


def parse_iso_date(value: Optional[Union[str, date]]) -> Optional[date]:
    """Parse a ``YYYY-MM-DD`` string; returns None for malformed or impossible dates."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not _DATE_RE.match(value.strip()):
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def date_on_or_after(candidate: str, reference: str) -> bool:
    """ISO dates compare correctly as strings."""
    return candidate >= reference


def js_day_of_week(value: date) -> int:
    """Day of week with 0 = Sunday (Python's ``weekday()`` has 0 = Monday)."""
    return (value.weekday() + 1) % 7


def weekday_name(day: int) -> str:
    if isinstance(day, int) and 0 <= day < len(WEEKDAY_NAMES):
        return WEEKDAY_NAMES[day]
    return f"Day {day}"


def unique_sorted_days(days: Iterable[int]) -> List[int]:
    return sorted(set(days))


def format_time_label(value: Union[datetime, time]) -> str:
    """24-hour ``HH:MM`` label."""
    return f"{value.hour:02d}:{value.minute:02d}"
