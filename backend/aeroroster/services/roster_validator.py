# backend/aeroroster/services/roster_validator.py
"""
Roster window validation.

Pure checks on a candidate rule's time range and effective-date range.
The validator never raises for bad input: it returns a tagged result so the
caller decides how to surface the failure.
"""

from dataclasses import dataclass
from datetime import date, time
from typing import Optional, Union

from ..core.enums import RosterValidationErrorKind
from ..core.exceptions import RosterValidationException
from ..utils.roster_time import (
    TimeLike,
    date_on_or_after,
    parse_iso_date,
    parse_time,
    parse_time_to_minutes,
)


@dataclass(frozen=True)
class RosterWindow:
    """Normalized time range and effective-date window of a candidate rule."""

    start_time: time
    end_time: time
    effective_from: date
    effective_until: Optional[date]

    @property
    def is_one_off(self) -> bool:
        return self.effective_until is not None and self.effective_until == self.effective_from


@dataclass(frozen=True)
class ValidationOk:
    value: RosterWindow
    ok: bool = True


@dataclass(frozen=True)
class ValidationErr:
    kind: RosterValidationErrorKind
    message: str
    ok: bool = False

    def to_exception(self) -> RosterValidationException:
        return RosterValidationException(self.message, kind=self.kind.value)


ValidationResult = Union[ValidationOk, ValidationErr]


def validate_times(start_time: TimeLike, end_time: TimeLike) -> Optional[ValidationErr]:
    start_minutes = parse_time_to_minutes(start_time)
    end_minutes = parse_time_to_minutes(end_time)

    if start_minutes is None or end_minutes is None:
        return ValidationErr(RosterValidationErrorKind.INVALID_TIME, "Invalid start or end time")

    if end_minutes <= start_minutes:
        return ValidationErr(
            RosterValidationErrorKind.END_BEFORE_START, "End time must be after start time"
        )

    return None


def validate_effective_range(
    effective_from: Union[str, date], effective_until: Optional[Union[str, date]]
) -> Optional[ValidationErr]:
    from_date = parse_iso_date(effective_from)
    if from_date is None:
        return ValidationErr(RosterValidationErrorKind.INVALID_DATE, "Invalid effective date")

    if effective_until is None or effective_until == "":
        return None

    until_date = parse_iso_date(effective_until)
    if until_date is None:
        return ValidationErr(RosterValidationErrorKind.INVALID_DATE, "Invalid effective date")

    if not date_on_or_after(until_date.isoformat(), from_date.isoformat()):
        return ValidationErr(
            RosterValidationErrorKind.RANGE_INVERTED, "End date must be on or after start date"
        )

    return None


def validate_roster_window(
    start_time: TimeLike,
    end_time: TimeLike,
    effective_from: Union[str, date],
    effective_until: Optional[Union[str, date]] = None,
    day_of_week: Optional[int] = None,
) -> ValidationResult:
    """
    Validate and normalize a candidate roster window.

    Args:
        start_time: ``HH:MM`` / ``HH:MM:SS`` string or time
        end_time: ``HH:MM`` / ``HH:MM:SS`` string or time
        effective_from: ``YYYY-MM-DD`` string or date
        effective_until: ``YYYY-MM-DD`` string, date, or None for indefinitely
        day_of_week: Optional 0-6 weekday; the schema layer normally checks it

    Returns:
        ValidationOk with the normalized window, or ValidationErr with the kind
    """
    if day_of_week is not None and not (
        isinstance(day_of_week, int) and 0 <= day_of_week <= 6
    ):
        return ValidationErr(RosterValidationErrorKind.INVALID_DAY, "Invalid day of week")

    time_error = validate_times(start_time, end_time)
    if time_error:
        return time_error

    range_error = validate_effective_range(effective_from, effective_until)
    if range_error:
        return range_error

    start = parse_time(start_time)
    end = parse_time(end_time)
    from_date = parse_iso_date(effective_from)
    until_date = parse_iso_date(effective_until) if effective_until else None
    # Checked above; these only narrow the Optional types
    assert start is not None and end is not None and from_date is not None

    return ValidationOk(
        RosterWindow(
            start_time=start,
            end_time=end,
            effective_from=from_date,
            effective_until=until_date,
        )
    )
