# backend/aeroroster/schemas/roster.py
"""
Roster rule schemas for the AeroRoster engine.

Request schemas only check shapes (patterns, ranges, lengths). Semantic
checks such as end-after-start live in the roster validator so that the
service layer applies them the same way for every caller.
"""

import datetime
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from ..utils.roster_time import unique_sorted_days
from .base import StandardizedModel, StrictRequestModel

TIME_PATTERN = r"^\d{2}:\d{2}(:\d{2})?$"
DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
NOTES_MAX_LENGTH = 2000


class RosterWindowFields(StrictRequestModel):
    """Fields shared by every roster write payload."""

    instructor_id: str = Field(..., min_length=1, max_length=36)
    start_time: str = Field(..., pattern=TIME_PATTERN, description="HH:MM or HH:MM:SS")
    end_time: str = Field(..., pattern=TIME_PATTERN, description="HH:MM or HH:MM:SS")
    effective_from: str = Field(..., pattern=DATE_PATTERN, description="YYYY-MM-DD")
    effective_until: Optional[str] = Field(
        None, pattern=DATE_PATTERN, description="YYYY-MM-DD, or null for indefinitely"
    )

    @field_validator("effective_until", mode="before")
    @classmethod
    def blank_until_is_open(cls, v: Optional[str]) -> Optional[str]:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class RosterRuleInput(RosterWindowFields):
    """A single-weekday roster rule, as created or updated."""

    day_of_week: int = Field(..., ge=0, le=6, description="0 = Sunday")
    notes: Optional[str] = None

    @field_validator("notes", mode="before")
    @classmethod
    def normalize_notes(cls, v: Optional[str]) -> Optional[str]:
        """Trim notes; blank becomes null."""
        if v is None:
            return None
        if not isinstance(v, str):
            raise ValueError("notes must be a string")
        trimmed = v.strip()
        if not trimmed:
            return None
        if len(trimmed) > NOTES_MAX_LENGTH:
            raise ValueError(f"notes must be at most {NOTES_MAX_LENGTH} characters")
        return trimmed


class RosterRuleCreate(RosterRuleInput):
    """
    Create payload.

    ``day_of_week`` creates one rule. ``days_of_week`` creates one rule per
    unique day after checking all of them for conflicts first.
    """

    day_of_week: Optional[int] = Field(None, ge=0, le=6)  # type: ignore[assignment]
    days_of_week: Optional[List[int]] = Field(None, min_length=1, max_length=7)

    @field_validator("days_of_week")
    @classmethod
    def validate_days(cls, v: Optional[List[int]]) -> Optional[List[int]]:
        if v is None:
            return v
        if any(day < 0 or day > 6 for day in v):
            raise ValueError("days_of_week entries must be between 0 and 6")
        return unique_sorted_days(v)

    @model_validator(mode="after")
    def require_a_day(self) -> "RosterRuleCreate":
        if self.day_of_week is None and not self.days_of_week:
            raise ValueError("day_of_week or days_of_week is required")
        return self

    @property
    def target_days(self) -> List[int]:
        days = list(self.days_of_week or [])
        if self.day_of_week is not None:
            days.append(self.day_of_week)
        return unique_sorted_days(days)

    def for_day(self, day_of_week: int) -> RosterRuleInput:
        return RosterRuleInput(
            instructor_id=self.instructor_id,
            day_of_week=day_of_week,
            start_time=self.start_time,
            end_time=self.end_time,
            effective_from=self.effective_from,
            effective_until=self.effective_until,
            notes=self.notes,
        )


class RosterConflictCheckRequest(RosterWindowFields):
    """Conflict preview for one or more weekdays."""

    days_of_week: List[int] = Field(..., min_length=1, max_length=7)
    exclude_rule_id: Optional[str] = None

    @field_validator("days_of_week")
    @classmethod
    def validate_days(cls, v: List[int]) -> List[int]:
        if any(day < 0 or day > 6 for day in v):
            raise ValueError("days_of_week entries must be between 0 and 6")
        return unique_sorted_days(v)


class RosterConflictCheckResponse(StandardizedModel):
    """Returned when none of the requested days conflict."""

    ok: bool = True
    conflicting_days: List[int] = Field(default_factory=list)


class RosterRuleResponse(StandardizedModel):
    """Roster rule as stored."""

    id: str
    tenant_id: str
    instructor_id: str
    day_of_week: int
    start_time: datetime.time
    end_time: datetime.time
    effective_from: datetime.date
    effective_until: Optional[datetime.date] = None
    is_active: bool
    voided_at: Optional[datetime.datetime] = None
    notes: Optional[str] = None
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None


class TimelineBlockResponse(StandardizedModel):
    """One rule drawn on an instructor row."""

    rule_id: str
    start_label: str
    end_label: str
    left_percent: float
    width_percent: float
    is_one_off: bool
    notes: Optional[str] = None


class TimelineInstructorRow(StandardizedModel):
    instructor_id: str
    display_name: str
    blocks: List[TimelineBlockResponse] = Field(default_factory=list)


class RosterTimelineResponse(StandardizedModel):
    """Day view: slot grid plus each instructor's visible rules."""

    date: datetime.date
    day_of_week: int
    start: datetime.datetime
    end: datetime.datetime
    interval_minutes: int
    slots: List[datetime.datetime]
    instructors: List[TimelineInstructorRow]

