# backend/aeroroster/services/roster_timeline.py
"""
Timeline layout for the roster day view.

The pure helpers map between three coordinate systems:

- wall-clock time on the selected date
- slot indices of the configured grid
- horizontal percentages of the rendered timeline

RosterTimelineService assembles a full day (slots, instructors, boxes) from
the database for the API.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
import logging
import math
from typing import Any, Dict, Iterable, List, Optional, Union

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.tenant import TenantContext
from ..models.roster_rule import RosterRule
from ..repositories import RepositoryFactory
from ..schemas.roster import (
    RosterTimelineResponse,
    TimelineBlockResponse,
    TimelineInstructorRow,
)
from ..utils.roster_time import format_time_label, js_day_of_week, parse_time_to_minutes
from .base import BaseService

logger = logging.getLogger(__name__)

MIN_INTERVAL_MINUTES = 5
BUSINESS_HOURS_INTERVAL_MINUTES = 30
FALLBACK_OPEN_HOUR = 6
FALLBACK_CLOSE_HOUR = 22


@dataclass(frozen=True)
class TimelineConfig:
    start_hour: float
    end_hour: float
    interval_minutes: int


@dataclass(frozen=True)
class TimeSlots:
    slots: List[datetime]
    start: datetime
    end: datetime

    @property
    def count(self) -> int:
        return len(self.slots)


@dataclass(frozen=True)
class LayoutBox:
    left_percent: float
    width_percent: float


@dataclass(frozen=True)
class DraftSlot:
    """Pre-filled form values for a click on an instructor's row."""

    instructor_id: str
    start_time: str
    end_time: str
    date: str
    day_of_week: int
    is_recurring: bool = True


def default_timeline_config() -> TimelineConfig:
    return TimelineConfig(
        start_hour=settings.default_timeline_start_hour,
        end_hour=settings.default_timeline_end_hour,
        interval_minutes=settings.default_timeline_interval_minutes,
    )


def _at_midnight(day: Union[date, datetime]) -> datetime:
    if isinstance(day, datetime):
        day = day.date()
    return datetime.combine(day, time(0, 0))


def build_time_slots(day: Union[date, datetime], config: TimelineConfig) -> TimeSlots:
    """
    Build the slot grid for ``day``.

    The interval is floored at 5 minutes, the start hour clamped to 0-23 and
    the end hour to [start + 1, 24]. Slots cover [start, end).
    """
    interval = max(MIN_INTERVAL_MINUTES, int(config.interval_minutes))
    start_hour = max(0, min(23, math.floor(config.start_hour)))
    end_hour = max(start_hour + 1, min(24, math.ceil(config.end_hour)))

    midnight = _at_midnight(day)
    start = midnight + timedelta(hours=start_hour)
    end = midnight + timedelta(hours=end_hour)

    slots: List[datetime] = []
    step = timedelta(minutes=interval)
    current = start
    while current < end:
        slots.append(current)
        current += step

    return TimeSlots(slots=slots, start=start, end=end)


def map_click_to_slot(
    click_x: float, container_left: float, container_width: float, slot_count: int
) -> Optional[int]:
    """
    Slot index under a horizontal click, or None when there is nothing to hit.

    >>> map_click_to_slot(150, 100, 800, 16)
    1
    """
    if slot_count <= 0 or container_width <= 0:
        return None

    relative_x = max(0.0, min(click_x - container_left, container_width))
    index = math.floor((relative_x / container_width) * slot_count)
    return min(index, slot_count - 1)


def _draft_label(value: datetime, day_start: datetime) -> str:
    # A window ending at 24:00 lands on the next day; keep the draft on this one
    if value.date() != day_start.date():
        return "23:59"
    return format_time_label(value)


def draft_slot_from_click(
    instructor_id: str,
    click_x: float,
    container_left: float,
    container_width: float,
    time_slots: TimeSlots,
    interval_minutes: int,
) -> Optional[DraftSlot]:
    """
    Turn a click on an instructor's row into a one-slot recurring draft.

    The draft ends one interval after the slot start, clamped to the window end.
    """
    index = map_click_to_slot(click_x, container_left, container_width, time_slots.count)
    if index is None:
        return None

    slot_start = time_slots.slots[index]
    interval = max(MIN_INTERVAL_MINUTES, int(interval_minutes))
    slot_end = min(slot_start + timedelta(minutes=interval), time_slots.end)
    day = time_slots.start.date()

    return DraftSlot(
        instructor_id=instructor_id,
        start_time=format_time_label(slot_start),
        end_time=_draft_label(slot_end, time_slots.start),
        date=day.isoformat(),
        day_of_week=js_day_of_week(day),
        is_recurring=True,
    )


def layout_box(
    rule_start: datetime,
    rule_end: datetime,
    timeline_start: datetime,
    timeline_end: datetime,
) -> Optional[LayoutBox]:
    """Clip a rule to the window and express it as percentages of the window."""
    duration = (timeline_end - timeline_start).total_seconds()
    if duration <= 0:
        return None

    start = max(rule_start, timeline_start)
    end = min(rule_end, timeline_end)
    if end <= start:
        return None

    return LayoutBox(
        left_percent=((start - timeline_start).total_seconds() / duration) * 100,
        width_percent=((end - start).total_seconds() / duration) * 100,
    )


def parse_time_for_date(base: Union[date, datetime], value: Union[str, time]) -> datetime:
    """Place an ``HH:MM[:SS]`` time on ``base``'s date. Unparseable parts count as zero."""
    midnight = _at_midnight(base)
    if isinstance(value, time):
        return midnight.replace(hour=value.hour, minute=value.minute)

    parts = value.split(":")
    hours = _int_or_zero(parts[0]) if parts else 0
    minutes = _int_or_zero(parts[1]) if len(parts) > 1 else 0
    return midnight + timedelta(hours=hours, minutes=minutes)


def _int_or_zero(text: str) -> int:
    text = text.strip()
    return int(text) if text.isdigit() else 0


def layout_rule(rule: RosterRule, time_slots: TimeSlots) -> Optional[LayoutBox]:
    """Layout box for a rule on the timeline's date."""
    return layout_box(
        parse_time_for_date(time_slots.start, rule.start_time),
        parse_time_for_date(time_slots.start, rule.end_time),
        time_slots.start,
        time_slots.end,
    )


def visible_rules_for_day(rules: Iterable[RosterRule], day: date) -> List[RosterRule]:
    """Live rules on ``day``'s weekday whose effective window contains ``day``."""
    weekday = js_day_of_week(day)
    return [
        rule
        for rule in rules
        if rule.is_live and rule.day_of_week == weekday and rule.covers_date(day)
    ]


def _settings_container(tenant_settings: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(tenant_settings, dict):
        return None
    general = tenant_settings.get("general")
    if isinstance(general, dict):
        return general
    return tenant_settings


def _read_setting(tenant_settings: Any, key: str, expected: type, fallback: Any) -> Any:
    container = _settings_container(tenant_settings)
    value = container.get(key) if container is not None else None
    return value if isinstance(value, expected) else fallback


def build_timeline_config(
    tenant_settings: Any, default: Optional[TimelineConfig] = None
) -> TimelineConfig:
    """
    Derive the day window from a tenant's business hours.

    Settings may be nested under ``general``. Closed or 24-hour tenants get
    the whole day; unusable hours fall back to 06:00-22:00.
    """
    default = default or default_timeline_config()

    open_time = _read_setting(tenant_settings, "business_open_time", str, "09:00:00")
    close_time = _read_setting(tenant_settings, "business_close_time", str, "17:00:00")
    is_24_hours = _read_setting(tenant_settings, "business_is_24_hours", bool, False)
    is_closed = _read_setting(tenant_settings, "business_is_closed", bool, False)

    if is_closed or is_24_hours:
        return TimelineConfig(0, 24, BUSINESS_HOURS_INTERVAL_MINUTES)

    open_minutes = parse_time_to_minutes(open_time)
    close_minutes = parse_time_to_minutes(close_time)
    if open_minutes is None or close_minutes is None or close_minutes <= open_minutes:
        return TimelineConfig(
            FALLBACK_OPEN_HOUR, FALLBACK_CLOSE_HOUR, BUSINESS_HOURS_INTERVAL_MINUTES
        )

    start_hour = math.floor(open_minutes / 60)
    end_hour = math.ceil(close_minutes / 60)
    if start_hour < 0 or start_hour > 23 or end_hour <= start_hour or end_hour > 24:
        return default

    return TimelineConfig(start_hour, end_hour, BUSINESS_HOURS_INTERVAL_MINUTES)


class RosterTimelineService(BaseService):
    """Builds the roster day view for a tenant."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.rule_repository = RepositoryFactory.create_roster_rule_repository(db)
        self.instructor_repository = RepositoryFactory.create_instructor_repository(db)
        self.settings_repository = RepositoryFactory.create_tenant_settings_repository(db)

    @BaseService.measure_operation("get_day_timeline")
    def get_day_timeline(self, context: TenantContext, day: date) -> RosterTimelineResponse:
        """
        Slots, instructors sorted by display name, and each instructor's
        visible rules laid out on the day's window.
        """
        tenant_id = context.require_tenant()

        config = build_timeline_config(self.settings_repository.get_settings(tenant_id))
        time_slots = build_time_slots(day, config)

        instructors = sorted(
            self.instructor_repository.list_for_tenant(tenant_id),
            key=lambda instructor: instructor.display_name.casefold(),
        )
        rules = visible_rules_for_day(
            self.rule_repository.list_for_tenant(tenant_id, include_voided=False), day
        )

        rules_by_instructor: Dict[str, List[RosterRule]] = {}
        for rule in rules:
            rules_by_instructor.setdefault(rule.instructor_id, []).append(rule)

        rows: List[TimelineInstructorRow] = []
        for instructor in instructors:
            blocks: List[TimelineBlockResponse] = []
            for rule in rules_by_instructor.get(instructor.id, []):
                box = layout_rule(rule, time_slots)
                if box is None:
                    continue
                blocks.append(
                    TimelineBlockResponse(
                        rule_id=rule.id,
                        start_label=format_time_label(rule.start_time),
                        end_label=format_time_label(rule.end_time),
                        left_percent=box.left_percent,
                        width_percent=box.width_percent,
                        is_one_off=rule.is_one_off,
                        notes=rule.notes,
                    )
                )
            rows.append(
                TimelineInstructorRow(
                    instructor_id=instructor.id,
                    display_name=instructor.display_name,
                    blocks=blocks,
                )
            )

        return RosterTimelineResponse(
            date=day,
            day_of_week=js_day_of_week(day),
            start=time_slots.start,
            end=time_slots.end,
            interval_minutes=max(MIN_INTERVAL_MINUTES, int(config.interval_minutes)),
            slots=time_slots.slots,
            instructors=rows,
        )
