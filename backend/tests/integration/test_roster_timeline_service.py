# backend/tests/integration/test_roster_timeline_service.py
"""RosterTimelineService day view assembled from the database."""

from datetime import date, datetime, time

import pytest

from aeroroster.core.exceptions import UnauthorizedException
from aeroroster.core.tenant import TenantContext
from aeroroster.models import Instructor
from aeroroster.services.roster_timeline import RosterTimelineService
from tests.helpers.roster import MONDAY, TENANT_ID, TUESDAY

MONDAY_DATE = date(2024, 6, 3)


@pytest.fixture
def timeline_service(db):
    return RosterTimelineService(db)


@pytest.fixture
def second_instructor(db):
    instructor = Instructor(tenant_id=TENANT_ID, first_name="Charles", last_name="Lindbergh")
    db.add(instructor)
    db.commit()
    return instructor


class TestGetDayTimeline:
    def test_default_window_without_settings(self, timeline_service, manager_context, instructor):
        timeline = timeline_service.get_day_timeline(manager_context, MONDAY_DATE)

        assert timeline.day_of_week == MONDAY
        assert timeline.start == datetime(2024, 6, 3, 9, 0)
        assert timeline.end == datetime(2024, 6, 3, 17, 0)
        assert timeline.interval_minutes == 30
        assert len(timeline.slots) == 16

    def test_business_hours_drive_the_window(
        self, timeline_service, manager_context, instructor, tenant_hours
    ):
        tenant_hours(
            {"general": {"business_open_time": "06:00:00", "business_close_time": "22:00:00"}}
        )

        timeline = timeline_service.get_day_timeline(manager_context, MONDAY_DATE)

        assert len(timeline.slots) == 32
        assert timeline.slots[0] == datetime(2024, 6, 3, 6, 0)

    def test_instructors_sorted_with_visible_blocks(
        self,
        timeline_service,
        manager_context,
        instructor,
        second_instructor,
        make_rule,
        tenant_hours,
    ):
        tenant_hours({"business_open_time": "06:00", "business_close_time": "22:00"})
        shown = make_rule(instructor.id, MONDAY, time(8), time(10), date(2024, 1, 1), notes="Solo")
        make_rule(instructor.id, MONDAY, time(23), time(23, 30), date(2024, 1, 1))
        make_rule(instructor.id, MONDAY, time(12), time(13), date(2024, 1, 1), voided=True)
        make_rule(instructor.id, TUESDAY, time(8), time(10), date(2024, 1, 1))
        make_rule(second_instructor.id, MONDAY, time(14), time(15), date(2024, 7, 1))

        timeline = timeline_service.get_day_timeline(manager_context, MONDAY_DATE)

        assert [row.display_name for row in timeline.instructors] == [
            "Amelia Earhart",
            "Charles Lindbergh",
        ]
        amelia, charles = timeline.instructors
        assert len(amelia.blocks) == 1
        block = amelia.blocks[0]
        assert block.rule_id == shown.id
        assert block.start_label == "08:00"
        assert block.end_label == "10:00"
        assert block.left_percent == pytest.approx(12.5)
        assert block.width_percent == pytest.approx(12.5)
        assert block.is_one_off is False
        assert block.notes == "Solo"
        assert charles.blocks == []

    def test_requires_tenant(self, timeline_service):
        with pytest.raises(UnauthorizedException):
            timeline_service.get_day_timeline(
                TenantContext(user_id="u", role="admin", tenant_id=None), MONDAY_DATE
            )
