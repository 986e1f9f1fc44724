# backend/tests/unit/test_roster_schemas.py
"""Shape validation for roster request schemas."""

from pydantic import ValidationError
import pytest

from aeroroster.schemas.roster import (
    RosterConflictCheckRequest,
    RosterRuleCreate,
    RosterRuleInput,
)

BASE = {
    "instructor_id": "01HX0000000000000000000000",
    "start_time": "09:00",
    "end_time": "12:00",
    "effective_from": "2024-01-01",
}


class TestRosterRuleInput:
    def test_notes_are_trimmed_and_blank_becomes_null(self):
        assert RosterRuleInput(**BASE, day_of_week=1, notes="  morning  ").notes == "morning"
        assert RosterRuleInput(**BASE, day_of_week=1, notes="   ").notes is None

    def test_notes_length_limit(self):
        RosterRuleInput(**BASE, day_of_week=1, notes="x" * 2000)
        with pytest.raises(ValidationError):
            RosterRuleInput(**BASE, day_of_week=1, notes="x" * 2001)

    def test_blank_until_is_indefinite(self):
        payload = RosterRuleInput(**BASE, day_of_week=1, effective_until="")
        assert payload.effective_until is None

    @pytest.mark.parametrize(
        "override",
        [
            {"day_of_week": 7},
            {"day_of_week": -1},
            {"start_time": "9am"},
            {"effective_from": "01/01/2024"},
            {"effective_until": "2024/02/01"},
        ],
    )
    def test_bad_shapes_are_rejected(self, override):
        data = {**BASE, "day_of_week": 1, **override}
        with pytest.raises(ValidationError):
            RosterRuleInput(**data)

    def test_unknown_fields_are_rejected(self):
        with pytest.raises(ValidationError):
            RosterRuleInput(**BASE, day_of_week=1, is_recurring=True)


class TestRosterRuleCreate:
    def test_requires_at_least_one_day(self):
        with pytest.raises(ValidationError):
            RosterRuleCreate(**BASE)

    def test_target_days_merge_and_sort(self):
        payload = RosterRuleCreate(**BASE, day_of_week=5, days_of_week=[3, 1, 3])
        assert payload.days_of_week == [1, 3]
        assert payload.target_days == [1, 3, 5]

    def test_for_day_builds_single_day_input(self):
        payload = RosterRuleCreate(**BASE, days_of_week=[1, 2], notes=" dual ")
        single = payload.for_day(2)

        assert isinstance(single, RosterRuleInput)
        assert single.day_of_week == 2
        assert single.notes == "dual"
        assert single.start_time == "09:00"

    def test_days_must_be_weekdays(self):
        with pytest.raises(ValidationError):
            RosterRuleCreate(**BASE, days_of_week=[1, 9])


def test_conflict_check_request_normalizes_days():
    payload = RosterConflictCheckRequest(**BASE, days_of_week=[4, 2, 4])
    assert payload.days_of_week == [2, 4]
    assert payload.exclude_rule_id is None
