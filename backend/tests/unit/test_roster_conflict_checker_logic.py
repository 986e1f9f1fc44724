# backend/tests/unit/test_roster_conflict_checker_logic.py
"""
Unit tests for RosterConflictChecker business logic.

Overlap predicates are tested directly; the service is tested against a
mocked repository so no database is needed.
"""

from datetime import date, time
from itertools import product
import threading
from types import SimpleNamespace
from unittest.mock import Mock

import pytest
from sqlalchemy.orm import Session

from aeroroster.core.exceptions import ConflictCheckFailedException, RepositoryException
from aeroroster.repositories.roster_rule_repository import RosterRuleRepository
from aeroroster.services.roster_conflict_checker import (
    RosterConflictChecker,
    build_conflict_message,
    date_windows_overlap,
    rules_overlap,
    time_ranges_overlap,
)

HOURS = [time(h, 0) for h in (8, 9, 10, 11, 12, 13)]


def _window(start, end, effective_from=date(2024, 1, 1), effective_until=None):
    return SimpleNamespace(
        start_time=start,
        end_time=end,
        effective_from=effective_from,
        effective_until=effective_until,
    )


class TestTimeRangeOverlap:
    def test_overlap_is_symmetric(self):
        ranges = [(a, b) for a, b in product(HOURS, HOURS) if a < b]
        for (a1, a2), (b1, b2) in product(ranges, ranges):
            assert time_ranges_overlap(a1, a2, b1, b2) == time_ranges_overlap(b1, b2, a1, a2)

    def test_partial_overlap(self):
        assert time_ranges_overlap(time(9), time(12), time(11), time(13))

    def test_back_to_back_shifts_do_not_overlap(self):
        # Half-open ranges: a shift ending at 12:00 and one starting at 12:00 can coexist
        assert not time_ranges_overlap(time(9), time(12), time(12), time(14))
        assert not time_ranges_overlap(time(12), time(14), time(9), time(12))

    def test_containment(self):
        assert time_ranges_overlap(time(8), time(13), time(10), time(11))


class TestDateWindowOverlap:
    @pytest.mark.parametrize(
        "candidate_from",
        [date(2024, 1, 1), date(2030, 6, 1), date(2999, 12, 31)],
    )
    def test_open_ended_rule_never_excluded_by_upper_bound(self, candidate_from):
        assert date_windows_overlap(date(2024, 1, 1), None, candidate_from, None)
        assert date_windows_overlap(
            date(2024, 1, 1), None, candidate_from, candidate_from
        )

    def test_candidate_before_open_ended_rule_starts(self):
        assert not date_windows_overlap(
            date(2024, 1, 1), None, date(2023, 1, 1), date(2023, 12, 31)
        )
        assert date_windows_overlap(date(2024, 1, 1), None, date(2023, 1, 1), None)

    def test_bounds_are_inclusive(self):
        assert date_windows_overlap(
            date(2024, 1, 1), date(2024, 3, 1), date(2024, 3, 1), date(2024, 4, 1)
        )
        assert not date_windows_overlap(
            date(2024, 1, 1), date(2024, 3, 1), date(2024, 3, 2), None
        )

    def test_symmetric(self):
        a = (date(2024, 1, 1), date(2024, 2, 1))
        b = (date(2024, 1, 15), None)
        assert date_windows_overlap(*a, *b) == date_windows_overlap(*b, *a)


def test_rules_overlap_needs_both_time_and_dates():
    existing = _window(time(9), time(12), date(2024, 1, 1), None)

    assert rules_overlap(existing, _window(time(11), time(13), date(2024, 6, 1)))
    assert not rules_overlap(existing, _window(time(12), time(14), date(2024, 6, 1)))
    assert not rules_overlap(
        existing, _window(time(11), time(13), date(2023, 1, 1), date(2023, 12, 31))
    )


class TestBuildConflictMessage:
    def test_single_day(self):
        assert build_conflict_message([1]) == "This roster overlaps an existing shift on Monday."

    def test_several_days(self):
        assert (
            build_conflict_message([1, 3])
            == "This roster overlaps existing shifts on Monday, Wednesday."
        )

    def test_unknown_day_falls_back(self):
        assert build_conflict_message([8]) == "This roster overlaps an existing shift on Day 8."


class TestRosterConflictCheckerService:
    def _checker(self):
        db = Mock(spec=Session)
        repository = Mock(spec=RosterRuleRepository)
        repository.dialect_name = "sqlite"
        return RosterConflictChecker(db, repository=repository), repository

    def test_returns_conflicting_rule(self):
        checker, repository = self._checker()
        blocking = Mock(id="01HZZZZZZZZZZZZZZZZZZZZZZZ")
        repository.find_conflict.return_value = blocking

        result = checker.find_conflict(
            "tenant", "inst", 1, time(11), time(13), date(2024, 6, 1), None
        )

        assert result is blocking
        repository.find_conflict.assert_called_once_with(
            "tenant", "inst", 1, time(11), time(13), date(2024, 6, 1), None, None
        )

    def test_query_failure_is_not_no_conflict(self):
        checker, repository = self._checker()
        repository.find_conflict.side_effect = RepositoryException("connection reset")

        with pytest.raises(ConflictCheckFailedException) as exc_info:
            checker.find_conflict("tenant", "inst", 1, time(9), time(10), date(2024, 1, 1))

        assert exc_info.value.to_http_exception().status_code == 500

    @pytest.mark.asyncio
    async def test_find_conflicting_days_collects_each_day(self):
        checker, repository = self._checker()
        repository.find_conflict.side_effect = (
            lambda tenant, instructor, day, *args: Mock(id=f"rule-{day}") if day in (1, 3) else None
        )

        days = await checker.find_conflicting_days(
            "tenant", "inst", [5, 3, 1, 3], time(9), time(10), date(2024, 1, 1)
        )

        assert days == [1, 3]
        assert repository.find_conflict.call_count == 3

    @pytest.mark.asyncio
    async def test_shared_session_days_run_off_the_event_loop(self):
        checker, repository = self._checker()
        loop_thread = threading.get_ident()
        query_threads = []

        def find_conflict(*args):
            query_threads.append(threading.get_ident())
            return None

        repository.find_conflict.side_effect = find_conflict

        days = await checker.find_conflicting_days(
            "tenant", "inst", [1, 2], time(9), time(10), date(2024, 1, 1)
        )

        assert days == []
        assert len(query_threads) == 2
        assert loop_thread not in query_threads

    @pytest.mark.asyncio
    async def test_find_conflicting_days_empty_input(self):
        checker, repository = self._checker()

        assert await checker.find_conflicting_days(
            "tenant", "inst", [], time(9), time(10), date(2024, 1, 1)
        ) == []
        repository.find_conflict.assert_not_called()

    @pytest.mark.asyncio
    async def test_any_failing_day_fails_the_whole_check(self):
        checker, repository = self._checker()

        def find_conflict(tenant, instructor, day, *args):
            if day == 2:
                raise RepositoryException("timeout")
            return None

        repository.find_conflict.side_effect = find_conflict

        with pytest.raises(ConflictCheckFailedException):
            await checker.find_conflicting_days(
                "tenant", "inst", [1, 2, 3], time(9), time(10), date(2024, 1, 1)
            )

    @pytest.mark.asyncio
    async def test_parallel_days_use_their_own_sessions(self, monkeypatch):
        db = Mock(spec=Session)
        repository = Mock(spec=RosterRuleRepository)
        repository.dialect_name = "postgresql"
        sessions = []

        def session_factory():
            session = Mock(spec=Session)
            sessions.append(session)
            return session

        day_repository = Mock(spec=RosterRuleRepository)
        day_repository.find_conflict.side_effect = (
            lambda tenant, instructor, day, *args: object() if day == 4 else None
        )
        monkeypatch.setattr(
            "aeroroster.services.roster_conflict_checker.RepositoryFactory."
            "create_roster_rule_repository",
            lambda session: day_repository,
        )

        checker = RosterConflictChecker(db, repository=repository, session_factory=session_factory)
        days = await checker.find_conflicting_days(
            "tenant", "inst", [2, 4], time(9), time(10), date(2024, 1, 1)
        )

        assert days == [4]
        assert len(sessions) == 2
        for session in sessions:
            session.close.assert_called_once()
        repository.find_conflict.assert_not_called()
