# backend/aeroroster/services/roster_conflict_checker.py
"""
Roster Conflict Checker Service for the AeroRoster engine.

Detects overlaps between a candidate roster window and the instructor's
live rules. Two rules conflict only when BOTH hold:

- their times overlap (half-open, so back-to-back shifts are fine)
- their effective-date windows overlap (a NULL end date runs forever)

A failed check is never reported as "no conflict": storage errors surface
as ConflictCheckFailedException.
"""

import asyncio
from datetime import date, time
import logging
from typing import Any, Callable, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import ConflictCheckFailedException, RepositoryException
from ..models.roster_rule import RosterRule
from ..repositories import RepositoryFactory
from ..repositories.roster_rule_repository import RosterRuleRepository
from ..utils.roster_time import unique_sorted_days, weekday_name
from .base import BaseService

logger = logging.getLogger(__name__)


def time_ranges_overlap(a_start: time, a_end: time, b_start: time, b_end: time) -> bool:
    """Half-open overlap of [a_start, a_end) and [b_start, b_end)."""
    return a_start < b_end and a_end > b_start


def date_windows_overlap(
    a_from: date, a_until: Optional[date], b_from: date, b_until: Optional[date]
) -> bool:
    """Inclusive date-window overlap where a None end means +infinity."""
    a_reaches_b = b_until is None or a_from <= b_until
    b_reaches_a = a_until is None or a_until >= b_from
    return a_reaches_b and b_reaches_a


def rules_overlap(a: Any, b: Any) -> bool:
    """
    In-memory version of the conflict predicate for two rule-like objects.

    Only compares windows; instructor, day and liveness are the caller's concern.
    """
    return time_ranges_overlap(
        a.start_time, a.end_time, b.start_time, b.end_time
    ) and date_windows_overlap(
        a.effective_from, a.effective_until, b.effective_from, b.effective_until
    )


def build_conflict_message(days: Iterable[int]) -> str:
    """
    Human-readable conflict message naming the weekday(s).

    >>> build_conflict_message([1])
    'This roster overlaps an existing shift on Monday.'
    """
    names = [weekday_name(day) for day in days]
    if not names:
        return ""
    if len(names) == 1:
        return f"This roster overlaps an existing shift on {names[0]}."
    return f"This roster overlaps existing shifts on {', '.join(names)}."


class RosterConflictChecker(BaseService):
    """
    Service for checking roster rule overlaps.

    Works against live rules only (is_active and not voided) for one
    instructor, one weekday at a time.
    """

    def __init__(
        self,
        db: Session,
        repository: Optional[RosterRuleRepository] = None,
        session_factory: Optional[Callable[[], Session]] = None,
    ):
        """
        Initialize roster conflict checker.

        Args:
            db: Database session
            repository: Optional RosterRuleRepository instance
            session_factory: Optional factory for per-day sessions; enables
                parallel multi-day checks on databases that allow it
        """
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_roster_rule_repository(db)
        self.session_factory = session_factory

    @BaseService.measure_operation("find_roster_conflict")
    def find_conflict(
        self,
        tenant_id: str,
        instructor_id: str,
        day_of_week: int,
        start_time: time,
        end_time: time,
        effective_from: date,
        effective_until: Optional[date] = None,
        exclude_rule_id: Optional[str] = None,
    ) -> Optional[RosterRule]:
        """
        Find a live rule overlapping the candidate on a single weekday.

        Args:
            tenant_id: Tenant scope
            instructor_id: The instructor to check
            day_of_week: 0-6, 0 = Sunday
            start_time / end_time: Candidate time range
            effective_from / effective_until: Candidate date window
            exclude_rule_id: Optional rule ID to exclude (the rule being edited)

        Returns:
            Any one conflicting rule, or None

        Raises:
            ConflictCheckFailedException: The query itself failed
        """
        try:
            conflict = self.repository.find_conflict(
                tenant_id,
                instructor_id,
                day_of_week,
                start_time,
                end_time,
                effective_from,
                effective_until,
                exclude_rule_id,
            )
        except RepositoryException as e:
            self.logger.error(
                f"Roster conflict check failed for instructor {instructor_id} "
                f"day {day_of_week}: {str(e)}"
            )
            raise ConflictCheckFailedException() from e

        if conflict is not None:
            self.logger.warning(
                f"Roster conflict for {instructor_id} on day {day_of_week} "
                f"{start_time}-{end_time} with rule {conflict.id}"
            )

        return conflict

    @BaseService.measure_operation("find_conflicting_days")
    async def find_conflicting_days(
        self,
        tenant_id: str,
        instructor_id: str,
        days: Iterable[int],
        start_time: time,
        end_time: time,
        effective_from: date,
        effective_until: Optional[date] = None,
        exclude_rule_id: Optional[str] = None,
    ) -> List[int]:
        """
        Check several weekdays at once and return those that conflict.

        Each unique day is checked independently; results are joined before
        returning. Per-day queries run in worker threads with their own
        sessions when a session factory is configured and the database is
        not SQLite, otherwise they run one after another on this service's
        session, still off the event loop.

        Returns:
            Conflicting days in ascending order
        """
        target_days = unique_sorted_days(days)
        if not target_days:
            return []

        def day_args(day: int) -> tuple:
            return (
                tenant_id,
                instructor_id,
                day,
                start_time,
                end_time,
                effective_from,
                effective_until,
                exclude_rule_id,
            )

        results: List[bool]
        if self._can_run_parallel():
            gathered = await asyncio.gather(
                *(
                    asyncio.to_thread(self._day_conflicts_isolated, *day_args(day))
                    for day in target_days
                )
            )
            results = list(gathered)
        else:
            # One session cannot serve concurrent queries; check the days in turn
            results = []
            for day in target_days:
                conflict = await asyncio.to_thread(self.find_conflict, *day_args(day))
                results.append(conflict is not None)

        conflicting = [day for day, has_conflict in zip(target_days, results) if has_conflict]

        if conflicting:
            self.logger.warning(
                f"Roster conflicts for {instructor_id} on days {conflicting} "
                f"{start_time}-{end_time}"
            )
        return conflicting

    def _can_run_parallel(self) -> bool:
        if self.session_factory is None or not settings.conflict_check_parallel:
            return False
        return self.repository.dialect_name != "sqlite"

    def _day_conflicts_isolated(
        self,
        tenant_id: str,
        instructor_id: str,
        day_of_week: int,
        start_time: time,
        end_time: time,
        effective_from: date,
        effective_until: Optional[date],
        exclude_rule_id: Optional[str],
    ) -> bool:
        """Single-day check on a dedicated session (runs in a worker thread)."""
        assert self.session_factory is not None
        session = self.session_factory()
        try:
            repository = RepositoryFactory.create_roster_rule_repository(session)
            conflict = repository.find_conflict(
                tenant_id,
                instructor_id,
                day_of_week,
                start_time,
                end_time,
                effective_from,
                effective_until,
                exclude_rule_id,
            )
            return conflict is not None
        except (RepositoryException, SQLAlchemyError) as e:
            self.logger.error(f"Parallel roster conflict check failed for day {day_of_week}: {str(e)}")
            raise ConflictCheckFailedException() from e
        finally:
            session.close()
