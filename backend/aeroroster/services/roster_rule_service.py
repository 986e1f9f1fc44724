# backend/aeroroster/services/roster_rule_service.py
"""
Roster Rule Service for the AeroRoster engine.

Owns the roster rule lifecycle: create (with recycling of past one-off rules
that still hold the natural key), update, void, and reads.

Create protocol:
    1. Validate the window and check the instructor belongs to the tenant
    2. Reject overlaps with live rules
    3. Insert; on a natural-key collision fetch the holder of the key
    4. A one-off holder dated before the candidate is archived and the insert
       retried once. If the key is still taken the holder is rewritten in
       place with the candidate's values and reactivated.
    5. Any other holder is an exact-key conflict the user must resolve
"""

import asyncio
from datetime import date, datetime, timezone
import logging
from typing import Any, Dict, List, NoReturn, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import (
    ExactKeyConflictException,
    InstructorNotFoundException,
    PersistenceFailedException,
    RepositoryException,
    RosterConflictException,
    RosterRuleNotFoundException,
    ServiceException,
    UniqueViolationException,
)
from ..core.tenant import TenantContext
from ..models.roster_rule import RosterRule
from ..repositories import RepositoryFactory
from ..repositories.instructor_repository import InstructorRepository
from ..repositories.roster_rule_repository import RosterRuleRepository
from ..schemas.roster import (
    RosterConflictCheckRequest,
    RosterRuleCreate,
    RosterRuleInput,
    RosterWindowFields,
)
from .base import BaseService
from .roster_conflict_checker import RosterConflictChecker, build_conflict_message
from .roster_validator import RosterWindow, validate_roster_window

logger = logging.getLogger(__name__)

CREATE_FAILED_MESSAGE = "Failed to create roster entry"
UPDATE_FAILED_MESSAGE = "Failed to update roster entry"
VOID_FAILED_MESSAGE = "Failed to void roster entry"


def exact_key_conflict_message(existing: RosterRule) -> str:
    """User-facing message naming the effective range of the rule holding the key."""
    until = existing.effective_until.isoformat() if existing.effective_until else "ongoing"
    return (
        "A roster entry for this instructor, day and time already exists "
        f"(effective {existing.effective_from.isoformat()} to {until}). "
        "Edit that entry instead of creating a new one."
    )


def is_recycle_eligible(existing: RosterRule, candidate_from: date) -> bool:
    """
    Only a one-off rule dated strictly before the candidate may be recycled.

    Recurring rules and one-offs on or after the candidate's start are real
    history the user has to edit explicitly.
    """
    return existing.is_one_off and existing.effective_from < candidate_from


class RosterRuleService(BaseService):
    """
    Service layer for roster rule management.

    Every mutating operation takes the caller's TenantContext and requires a
    roster-managing role (owner, admin or instructor).
    """

    def __init__(
        self,
        db: Session,
        repository: Optional[RosterRuleRepository] = None,
        instructor_repository: Optional[InstructorRepository] = None,
        conflict_checker: Optional[RosterConflictChecker] = None,
    ):
        """
        Initialize roster rule service.

        Args:
            db: Database session
            repository: Optional RosterRuleRepository
            instructor_repository: Optional InstructorRepository
            conflict_checker: Optional RosterConflictChecker
        """
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_roster_rule_repository(db)
        self.instructor_repository = (
            instructor_repository or RepositoryFactory.create_instructor_repository(db)
        )
        self.conflict_checker = conflict_checker or RosterConflictChecker(
            db, repository=self.repository
        )

    # Reads

    @BaseService.measure_operation("get_roster_rule")
    def get_rule(self, context: TenantContext, rule_id: str) -> RosterRule:
        tenant_id = context.require_tenant()
        rule = self.repository.find_by_id(tenant_id, rule_id)
        if rule is None:
            raise RosterRuleNotFoundException(rule_id)
        return rule

    @BaseService.measure_operation("list_roster_rules")
    def list_rules(self, context: TenantContext, include_voided: bool = True) -> List[RosterRule]:
        """All rules in the caller's tenant ordered by weekday, then start time."""
        tenant_id = context.require_tenant()
        return self.repository.list_for_tenant(tenant_id, include_voided=include_voided)

    # Conflict preview

    @BaseService.measure_operation("check_roster_conflicts")
    async def check_conflicts(
        self, context: TenantContext, payload: RosterConflictCheckRequest
    ) -> List[int]:
        """
        Check a window against several weekdays without writing anything.

        Returns:
            An empty list when none of the days conflict

        Raises:
            RosterConflictException: With every conflicting day
        """
        tenant_id = context.require_roster_manager()
        window = self._validate(payload)
        await asyncio.to_thread(self._require_instructor, tenant_id, payload.instructor_id)

        conflicting = await self.conflict_checker.find_conflicting_days(
            tenant_id,
            payload.instructor_id,
            payload.days_of_week,
            window.start_time,
            window.end_time,
            window.effective_from,
            window.effective_until,
            exclude_rule_id=payload.exclude_rule_id,
        )
        if conflicting:
            raise RosterConflictException(conflicting, build_conflict_message(conflicting))
        return []

    # Writes

    @BaseService.measure_operation("create_roster_rules")
    async def create_rules(
        self, context: TenantContext, payload: RosterRuleCreate
    ) -> List[RosterRule]:
        """
        Create one rule per requested weekday.

        All days are checked for conflicts before the first insert, so a
        conflicting day means nothing is written. Inserts run one at a time in
        a worker thread since they share the request session.
        """
        days = payload.target_days
        if len(days) == 1:
            rule = await asyncio.to_thread(self.create_rule, context, payload.for_day(days[0]))
            return [rule]

        await self.check_conflicts(
            context,
            RosterConflictCheckRequest(
                instructor_id=payload.instructor_id,
                start_time=payload.start_time,
                end_time=payload.end_time,
                effective_from=payload.effective_from,
                effective_until=payload.effective_until,
                days_of_week=days,
            ),
        )

        self.log_operation(
            "create_roster_rules",
            tenant_id=context.tenant_id,
            instructor_id=payload.instructor_id,
            days=days,
        )
        rules: List[RosterRule] = []
        for day in days:
            rules.append(await asyncio.to_thread(self.create_rule, context, payload.for_day(day)))
        return rules

    @BaseService.measure_operation("create_roster_rule")
    def create_rule(self, context: TenantContext, payload: RosterRuleInput) -> RosterRule:
        """
        Create a single-weekday roster rule.

        Raises:
            RosterValidationException: Bad times or dates
            InstructorNotFoundException: Instructor not in the tenant
            RosterConflictException: Overlaps a live rule on that day
            ExactKeyConflictException: Key held by a rule that cannot be recycled
            PersistenceFailedException: Any other write failure
        """
        tenant_id = context.require_roster_manager()
        window = self._validate(payload)
        self._require_instructor(tenant_id, payload.instructor_id)

        conflict = self.conflict_checker.find_conflict(
            tenant_id,
            payload.instructor_id,
            payload.day_of_week,
            window.start_time,
            window.end_time,
            window.effective_from,
            window.effective_until,
        )
        if conflict is not None:
            days = [payload.day_of_week]
            raise RosterConflictException(days, build_conflict_message(days))

        fields = self._rule_fields(payload, window)

        try:
            with self.transaction():
                rule = self.repository.insert(tenant_id=tenant_id, **fields)
            self.logger.info(f"Created roster rule {rule.id} for instructor {payload.instructor_id}")
            return rule
        except UniqueViolationException:
            self.logger.info(
                f"Natural key taken for instructor {payload.instructor_id} "
                f"day {payload.day_of_week} {window.start_time}-{window.end_time}"
            )
        except (RepositoryException, ServiceException) as e:
            self._persistence_failed(CREATE_FAILED_MESSAGE, context, fields, e)

        return self._recycle(context, tenant_id, fields, window)

    @BaseService.measure_operation("update_roster_rule")
    def update_rule(
        self, context: TenantContext, rule_id: str, payload: RosterRuleInput
    ) -> RosterRule:
        """
        Replace every field of a rule and reactivate it.

        Editing a voided rule brings it back. A natural-key collision with a
        different row is reported as an exact-key conflict; update never recycles.
        """
        tenant_id = context.require_roster_manager()
        if self.repository.find_by_id(tenant_id, rule_id) is None:
            raise RosterRuleNotFoundException(rule_id)

        window = self._validate(payload)
        self._require_instructor(tenant_id, payload.instructor_id)

        conflict = self.conflict_checker.find_conflict(
            tenant_id,
            payload.instructor_id,
            payload.day_of_week,
            window.start_time,
            window.end_time,
            window.effective_from,
            window.effective_until,
            exclude_rule_id=rule_id,
        )
        if conflict is not None:
            days = [payload.day_of_week]
            raise RosterConflictException(days, build_conflict_message(days))

        patch = self._rule_fields(payload, window)
        patch["updated_at"] = datetime.now(timezone.utc)

        try:
            with self.transaction():
                rule = self.repository.update_by_id(tenant_id, rule_id, **patch)
        except UniqueViolationException:
            holder = self.repository.find_by_natural_key(
                tenant_id,
                payload.instructor_id,
                payload.day_of_week,
                window.start_time,
                window.end_time,
            )
            self._raise_exact_key_conflict(holder, patch)
        except (RepositoryException, ServiceException) as e:
            self._persistence_failed(UPDATE_FAILED_MESSAGE, context, patch, e)

        if rule is None:
            raise RosterRuleNotFoundException(rule_id)
        self.logger.info(f"Updated roster rule {rule_id}")
        return rule

    @BaseService.measure_operation("void_roster_rule")
    def void_rule(self, context: TenantContext, rule_id: str) -> RosterRule:
        """Soft-delete a rule. Voiding an already voided rule is allowed."""
        tenant_id = context.require_roster_manager()
        if self.repository.find_by_id(tenant_id, rule_id) is None:
            raise RosterRuleNotFoundException(rule_id)

        try:
            with self.transaction():
                rule = self.repository.archive(tenant_id, rule_id)
        except (RepositoryException, ServiceException) as e:
            self._persistence_failed(VOID_FAILED_MESSAGE, context, {"rule_id": rule_id}, e)

        if rule is None:
            raise RosterRuleNotFoundException(rule_id)
        self.logger.info(f"Voided roster rule {rule_id}")
        return rule

    # Recycling

    def _recycle(
        self,
        context: TenantContext,
        tenant_id: str,
        fields: Dict[str, Any],
        window: RosterWindow,
    ) -> RosterRule:
        """Resolve a natural-key collision on create."""
        try:
            existing = self.repository.find_by_natural_key(
                tenant_id,
                fields["instructor_id"],
                fields["day_of_week"],
                window.start_time,
                window.end_time,
            )
        except RepositoryException as e:
            self._persistence_failed(CREATE_FAILED_MESSAGE, context, fields, e)

        if existing is None:
            # The key holder disappeared between the insert and the lookup
            self._persistence_failed(
                CREATE_FAILED_MESSAGE, context, fields, "natural key holder not found"
            )

        if not is_recycle_eligible(existing, window.effective_from):
            self._raise_exact_key_conflict(existing, fields)

        existing_id = existing.id
        self.logger.info(
            f"Recycling one-off roster rule {existing_id} dated {existing.effective_from}"
        )

        try:
            with self.transaction():
                self.repository.archive(tenant_id, existing_id)
        except (RepositoryException, ServiceException) as e:
            self._persistence_failed(CREATE_FAILED_MESSAGE, context, fields, e)

        try:
            with self.transaction():
                rule = self.repository.insert(tenant_id=tenant_id, **fields)
            return rule
        except UniqueViolationException:
            self.logger.info(f"Key still held by {existing_id}; recycling it in place")
        except (RepositoryException, ServiceException) as e:
            self._persistence_failed(CREATE_FAILED_MESSAGE, context, fields, e)

        patch = dict(fields)
        patch["updated_at"] = datetime.now(timezone.utc)
        try:
            with self.transaction():
                recycled = self.repository.update_by_id(tenant_id, existing_id, **patch)
        except (RepositoryException, ServiceException) as e:
            self._persistence_failed(CREATE_FAILED_MESSAGE, context, fields, e)

        if recycled is None:
            self._persistence_failed(
                CREATE_FAILED_MESSAGE, context, fields, f"recycled rule {existing_id} vanished"
            )
        return recycled

    # Helpers

    def _validate(self, payload: RosterWindowFields) -> RosterWindow:
        result = validate_roster_window(
            payload.start_time,
            payload.end_time,
            payload.effective_from,
            payload.effective_until,
            getattr(payload, "day_of_week", None),
        )
        if not result.ok:
            raise result.to_exception()
        return result.value

    def _require_instructor(self, tenant_id: str, instructor_id: str) -> None:
        try:
            exists = self.instructor_repository.exists_in_tenant(tenant_id, instructor_id)
        except RepositoryException as e:
            self.logger.error(f"Instructor lookup failed for {instructor_id}: {str(e)}")
            raise PersistenceFailedException("Failed to verify instructor", cause=str(e)) from e
        if not exists:
            raise InstructorNotFoundException(instructor_id)

    @staticmethod
    def _rule_fields(payload: RosterRuleInput, window: RosterWindow) -> Dict[str, Any]:
        """Column values for a rule. The tenant is passed separately and never patched."""
        return {
            "instructor_id": payload.instructor_id,
            "day_of_week": payload.day_of_week,
            "start_time": window.start_time,
            "end_time": window.end_time,
            "effective_from": window.effective_from,
            "effective_until": window.effective_until,
            "notes": payload.notes,
            "is_active": True,
            "voided_at": None,
        }

    def _raise_exact_key_conflict(
        self, existing: Optional[RosterRule], fields: Dict[str, Any]
    ) -> NoReturn:
        if existing is None:
            raise ExactKeyConflictException(
                "A roster entry for this instructor, day and time already exists. "
                "Edit that entry instead of creating a new one."
            )
        self.logger.warning(
            f"Exact-key roster conflict with rule {existing.id} "
            f"({existing.effective_range_label()}) for instructor {fields.get('instructor_id')}"
        )
        raise ExactKeyConflictException(
            exact_key_conflict_message(existing),
            existing_rule_id=existing.id,
            effective_from=existing.effective_from.isoformat(),
            effective_until=(
                existing.effective_until.isoformat() if existing.effective_until else None
            ),
        )

    def _persistence_failed(
        self,
        message: str,
        context: TenantContext,
        payload: Dict[str, Any],
        cause: Any,
    ) -> NoReturn:
        cause_text = str(cause)
        self.logger.error(
            f"{message}: tenant={context.tenant_id} actor={context.user_id} "
            f"payload={payload!r} cause={cause_text}"
        )
        if isinstance(cause, BaseException):
            raise PersistenceFailedException(message, cause=cause_text) from cause
        raise PersistenceFailedException(message, cause=cause_text)
