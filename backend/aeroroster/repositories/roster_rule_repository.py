# backend/aeroroster/repositories/roster_rule_repository.py
"""
RosterRule Repository for the AeroRoster engine.

Storage primitives consumed by the conflict checker and the lifecycle
service. Every query is filtered by tenant.

Key queries:
- Natural-key lookup (matches live AND voided rows)
- Live-rule overlap lookup for conflict detection
"""

from datetime import date, datetime, time, timezone
import logging
from typing import Any, List, Optional, cast

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.roster_rule import RosterRule
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class RosterRuleRepository(BaseRepository[RosterRule]):
    """
    Repository for roster rule data access.

    Works with tenant-scoped roster rules. Writes flush but never commit.
    """

    def __init__(self, db: Session):
        """Initialize with RosterRule model as primary."""
        super().__init__(db, RosterRule)
        self.logger = logging.getLogger(__name__)

    # Writes

    def insert(self, **fields: Any) -> RosterRule:
        """
        Insert a roster rule.

        Raises:
            UniqueViolationException: The natural key is already taken (live or voided)
            RepositoryException: Any other write failure
        """
        return self.create(**fields)

    def update_by_id(self, tenant_id: str, rule_id: str, **patch: Any) -> Optional[RosterRule]:
        """
        Apply ``patch`` to a rule inside the tenant.

        Returns:
            The updated rule, or None if it does not exist in the tenant
        """
        rule = self.find_by_id(tenant_id, rule_id)
        if rule is None:
            return None
        try:
            return self._apply_update(rule, **patch)
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating roster rule {rule_id}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to update roster rule: {str(e)}")

    def archive(self, tenant_id: str, rule_id: str) -> Optional[RosterRule]:
        """Void a rule: inactive, ``voided_at`` stamped. Other fields untouched."""
        now = datetime.now(timezone.utc)
        return self.update_by_id(
            tenant_id, rule_id, is_active=False, voided_at=now, updated_at=now
        )

    # Reads

    def find_by_id(self, tenant_id: str, rule_id: str) -> Optional[RosterRule]:
        try:
            result = (
                self.db.query(RosterRule)
                .filter(RosterRule.tenant_id == tenant_id, RosterRule.id == rule_id)
                .first()
            )
            return cast(Optional[RosterRule], result)
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting roster rule {rule_id}: {str(e)}")
            raise RepositoryException(f"Failed to get roster rule: {str(e)}")

    def find_by_natural_key(
        self,
        tenant_id: str,
        instructor_id: str,
        day_of_week: int,
        start_time: time,
        end_time: time,
    ) -> Optional[RosterRule]:
        """
        Get the single row holding a natural key, whether live or voided.
        """
        try:
            result = (
                self.db.query(RosterRule)
                .filter(
                    RosterRule.tenant_id == tenant_id,
                    RosterRule.instructor_id == instructor_id,
                    RosterRule.day_of_week == day_of_week,
                    RosterRule.start_time == start_time,
                    RosterRule.end_time == end_time,
                )
                .first()
            )
            return cast(Optional[RosterRule], result)
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting roster rule by natural key: {str(e)}")
            raise RepositoryException(f"Failed to get roster rule by key: {str(e)}")

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
        Get a live rule that overlaps the candidate window on one weekday.

        Overlap requires both:
        - time: existing.start < candidate.end AND existing.end > candidate.start
        - dates: existing.from <= candidate.until (open = +inf) AND
          (existing.until IS NULL OR existing.until >= candidate.from)

        Args:
            tenant_id: Tenant scope
            instructor_id: The instructor to check
            day_of_week: 0-6, 0 = Sunday
            start_time / end_time: Candidate time range
            effective_from / effective_until: Candidate date window
            exclude_rule_id: Rule to ignore (editing a rule against itself)

        Returns:
            Any one conflicting rule, or None
        """
        try:
            query = self.db.query(RosterRule).filter(
                RosterRule.tenant_id == tenant_id,
                RosterRule.instructor_id == instructor_id,
                RosterRule.day_of_week == day_of_week,
                RosterRule.is_active.is_(True),
                RosterRule.voided_at.is_(None),
                RosterRule.start_time < end_time,
                RosterRule.end_time > start_time,
                or_(
                    RosterRule.effective_until.is_(None),
                    RosterRule.effective_until >= effective_from,
                ),
            )

            if effective_until is not None:
                query = query.filter(RosterRule.effective_from <= effective_until)

            if exclude_rule_id:
                query = query.filter(RosterRule.id != exclude_rule_id)

            return cast(Optional[RosterRule], query.first())
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking roster conflicts: {str(e)}")
            raise RepositoryException(f"Failed to check roster conflicts: {str(e)}")

    def list_for_tenant(
        self, tenant_id: str, include_voided: bool = True
    ) -> List[RosterRule]:
        """All rules in the tenant ordered by weekday then start time."""
        query = self._build_query().filter(RosterRule.tenant_id == tenant_id)
        if not include_voided:
            query = query.filter(RosterRule.is_active.is_(True), RosterRule.voided_at.is_(None))
        query = query.order_by(
            RosterRule.day_of_week, RosterRule.start_time, RosterRule.instructor_id
        )
        return self._execute_query(query)
