# backend/aeroroster/repositories/instructor_repository.py
"""
Instructor Repository for the AeroRoster engine.

Tenant-scoped instructor lookups used by roster validation and the timeline.
"""

import logging
from typing import List, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.instructor import Instructor
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class InstructorRepository(BaseRepository[Instructor]):
    """Repository for instructor reads."""

    def __init__(self, db: Session):
        super().__init__(db, Instructor)

    def exists_in_tenant(self, tenant_id: str, instructor_id: str) -> bool:
        """Whether ``instructor_id`` belongs to ``tenant_id``."""
        return self.exists(tenant_id=tenant_id, id=instructor_id)

    def list_for_tenant(self, tenant_id: str) -> List[Instructor]:
        """Instructors in the tenant, actively instructing first, then by name."""
        try:
            return cast(
                List[Instructor],
                self.db.query(Instructor)
                .filter(Instructor.tenant_id == tenant_id)
                .order_by(
                    Instructor.is_actively_instructing.desc(),
                    Instructor.last_name,
                    Instructor.first_name,
                )
                .all(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing instructors: {str(e)}")
            raise RepositoryException(f"Failed to list instructors: {str(e)}")
