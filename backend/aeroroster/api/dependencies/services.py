# backend/aeroroster/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

import logging
from typing import Callable

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.roster_conflict_checker import RosterConflictChecker
from ...services.roster_rule_service import RosterRuleService
from ...services.roster_timeline import RosterTimelineService
from .database import get_db, get_session_factory

logger = logging.getLogger(__name__)


def get_roster_conflict_checker(
    db: Session = Depends(get_db),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
) -> RosterConflictChecker:
    """
    Get roster conflict checker instance.

    Args:
        db: Database session
        session_factory: Factory for per-day sessions on parallel checks

    Returns:
        RosterConflictChecker instance
    """
    return RosterConflictChecker(db, session_factory=session_factory)


def get_roster_rule_service(
    db: Session = Depends(get_db),
    conflict_checker: RosterConflictChecker = Depends(get_roster_conflict_checker),
) -> RosterRuleService:
    """Get RosterRuleService instance with proper dependencies."""
    return RosterRuleService(db, conflict_checker=conflict_checker)


def get_roster_timeline_service(db: Session = Depends(get_db)) -> RosterTimelineService:
    """Get RosterTimelineService instance."""
    return RosterTimelineService(db)
