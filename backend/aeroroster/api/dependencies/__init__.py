# backend/aeroroster/api/dependencies/__init__.py
"""
Centralized dependency injection for the AeroRoster API.

Usage:
    from aeroroster.api.dependencies import get_tenant_context, get_roster_rule_service
"""

from .database import get_db, get_session_factory
from .services import (
    get_roster_conflict_checker,
    get_roster_rule_service,
    get_roster_timeline_service,
)
from .tenant import get_tenant_context

__all__ = [
    "get_db",
    "get_roster_conflict_checker",
    "get_roster_rule_service",
    "get_roster_timeline_service",
    "get_session_factory",
    "get_tenant_context",
]
