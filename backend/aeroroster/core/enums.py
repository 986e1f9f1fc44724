# backend/aeroroster/core/enums.py
"""
Core enums for the AeroRoster engine.

Role names arrive from the identity layer as plain strings; these enums
give them names inside the engine.
"""

from enum import Enum
from typing import FrozenSet


class RoleName(str, Enum):
    """Tenant roles known to the roster engine."""

    OWNER = "owner"
    ADMIN = "admin"
    INSTRUCTOR = "instructor"
    MEMBER = "member"
    STUDENT = "student"


class RosterValidationErrorKind(str, Enum):
    """Failure kinds produced by the roster window validator."""

    INVALID_TIME = "INVALID_TIME"
    END_BEFORE_START = "END_BEFORE_START"
    INVALID_DATE = "INVALID_DATE"
    RANGE_INVERTED = "RANGE_INVERTED"
    INVALID_DAY = "INVALID_DAY"


# Roles allowed to create, edit and void roster rules
ROSTER_MANAGER_ROLES: FrozenSet[str] = frozenset(
    {RoleName.OWNER.value, RoleName.ADMIN.value, RoleName.INSTRUCTOR.value}
)
