"""
Database models for the AeroRoster engine.

- Instructor: staff who hold roster rules
- RosterRule: instructor availability windows
- TenantSettings: per-tenant settings (business hours)
"""

from .instructor import Instructor
from .roster_rule import NATURAL_KEY_CONSTRAINT, RosterRule
from .tenant_settings import TenantSettings

__all__ = [
    "Instructor",
    "NATURAL_KEY_CONSTRAINT",
    "RosterRule",
    "TenantSettings",
]
