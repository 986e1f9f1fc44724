# backend/aeroroster/repositories/factory.py
"""
Repository Factory for the AeroRoster engine.

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .instructor_repository import InstructorRepository
    from .roster_rule_repository import RosterRuleRepository
    from .tenant_settings_repository import TenantSettingsRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_roster_rule_repository(db: Session) -> "RosterRuleRepository":
        """Create repository for roster rule storage primitives."""
        from .roster_rule_repository import RosterRuleRepository

        return RosterRuleRepository(db)

    @staticmethod
    def create_instructor_repository(db: Session) -> "InstructorRepository":
        """Create repository for instructor lookups."""
        from .instructor_repository import InstructorRepository

        return InstructorRepository(db)

    @staticmethod
    def create_tenant_settings_repository(db: Session) -> "TenantSettingsRepository":
        """Create repository for tenant settings."""
        from .tenant_settings_repository import TenantSettingsRepository

        return TenantSettingsRepository(db)
