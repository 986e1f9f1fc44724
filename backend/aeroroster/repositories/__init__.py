# backend/aeroroster/repositories/__init__.py
"""
Repository Pattern Implementation for the AeroRoster engine.

This package provides the repository layer for data access,
separating business logic from database queries.

Key Components:
- BaseRepository: Foundation for all repositories
- RepositoryFactory: Factory for creating repository instances
- RosterRuleRepository: Roster storage primitives (insert, natural key, conflicts)
- InstructorRepository: Tenant-scoped instructor lookups
- TenantSettingsRepository: Tenant settings document

Usage:
    from aeroroster.repositories import RepositoryFactory

    repository = RepositoryFactory.create_roster_rule_repository(db)
    rule = repository.find_by_id(tenant_id, rule_id)
"""

from .base_repository import BaseRepository, IRepository, is_unique_violation
from .factory import RepositoryFactory
from .instructor_repository import InstructorRepository
from .roster_rule_repository import RosterRuleRepository
from .tenant_settings_repository import TenantSettingsRepository

__all__ = [
    "BaseRepository",
    "IRepository",
    "InstructorRepository",
    "RepositoryFactory",
    "RosterRuleRepository",
    "TenantSettingsRepository",
    "is_unique_violation",
]
