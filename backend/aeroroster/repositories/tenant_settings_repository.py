# backend/aeroroster/repositories/tenant_settings_repository.py
"""TenantSettings Repository for the AeroRoster engine."""

from typing import Any, Optional

from sqlalchemy.orm import Session

from ..models.tenant_settings import TenantSettings
from .base_repository import BaseRepository


class TenantSettingsRepository(BaseRepository[TenantSettings]):
    """Reads the per-tenant settings document."""

    def __init__(self, db: Session):
        super().__init__(db, TenantSettings)

    def get_settings(self, tenant_id: str) -> Optional[Any]:
        """Raw settings JSON for the tenant, or None when it has none."""
        row = self.find_one_by(tenant_id=tenant_id)
        return row.settings if row is not None else None
