# backend/aeroroster/models/tenant_settings.py
"""Per-tenant settings document (business hours drive the roster timeline)."""

from sqlalchemy import JSON, Column, DateTime, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from ..database import Base


class TenantSettings(Base):
    """Free-form JSON settings for a tenant."""

    __tablename__ = "tenant_settings"

    tenant_id = Column(String(36), primary_key=True)
    settings = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<TenantSettings {self.tenant_id}>"
