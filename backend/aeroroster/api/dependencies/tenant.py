# backend/aeroroster/api/dependencies/tenant.py
"""
Caller identity dependencies.

The gateway in front of the engine authenticates the user and forwards who
they are as headers. Missing values are passed through as None; the service
layer decides whether that is an error.
"""

from typing import Optional

from fastapi import Header

from ...core.tenant import TenantContext


def get_tenant_context(
    x_user_id: Optional[str] = Header(None, alias="X-User-ID"),
    x_user_role: Optional[str] = Header(None, alias="X-User-Role"),
    x_tenant_id: Optional[str] = Header(None, alias="X-Tenant-ID"),
) -> TenantContext:
    """Build the TenantContext for the current request."""
    role = x_user_role.strip().lower() if x_user_role else None
    return TenantContext(
        user_id=x_user_id.strip() if x_user_id else None,
        role=role or None,
        tenant_id=x_tenant_id.strip() if x_tenant_id else None,
    )
