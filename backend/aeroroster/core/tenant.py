"""Tenant context for roster callers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .enums import ROSTER_MANAGER_ROLES
from .exceptions import ForbiddenException, UnauthorizedException


@dataclass(frozen=True)
class TenantContext:
    """The resolved caller: who they are, their role, and which tenant they act in."""

    user_id: Optional[str]
    role: Optional[str]
    tenant_id: Optional[str]

    @property
    def can_manage_rosters(self) -> bool:
        return self.role in ROSTER_MANAGER_ROLES

    def require_tenant(self) -> str:
        """Return the tenant id, raising if the caller is anonymous or tenantless."""
        if not self.user_id:
            raise UnauthorizedException("Unauthorized", code="UNAUTHORIZED")
        if not self.tenant_id:
            raise UnauthorizedException("Missing tenant context", code="MISSING_TENANT")
        return self.tenant_id

    def require_roster_manager(self) -> str:
        tenant_id = self.require_tenant()
        if not self.can_manage_rosters:
            raise ForbiddenException(
                "Forbidden", code="FORBIDDEN", details={"role": self.role}
            )
        return tenant_id
