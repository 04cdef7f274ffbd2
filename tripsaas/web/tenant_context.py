"""Tenant context for multi-tenant request scoping."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from tripsaas.types import Permission, Plan, Role
from tripsaas.web.auth.permissions import has_permission

if TYPE_CHECKING:
    from tripsaas.web.auth.session import SessionSnapshot


@dataclass(frozen=True, slots=True)
class TenantContext:
    """Immutable tenant context carried through each request.

    Route handlers scope every persistence call by ``tenant_id``.
    """

    tenant_id: str
    user_id: str
    role: Role
    plan: Plan
    tenant_slug: str
    tenant_name: str
    email: str = ""

    @classmethod
    def from_session(cls, session: SessionSnapshot) -> TenantContext:
        return cls(
            tenant_id=session.tenant_id,
            user_id=session.user_id,
            role=session.role,
            plan=session.plan,
            tenant_slug=session.tenant_slug,
            tenant_name=session.tenant_name,
            email=session.email,
        )

    @property
    def is_superadmin(self) -> bool:
        return self.role == Role.SUPERADMIN

    def can(self, permission: Permission) -> bool:
        return has_permission(self.role, permission)
