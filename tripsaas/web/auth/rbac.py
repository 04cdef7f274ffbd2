"""Role-based access control dependencies for multi-tenant requests."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

import structlog
from fastapi import Depends, HTTPException, Request

from tripsaas.storage.repositories.tenants import DatabaseTenantRepository
from tripsaas.types import Permission, RejectReason, Role
from tripsaas.web.auth.permissions import has_permission
from tripsaas.web.dependencies import get_request_gate, get_tenant_repo
from tripsaas.web.gate import GateRejected, GateResult, RequestGate
from tripsaas.web.tenant_context import TenantContext

logger = structlog.get_logger(__name__)

TenantDependency = Callable[..., Awaitable[TenantContext]]


def _to_context(result: GateResult) -> TenantContext:
    if isinstance(result, GateRejected):
        if result.reason == RejectReason.UNAUTHENTICATED:
            raise HTTPException(status_code=401, detail="Not authenticated")
        raise HTTPException(status_code=403, detail="Forbidden")
    structlog.contextvars.bind_contextvars(
        tenant_id=result.tenant_id, user_id=result.user_id
    )
    return TenantContext.from_session(result.session)


async def require_session(
    request: Request,
    gate: RequestGate = Depends(get_request_gate),
) -> TenantContext:
    """Require any valid session."""
    return _to_context(gate.authorize(request))


def require_roles(*roles: Role) -> TenantDependency:
    """Require the session role to be one of ``roles``."""

    async def dependency(
        request: Request,
        gate: RequestGate = Depends(get_request_gate),
    ) -> TenantContext:
        return _to_context(gate.authorize(request, required_roles=roles))

    return dependency


async def require_active_tenant(
    tenant: TenantContext = Depends(require_session),
    tenants: DatabaseTenantRepository = Depends(get_tenant_repo),
) -> TenantContext:
    """Require a session whose tenant is still active.

    Sessions outlive deactivation, so the tenant row is checked on each call.
    """
    row = await tenants.get_by_id(tenant.tenant_id)
    if row is None or not row.is_active:
        logger.info("tenant_inactive_denied", user_id=tenant.user_id, tenant_id=tenant.tenant_id)
        raise HTTPException(status_code=403, detail="Tenant inactive")
    return tenant


def require_permission(permission: Permission) -> TenantDependency:
    """Require an active tenant and a session whose role grants ``permission``."""

    async def dependency(
        tenant: TenantContext = Depends(require_active_tenant),
    ) -> TenantContext:
        if not has_permission(tenant.role, permission):
            logger.info(
                "permission_denied",
                user_id=tenant.user_id,
                tenant_id=tenant.tenant_id,
                role=tenant.role.value,
            )
            raise HTTPException(status_code=403, detail="Forbidden")
        return tenant

    return dependency


require_superadmin = require_roles(Role.SUPERADMIN)
