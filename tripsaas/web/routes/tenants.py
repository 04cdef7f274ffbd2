"""Public tenant lookup and superadmin tenant administration."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request

from tripsaas.audit.logger import AuditLogger
from tripsaas.config.settings import get_settings
from tripsaas.models.api import TenantAdminResponse, TenantPublicResponse, TenantUpdate
from tripsaas.storage.repositories.tenants import DatabaseTenantRepository
from tripsaas.types import ResolutionStatus
from tripsaas.web.auth.rbac import require_superadmin
from tripsaas.web.dependencies import get_audit_logger, get_tenant_repo, resolve_request_tenant
from tripsaas.web.tenancy import TenantResolution
from tripsaas.web.tenant_context import TenantContext

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["tenants"])


@router.get("/api/tenant", response_model=TenantPublicResponse)
async def current_tenant(
    resolution: TenantResolution = Depends(resolve_request_tenant),
    tenants: DatabaseTenantRepository = Depends(get_tenant_repo),
) -> TenantPublicResponse:
    """Resolve the tenant for this host.

    An unknown tenant is a normal routing outcome and answers 404. When the
    request carries no tenant hint at all, the configured default tenant is
    used if there is one.
    """
    tenant = resolution.tenant
    if resolution.status == ResolutionStatus.NO_HINT:
        default_slug = get_settings().default_tenant_slug
        tenant = await tenants.get_by_slug(default_slug) if default_slug else None

    if tenant is None or not tenant.is_active:
        raise HTTPException(status_code=404, detail="Tenant not found")
    return TenantPublicResponse.from_tenant(tenant)


# ---------------------------------------------------------------------------
# Superadmin
# ---------------------------------------------------------------------------


@router.get("/api/superadmin/tenants", response_model=list[TenantAdminResponse])
async def list_tenants(
    _admin: TenantContext = Depends(require_superadmin),
    tenants: DatabaseTenantRepository = Depends(get_tenant_repo),
) -> list[TenantAdminResponse]:
    return [TenantAdminResponse.from_tenant(t) for t in await tenants.list_all()]


@router.patch("/api/superadmin/tenants/{tenant_id}", response_model=TenantAdminResponse)
async def update_tenant(
    tenant_id: str,
    body: TenantUpdate,
    request: Request,
    admin: TenantContext = Depends(require_superadmin),
    tenants: DatabaseTenantRepository = Depends(get_tenant_repo),
    audit: AuditLogger = Depends(get_audit_logger),
) -> TenantAdminResponse:
    """Change a tenant's plan, name or active flag.

    Sessions already issued for the tenant keep their old plan until they
    are refreshed.
    """
    tenant = await tenants.update(
        tenant_id, plan=body.plan, is_active=body.is_active, name=body.name
    )
    if tenant is None:
        raise HTTPException(status_code=404, detail="Tenant not found")

    await audit.log(
        action="tenant.updated",
        tenant_id=tenant.id,
        user_id=admin.user_id,
        entity="tenant",
        entity_id=tenant.id,
        details=body.model_dump(exclude_none=True, mode="json"),
        request=request,
    )
    return TenantAdminResponse.from_tenant(tenant)
