"""Plan usage and tenant reactivation."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request

from tripsaas.audit.logger import AuditLogger
from tripsaas.models.api import ReactivateRequest, ResourceUsageResponse, UsageResponse
from tripsaas.storage.repositories.tenants import DatabaseTenantRepository
from tripsaas.types import Permission, Role
from tripsaas.web.auth.credentials import CredentialVerifier
from tripsaas.web.auth.rbac import require_permission
from tripsaas.web.dependencies import (
    get_audit_logger,
    get_credential_verifier,
    get_quota_enforcer,
    get_tenant_repo,
)
from tripsaas.web.tenancy import RequestMeta
from tripsaas.web.tenant_context import TenantContext
from tripsaas.web.usage import PlanQuotaEnforcer

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["billing"])


@router.get("/api/billing/usage", response_model=UsageResponse)
async def plan_usage(
    tenant: TenantContext = Depends(require_permission(Permission.VIEW_REPORTS)),
    quota: PlanQuotaEnforcer = Depends(get_quota_enforcer),
) -> UsageResponse:
    snapshot = await quota.usage_snapshot(tenant.tenant_id)
    if snapshot is None:
        raise HTTPException(status_code=404, detail="Tenant not found")
    return UsageResponse(
        tenant_id=snapshot.tenant_id,
        plan=snapshot.plan,
        storage=snapshot.storage,
        usage=[
            ResourceUsageResponse(
                resource=u.resource, current=u.current, limit=u.limit, unlimited=u.unlimited
            )
            for u in snapshot.usage
        ],
    )


@router.post("/api/billing/reactivate")
async def reactivate_tenant(
    body: ReactivateRequest,
    request: Request,
    verifier: CredentialVerifier = Depends(get_credential_verifier),
    tenants: DatabaseTenantRepository = Depends(get_tenant_repo),
    audit: AuditLogger = Depends(get_audit_logger),
) -> dict[str, str]:
    """Reactivate a deactivated tenant with its admin's credentials.

    This is the one authenticated action a deactivated tenant may take.
    Payment collection is mocked: the renewal is accepted as paid.
    """
    identity = await verifier.verify(
        body.email, body.password, RequestMeta.from_request(request), allow_inactive=True
    )
    if identity is None or identity.role not in {Role.ADMIN, Role.SUPERADMIN}:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    tenant = await tenants.update(identity.tenant_id, is_active=True)
    if tenant is None:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    await audit.log(
        action="tenant.reactivated",
        tenant_id=tenant.id,
        user_id=identity.id,
        entity="tenant",
        entity_id=tenant.id,
        details={"plan": tenant.plan},
        request=request,
    )
    logger.info("tenant_reactivated", tenant_id=tenant.id, user_id=identity.id)
    return {"status": "active", "tenant_id": tenant.id}
