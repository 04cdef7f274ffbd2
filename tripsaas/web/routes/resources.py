"""Quota-checked creates for tours, bookings and staff.

Each create runs the plan quota check immediately before the insert, inside
the same request.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request

from tripsaas.audit.logger import AuditLogger
from tripsaas.exceptions import StorageError
from tripsaas.models.api import (
    BookingCreate,
    BookingResponse,
    RoleUpdate,
    StaffCreate,
    StaffResponse,
    TourCreate,
    TourResponse,
)
from tripsaas.models.database import Booking, Tour
from tripsaas.storage.repositories.resources import DatabaseResourceRepository
from tripsaas.storage.repositories.users import DatabaseUserRepository
from tripsaas.types import Permission, PlanResource, Role
from tripsaas.web.auth.passwords import hash_password
from tripsaas.web.auth.rbac import require_permission
from tripsaas.web.dependencies import (
    get_audit_logger,
    get_quota_enforcer,
    get_resource_repo,
    get_user_repo,
)
from tripsaas.web.tenant_context import TenantContext
from tripsaas.web.usage import PlanQuotaEnforcer

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["resources"])


@router.post("/api/tours", response_model=TourResponse, status_code=201)
async def create_tour(
    body: TourCreate,
    tenant: TenantContext = Depends(require_permission(Permission.MANAGE_TOURS)),
    quota: PlanQuotaEnforcer = Depends(get_quota_enforcer),
    resources: DatabaseResourceRepository = Depends(get_resource_repo),
) -> TourResponse:
    await quota.enforce(tenant.tenant_id, PlanResource.TOURS)
    tour = await resources.create_tour(Tour(tenant_id=tenant.tenant_id, **body.model_dump()))
    return TourResponse.model_validate(tour, from_attributes=True)


@router.post("/api/bookings", response_model=BookingResponse, status_code=201)
async def create_booking(
    body: BookingCreate,
    tenant: TenantContext = Depends(require_permission(Permission.MANAGE_BOOKINGS)),
    quota: PlanQuotaEnforcer = Depends(get_quota_enforcer),
    resources: DatabaseResourceRepository = Depends(get_resource_repo),
) -> BookingResponse:
    if body.tour_id is not None and await resources.get_tour(tenant.tenant_id, body.tour_id) is None:
        raise HTTPException(status_code=404, detail="Tour not found")
    await quota.enforce(tenant.tenant_id, PlanResource.BOOKINGS)
    booking = await resources.create_booking(
        Booking(tenant_id=tenant.tenant_id, **body.model_dump())
    )
    return BookingResponse.model_validate(booking, from_attributes=True)


@router.post("/api/staff", response_model=StaffResponse, status_code=201)
async def create_staff(
    body: StaffCreate,
    request: Request,
    tenant: TenantContext = Depends(require_permission(Permission.MANAGE_STAFF)),
    quota: PlanQuotaEnforcer = Depends(get_quota_enforcer),
    users: DatabaseUserRepository = Depends(get_user_repo),
    audit: AuditLogger = Depends(get_audit_logger),
) -> StaffResponse:
    if body.role == Role.SUPERADMIN and not tenant.is_superadmin:
        raise HTTPException(status_code=403, detail="Forbidden")
    if await users.get_by_email_in_tenant(tenant.tenant_id, body.email) is not None:
        raise HTTPException(status_code=409, detail="A staff member with this email exists")

    await quota.enforce(tenant.tenant_id, PlanResource.STAFF)
    try:
        user = await users.create(
            tenant_id=tenant.tenant_id,
            email=body.email,
            name=body.name,
            role=body.role,
            hashed_password=hash_password(body.password) if body.password else None,
        )
    except StorageError as exc:
        raise HTTPException(status_code=409, detail="A staff member with this email exists") from exc
    await audit.log(
        action="staff.created",
        tenant_id=tenant.tenant_id,
        user_id=tenant.user_id,
        entity="user",
        entity_id=user.id,
        details={"role": user.role},
        request=request,
    )
    return StaffResponse(id=user.id, email=user.email, name=user.name, role=Role(user.role))


@router.patch("/api/staff/{user_id}/role", response_model=StaffResponse)
async def change_staff_role(
    user_id: str,
    body: RoleUpdate,
    request: Request,
    tenant: TenantContext = Depends(require_permission(Permission.MANAGE_STAFF)),
    users: DatabaseUserRepository = Depends(get_user_repo),
    audit: AuditLogger = Depends(get_audit_logger),
) -> StaffResponse:
    """Change a staff member's role. Takes effect at their next sign-in or refresh."""
    target = await users.get_by_id(user_id)
    if target is None or (target.tenant_id != tenant.tenant_id and not tenant.is_superadmin):
        raise HTTPException(status_code=404, detail="User not found")
    if Role.SUPERADMIN in (body.role, Role(target.role)) and not tenant.is_superadmin:
        raise HTTPException(status_code=403, detail="Forbidden")

    updated = await users.update_role(user_id, body.role)
    if updated is None:
        raise HTTPException(status_code=404, detail="User not found")
    await audit.log(
        action="staff.role_changed",
        tenant_id=updated.tenant_id,
        user_id=tenant.user_id,
        entity="user",
        entity_id=updated.id,
        details={"from": target.role, "to": updated.role},
        request=request,
    )
    return StaffResponse(
        id=updated.id, email=updated.email, name=updated.name, role=Role(updated.role)
    )
