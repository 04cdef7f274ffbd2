"""API request/response schemas for FastAPI endpoints."""

from __future__ import annotations

import json
from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from tripsaas.types import Plan, PlanResource, Role

if TYPE_CHECKING:
    from tripsaas.models.database import Tenant
    from tripsaas.web.auth.session import SessionSnapshot


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    email: str
    password: str


class MagicLinkRequest(BaseModel):
    email: str


class SessionResponse(BaseModel):
    user_id: str
    email: str
    tenant_id: str
    tenant_slug: str
    tenant_name: str
    role: Role
    plan: Plan
    expires_at: int

    @classmethod
    def from_snapshot(cls, snapshot: SessionSnapshot) -> SessionResponse:
        return cls(
            user_id=snapshot.user_id,
            email=snapshot.email,
            tenant_id=snapshot.tenant_id,
            tenant_slug=snapshot.tenant_slug,
            tenant_name=snapshot.tenant_name,
            role=snapshot.role,
            plan=snapshot.plan,
            expires_at=snapshot.expires_at,
        )


class LoginResponse(BaseModel):
    status: str = "ok"
    access_token: str
    token_type: str = "bearer"
    session: SessionResponse


# ---------------------------------------------------------------------------
# Tenants
# ---------------------------------------------------------------------------


class TenantPublicResponse(BaseModel):
    id: str
    slug: str
    name: str
    domain: str | None
    default_currency: str
    supported_currencies: list[str]
    default_locale: str
    supported_locales: list[str]
    contact_email: str | None
    country: str | None
    logo_url: str | None
    primary_color: str | None

    @classmethod
    def from_tenant(cls, tenant: Tenant) -> TenantPublicResponse:
        return cls(
            id=tenant.id,
            slug=tenant.slug,
            name=tenant.name,
            domain=tenant.domain,
            default_currency=tenant.default_currency,
            supported_currencies=json.loads(tenant.supported_currencies_json),
            default_locale=tenant.default_locale,
            supported_locales=json.loads(tenant.supported_locales_json),
            contact_email=tenant.contact_email,
            country=tenant.country,
            logo_url=tenant.logo_url,
            primary_color=tenant.primary_color,
        )


class TenantAdminResponse(BaseModel):
    id: str
    slug: str
    name: str
    domain: str | None
    plan: Plan
    is_active: bool
    created_at: datetime

    @classmethod
    def from_tenant(cls, tenant: Tenant) -> TenantAdminResponse:
        return cls(
            id=tenant.id,
            slug=tenant.slug,
            name=tenant.name,
            domain=tenant.domain,
            plan=Plan(tenant.plan),
            is_active=tenant.is_active,
            created_at=tenant.created_at,
        )


class TenantUpdate(BaseModel):
    plan: Plan | None = None
    is_active: bool | None = None
    name: str | None = Field(default=None, min_length=1)


class ReactivateRequest(BaseModel):
    email: str
    password: str


# ---------------------------------------------------------------------------
# Quota-counted resources
# ---------------------------------------------------------------------------


class TourCreate(BaseModel):
    name: str = Field(min_length=1)
    destination: str = ""
    price_cents: int = Field(default=0, ge=0)
    currency: str = "USD"


class TourResponse(BaseModel):
    id: str
    name: str
    destination: str
    price_cents: int
    currency: str
    created_at: datetime


class BookingCreate(BaseModel):
    customer_name: str = Field(min_length=1)
    customer_email: str = ""
    tour_id: str | None = None


class BookingResponse(BaseModel):
    id: str
    tour_id: str | None
    customer_name: str
    customer_email: str
    status: str
    created_at: datetime


class StaffCreate(BaseModel):
    email: str
    name: str = ""
    role: Role = Role.SALES
    password: str | None = Field(default=None, min_length=8)


class StaffResponse(BaseModel):
    id: str
    email: str
    name: str
    role: Role


class RoleUpdate(BaseModel):
    role: Role


# ---------------------------------------------------------------------------
# Billing
# ---------------------------------------------------------------------------


class ResourceUsageResponse(BaseModel):
    resource: PlanResource
    current: int
    limit: int
    unlimited: bool


class UsageResponse(BaseModel):
    tenant_id: str
    plan: Plan
    storage: str
    usage: list[ResourceUsageResponse]


class QuotaExceededResponse(BaseModel):
    code: str = "PLAN_LIMIT_EXCEEDED"
    detail: str
    resource: PlanResource
    limit: int
    current: int
