"""SQLModel database table models."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from tripsaas.types import Plan, Role


def _utc_now() -> datetime:
    """Return current UTC time as naive datetime for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


def _new_uuid() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Tenancy
# ---------------------------------------------------------------------------


class Tenant(SQLModel, table=True):
    __tablename__ = "tenants"

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    slug: str = Field(unique=True, index=True)
    domain: str | None = Field(default=None, unique=True)
    name: str
    plan: str = Field(default=Plan.FREE.value)
    is_active: bool = Field(default=True)

    default_currency: str = Field(default="USD")
    supported_currencies_json: str = Field(default='["USD"]')
    default_locale: str = Field(default="en")
    supported_locales_json: str = Field(default='["en"]')

    contact_email: str | None = None
    contact_phone: str | None = None
    country: str | None = None

    logo_url: str | None = None
    primary_color: str | None = None

    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


class User(SQLModel, table=True):
    __tablename__ = "users"
    # Email is unique per tenant, not globally.
    __table_args__ = (UniqueConstraint("tenant_id", "email", name="uq_users_tenant_email"),)

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    tenant_id: str = Field(foreign_key="tenants.id", index=True)
    email: str = Field(index=True)
    name: str = ""
    hashed_password: str | None = None
    role: str = Field(default=Role.USER.value)
    last_login_at: datetime | None = None
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


# ---------------------------------------------------------------------------
# Quota-counted resources
# ---------------------------------------------------------------------------


class Tour(SQLModel, table=True):
    __tablename__ = "tours"

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    tenant_id: str = Field(foreign_key="tenants.id", index=True)
    name: str
    destination: str = ""
    price_cents: int = Field(default=0)
    currency: str = Field(default="USD")
    created_at: datetime = Field(default_factory=_utc_now)


class Booking(SQLModel, table=True):
    __tablename__ = "bookings"

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    tenant_id: str = Field(foreign_key="tenants.id", index=True)
    tour_id: str | None = Field(default=None, foreign_key="tours.id", index=True)
    customer_name: str
    customer_email: str = ""
    status: str = Field(default="pending")  # pending | confirmed | cancelled
    created_at: datetime = Field(default_factory=_utc_now)


# ---------------------------------------------------------------------------
# Audit trail
# ---------------------------------------------------------------------------


class AuditLog(SQLModel, table=True):
    __tablename__ = "audit_logs"

    id: str = Field(default_factory=_new_uuid, primary_key=True)
    tenant_id: str | None = Field(default=None, index=True)
    user_id: str | None = None
    action: str = Field(index=True)
    entity: str = ""
    entity_id: str = ""
    details_json: str = "{}"
    ip_address: str = ""
    request_id: str = ""
    created_at: datetime = Field(default_factory=_utc_now)
