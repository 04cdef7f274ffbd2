"""FastAPI dependency injection for repositories and the authorization core."""

from __future__ import annotations

import structlog
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncEngine

from tripsaas.audit.logger import AuditLogger
from tripsaas.config.settings import get_settings
from tripsaas.storage.database import get_db_engine
from tripsaas.storage.repositories.resources import DatabaseResourceRepository
from tripsaas.storage.repositories.tenants import DatabaseTenantRepository
from tripsaas.storage.repositories.users import DatabaseUserRepository
from tripsaas.web.auth.credentials import CredentialVerifier
from tripsaas.web.auth.magic_link import LoggingMagicLinkSender, MagicLinkSender
from tripsaas.web.auth.session import SessionBinder, build_session_binder
from tripsaas.web.gate import RequestGate
from tripsaas.web.tenancy import TenantResolution, TenantResolver
from tripsaas.web.usage import PlanQuotaEnforcer

logger = structlog.get_logger(__name__)

_magic_link_sender: MagicLinkSender = LoggingMagicLinkSender()

# ── Repositories ──────────────────────────────────────────────────


async def get_tenant_repo(
    engine: AsyncEngine = Depends(get_db_engine),
) -> DatabaseTenantRepository:
    return DatabaseTenantRepository(engine)


async def get_user_repo(
    engine: AsyncEngine = Depends(get_db_engine),
) -> DatabaseUserRepository:
    return DatabaseUserRepository(engine)


async def get_resource_repo(
    engine: AsyncEngine = Depends(get_db_engine),
) -> DatabaseResourceRepository:
    return DatabaseResourceRepository(engine)


async def get_audit_logger(
    engine: AsyncEngine = Depends(get_db_engine),
) -> AuditLogger:
    return AuditLogger(engine)


# ── Authorization core ────────────────────────────────────────────


async def get_tenant_resolver(
    tenants: DatabaseTenantRepository = Depends(get_tenant_repo),
) -> TenantResolver:
    return TenantResolver(tenants)


async def get_session_binder(
    users: DatabaseUserRepository = Depends(get_user_repo),
) -> SessionBinder:
    return build_session_binder(users)


async def get_request_gate(
    binder: SessionBinder = Depends(get_session_binder),
) -> RequestGate:
    return RequestGate(binder, cookie_name=get_settings().session_cookie_name)


async def get_credential_verifier(
    users: DatabaseUserRepository = Depends(get_user_repo),
    resolver: TenantResolver = Depends(get_tenant_resolver),
) -> CredentialVerifier:
    return CredentialVerifier(users, resolver)


async def get_quota_enforcer(
    tenants: DatabaseTenantRepository = Depends(get_tenant_repo),
    resources: DatabaseResourceRepository = Depends(get_resource_repo),
) -> PlanQuotaEnforcer:
    return PlanQuotaEnforcer(tenants, resources)


def get_magic_link_sender() -> MagicLinkSender:
    return _magic_link_sender


async def resolve_request_tenant(
    request: Request,
    resolver: TenantResolver = Depends(get_tenant_resolver),
) -> TenantResolution:
    """Resolve the request's tenant and bind its slug to the log context."""
    resolution = await resolver.resolve_request(request)
    if resolution.tenant is not None:
        structlog.contextvars.bind_contextvars(tenant_slug=resolution.tenant.slug)
    return resolution
