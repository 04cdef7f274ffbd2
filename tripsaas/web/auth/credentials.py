"""Email/password verification against stored bcrypt hashes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from tripsaas.types import Plan, Role
from tripsaas.web.auth.passwords import burn_verification, verify_password

if TYPE_CHECKING:
    from tripsaas.models.database import Tenant, User
    from tripsaas.storage.repositories.users import DatabaseUserRepository
    from tripsaas.web.tenancy import RequestMeta, TenantResolver

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class AuthenticatedIdentity:
    """Minimal identity record handed to the session binder."""

    id: str
    email: str
    name: str
    tenant_id: str
    tenant_slug: str
    tenant_name: str
    role: Role
    plan: Plan

    @classmethod
    def from_rows(cls, user: User, tenant: Tenant) -> AuthenticatedIdentity:
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            tenant_id=tenant.id,
            tenant_slug=tenant.slug,
            tenant_name=tenant.name,
            role=Role(user.role),
            plan=Plan(tenant.plan),
        )


class CredentialVerifier:
    """Checks credentials and the request's tenant binding.

    Every rejection returns None; the reason is only logged, so callers
    cannot tell an unknown email from a wrong password, an inactive tenant
    or a cross-tenant attempt.
    """

    def __init__(self, users: DatabaseUserRepository, resolver: TenantResolver) -> None:
        self._users = users
        self._resolver = resolver

    async def verify(
        self,
        email: str,
        password: str,
        meta: RequestMeta | None = None,
        *,
        allow_inactive: bool = False,
    ) -> AuthenticatedIdentity | None:
        if not email or not password:
            return None

        email = email.strip().lower()
        resolution = await self._resolver.resolve(meta) if meta is not None else None

        found = await self._users.find_first_by_email(email)
        if found is None:
            burn_verification(password)
            return self._reject("unknown_email")
        user, tenant = found

        if not tenant.is_active and not allow_inactive:
            burn_verification(password)
            return self._reject("tenant_inactive", user_id=user.id, tenant_id=tenant.id)

        if not verify_password(password, user.hashed_password):
            return self._reject("bad_password", user_id=user.id, tenant_id=tenant.id)

        # Only a hint that resolved to a tenant restricts the login.
        if resolution is not None and resolution.found and resolution.tenant is not None:
            if resolution.tenant.id != user.tenant_id:
                return self._reject(
                    "cross_tenant",
                    user_id=user.id,
                    tenant_id=tenant.id,
                    requested_tenant_id=resolution.tenant.id,
                )

        return AuthenticatedIdentity.from_rows(user, tenant)

    @staticmethod
    def _reject(reason: str, **context: str | None) -> None:
        logger.info("credentials_rejected", reason=reason, **context)
        return None
