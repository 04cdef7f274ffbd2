"""Signed session tokens carrying a tenant-bound identity snapshot.

The snapshot (user, tenant, role, plan) is captured at sign-in and trusted
until the token expires or is refreshed. Role or plan changes made in the
meantime are not visible to requests holding an older token.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import jwt
import structlog

from tripsaas.config.settings import get_settings
from tripsaas.types import Plan, Role, SignInProvider
from tripsaas.web.auth.credentials import AuthenticatedIdentity

if TYPE_CHECKING:
    from tripsaas.storage.repositories.users import DatabaseUserRepository

logger = structlog.get_logger(__name__)

_REQUIRED_CLAIMS = ["sub", "exp", "iat", "tenant_id", "role", "plan"]
_TOKEN_TYPE = "session"


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    user_id: str
    tenant_id: str
    role: Role
    tenant_slug: str
    tenant_name: str
    plan: Plan
    email: str = ""
    provider: SignInProvider = SignInProvider.CREDENTIALS
    issued_at: int = 0
    expires_at: int = 0


class SessionBinder:
    """Issues and reads HMAC-signed JWT sessions."""

    def __init__(
        self,
        secret_key: str,
        max_age: int = 30 * 24 * 3600,
        algorithm: str = "HS256",
        users: DatabaseUserRepository | None = None,
    ) -> None:
        self._secret = secret_key
        self._max_age = max_age
        self._algorithm = algorithm
        self._users = users

    @property
    def max_age(self) -> int:
        return self._max_age

    def create_session(
        self,
        identity: AuthenticatedIdentity,
        provider: SignInProvider = SignInProvider.CREDENTIALS,
    ) -> str:
        """Return a signed token embedding the identity snapshot."""
        now = int(time.time())
        claims: dict[str, Any] = {
            "typ": _TOKEN_TYPE,
            "sub": identity.id,
            "email": identity.email,
            "tenant_id": identity.tenant_id,
            "tenant_slug": identity.tenant_slug,
            "tenant_name": identity.tenant_name,
            "role": identity.role.value,
            "plan": identity.plan.value,
            "provider": provider.value,
            "iat": now,
            "exp": now + self._max_age,
        }
        token = jwt.encode(claims, self._secret, algorithm=self._algorithm)
        logger.info(
            "session_created",
            user_id=identity.id,
            tenant_id=identity.tenant_id,
            provider=provider.value,
        )
        return token

    def read_session(self, token: str | None) -> SessionSnapshot | None:
        """Verify a token and return its snapshot, or None when unauthenticated."""
        if not token:
            return None
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": _REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError:
            logger.debug("session_expired")
            return None
        except jwt.PyJWTError as exc:
            logger.debug("session_invalid", error=str(exc))
            return None

        if claims.get("typ") != _TOKEN_TYPE:
            return None
        try:
            return SessionSnapshot(
                user_id=str(claims["sub"]),
                tenant_id=str(claims["tenant_id"]),
                role=Role(claims["role"]),
                tenant_slug=str(claims.get("tenant_slug", "")),
                tenant_name=str(claims.get("tenant_name", "")),
                plan=Plan(claims["plan"]),
                email=str(claims.get("email", "")),
                provider=SignInProvider(claims.get("provider", SignInProvider.CREDENTIALS)),
                issued_at=int(claims["iat"]),
                expires_at=int(claims["exp"]),
            )
        except (KeyError, ValueError) as exc:
            logger.warning("session_claims_malformed", error=str(exc))
            return None

    async def sign_in(self, user_id: str, provider: SignInProvider) -> str | None:
        """Issue a session for a user whose identity was already proven.

        Every sign-in path goes through here, so a deactivated tenant blocks
        credential, magic-link and federated sign-in alike. The snapshot is
        re-derived from the database rather than from the caller's identity.
        """
        if self._users is None:
            msg = "SessionBinder.sign_in requires a user repository"
            raise RuntimeError(msg)

        found = await self._users.get_with_tenant(user_id)
        if found is None:
            logger.info("sign_in_rejected", reason="unknown_user", user_id=user_id)
            return None
        user, tenant = found
        if not tenant.is_active:
            logger.info(
                "sign_in_rejected",
                reason="tenant_inactive",
                user_id=user_id,
                tenant_id=tenant.id,
            )
            return None

        await self._users.touch_last_login(user.id)
        logger.info(
            "user_signed_in", user_id=user.id, tenant_id=tenant.id, provider=provider.value
        )
        return self.create_session(AuthenticatedIdentity.from_rows(user, tenant), provider)

    async def refresh_session(self, token: str | None) -> str | None:
        """Re-derive the snapshot for the token's user, picking up role/plan changes."""
        snapshot = self.read_session(token)
        if snapshot is None:
            return None
        return await self.sign_in(snapshot.user_id, snapshot.provider)


def build_session_binder(users: DatabaseUserRepository | None = None) -> SessionBinder:
    """Create a binder from settings, optionally with a user repository for sign-in."""
    settings = get_settings()
    return SessionBinder(
        secret_key=settings.secret_key,
        max_age=settings.session_max_age,
        algorithm=settings.session_algorithm,
        users=users,
    )
