"""Single-purpose sign-in tokens for email (magic link) sign-in.

Delivering the link is left to a sender hook; the default one only records
that a link was issued.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

import jwt
import structlog

logger = structlog.get_logger(__name__)

_TOKEN_TYPE = "magic_link"


@dataclass(frozen=True, slots=True)
class MagicLinkClaim:
    user_id: str
    login_marker: str

    def matches(self, last_login_at: datetime | None) -> bool:
        """True while the user has not signed in since the link was issued."""
        return self.login_marker == login_marker(last_login_at)


def login_marker(last_login_at: datetime | None) -> str:
    return last_login_at.isoformat() if last_login_at is not None else ""


class MagicLinkSender(Protocol):
    async def send(self, *, email: str, link: str, tenant_id: str) -> None: ...


class LoggingMagicLinkSender:
    """Records issuance without delivering anything."""

    async def send(self, *, email: str, link: str, tenant_id: str) -> None:
        logger.info("magic_link_issued", email=email, tenant_id=tenant_id)


def create_magic_link_token(
    user_id: str,
    tenant_id: str,
    *,
    secret_key: str,
    max_age: int,
    last_login_at: datetime | None = None,
    algorithm: str = "HS256",
) -> str:
    now = int(time.time())
    claims = {
        "typ": _TOKEN_TYPE,
        "sub": user_id,
        "tenant_id": tenant_id,
        "llm": login_marker(last_login_at),
        "iat": now,
        "exp": now + max_age,
    }
    return jwt.encode(claims, secret_key, algorithm=algorithm)


def read_magic_link_token(
    token: str,
    *,
    secret_key: str,
    algorithm: str = "HS256",
) -> MagicLinkClaim | None:
    """Decode a magic-link token.

    The token is single use: it carries the user's last sign-in time at
    issuance, and any sign-in afterwards (including this one) invalidates it.
    """
    try:
        claims = jwt.decode(
            token,
            secret_key,
            algorithms=[algorithm],
            options={"require": ["sub", "exp", "iat", "llm"]},
        )
    except jwt.PyJWTError as exc:
        logger.info("magic_link_invalid", error=str(exc))
        return None
    if claims.get("typ") != _TOKEN_TYPE:
        return None
    return MagicLinkClaim(user_id=str(claims["sub"]), login_marker=str(claims.get("llm", "")))
