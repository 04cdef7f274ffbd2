"""Audit logger: immutable, insert-only audit trail.

Uses its own DB session so audit entries survive the caller's rollbacks.
Details are sanitized (sensitive keys stripped, 10KB max).
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import structlog
from sqlmodel.ext.asyncio.session import AsyncSession

from tripsaas.models.database import AuditLog

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine
    from starlette.requests import Request

logger = structlog.get_logger(__name__)

_SENSITIVE_FIELDS = frozenset(
    {
        "password",
        "hashed_password",
        "secret",
        "token",
        "access_token",
        "api_key",
        "secret_key",
        "authorization",
        "cookie",
        "session",
    }
)

_MAX_DETAILS_BYTES = 10_240


def _sanitize_details(details: dict[str, Any]) -> str:
    sanitized = {k: v for k, v in details.items() if k.lower() not in _SENSITIVE_FIELDS}
    encoded = json.dumps(sanitized, default=str)
    if len(encoded) > _MAX_DETAILS_BYTES:
        encoded = encoded[:_MAX_DETAILS_BYTES]
    return encoded


class AuditLogger:
    """Insert-only audit logger with its own DB session."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def log(
        self,
        *,
        action: str,
        tenant_id: str | None = None,
        user_id: str | None = None,
        entity: str = "",
        entity_id: str = "",
        details: dict[str, Any] | None = None,
        request: Request | None = None,
    ) -> None:
        """Write an audit entry. Failures are logged and never raised."""
        entry = AuditLog(
            tenant_id=tenant_id,
            user_id=user_id,
            action=action,
            entity=entity,
            entity_id=entity_id,
            details_json=_sanitize_details(details or {}),
            ip_address=request.client.host if request is not None and request.client else "",
            request_id=getattr(request.state, "request_id", "") if request is not None else "",
        )
        try:
            async with AsyncSession(self._engine) as session:
                session.add(entry)
                await session.commit()
        except Exception:
            # Audit must never break the request.
            logger.exception("audit_log_failed", action=action, tenant_id=tenant_id)
