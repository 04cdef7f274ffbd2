"""Request gate: the one authorization call route handlers make."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from tripsaas.types import RejectReason, Role

if TYPE_CHECKING:
    from starlette.requests import Request

    from tripsaas.web.auth.session import SessionBinder, SessionSnapshot

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class GateAllowed:
    tenant_id: str
    user_id: str
    session: SessionSnapshot


@dataclass(frozen=True, slots=True)
class GateRejected:
    reason: RejectReason


GateResult = GateAllowed | GateRejected


def extract_token(request: Request, cookie_name: str = "session") -> str | None:
    """Session token from the cookie, else from an ``Authorization: Bearer`` header."""
    token = request.cookies.get(cookie_name)
    if token:
        return token
    auth_header = request.headers.get("authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return None


class RequestGate:
    """Accepts or rejects a request from its session and the roles it needs.

    Quota checks are not part of the gate; create-type handlers call the
    quota enforcer themselves.
    """

    def __init__(self, binder: SessionBinder, cookie_name: str = "session") -> None:
        self._binder = binder
        self._cookie_name = cookie_name

    def authorize(
        self,
        request: Request,
        required_roles: Iterable[Role] | None = None,
    ) -> GateResult:
        return self.authorize_token(extract_token(request, self._cookie_name), required_roles)

    def authorize_token(
        self,
        token: str | None,
        required_roles: Iterable[Role] | None = None,
    ) -> GateResult:
        session = self._binder.read_session(token)
        if session is None:
            return GateRejected(RejectReason.UNAUTHENTICATED)

        if required_roles is not None and session.role not in frozenset(required_roles):
            logger.info(
                "request_forbidden",
                user_id=session.user_id,
                tenant_id=session.tenant_id,
                role=session.role.value,
            )
            return GateRejected(RejectReason.FORBIDDEN)

        return GateAllowed(tenant_id=session.tenant_id, user_id=session.user_id, session=session)
