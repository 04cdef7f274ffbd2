"""Authentication routes: password login, magic link, refresh and logout."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import RedirectResponse

from tripsaas.audit.logger import AuditLogger
from tripsaas.config.settings import get_settings
from tripsaas.models.api import LoginRequest, LoginResponse, MagicLinkRequest, SessionResponse
from tripsaas.storage.repositories.users import DatabaseUserRepository
from tripsaas.types import SignInProvider
from tripsaas.web.auth.credentials import CredentialVerifier
from tripsaas.web.auth.magic_link import (
    MagicLinkSender,
    create_magic_link_token,
    read_magic_link_token,
)
from tripsaas.web.auth.session import SessionBinder
from tripsaas.web.dependencies import (
    get_audit_logger,
    get_credential_verifier,
    get_magic_link_sender,
    get_request_gate,
    get_session_binder,
    get_tenant_resolver,
    get_user_repo,
)
from tripsaas.web.gate import GateRejected, RequestGate, extract_token
from tripsaas.web.tenancy import RequestMeta, TenantResolver

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["auth"])

_INVALID_CREDENTIALS = "Invalid credentials"


def _set_session_cookie(response: Response, token: str, max_age: int) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        secure=not settings.debug,
        samesite="lax",
        max_age=max_age,
    )


def _login_response(response: Response, binder: SessionBinder, token: str) -> LoginResponse:
    snapshot = binder.read_session(token)
    if snapshot is None:
        raise HTTPException(status_code=500, detail="Session could not be issued")
    _set_session_cookie(response, token, binder.max_age)
    return LoginResponse(access_token=token, session=SessionResponse.from_snapshot(snapshot))


# ---------------------------------------------------------------------------
# Password login
# ---------------------------------------------------------------------------


@router.post("/api/auth/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    verifier: CredentialVerifier = Depends(get_credential_verifier),
    binder: SessionBinder = Depends(get_session_binder),
    audit: AuditLogger = Depends(get_audit_logger),
) -> LoginResponse:
    """Verify credentials against the request's tenant and start a session."""
    identity = await verifier.verify(body.email, body.password, RequestMeta.from_request(request))
    token = await binder.sign_in(identity.id, SignInProvider.CREDENTIALS) if identity else None
    if identity is None or token is None:
        await audit.log(
            action="auth.login_failed",
            details={"email": body.email.strip().lower()},
            request=request,
        )
        raise HTTPException(status_code=401, detail=_INVALID_CREDENTIALS)

    await audit.log(
        action="auth.login",
        tenant_id=identity.tenant_id,
        user_id=identity.id,
        details={"provider": SignInProvider.CREDENTIALS.value},
        request=request,
    )
    return _login_response(response, binder, token)


# ---------------------------------------------------------------------------
# Magic link (email) sign-in
# ---------------------------------------------------------------------------


@router.post("/api/auth/magic-link", status_code=202)
async def request_magic_link(
    body: MagicLinkRequest,
    request: Request,
    resolver: TenantResolver = Depends(get_tenant_resolver),
    users: DatabaseUserRepository = Depends(get_user_repo),
    sender: MagicLinkSender = Depends(get_magic_link_sender),
) -> dict[str, str]:
    """Issue a magic link for a known user. Always answers the same way."""
    email = body.email.strip().lower()
    resolution = await resolver.resolve_request(request)

    user = None
    tenant = None
    if resolution.found and resolution.tenant is not None:
        tenant = resolution.tenant
        user = await users.get_by_email_in_tenant(tenant.id, email)
    else:
        found = await users.find_first_by_email(email)
        if found is not None:
            user, tenant = found

    if user is not None and tenant is not None and tenant.is_active:
        settings = get_settings()
        token = create_magic_link_token(
            user.id,
            tenant.id,
            secret_key=settings.secret_key,
            max_age=settings.magic_link_max_age,
            last_login_at=user.last_login_at,
            algorithm=settings.session_algorithm,
        )
        link = str(request.url_for("magic_link_callback").include_query_params(token=token))
        await sender.send(email=user.email, link=link, tenant_id=tenant.id)
    else:
        logger.info("magic_link_skipped", found=user is not None)

    return {"status": "sent"}


@router.get("/api/auth/magic-link/callback", name="magic_link_callback")
async def magic_link_callback(
    token: str,
    request: Request,
    users: DatabaseUserRepository = Depends(get_user_repo),
    binder: SessionBinder = Depends(get_session_binder),
    audit: AuditLogger = Depends(get_audit_logger),
) -> RedirectResponse:
    settings = get_settings()
    claim = read_magic_link_token(
        token, secret_key=settings.secret_key, algorithm=settings.session_algorithm
    )
    user = await users.get_by_id(claim.user_id) if claim else None
    if claim is None or user is None or not claim.matches(user.last_login_at):
        logger.info("magic_link_rejected", used=user is not None)
        raise HTTPException(status_code=401, detail=_INVALID_CREDENTIALS)

    session_token = await binder.sign_in(user.id, SignInProvider.EMAIL)
    if session_token is None:
        raise HTTPException(status_code=401, detail=_INVALID_CREDENTIALS)

    snapshot = binder.read_session(session_token)
    await audit.log(
        action="auth.login",
        tenant_id=snapshot.tenant_id if snapshot else None,
        user_id=user.id,
        details={"provider": SignInProvider.EMAIL.value},
        request=request,
    )
    redirect = RedirectResponse(url="/dashboard", status_code=303)
    _set_session_cookie(redirect, session_token, binder.max_age)
    return redirect


# ---------------------------------------------------------------------------
# Session lifecycle
# ---------------------------------------------------------------------------


@router.get("/api/auth/session", response_model=SessionResponse)
async def current_session(
    request: Request,
    gate: RequestGate = Depends(get_request_gate),
) -> SessionResponse:
    result = gate.authorize(request)
    if isinstance(result, GateRejected):
        raise HTTPException(status_code=401, detail="Not authenticated")
    return SessionResponse.from_snapshot(result.session)


@router.post("/api/auth/refresh", response_model=LoginResponse)
async def refresh(
    request: Request,
    response: Response,
    binder: SessionBinder = Depends(get_session_binder),
) -> LoginResponse:
    """Re-derive the session snapshot so role and plan changes take effect."""
    token = await binder.refresh_session(
        extract_token(request, get_settings().session_cookie_name)
    )
    if token is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return _login_response(response, binder, token)


@router.post("/api/auth/logout")
async def logout(
    request: Request,
    response: Response,
    binder: SessionBinder = Depends(get_session_binder),
    audit: AuditLogger = Depends(get_audit_logger),
) -> dict[str, str]:
    """Clear the session cookie. Bearer tokens stay valid until they expire."""
    settings = get_settings()
    snapshot = binder.read_session(extract_token(request, settings.session_cookie_name))
    response.delete_cookie(settings.session_cookie_name)
    if snapshot is not None:
        await audit.log(
            action="auth.logout",
            tenant_id=snapshot.tenant_id,
            user_id=snapshot.user_id,
            request=request,
        )
    return {"status": "logged_out"}
