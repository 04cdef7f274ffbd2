"""Unit tests for session tokens and the sign-in path."""

from __future__ import annotations

import time
from datetime import datetime

import jwt
import pytest

from tripsaas.types import Plan, Role, SignInProvider
from tripsaas.web.auth.credentials import AuthenticatedIdentity
from tripsaas.web.auth.magic_link import create_magic_link_token, read_magic_link_token
from tripsaas.web.auth.session import SessionBinder

SECRET = "unit-test-secret"

IDENTITY = AuthenticatedIdentity(
    id="u-1",
    email="owner@acme.com",
    name="Owner",
    tenant_id="t-acme",
    tenant_slug="acme",
    tenant_name="Acme",
    role=Role.ADMIN,
    plan=Plan.BASIC,
)


@pytest.mark.unit
class TestSessionTokens:
    def test_round_trip_preserves_snapshot(self) -> None:
        binder = SessionBinder(secret_key=SECRET)
        snapshot = binder.read_session(binder.create_session(IDENTITY))

        assert snapshot is not None
        assert snapshot.user_id == "u-1"
        assert snapshot.tenant_id == "t-acme"
        assert snapshot.tenant_slug == "acme"
        assert snapshot.tenant_name == "Acme"
        assert snapshot.role == Role.ADMIN
        assert snapshot.plan == Plan.BASIC
        assert snapshot.email == "owner@acme.com"
        assert snapshot.provider == SignInProvider.CREDENTIALS

    def test_expiry_window(self) -> None:
        binder = SessionBinder(secret_key=SECRET, max_age=3600)
        snapshot = binder.read_session(binder.create_session(IDENTITY, SignInProvider.GOOGLE))
        assert snapshot is not None
        assert snapshot.expires_at - snapshot.issued_at == 3600
        assert snapshot.provider == SignInProvider.GOOGLE

    def test_expired_token(self) -> None:
        binder = SessionBinder(secret_key=SECRET, max_age=-10)
        assert binder.read_session(binder.create_session(IDENTITY)) is None

    def test_wrong_secret(self) -> None:
        token = SessionBinder(secret_key="secret-1").create_session(IDENTITY)
        assert SessionBinder(secret_key="secret-2").read_session(token) is None

    def test_tampered_payload(self) -> None:
        binder = SessionBinder(secret_key=SECRET)
        claims = jwt.decode(binder.create_session(IDENTITY), options={"verify_signature": False})
        claims["role"] = Role.SUPERADMIN.value
        forged = jwt.encode(claims, "attacker-secret", algorithm="HS256")
        assert binder.read_session(forged) is None

    def test_garbage_and_empty(self) -> None:
        binder = SessionBinder(secret_key=SECRET)
        assert binder.read_session("not-a-token") is None
        assert binder.read_session("") is None
        assert binder.read_session(None) is None

    def test_missing_tenant_claim(self) -> None:
        now = int(time.time())
        claims = {"typ": "session", "sub": "u-1", "role": "ADMIN", "plan": "FREE"}
        token = jwt.encode(
            {**claims, "iat": now, "exp": now + 60},
            SECRET,
            algorithm="HS256",
        )
        assert SessionBinder(secret_key=SECRET).read_session(token) is None

    def test_unknown_role_claim(self) -> None:
        now = int(time.time())
        claims = {"typ": "session", "sub": "u-1", "tenant_id": "t", "role": "OWNER", "plan": "FREE"}
        token = jwt.encode(
            {**claims, "iat": now, "exp": now + 60},
            SECRET,
            algorithm="HS256",
        )
        assert SessionBinder(secret_key=SECRET).read_session(token) is None

    def test_magic_link_token_is_not_a_session(self) -> None:
        token = create_magic_link_token("u-1", "t-acme", secret_key=SECRET, max_age=60)
        assert SessionBinder(secret_key=SECRET).read_session(token) is None

    def test_session_is_not_a_magic_link(self) -> None:
        token = SessionBinder(secret_key=SECRET).create_session(IDENTITY)
        assert read_magic_link_token(token, secret_key=SECRET) is None

    def test_magic_link_round_trip(self) -> None:
        token = create_magic_link_token("u-1", "t-acme", secret_key=SECRET, max_age=60)
        claim = read_magic_link_token(token, secret_key=SECRET)
        assert claim is not None
        assert claim.user_id == "u-1"
        assert claim.matches(None)
        assert read_magic_link_token(token, secret_key="other") is None

    def test_magic_link_invalidated_by_later_sign_in(self) -> None:
        issued_after = datetime(2026, 1, 5, 9, 30)
        token = create_magic_link_token(
            "u-1", "t-acme", secret_key=SECRET, max_age=60, last_login_at=issued_after
        )
        claim = read_magic_link_token(token, secret_key=SECRET)
        assert claim is not None
        assert claim.matches(issued_after)
        assert not claim.matches(datetime(2026, 1, 6, 8, 0))
        assert not claim.matches(None)


@pytest.mark.unit
class TestSignIn:
    async def test_sign_in_derives_snapshot_from_database(
        self, user_repo, make_tenant, make_user
    ) -> None:
        tenant = await make_tenant("acme", plan=Plan.PRO)
        user = await make_user(tenant, "owner@acme.com", role=Role.SALES)
        binder = SessionBinder(secret_key=SECRET, users=user_repo)

        token = await binder.sign_in(user.id, SignInProvider.EMAIL)

        snapshot = binder.read_session(token)
        assert snapshot is not None
        assert snapshot.tenant_id == tenant.id
        assert snapshot.role == Role.SALES
        assert snapshot.plan == Plan.PRO
        assert snapshot.provider == SignInProvider.EMAIL
        refreshed = await user_repo.get_by_id(user.id)
        assert refreshed is not None
        assert refreshed.last_login_at is not None

    async def test_sign_in_inactive_tenant(self, user_repo, make_tenant, make_user) -> None:
        tenant = await make_tenant("acme", is_active=False)
        user = await make_user(tenant, "owner@acme.com")
        binder = SessionBinder(secret_key=SECRET, users=user_repo)
        for provider in SignInProvider:
            assert await binder.sign_in(user.id, provider) is None

    async def test_sign_in_unknown_user(self, user_repo) -> None:
        binder = SessionBinder(secret_key=SECRET, users=user_repo)
        assert await binder.sign_in("missing", SignInProvider.CREDENTIALS) is None

    async def test_sign_in_requires_repository(self) -> None:
        with pytest.raises(RuntimeError):
            await SessionBinder(secret_key=SECRET).sign_in("u-1", SignInProvider.CREDENTIALS)

    async def test_refresh_picks_up_role_and_plan_changes(
        self, user_repo, tenant_repo, make_tenant, make_user
    ) -> None:
        tenant = await make_tenant("acme", plan=Plan.FREE)
        user = await make_user(tenant, "owner@acme.com", role=Role.SALES)
        binder = SessionBinder(secret_key=SECRET, users=user_repo)
        token = await binder.sign_in(user.id, SignInProvider.CREDENTIALS)

        await user_repo.update_role(user.id, Role.ADMIN)
        await tenant_repo.update(tenant.id, plan=Plan.PRO)

        stale = binder.read_session(token)
        assert stale is not None
        assert stale.role == Role.SALES

        fresh = binder.read_session(await binder.refresh_session(token))
        assert fresh is not None
        assert fresh.role == Role.ADMIN
        assert fresh.plan == Plan.PRO

    async def test_refresh_rejected_after_deactivation(
        self, user_repo, tenant_repo, make_tenant, make_user
    ) -> None:
        tenant = await make_tenant("acme")
        user = await make_user(tenant, "owner@acme.com")
        binder = SessionBinder(secret_key=SECRET, users=user_repo)
        token = await binder.sign_in(user.id, SignInProvider.CREDENTIALS)

        await tenant_repo.update(tenant.id, is_active=False)

        assert await binder.refresh_session(token) is None

    async def test_refresh_invalid_token(self, user_repo) -> None:
        binder = SessionBinder(secret_key=SECRET, users=user_repo)
        assert await binder.refresh_session("garbage") is None
