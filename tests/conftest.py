"""Shared test fixtures."""

from __future__ import annotations

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-tripsaas-tests")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from collections.abc import Awaitable, Callable  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

from tripsaas.config.settings import get_settings  # noqa: E402
from tripsaas.models.database import Tenant, User  # noqa: E402
from tripsaas.storage.database import get_db_engine  # noqa: E402
from tripsaas.storage.repositories.tenants import DatabaseTenantRepository  # noqa: E402
from tripsaas.storage.repositories.users import DatabaseUserRepository  # noqa: E402
from tripsaas.types import Plan, Role  # noqa: E402
from tripsaas.web.app import create_app  # noqa: E402
from tripsaas.web.auth.passwords import hash_password  # noqa: E402

TEST_PASSWORD = "correct-horse-battery"

TenantFactory = Callable[..., Awaitable[Tenant]]
UserFactory = Callable[..., Awaitable[User]]


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Settings are cached per process; tests that patch env need a clean cache."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
async def async_engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def tenant_repo(async_engine) -> DatabaseTenantRepository:
    return DatabaseTenantRepository(async_engine)


@pytest.fixture()
def user_repo(async_engine) -> DatabaseUserRepository:
    return DatabaseUserRepository(async_engine)


@pytest.fixture()
def make_tenant(tenant_repo: DatabaseTenantRepository) -> TenantFactory:
    async def _make(
        slug: str,
        *,
        plan: Plan = Plan.FREE,
        domain: str | None = None,
        is_active: bool = True,
    ) -> Tenant:
        return await tenant_repo.create(
            Tenant(
                slug=slug,
                name=slug.title(),
                domain=domain,
                plan=plan.value,
                is_active=is_active,
            )
        )

    return _make


@pytest.fixture()
def make_user(user_repo: DatabaseUserRepository) -> UserFactory:
    async def _make(
        tenant: Tenant,
        email: str,
        *,
        role: Role = Role.ADMIN,
        password: str | None = TEST_PASSWORD,
    ) -> User:
        return await user_repo.create(
            tenant_id=tenant.id,
            email=email,
            role=role,
            hashed_password=hash_password(password, rounds=4) if password else None,
        )

    return _make


@pytest.fixture()
def app(async_engine):
    """A fresh app instance wired to the in-memory database."""
    application = create_app()
    application.dependency_overrides[get_db_engine] = lambda: async_engine
    yield application
    application.dependency_overrides.clear()


@pytest.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def login(client: AsyncClient) -> Callable[..., Awaitable[dict[str, str]]]:
    """Log in and return an Authorization header carrying the bearer token."""

    async def _login(email: str, password: str = TEST_PASSWORD) -> dict[str, str]:
        resp = await client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['access_token']}"}

    return _login
