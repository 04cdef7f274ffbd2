"""User repository, PostgreSQL-backed."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy.exc import IntegrityError
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from tripsaas.exceptions import StorageError
from tripsaas.models.database import Tenant, User, _utc_now
from tripsaas.types import Role

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = structlog.get_logger(__name__)


class DatabaseUserRepository:
    """PostgreSQL-backed user store.

    Lookups that feed authentication return the user together with its
    owning tenant so callers never need a second round-trip.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def create(
        self,
        *,
        tenant_id: str,
        email: str,
        name: str = "",
        role: Role = Role.USER,
        hashed_password: str | None = None,
    ) -> User:
        async with AsyncSession(self._engine) as session:
            user = User(
                tenant_id=tenant_id,
                email=email.lower(),
                name=name or email,
                role=role.value,
                hashed_password=hashed_password,
            )
            session.add(user)
            try:
                await session.commit()
            except IntegrityError as exc:
                raise StorageError(f"User {email.lower()} already exists in tenant {tenant_id}") from exc
            await session.refresh(user)
            logger.info("user_created", user_id=user.id, tenant_id=tenant_id, role=role.value)
            return user

    async def get_by_id(self, user_id: str) -> User | None:
        async with AsyncSession(self._engine) as session:
            return await session.get(User, user_id)

    async def get_with_tenant(self, user_id: str) -> tuple[User, Tenant] | None:
        """Return (user, tenant) for a user id."""
        async with AsyncSession(self._engine) as session:
            stmt = (
                select(User, Tenant)
                .join(Tenant, col(User.tenant_id) == col(Tenant.id))
                .where(col(User.id) == user_id)
            )
            result = await session.execute(stmt)
            row = result.first()
            if row is None:
                return None
            user, tenant = row
            return user, tenant

    async def find_first_by_email(self, email: str) -> tuple[User, Tenant] | None:
        """Return the oldest (user, tenant) pair with this email across all tenants."""
        async with AsyncSession(self._engine) as session:
            stmt = (
                select(User, Tenant)
                .join(Tenant, col(User.tenant_id) == col(Tenant.id))
                .where(col(User.email) == email.lower())
                .order_by(col(User.created_at), col(User.id))
                .limit(1)
            )
            result = await session.execute(stmt)
            row = result.first()
            if row is None:
                return None
            user, tenant = row
            return user, tenant

    async def get_by_email_in_tenant(self, tenant_id: str, email: str) -> User | None:
        async with AsyncSession(self._engine) as session:
            stmt = select(User).where(
                col(User.tenant_id) == tenant_id,
                col(User.email) == email.lower(),
            )
            result = await session.execute(stmt)
            return result.scalars().first()

    async def update_role(self, user_id: str, role: Role) -> User | None:
        async with AsyncSession(self._engine) as session:
            user = await session.get(User, user_id)
            if user is None:
                return None
            user.role = role.value
            user.updated_at = _utc_now()
            session.add(user)
            await session.commit()
            await session.refresh(user)
            logger.info("user_role_updated", user_id=user_id, role=role.value)
            return user

    async def touch_last_login(self, user_id: str) -> None:
        async with AsyncSession(self._engine) as session:
            user = await session.get(User, user_id)
            if user is None:
                return
            user.last_login_at = _utc_now()
            session.add(user)
            await session.commit()
