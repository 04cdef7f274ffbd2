"""Tenant repository, PostgreSQL-backed."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy.exc import IntegrityError
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from tripsaas.exceptions import StorageError
from tripsaas.models.database import Tenant, _utc_now

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from tripsaas.types import Plan

logger = structlog.get_logger(__name__)


class DatabaseTenantRepository:
    """Tenant lookups by id, slug and custom domain, plus admin mutations."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def create(self, tenant: Tenant) -> Tenant:
        slug = tenant.slug
        async with AsyncSession(self._engine) as session:
            session.add(tenant)
            try:
                await session.commit()
            except IntegrityError as exc:
                raise StorageError(f"Tenant slug or domain already taken: {slug}") from exc
            await session.refresh(tenant)
            logger.info("tenant_created", tenant_id=tenant.id, slug=tenant.slug, plan=tenant.plan)
            return tenant

    async def get_by_id(self, tenant_id: str) -> Tenant | None:
        async with AsyncSession(self._engine) as session:
            return await session.get(Tenant, tenant_id)

    async def get_by_slug(self, slug: str) -> Tenant | None:
        async with AsyncSession(self._engine) as session:
            stmt = select(Tenant).where(col(Tenant.slug) == slug)
            result = await session.execute(stmt)
            return result.scalars().first()

    async def get_by_domain(self, domain: str) -> Tenant | None:
        async with AsyncSession(self._engine) as session:
            stmt = select(Tenant).where(col(Tenant.domain) == domain)
            result = await session.execute(stmt)
            return result.scalars().first()

    async def list_all(self) -> list[Tenant]:
        async with AsyncSession(self._engine) as session:
            stmt = select(Tenant).order_by(col(Tenant.created_at))
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def update(
        self,
        tenant_id: str,
        *,
        plan: Plan | None = None,
        is_active: bool | None = None,
        name: str | None = None,
    ) -> Tenant | None:
        """Apply the given field changes; returns None when the tenant is missing."""
        async with AsyncSession(self._engine) as session:
            tenant = await session.get(Tenant, tenant_id)
            if tenant is None:
                return None
            if plan is not None:
                tenant.plan = plan.value
            if is_active is not None:
                tenant.is_active = is_active
            if name is not None:
                tenant.name = name
            tenant.updated_at = _utc_now()
            session.add(tenant)
            await session.commit()
            await session.refresh(tenant)
            logger.info(
                "tenant_updated",
                tenant_id=tenant_id,
                plan=tenant.plan,
                is_active=tenant.is_active,
            )
            return tenant
