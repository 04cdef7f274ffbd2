"""Tour and booking rows, and tenant-scoped counts for quota checks."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func
from sqlmodel import SQLModel, col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from tripsaas.models.database import Booking, Tour, User
from tripsaas.types import PlanResource

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = structlog.get_logger(__name__)

# Staff are the tenant's users.
_RESOURCE_MODELS: dict[PlanResource, type[SQLModel]] = {
    PlanResource.TOURS: Tour,
    PlanResource.BOOKINGS: Booking,
    PlanResource.STAFF: User,
}


class DatabaseResourceRepository:
    """PostgreSQL-backed store for quota-counted resources."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def count(self, tenant_id: str, resource: PlanResource) -> int:
        """Count rows of a resource kind owned by the tenant."""
        model = _RESOURCE_MODELS[resource]
        async with AsyncSession(self._engine) as session:
            stmt = (
                select(func.count())
                .select_from(model)
                .where(col(model.tenant_id) == tenant_id)  # type: ignore[attr-defined]
            )
            result = await session.execute(stmt)
            return int(result.scalar_one())

    async def get_tour(self, tenant_id: str, tour_id: str) -> Tour | None:
        async with AsyncSession(self._engine) as session:
            stmt = select(Tour).where(col(Tour.id) == tour_id, col(Tour.tenant_id) == tenant_id)
            result = await session.execute(stmt)
            return result.scalars().first()

    async def create_tour(self, tour: Tour) -> Tour:
        async with AsyncSession(self._engine) as session:
            session.add(tour)
            await session.commit()
            await session.refresh(tour)
            logger.info("tour_created", tour_id=tour.id, tenant_id=tour.tenant_id)
            return tour

    async def create_booking(self, booking: Booking) -> Booking:
        async with AsyncSession(self._engine) as session:
            session.add(booking)
            await session.commit()
            await session.refresh(booking)
            logger.info("booking_created", booking_id=booking.id, tenant_id=booking.tenant_id)
            return booking
