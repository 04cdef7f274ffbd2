"""Async database engine and session factory."""

from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlmodel import SQLModel

from tripsaas.config.settings import get_settings


@lru_cache
def get_engine() -> AsyncEngine:
    """Return a cached async database engine (singleton per process)."""
    settings = get_settings()
    return create_async_engine(
        settings.database_url,
        echo=settings.debug,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        pool_recycle=3600,
    )


async def get_db_engine() -> AsyncEngine:
    """FastAPI dependency yielding the process engine; tests override it."""
    return get_engine()


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Create all tables (for dev/testing only; use Alembic in production)."""
    import tripsaas.models.database  # noqa: F401  registers table metadata

    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
