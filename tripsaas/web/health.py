"""Liveness endpoint with a database round-trip."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from tripsaas import __version__
from tripsaas.config.settings import get_settings
from tripsaas.storage.database import get_db_engine

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["health"])


async def check_health(engine: AsyncEngine) -> dict[str, object]:
    """Report service status; a failed probe degrades rather than errors."""
    report: dict[str, object] = {
        "status": "healthy",
        "version": __version__,
        "platform_domain": get_settings().platform_domain,
        "database": "connected",
    }
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("health_check_db_failed", error=str(exc))
        report["database"] = "unavailable"
        report["status"] = "degraded"
    return report


@router.get("/api/health")
async def health(engine: AsyncEngine = Depends(get_db_engine)) -> dict[str, object]:
    return await check_health(engine)
