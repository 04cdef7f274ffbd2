"""FastAPI application factory."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import quote

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

if TYPE_CHECKING:
    from fastapi.exceptions import HTTPException
from fastapi.responses import JSONResponse, RedirectResponse

from tripsaas import __version__
from tripsaas.config.logging import setup_logging
from tripsaas.config.settings import get_settings
from tripsaas.exceptions import PlanLimitExceededError
from tripsaas.models.api import QuotaExceededResponse
from tripsaas.web.health import router as health_router
from tripsaas.web.middleware import RequestIDMiddleware
from tripsaas.web.routes.auth import router as auth_router
from tripsaas.web.routes.billing import router as billing_router
from tripsaas.web.routes.pages import router as pages_router
from tripsaas.web.routes.resources import router as resources_router
from tripsaas.web.routes.tenants import router as tenants_router

logger = structlog.get_logger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    setup_logging(log_level=settings.log_level, json_output=not settings.debug)

    app = FastAPI(
        title="TripSaaS",
        description="Multi-tenant backend for tour operators",
        version=__version__,
    )

    # Redirect 401s to /login for browser page requests; return JSON for API
    @app.exception_handler(401)
    async def auth_redirect_handler(
        request: Request, exc: HTTPException
    ) -> RedirectResponse | JSONResponse:
        if not request.url.path.startswith("/api/"):
            next_url = quote(str(request.url.path), safe="/")
            return RedirectResponse(url=f"/login?next={next_url}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
        )

    @app.exception_handler(PlanLimitExceededError)
    async def plan_limit_handler(request: Request, exc: PlanLimitExceededError) -> JSONResponse:
        body = QuotaExceededResponse(
            detail=str(exc), resource=exc.resource, limit=exc.limit, current=exc.current
        )
        return JSONResponse(status_code=403, content=body.model_dump(mode="json"))

    # Middleware (order matters: last added runs first)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID", settings.tenant_header],
    )
    app.add_middleware(RequestIDMiddleware)

    app.include_router(auth_router)
    app.include_router(tenants_router)
    app.include_router(health_router)

    # Routers below authorize per endpoint with role and permission dependencies
    app.include_router(resources_router)
    app.include_router(billing_router)
    app.include_router(pages_router)

    logger.info("app_created")
    return app
