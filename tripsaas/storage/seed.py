"""CLI entry point that seeds demo tenants and their admins."""

from __future__ import annotations

import argparse
import asyncio
import json
import os
from typing import TYPE_CHECKING

import structlog

from tripsaas.config.logging import setup_logging
from tripsaas.models.database import Tenant
from tripsaas.storage.database import get_engine, init_db
from tripsaas.storage.repositories.tenants import DatabaseTenantRepository
from tripsaas.storage.repositories.users import DatabaseUserRepository
from tripsaas.types import Plan, Role
from tripsaas.web.auth.passwords import hash_password

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = structlog.get_logger(__name__)

PLATFORM_TENANT_SLUG = "platform"

DEMO_TENANTS: tuple[dict[str, object], ...] = (
    {
        "slug": "tripsatasia",
        "name": "Trips at Asia",
        "domain": "tripsatasia.local",
        "plan": Plan.PRO,
        "default_currency": "USD",
        "supported_currencies": ["USD", "EUR", "MNT"],
        "supported_locales": ["en", "mn"],
        "contact_email": "hello@tripsatasia.local",
        "country": "MN",
        "primary_color": "#0f766e",
    },
    {
        "slug": "mongoliatours",
        "name": "Mongolia Tours",
        "domain": None,
        "plan": Plan.BASIC,
        "default_currency": "MNT",
        "supported_currencies": ["MNT", "USD"],
        "supported_locales": ["mn", "en"],
        "contact_email": "info@mongoliatours.mn",
        "country": "MN",
        "primary_color": "#1d4ed8",
    },
)


async def seed(engine: AsyncEngine, password: str) -> list[str]:
    """Create demo tenants, one admin per tenant and a platform superadmin.

    Existing tenants are left untouched, so running the seed twice is safe.
    Returns the slugs that were created.
    """
    await init_db(engine)
    tenants = DatabaseTenantRepository(engine)
    users = DatabaseUserRepository(engine)
    hashed = hash_password(password)
    created: list[str] = []

    for demo in DEMO_TENANTS:
        slug = str(demo["slug"])
        if await tenants.get_by_slug(slug) is not None:
            logger.info("seed_tenant_exists", slug=slug)
            continue
        tenant = await tenants.create(
            Tenant(
                slug=slug,
                name=str(demo["name"]),
                domain=demo["domain"],  # type: ignore[arg-type]
                plan=Plan(demo["plan"]).value,
                default_currency=str(demo["default_currency"]),
                supported_currencies_json=json.dumps(demo["supported_currencies"]),
                supported_locales_json=json.dumps(demo["supported_locales"]),
                default_locale=demo["supported_locales"][0],  # type: ignore[index]
                contact_email=str(demo["contact_email"]),
                country=str(demo["country"]),
                primary_color=str(demo["primary_color"]),
            )
        )
        await users.create(
            tenant_id=tenant.id,
            email=f"admin@{slug}.com",
            name=f"{tenant.name} Admin",
            role=Role.ADMIN,
            hashed_password=hashed,
        )
        created.append(slug)

    if await tenants.get_by_slug(PLATFORM_TENANT_SLUG) is None:
        platform = await tenants.create(
            Tenant(slug=PLATFORM_TENANT_SLUG, name="TripSaaS Platform", plan=Plan.ENTERPRISE.value)
        )
        await users.create(
            tenant_id=platform.id,
            email="superadmin@tripsaas.com",
            name="Platform Superadmin",
            role=Role.SUPERADMIN,
            hashed_password=hashed,
        )
        created.append(PLATFORM_TENANT_SLUG)

    logger.info("seed_complete", created=created)
    return created


def main() -> None:
    """Seed the configured database with demo data."""
    parser = argparse.ArgumentParser(description="Seed tripsaas demo tenants")
    parser.add_argument(
        "--password",
        default=os.environ.get("SEED_PASSWORD", "password123"),
        help="Password given to every seeded user",
    )
    args = parser.parse_args()

    setup_logging(log_level="INFO", json_output=True)
    asyncio.run(seed(get_engine(), args.password))


if __name__ == "__main__":
    main()
