"""Host-based tenant resolution.

Resolution runs an ordered chain of strategies. A strategy either declines
the host (returns None and the next one runs) or claims it and returns a
TenantResolution, which ends the chain. Claiming is decided by the hostname
alone, so a platform subdomain that matches no tenant is reported as
not-found instead of being retried as a custom domain.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

import structlog

from tripsaas.config.settings import get_settings
from tripsaas.types import ResolutionStatus

if TYPE_CHECKING:
    from starlette.requests import Request

    from tripsaas.config.settings import Settings
    from tripsaas.models.database import Tenant

logger = structlog.get_logger(__name__)


class TenantLookup(Protocol):
    async def get_by_slug(self, slug: str) -> Tenant | None: ...

    async def get_by_domain(self, domain: str) -> Tenant | None: ...


@dataclass(frozen=True, slots=True)
class RequestMeta:
    """The parts of a request that tenant resolution depends on."""

    hostname: str
    tenant_header: str | None = None
    tenant_query: str | None = None

    @classmethod
    def from_request(cls, request: Request, settings: Settings | None = None) -> RequestMeta:
        settings = settings or get_settings()
        return cls(
            hostname=normalize_hostname(request.url.hostname or request.headers.get("host", "")),
            tenant_header=request.headers.get(settings.tenant_header) or None,
            tenant_query=request.query_params.get(settings.tenant_query_param) or None,
        )


@dataclass(frozen=True, slots=True)
class TenantResolution:
    status: ResolutionStatus
    tenant: Tenant | None = None
    source: str | None = None  # dev_host | subdomain | domain
    hint: str | None = None

    @property
    def found(self) -> bool:
        return self.status == ResolutionStatus.RESOLVED


Strategy = Callable[[RequestMeta], Awaitable[TenantResolution | None]]


def normalize_hostname(host: str) -> str:
    """Lower-case a host and strip any port and trailing dot."""
    host = host.strip().lower()
    if host.startswith("["):
        return host[1:].split("]", 1)[0]
    if host.count(":") > 1:
        # Bare IPv6 literal, as Starlette reports it.
        return host
    return host.split(":", 1)[0].rstrip(".")


def _outcome(tenant: Tenant | None, source: str, hint: str) -> TenantResolution:
    status = ResolutionStatus.RESOLVED if tenant is not None else ResolutionStatus.NOT_FOUND
    return TenantResolution(status=status, tenant=tenant, source=source, hint=hint)


class TenantResolver:
    """Derives the active tenant from request metadata. Never mutates state."""

    def __init__(self, tenants: TenantLookup, settings: Settings | None = None) -> None:
        self._tenants = tenants
        self._settings = settings or get_settings()
        self._platform_suffix = "." + self._settings.platform_domain.lower().strip(".")
        self.strategies: tuple[Strategy, ...] = (
            self._from_dev_host,
            self._from_platform_subdomain,
            self._from_custom_domain,
        )

    async def resolve(self, meta: RequestMeta) -> TenantResolution:
        for strategy in self.strategies:
            resolution = await strategy(meta)
            if resolution is not None:
                logger.debug(
                    "tenant_resolved",
                    hostname=meta.hostname,
                    source=resolution.source,
                    status=resolution.status.value,
                )
                return resolution
        return TenantResolution(status=ResolutionStatus.NOT_FOUND)

    async def resolve_request(self, request: Request) -> TenantResolution:
        return await self.resolve(RequestMeta.from_request(request, self._settings))

    async def _from_dev_host(self, meta: RequestMeta) -> TenantResolution | None:
        if meta.hostname not in self._settings.dev_hosts:
            return None
        # Header wins over query parameter.
        slug = meta.tenant_header or meta.tenant_query
        if not slug:
            return TenantResolution(status=ResolutionStatus.NO_HINT, source="dev_host")
        tenant = await self._tenants.get_by_slug(slug)
        return _outcome(tenant, "dev_host", slug)

    async def _from_platform_subdomain(self, meta: RequestMeta) -> TenantResolution | None:
        if not meta.hostname.endswith(self._platform_suffix):
            return None
        labels = meta.hostname.split(".")
        if len(labels) < 3 or not labels[0]:
            return None
        slug = labels[0]
        tenant = await self._tenants.get_by_slug(slug)
        return _outcome(tenant, "subdomain", slug)

    async def _from_custom_domain(self, meta: RequestMeta) -> TenantResolution | None:
        if not meta.hostname:
            return TenantResolution(status=ResolutionStatus.NOT_FOUND, source="domain")
        tenant = await self._tenants.get_by_domain(meta.hostname)
        return _outcome(tenant, "domain", meta.hostname)
