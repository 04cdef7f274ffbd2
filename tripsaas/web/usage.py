"""Plan quota enforcement for tenant-scoped creates.

The check is best-effort: counting and the subsequent insert are separate
statements, so two concurrent creates can both observe ``limit - 1`` and the
tenant ends one over its quota. Callers must run ``check_limit`` immediately
before the create in the same request.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

import structlog

from tripsaas.billing.plans import get_plan_config, is_unlimited
from tripsaas.exceptions import PlanLimitExceededError
from tripsaas.types import Plan, PlanResource

if TYPE_CHECKING:
    from tripsaas.storage.repositories.resources import DatabaseResourceRepository
    from tripsaas.storage.repositories.tenants import DatabaseTenantRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class QuotaAllowed:
    allowed: Literal[True] = True


@dataclass(frozen=True, slots=True)
class QuotaDenied:
    resource: PlanResource
    limit: int
    current: int
    allowed: Literal[False] = False


QuotaResult = QuotaAllowed | QuotaDenied


@dataclass(frozen=True, slots=True)
class ResourceUsage:
    resource: PlanResource
    current: int
    limit: int

    @property
    def unlimited(self) -> bool:
        return is_unlimited(self.limit)


@dataclass(frozen=True, slots=True)
class PlanUsageSnapshot:
    """Counts taken at one instant; never cached."""

    tenant_id: str
    plan: Plan
    storage: str
    usage: tuple[ResourceUsage, ...]


class PlanQuotaEnforcer:
    """Checks tenant resource counts against plan limits."""

    def __init__(
        self,
        tenants: DatabaseTenantRepository,
        resources: DatabaseResourceRepository,
    ) -> None:
        self._tenants = tenants
        self._resources = resources

    async def check_limit(self, tenant_id: str, resource: PlanResource) -> QuotaResult:
        """Return whether one more ``resource`` may be created for the tenant."""
        tenant = await self._tenants.get_by_id(tenant_id)
        if tenant is None:
            logger.warning("quota_check_unknown_tenant", tenant_id=tenant_id, resource=resource)
            return QuotaDenied(resource=resource, limit=0, current=0)

        limit = get_plan_config(tenant.plan).limits.for_resource(resource)
        if is_unlimited(limit):
            return QuotaAllowed()

        current = await self._resources.count(tenant_id, resource)
        if current >= limit:
            logger.warning(
                "plan_limit_exceeded",
                tenant_id=tenant_id,
                plan=tenant.plan,
                resource=resource.value,
                current=current,
                limit=limit,
            )
            return QuotaDenied(resource=resource, limit=limit, current=current)
        return QuotaAllowed()

    async def enforce(self, tenant_id: str, resource: PlanResource) -> None:
        """Raise PlanLimitExceededError when the quota is used up."""
        result = await self.check_limit(tenant_id, resource)
        if isinstance(result, QuotaDenied):
            raise PlanLimitExceededError(result.resource, result.limit, result.current)

    async def usage_snapshot(self, tenant_id: str) -> PlanUsageSnapshot | None:
        tenant = await self._tenants.get_by_id(tenant_id)
        if tenant is None:
            return None
        config = get_plan_config(tenant.plan)
        usage = tuple(
            [
                ResourceUsage(
                    resource=resource,
                    current=await self._resources.count(tenant_id, resource),
                    limit=config.limits.for_resource(resource),
                )
                for resource in PlanResource
            ]
        )
        return PlanUsageSnapshot(
            tenant_id=tenant_id,
            plan=config.plan,
            storage=config.limits.storage,
            usage=usage,
        )
