"""Plan tier definitions with concrete limits."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from tripsaas.types import Plan, PlanResource

if TYPE_CHECKING:
    from collections.abc import Mapping

UNLIMITED = -1


def is_unlimited(limit: int) -> bool:
    """Any negative limit means the resource is not capped."""
    return limit < 0


@dataclass(frozen=True, slots=True)
class PlanLimits:
    """Resource quotas for a billing plan."""

    tours: int
    bookings: int
    staff: int
    storage: str

    def for_resource(self, resource: PlanResource) -> int:
        return int(getattr(self, resource.value))


@dataclass(frozen=True, slots=True)
class PlanConfig:
    plan: Plan
    price: int  # USD per month
    limits: PlanLimits
    features: tuple[str, ...]


PLANS: Mapping[Plan, PlanConfig] = MappingProxyType(
    {
        Plan.FREE: PlanConfig(
            plan=Plan.FREE,
            price=0,
            limits=PlanLimits(tours=3, bookings=20, staff=1, storage="100MB"),
            features=("basic dashboard", "email support"),
        ),
        Plan.BASIC: PlanConfig(
            plan=Plan.BASIC,
            price=29,
            limits=PlanLimits(tours=20, bookings=200, staff=5, storage="1GB"),
            features=("all free", "analytics", "custom domain", "priority support"),
        ),
        Plan.PRO: PlanConfig(
            plan=Plan.PRO,
            price=99,
            limits=PlanLimits(tours=UNLIMITED, bookings=UNLIMITED, staff=20, storage="10GB"),
            features=("all basic", "white label", "API access", "dedicated support"),
        ),
        Plan.ENTERPRISE: PlanConfig(
            plan=Plan.ENTERPRISE,
            price=299,
            limits=PlanLimits(
                tours=UNLIMITED, bookings=UNLIMITED, staff=UNLIMITED, storage="100GB"
            ),
            features=("all pro", "custom integrations", "SLA", "onboarding"),
        ),
    }
)


def get_plan_config(plan: Plan | str) -> PlanConfig:
    """Get config for a plan, defaulting to the free tier for unknown values."""
    try:
        return PLANS[Plan(plan)]
    except ValueError:
        return PLANS[Plan.FREE]
