"""Exception hierarchy for tripsaas."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tripsaas.types import PlanResource


class TripSaasError(Exception):
    """Base exception for all tripsaas errors."""


class ConfigError(TripSaasError):
    """Raised when configuration is invalid."""


class StorageError(TripSaasError):
    """Raised when a persistence operation fails in an unexpected way."""


class PlanLimitExceededError(TripSaasError):
    """Raised when a create would push a tenant past its plan quota.

    Unlike authentication failures this one carries detail: the limit and
    current count are actionable by the tenant's own admin.
    """

    def __init__(self, resource: PlanResource, limit: int, current: int) -> None:
        self.resource = resource
        self.limit = limit
        self.current = current
        super().__init__(
            f"Plan limit reached for {resource.value}: {current} of {limit} used. "
            "Upgrade your plan to add more."
        )
