"""Pricing adapter port.

Any caller may plug in a different pricing source by implementing
PricingAdapter. Running without an adapter is a valid configuration: the cost
estimator then prices every line from the static heuristic table.
"""

from abc import ABC, abstractmethod

from arch_engine.pricing.types import CloudPricingRequest, PricingResponse


class PricingAdapter(ABC):
    """Abstract base for cloud pricing sources."""

    @abstractmethod
    async def estimate(self, request: CloudPricingRequest) -> PricingResponse:
        """Price every usage line of the request."""
        pass
