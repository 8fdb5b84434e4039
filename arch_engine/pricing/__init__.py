"""Cloud pricing resolution.

Usage:
    from arch_engine.pricing import CloudPricingResolver, CloudPricingRequest

    resolver = CloudPricingResolver()
    response = await resolver.estimate(request)
    response.data_source  # LIVE_API / CACHED / STATIC
"""

from arch_engine.pricing.types import (
    CloudProvider,
    PricingDataSource,
    CloudServiceUsage,
    CloudPricingRequest,
    CloudPricePoint,
    CloudServiceCost,
    PricingResponse,
    LivePrice,
    CachedPrice,
    FallbackPrice,
    PricingResult,
    dominant_source,
)
from arch_engine.pricing.base import PricingAdapter
from arch_engine.pricing.providers import PricingLookupError
from arch_engine.pricing.factory import create_provider_client
from arch_engine.pricing.resolver import (
    CloudPricingResolver,
    calculate_service_cost,
    clear_price_cache,
)

__all__ = [
    "CloudProvider",
    "PricingDataSource",
    "CloudServiceUsage",
    "CloudPricingRequest",
    "CloudPricePoint",
    "CloudServiceCost",
    "PricingResponse",
    "LivePrice",
    "CachedPrice",
    "FallbackPrice",
    "PricingResult",
    "dominant_source",
    "PricingAdapter",
    "PricingLookupError",
    "create_provider_client",
    "CloudPricingResolver",
    "calculate_service_cost",
    "clear_price_cache",
]
