"""
Cloud Pricing Resolver - live price lists with cache and static fallback.

Resolution chain per usage line:
- process-wide cache keyed provider:region:service (case-insensitive)
- live provider price list (single attempt, per-request timeout)
- static reference table, with an assumption explaining why

Failures never propagate: they lower pricing confidence (dataSource and
assumptions) instead.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
import structlog

from arch_engine.config import Settings, get_settings
from arch_engine.pricing.base import PricingAdapter
from arch_engine.pricing.factory import create_provider_client
from arch_engine.pricing.heuristics import HOURS_PER_MONTH, fallback_price_point
from arch_engine.pricing.providers.base import BaseProviderClient, PricingLookupError
from arch_engine.pricing.types import (
    CachedPrice,
    CloudPricePoint,
    CloudPricingRequest,
    CloudProvider,
    CloudServiceCost,
    CloudServiceUsage,
    FallbackPrice,
    LivePrice,
    PricingDataSource,
    PROVIDER_DISPLAY_NAMES,
    PricingResponse,
    PricingResult,
    dominant_source,
)

logger = structlog.get_logger()

LIVE_ASSUMPTIONS: dict[CloudProvider, str] = {
    CloudProvider.AWS: "AWS pricing retrieved from calculator.aws live endpoint.",
    CloudProvider.AZURE: "Azure pricing retrieved from azure.microsoft.com pricing API.",
    CloudProvider.GCP: "GCP pricing retrieved from cloudpricingcalculator dataset.",
}


# =============================================================================
# Process-wide price cache
# =============================================================================

# No TTL: unit prices move slowly relative to a session. Concurrent misses for
# the same key may both write; last write wins.
_price_cache: dict[str, CloudPricePoint] = {}


def clear_price_cache() -> None:
    """Drop every cached live price."""
    _price_cache.clear()


def calculate_service_cost(usage: CloudServiceUsage, price_point: CloudPricePoint) -> CloudServiceCost:
    """Combine a usage line with its price into hourly/monthly/annual figures."""
    monthly_cost = price_point.price_per_unit * usage.quantity
    if price_point.unit.upper() == "HOURS":
        hourly_cost = price_point.price_per_unit
    else:
        hourly_cost = monthly_cost / HOURS_PER_MONTH

    return CloudServiceCost(
        usage=usage,
        price_point=price_point,
        hourly_cost=hourly_cost,
        monthly_cost=monthly_cost,
        annual_cost=monthly_cost * 12,
        blended_discount=0.0,
        notes=[],
    )


# =============================================================================
# Resolver
# =============================================================================


class CloudPricingResolver(PricingAdapter):
    """PricingAdapter backed by the public provider price lists.

    Args:
        settings: Engine settings (timeouts, URLs, live toggle).
        http_client: Optional shared httpx client; one is created per
            estimate() call otherwise.
        cache: Price cache to use; defaults to the process-wide cache.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        cache: Optional[dict[str, CloudPricePoint]] = None,
    ):
        self.settings = settings or get_settings()
        self._http_client = http_client
        self._cache = _price_cache if cache is None else cache
        self._provider_clients: dict[CloudProvider, BaseProviderClient] = {}

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=self.settings.pricing_timeout_seconds) as client:
            yield client

    def _provider_client(self, provider: CloudProvider) -> BaseProviderClient:
        if provider not in self._provider_clients:
            self._provider_clients[provider] = create_provider_client(provider, self.settings)
        return self._provider_clients[provider]

    async def estimate(self, request: CloudPricingRequest) -> PricingResponse:
        """Price every usage line; never raises for pricing failures."""
        services: list[CloudServiceCost] = []
        assumptions: dict[str, None] = {}
        data_source = PricingDataSource.STATIC

        async with self._client() as client:
            for usage in request.usage:
                result = await self.resolve(client, usage)
                data_source = dominant_source(data_source, result.source)
                if not isinstance(result, CachedPrice):
                    assumptions.setdefault(result.assumption, None)
                services.append(calculate_service_cost(usage, result.price_point))

        logger.info(
            "pricing_estimate_complete",
            lines=len(services),
            data_source=data_source.value,
        )
        return PricingResponse(
            services=services,
            data_source=data_source,
            assumptions=list(assumptions),
        )

    async def resolve(self, client: httpx.AsyncClient, usage: CloudServiceUsage) -> PricingResult:
        """Resolve one usage line through cache -> live -> static."""
        cache_key = usage.cache_key
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug("pricing_cache_hit", key=cache_key)
            return CachedPrice(
                price_point=cached.model_copy(update={"source": PricingDataSource.CACHED}),
            )

        if not self.settings.pricing_live_enabled:
            return self._fallback(usage, "live pricing disabled")

        logger.debug(
            "pricing_live_lookup",
            provider=usage.provider.value,
            region=usage.region,
            service=usage.service,
        )
        try:
            price_point = await self._provider_client(usage.provider).fetch(client, usage)
        except httpx.TimeoutException:
            return self._fallback(usage, "request timed out")
        except (httpx.HTTPError, PricingLookupError) as e:
            return self._fallback(usage, str(e) or e.__class__.__name__)
        except Exception as e:
            logger.warning("pricing_unexpected_error", error=str(e), exc_info=True)
            return self._fallback(usage, str(e) or e.__class__.__name__)

        self._cache[cache_key] = price_point
        return LivePrice(price_point=price_point, assumption=LIVE_ASSUMPTIONS[usage.provider])

    def _fallback(self, usage: CloudServiceUsage, reason: str) -> FallbackPrice:
        logger.warning(
            "pricing_fallback",
            provider=usage.provider.value,
            region=usage.region,
            service=usage.service,
            reason=reason,
        )
        return FallbackPrice(
            price_point=fallback_price_point(usage),
            reason=reason,
            assumption=f"{PROVIDER_DISPLAY_NAMES[usage.provider]} pricing API unavailable ({reason}). Fallback rates applied.",
        )
