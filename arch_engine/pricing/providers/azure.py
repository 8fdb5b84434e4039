"""Azure pricing calculator client."""

import httpx

from arch_engine.pricing.heuristics import fallback_bucket, fallback_price_point
from arch_engine.pricing.providers.base import BaseProviderClient, PricingLookupError
from arch_engine.pricing.types import (
    CloudPricePoint,
    CloudProvider,
    CloudServiceUsage,
    PricingDataSource,
)


class AzurePricingClient(BaseProviderClient):
    """Matches calculator offers by name against the service bucket."""

    provider = CloudProvider.AZURE

    async def fetch(self, client: httpx.AsyncClient, usage: CloudServiceUsage) -> CloudPricePoint:
        bucket = fallback_bucket(usage.service)
        data = await self._get_json(client, self.settings.azure_pricing_url, region=usage.region)

        items = []
        if isinstance(data, dict):
            items = data.get("Offers") or data.get("items") or []
        if not isinstance(items, list):
            raise PricingLookupError(self.provider, "Malformed Azure pricing response")

        match = next(
            (
                item for item in items
                if isinstance(item, dict) and bucket in str(item.get("name") or "").lower()
            ),
            None,
        )
        if match is None:
            raise PricingLookupError(self.provider, "No matching Azure pricing item found")

        price = self._to_price((match.get("prices") or {}).get("USD"))
        if price <= 0:
            price = fallback_price_point(usage).price_per_unit

        return CloudPricePoint(
            sku=match.get("id") or match.get("name") or usage.service,
            description=match.get("name") or usage.service,
            unit=match.get("unit") or usage.unit or "HOURS",
            price_per_unit=price,
            currency="USD",
            provider=self.provider,
            region=usage.region,
            service=usage.service,
            source=PricingDataSource.LIVE_API,
        )
