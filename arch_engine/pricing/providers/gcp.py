"""GCP price-list client (cloudpricingcalculator dataset)."""

import httpx

from arch_engine.pricing.heuristics import fallback_bucket, fallback_price_point
from arch_engine.pricing.providers.base import BaseProviderClient, PricingLookupError
from arch_engine.pricing.types import (
    CloudPricePoint,
    CloudProvider,
    CloudServiceUsage,
    PricingDataSource,
)


class GCPPricingClient(BaseProviderClient):
    """Matches price-list keys on service bucket and region."""

    provider = CloudProvider.GCP

    async def fetch(self, client: httpx.AsyncClient, usage: CloudServiceUsage) -> CloudPricePoint:
        bucket = fallback_bucket(usage.service)
        # Price-list keys spell regions without the first dash (us-central1 -> uscentral1)
        region_key = usage.region.replace("-", "", 1).lower()

        data = await self._get_json(client, self.settings.gcp_pricing_url)
        prices = {}
        if isinstance(data, dict):
            prices = data.get("gcp_price_list") or data.get("services") or {}
        if not isinstance(prices, dict):
            raise PricingLookupError(self.provider, "Malformed GCP pricing response")

        match_key = next(
            (key for key in prices if bucket in key.lower() and region_key in key.lower()),
            None,
        )
        if match_key is None:
            raise PricingLookupError(self.provider, "No matching GCP pricing entry found")

        entry = prices[match_key] if isinstance(prices[match_key], dict) else {}
        price = self._to_price(entry.get("usd_price")) or self._to_price((entry.get("unitPrice") or {}).get("USD"))
        if price <= 0:
            price = fallback_price_point(usage).price_per_unit

        return CloudPricePoint(
            sku=match_key,
            description=entry.get("description") or usage.service,
            unit=entry.get("unit") or usage.unit or "HOURS",
            price_per_unit=price,
            currency="USD",
            provider=self.provider,
            region=usage.region,
            service=usage.service,
            source=PricingDataSource.LIVE_API,
        )
