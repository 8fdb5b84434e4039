"""AWS price-list client (calculator.aws offer files)."""

from urllib.parse import quote

import httpx

from arch_engine.pricing.heuristics import fallback_bucket, fallback_price_point
from arch_engine.pricing.providers.base import BaseProviderClient, PricingLookupError
from arch_engine.pricing.types import (
    CloudPricePoint,
    CloudProvider,
    CloudServiceUsage,
    PricingDataSource,
)

# Offer files are keyed by region label, not region code
AWS_REGION_LABELS: dict[str, str] = {
    "us-east-1": "US East (N. Virginia)",
    "us-east-2": "US East (Ohio)",
    "us-west-2": "US West (Oregon)",
    "eu-west-1": "EU (Ireland)",
    "ap-southeast-1": "Asia Pacific (Singapore)",
}
DEFAULT_AWS_REGION_LABEL = "US East (N. Virginia)"


def map_aws_region(region: str) -> str:
    """Map a region code to its offer-file label (default N. Virginia)."""
    return AWS_REGION_LABELS.get(region, DEFAULT_AWS_REGION_LABEL)


class AWSPricingClient(BaseProviderClient):
    """Looks up EC2-style products in the regional offer file."""

    provider = CloudProvider.AWS

    async def fetch(self, client: httpx.AsyncClient, usage: CloudServiceUsage) -> CloudPricePoint:
        bucket = fallback_bucket(usage.service)
        url = self.settings.aws_pricing_url.format(region=quote(map_aws_region(usage.region)))

        data = await self._get_json(client, url)
        products = data.get("products") if isinstance(data, dict) else None
        if not isinstance(products, dict):
            raise PricingLookupError(self.provider, "Malformed AWS pricing response")

        product_key = next((key for key in products if bucket in key.lower()), None)
        if product_key is None:
            raise PricingLookupError(self.provider, "No matching AWS pricing product found")

        product = products[product_key] if isinstance(products[product_key], dict) else {}
        price = self._to_price((product.get("price") or {}).get("USD"))
        if price <= 0:
            price = fallback_price_point(usage).price_per_unit

        return CloudPricePoint(
            sku=product_key,
            description=(product.get("attributes") or {}).get("instanceType") or product.get("sku") or usage.service,
            unit=product.get("unit") or usage.unit or "HOURS",
            price_per_unit=price,
            currency="USD",
            provider=self.provider,
            region=usage.region,
            service=usage.service,
            source=PricingDataSource.LIVE_API,
        )
