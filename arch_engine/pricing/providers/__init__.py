"""Provider price-list clients."""

from arch_engine.pricing.providers.base import BaseProviderClient, PricingLookupError
from arch_engine.pricing.providers.aws import AWSPricingClient, map_aws_region
from arch_engine.pricing.providers.azure import AzurePricingClient
from arch_engine.pricing.providers.gcp import GCPPricingClient

__all__ = [
    "BaseProviderClient",
    "PricingLookupError",
    "AWSPricingClient",
    "AzurePricingClient",
    "GCPPricingClient",
    "map_aws_region",
]
