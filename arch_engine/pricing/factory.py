"""Factory functions for provider price-list clients."""

from typing import Optional

from arch_engine.config import Settings, get_settings
from arch_engine.pricing.providers.base import BaseProviderClient
from arch_engine.pricing.types import CloudProvider


def create_provider_client(
    provider: CloudProvider,
    settings: Optional[Settings] = None,
) -> BaseProviderClient:
    """Create the price-list client for a provider.

    Args:
        provider: Cloud provider of the usage line
        settings: Settings carrying price-list URLs (defaults to get_settings())

    Returns:
        Client able to fetch live prices for the provider

    Raises:
        ValueError: If provider is unknown
    """
    settings = settings or get_settings()
    if provider == CloudProvider.AWS:
        from arch_engine.pricing.providers.aws import AWSPricingClient
        return AWSPricingClient(settings)
    elif provider == CloudProvider.AZURE:
        from arch_engine.pricing.providers.azure import AzurePricingClient
        return AzurePricingClient(settings)
    elif provider == CloudProvider.GCP:
        from arch_engine.pricing.providers.gcp import GCPPricingClient
        return GCPPricingClient(settings)
    else:
        raise ValueError(f"Unknown provider: {provider}")
