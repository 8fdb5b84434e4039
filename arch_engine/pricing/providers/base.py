"""Base client interface for provider price lists."""

from abc import ABC, abstractmethod
from typing import Any

import httpx

from arch_engine.config import Settings
from arch_engine.pricing.types import PROVIDER_DISPLAY_NAMES, CloudPricePoint, CloudProvider, CloudServiceUsage


class PricingLookupError(Exception):
    """A live price lookup produced no usable price.

    Raised for non-2xx responses, malformed bodies and unmatched services.
    Never escapes the resolver: it is converted into a fallback price.
    """

    def __init__(self, provider: CloudProvider, message: str):
        self.provider = provider
        self.message = message
        super().__init__(message)


class BaseProviderClient(ABC):
    """Abstract base for provider price-list clients."""

    provider: CloudProvider

    def __init__(self, settings: Settings):
        self.settings = settings

    @abstractmethod
    async def fetch(self, client: httpx.AsyncClient, usage: CloudServiceUsage) -> CloudPricePoint:
        """Fetch a live price point for one usage line."""
        pass

    async def _get_json(self, client: httpx.AsyncClient, url: str, **params: Any) -> Any:
        """GET a JSON document, raising PricingLookupError on bad status or body."""
        response = await client.get(
            url,
            params=params or None,
            timeout=self.settings.pricing_timeout_seconds,
        )
        if not response.is_success:
            raise PricingLookupError(
                self.provider,
                f"{PROVIDER_DISPLAY_NAMES[self.provider]} pricing API responded with {response.status_code}",
            )
        try:
            return response.json()
        except ValueError as e:
            raise PricingLookupError(self.provider, f"Malformed pricing response: {e}") from e

    @staticmethod
    def _to_price(value: Any) -> float:
        """Coerce a price-list value to float, 0.0 when unusable."""
        try:
            return float(value)
        except (TypeError, ValueError):
            return 0.0
