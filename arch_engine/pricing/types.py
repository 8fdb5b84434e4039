"""Core type definitions for cloud pricing resolution."""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import Field

from arch_engine.model.types import ArchModel


class CloudProvider(str, Enum):
    """Supported cloud providers."""
    AWS = "AWS"
    AZURE = "AZURE"
    GCP = "GCP"


PROVIDER_DISPLAY_NAMES: dict[CloudProvider, str] = {
    CloudProvider.AWS: "AWS",
    CloudProvider.AZURE: "Azure",
    CloudProvider.GCP: "GCP",
}


class PricingDataSource(str, Enum):
    """Where a price came from. Precedence: LIVE_API > CACHED > STATIC."""
    LIVE_API = "LIVE_API"
    CACHED = "CACHED"
    STATIC = "STATIC"


_SOURCE_RANK = {
    PricingDataSource.STATIC: 0,
    PricingDataSource.CACHED: 1,
    PricingDataSource.LIVE_API: 2,
}


def dominant_source(current: PricingDataSource, incoming: PricingDataSource) -> PricingDataSource:
    """Pick the higher-confidence source of the two."""
    return incoming if _SOURCE_RANK[incoming] > _SOURCE_RANK[current] else current


class CloudServiceUsage(ArchModel):
    """One line of a pricing request."""
    id: str
    provider: CloudProvider
    region: str
    service: str
    resource: str = ""
    unit: str = "HOURS"
    quantity: float = Field(0.0, ge=0)
    description: Optional[str] = None
    assumptions: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def cache_key(self) -> str:
        return f"{self.provider.value}:{self.region}:{self.service}".lower()

    @property
    def discount_rate(self) -> float:
        """Per-line discount from metadata (either spelling), 0 when absent."""
        value = self.metadata.get("discount_rate", self.metadata.get("discountRate", 0))
        try:
            return float(value or 0)
        except (TypeError, ValueError):
            return 0.0


class CloudPricingRequest(ArchModel):
    currency: str = "USD"
    discount_rate: Optional[float] = Field(None, description="Enterprise discount percentage")
    usage: list[CloudServiceUsage] = Field(default_factory=list)


class CloudPricePoint(ArchModel):
    """Resolved per-unit price with provenance."""
    sku: str
    description: str
    unit: str
    price_per_unit: float
    currency: str = "USD"
    provider: CloudProvider
    region: str
    service: str
    last_updated: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    source: PricingDataSource = PricingDataSource.STATIC


class CloudServiceCost(ArchModel):
    usage: CloudServiceUsage
    price_point: CloudPricePoint
    hourly_cost: float
    monthly_cost: float
    annual_cost: float
    blended_discount: float = 0.0
    notes: list[str] = Field(default_factory=list)

    @property
    def list_monthly_cost(self) -> float:
        """Undiscounted monthly cost."""
        return self.price_point.price_per_unit * self.usage.quantity


class PricingResponse(ArchModel):
    """What a PricingAdapter returns for a request."""
    services: list[CloudServiceCost] = Field(default_factory=list)
    data_source: PricingDataSource = PricingDataSource.STATIC
    assumptions: list[str] = Field(default_factory=list)


# =============================================================================
# Per-line resolution outcome
# =============================================================================


class LivePrice(ArchModel):
    """Price fetched from a provider's live price list."""
    kind: Literal["live"] = "live"
    price_point: CloudPricePoint
    assumption: str

    @property
    def source(self) -> PricingDataSource:
        return PricingDataSource.LIVE_API


class CachedPrice(ArchModel):
    """Price served from the process-wide cache."""
    kind: Literal["cached"] = "cached"
    price_point: CloudPricePoint

    @property
    def source(self) -> PricingDataSource:
        return PricingDataSource.CACHED


class FallbackPrice(ArchModel):
    """Static table price used because the live lookup failed."""
    kind: Literal["fallback"] = "fallback"
    price_point: CloudPricePoint
    reason: str
    assumption: str

    @property
    def source(self) -> PricingDataSource:
        return PricingDataSource.STATIC


PricingResult = Annotated[
    Union[LivePrice, CachedPrice, FallbackPrice],
    Field(discriminator="kind"),
]
