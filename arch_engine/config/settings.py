"""
Engine Settings - Pydantic-based configuration management.

Loads settings from environment variables with validation and type coercion.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Engine settings loaded from environment variables.

    All settings can be overridden via ARCH_ENGINE_* environment variables.
    """

    model_config = SettingsConfigDict(
        env_prefix="ARCH_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Cloud Pricing
    # -------------------------------------------------------------------------
    pricing_live_enabled: bool = Field(default=True, description="Attempt live price-list lookups")
    pricing_timeout_seconds: float = Field(
        default=3.0,
        gt=0.0,
        le=60.0,
        description="Per-request timeout for live price-list lookups",
    )
    aws_pricing_url: str = Field(
        default="https://calculator.aws/pricing/2.0/mpp/offers/ec2/current/region/{region}.json",
        description="AWS price list URL template ({region} is the region label)",
    )
    azure_pricing_url: str = Field(
        default="https://azure.microsoft.com/api/v3/pricing/virtual-machines-base/calculator",
        description="Azure pricing calculator endpoint",
    )
    gcp_pricing_url: str = Field(
        default="https://cloudpricingcalculator.appspot.com/static/data/pricelist.json",
        description="GCP price list dataset",
    )
    max_discount_rate: float = Field(
        default=80.0,
        ge=0.0,
        le=100.0,
        description="Upper bound (percent) for enterprise discounts",
    )

    # -------------------------------------------------------------------------
    # Estimation Heuristics
    # -------------------------------------------------------------------------
    cost_per_effort_day: float = Field(default=1000.0, ge=0.0, description="USD per person-day of gap effort")
    working_days_per_month: int = Field(default=20, ge=1, le=31, description="Working days used for timelines")
    default_capacity_per_unit: float = Field(
        default=600.0,
        gt=0.0,
        description="Transactions/sec per capacity unit when no element declares one",
    )
    debt_days_per_element: float = Field(default=5.0, ge=0.0, description="Baseline technical debt per element")

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    log_level: str = Field(default="INFO", description="Root log level")
    log_json: bool = Field(default=True, description="Render logs as JSON (console renderer otherwise)")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Singleton Settings instance.
    """
    return Settings()
