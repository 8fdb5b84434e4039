"""Static price tables and service-name normalization.

Two tables live here:
- HEURISTIC_RATES: coarse per-unit rates used by the cost estimator when no
  pricing adapter produced anything.
- FALLBACK_PRICE_POINTS: reference SKUs the resolver falls back to when a live
  lookup fails.
"""
from datetime import datetime, timezone

from arch_engine.pricing.types import (
    CloudPricePoint,
    CloudProvider,
    CloudServiceUsage,
    PricingDataSource,
)

DEFAULT_RATE = 0.12
HOURS_PER_MONTH = 30 * 24

# Rates per canonical bucket; "default" catches unmatched services
HEURISTIC_RATES: dict[CloudProvider, dict[str, float]] = {
    CloudProvider.AWS: {
        "compute": 0.11,
        "container": 0.095,
        "serverless": 0.00002,
        "database": 0.25,
        "datawarehouse": 0.35,
        "storage": 0.023,
        "objectstorage": 0.021,
        "blockstorage": 0.08,
        "network": 0.09,
        "analytics": 0.19,
        "monitoring": 0.015,
        "security": 0.04,
        "default": 0.12,
    },
    CloudProvider.AZURE: {
        "compute": 0.10,
        "container": 0.09,
        "serverless": 0.000018,
        "database": 0.22,
        "datawarehouse": 0.32,
        "storage": 0.02,
        "objectstorage": 0.019,
        "blockstorage": 0.075,
        "network": 0.085,
        "analytics": 0.18,
        "monitoring": 0.013,
        "security": 0.038,
        "default": 0.11,
    },
    CloudProvider.GCP: {
        "compute": 0.098,
        "container": 0.088,
        "serverless": 0.000017,
        "database": 0.20,
        "datawarehouse": 0.30,
        "storage": 0.020,
        "objectstorage": 0.0185,
        "blockstorage": 0.07,
        "network": 0.082,
        "analytics": 0.17,
        "monitoring": 0.012,
        "security": 0.036,
        "default": 0.10,
    },
}

_REFERENCE_DATE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _reference(sku: str, description: str, unit: str, price: float,
               provider: CloudProvider, region: str, service: str) -> CloudPricePoint:
    return CloudPricePoint(
        sku=sku,
        description=description,
        unit=unit,
        price_per_unit=price,
        currency="USD",
        provider=provider,
        region=region,
        service=service,
        last_updated=_REFERENCE_DATE,
        source=PricingDataSource.STATIC,
    )


FALLBACK_PRICE_POINTS: dict[CloudProvider, dict[str, CloudPricePoint]] = {
    CloudProvider.AWS: {
        "compute": _reference("aws-compute-t3-medium", "AWS EC2 t3.medium On-Demand compute (US East)",
                              "HOURS", 0.0416, CloudProvider.AWS, "us-east-1", "EC2"),
        "storage": _reference("aws-s3-standard", "AWS S3 Standard storage (US East)",
                              "GB-MONTH", 0.023, CloudProvider.AWS, "us-east-1", "S3"),
        "database": _reference("aws-rds-postgres-large", "AWS RDS db.m5.large PostgreSQL (On-Demand)",
                               "HOURS", 0.29, CloudProvider.AWS, "us-east-1", "RDS"),
    },
    CloudProvider.AZURE: {
        "compute": _reference("azure-compute-d2s-v5", "Azure D2s v5 VM (Pay-as-you-go)",
                              "HOURS", 0.096, CloudProvider.AZURE, "eastus", "Virtual Machines"),
        "storage": _reference("azure-blob-hot", "Azure Blob Storage hot tier (LRS)",
                              "GB-MONTH", 0.0184, CloudProvider.AZURE, "eastus", "Blob Storage"),
        "database": _reference("azure-sql-dtu", "Azure SQL Database Standard S3 (DTU model)",
                               "HOURS", 0.112, CloudProvider.AZURE, "eastus", "SQL Database"),
    },
    CloudProvider.GCP: {
        "compute": _reference("gcp-compute-e2-standard-2", "GCP e2-standard-2 VM (On-Demand)",
                              "HOURS", 0.067999, CloudProvider.GCP, "us-central1", "Compute Engine"),
        "storage": _reference("gcp-storage-standard", "GCP Cloud Storage standard class",
                              "GB-MONTH", 0.020, CloudProvider.GCP, "us-central1", "Cloud Storage"),
        "database": _reference("gcp-sql-postgres", "Cloud SQL for PostgreSQL db-custom-2-7680",
                               "HOURS", 0.26, CloudProvider.GCP, "us-central1", "Cloud SQL"),
    },
}

# Exact service names that map straight to a fallback bucket
SERVICE_KEY_OVERRIDES: dict[str, str] = {
    "lambda": "compute",
    "functions": "compute",
    "firestore": "database",
    "bigquery": "database",
    "dynamodb": "database",
    "s3": "storage",
    "blob": "storage",
    "synapse": "database",
}


def normalize_service_key(service: str) -> str:
    """Map a free-form service name to a HEURISTIC_RATES bucket.

    Order matters: serverless and container checks run before database so
    "Azure Functions" or "Kubernetes" never land in a broader bucket.

    Examples:
        >>> normalize_service_key("AWS Lambda")
        'serverless'
        >>> normalize_service_key("Amazon Redshift")
        'datawarehouse'
        >>> normalize_service_key("Quantum Widget")
        'default'
    """
    key = service.lower()
    if any(word in key for word in ("lambda", "serverless", "functions")):
        return "serverless"
    if "kubernetes" in key or "container" in key:
        return "container"
    if any(word in key for word in ("sql", "database", "postgres", "mysql")):
        return "database"
    if any(word in key for word in ("warehouse", "redshift", "bigquery", "synapse")):
        return "datawarehouse"
    if "storage" in key and "object" in key:
        return "objectstorage"
    if "storage" in key and "block" in key:
        return "blockstorage"
    if "storage" in key:
        return "storage"
    if "network" in key or "bandwidth" in key:
        return "network"
    if "analytics" in key or "insight" in key:
        return "analytics"
    if any(word in key for word in ("monitor", "observability", "logging")):
        return "monitoring"
    if any(word in key for word in ("security", "iam", "identity")):
        return "security"
    if any(word in key for word in ("compute", "ec2", "vm", "instance")):
        return "compute"
    return "default"


def fallback_bucket(service: str) -> str:
    """Map a service name to a FALLBACK_PRICE_POINTS bucket (default compute)."""
    key = service.lower().strip()
    if key in SERVICE_KEY_OVERRIDES:
        return SERVICE_KEY_OVERRIDES[key]
    if "s3" in key or "storage" in key:
        return "storage"
    if "sql" in key or "database" in key or "db" in key:
        return "database"
    return "compute"


def heuristic_price_point(usage: CloudServiceUsage) -> CloudPricePoint:
    """Build a STATIC price point from HEURISTIC_RATES."""
    service_key = normalize_service_key(usage.service)
    provider_rates = HEURISTIC_RATES.get(usage.provider, {})
    price = provider_rates.get(service_key, provider_rates.get("default", DEFAULT_RATE))

    return CloudPricePoint(
        sku=f"{usage.provider.value}-{service_key}-{usage.region}",
        description=f"Heuristic pricing for {usage.service}",
        unit=usage.unit,
        price_per_unit=price,
        currency="USD",
        provider=usage.provider,
        region=usage.region,
        service=usage.service,
        source=PricingDataSource.STATIC,
    )


def fallback_price_point(usage: CloudServiceUsage) -> CloudPricePoint:
    """Reference SKU for the usage's bucket, re-labelled with its region/service."""
    bucket = fallback_bucket(usage.service)
    provider_points = FALLBACK_PRICE_POINTS.get(usage.provider, {})
    reference = provider_points.get(bucket) or provider_points.get("compute")

    if reference is None:
        return CloudPricePoint(
            sku=f"{usage.provider.value}-{bucket}-{usage.region}",
            description=f"{usage.provider.value} heuristic pricing for {usage.service}",
            unit=usage.unit or "HOURS",
            price_per_unit=DEFAULT_RATE,
            currency="USD",
            provider=usage.provider,
            region=usage.region,
            service=usage.service,
            source=PricingDataSource.STATIC,
        )

    return reference.model_copy(update={"region": usage.region, "service": usage.service})
