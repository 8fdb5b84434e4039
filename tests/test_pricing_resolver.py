"""Tests for the live/cached/static cloud pricing resolver."""
import httpx
import pytest

from arch_engine.config import Settings
from arch_engine.pricing import (
    CachedPrice,
    CloudPricePoint,
    CloudPricingRequest,
    CloudPricingResolver,
    CloudServiceUsage,
    FallbackPrice,
    LivePrice,
    PricingDataSource,
    calculate_service_cost,
    dominant_source,
)
from arch_engine.pricing.heuristics import fallback_bucket, normalize_service_key
from arch_engine.pricing.providers import map_aws_region
from arch_engine.pricing.resolver import LIVE_ASSUMPTIONS


AWS_BODY = {
    "products": {
        "compute-t3.medium": {
            "price": {"USD": "0.05"},
            "unit": "HOURS",
            "attributes": {"instanceType": "t3.medium"},
        },
    },
}

AZURE_BODY = {
    "Offers": [
        {"id": "vm-d2s", "name": "Compute D2s v5", "prices": {"USD": 0.1}},
        {"id": "sql-s3", "name": "Database S3", "prices": {"USD": 0.15}, "unit": "HOURS"},
    ],
}

GCP_BODY = {
    "gcp_price_list": {
        "CP-COMPUTEENGINE-compute-useast1": {"usd_price": 0.09},
        "CP-COMPUTEENGINE-compute-uscentral1": {"usd_price": 0.07, "description": "e2-standard-2"},
    },
}


def _usage(usage_id="u1", provider="AWS", region="us-east-1", service="EC2", quantity=10, unit="HOURS"):
    return CloudServiceUsage(
        id=usage_id,
        provider=provider,
        region=region,
        service=service,
        quantity=quantity,
        unit=unit,
    )


class Recorder:
    """MockTransport handler that records requests and replies per host."""

    def __init__(self, responses=None, error=None):
        self.responses = responses or {}
        self.error = error
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error(f"simulated {self.error.__name__}", request=request)
        reply = self.responses.get(request.url.host)
        if reply is None:
            return httpx.Response(404, json={"error": "not found"})
        if isinstance(reply, httpx.Response):
            return reply
        return httpx.Response(200, json=reply)


def _resolver(recorder, settings=None):
    client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    return CloudPricingResolver(settings=settings or Settings(), http_client=client)


class TestLivePricing:
    """Tests for successful live lookups."""

    @pytest.mark.asyncio
    async def test_aws_live_price(self):
        recorder = Recorder({"calculator.aws": AWS_BODY})
        resolver = _resolver(recorder)

        response = await resolver.estimate(CloudPricingRequest(usage=[_usage()]))

        service = response.services[0]
        assert response.data_source == PricingDataSource.LIVE_API
        assert service.price_point.source == PricingDataSource.LIVE_API
        assert service.price_point.price_per_unit == 0.05
        assert service.price_point.sku == "compute-t3.medium"
        assert service.price_point.description == "t3.medium"
        assert service.monthly_cost == pytest.approx(0.5)
        assert service.hourly_cost == pytest.approx(0.05)
        assert response.assumptions == [LIVE_ASSUMPTIONS[service.usage.provider]]
        assert recorder.requests[0].url.host == "calculator.aws"

    @pytest.mark.asyncio
    async def test_azure_matches_offer_by_bucket(self):
        recorder = Recorder({"azure.microsoft.com": AZURE_BODY})
        resolver = _resolver(recorder)
        usage = _usage(provider="AZURE", region="eastus", service="SQL Database")

        response = await resolver.estimate(CloudPricingRequest(usage=[usage]))

        point = response.services[0].price_point
        assert point.sku == "sql-s3"
        assert point.price_per_unit == 0.15
        assert recorder.requests[0].url.params["region"] == "eastus"

    @pytest.mark.asyncio
    async def test_gcp_matches_bucket_and_region(self):
        recorder = Recorder({"cloudpricingcalculator.appspot.com": GCP_BODY})
        resolver = _resolver(recorder)
        usage = _usage(provider="GCP", region="us-central1", service="Compute Engine")

        response = await resolver.estimate(CloudPricingRequest(usage=[usage]))

        point = response.services[0].price_point
        assert point.sku == "CP-COMPUTEENGINE-compute-uscentral1"
        assert point.price_per_unit == 0.07
        assert point.description == "e2-standard-2"

    @pytest.mark.asyncio
    async def test_zero_live_price_uses_reference_rate(self):
        body = {"products": {"compute-free": {"price": {"USD": "0"}}}}
        resolver = _resolver(Recorder({"calculator.aws": body}))

        response = await resolver.estimate(CloudPricingRequest(usage=[_usage()]))

        point = response.services[0].price_point
        assert point.source == PricingDataSource.LIVE_API
        assert point.price_per_unit == 0.0416


class TestCache:
    """Tests for the process-wide price cache."""

    @pytest.mark.asyncio
    async def test_second_lookup_served_from_cache(self):
        recorder = Recorder({"calculator.aws": AWS_BODY})
        resolver = _resolver(recorder)
        request = CloudPricingRequest(usage=[_usage()])

        await resolver.estimate(request)
        response = await resolver.estimate(request)

        assert len(recorder.requests) == 1
        assert response.data_source == PricingDataSource.CACHED
        assert response.services[0].price_point.source == PricingDataSource.CACHED
        assert response.services[0].price_point.price_per_unit == 0.05
        assert response.assumptions == []

    @pytest.mark.asyncio
    async def test_cache_key_is_case_insensitive(self):
        recorder = Recorder({"calculator.aws": AWS_BODY})
        resolver = _resolver(recorder)

        await resolver.estimate(CloudPricingRequest(usage=[_usage(service="EC2", region="us-east-1")]))
        response = await resolver.estimate(
            CloudPricingRequest(usage=[_usage(service="ec2", region="US-EAST-1")])
        )

        assert len(recorder.requests) == 1
        assert response.data_source == PricingDataSource.CACHED

    @pytest.mark.asyncio
    async def test_cache_shared_between_resolvers(self):
        recorder = Recorder({"calculator.aws": AWS_BODY})
        await _resolver(recorder).estimate(CloudPricingRequest(usage=[_usage()]))

        response = await _resolver(recorder).estimate(CloudPricingRequest(usage=[_usage()]))

        assert len(recorder.requests) == 1
        assert response.data_source == PricingDataSource.CACHED

    @pytest.mark.asyncio
    async def test_fallback_prices_are_not_cached(self):
        recorder = Recorder({"calculator.aws": httpx.Response(503)})
        resolver = _resolver(recorder)
        request = CloudPricingRequest(usage=[_usage()])

        await resolver.estimate(request)
        await resolver.estimate(request)

        assert len(recorder.requests) == 2

    @pytest.mark.asyncio
    async def test_injected_cache_is_isolated(self):
        recorder = Recorder({"calculator.aws": AWS_BODY})
        client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
        cache = {}
        resolver = CloudPricingResolver(settings=Settings(), http_client=client, cache=cache)

        await resolver.estimate(CloudPricingRequest(usage=[_usage()]))

        assert list(cache) == ["aws:us-east-1:ec2"]


class TestFallback:
    """Tests for degraded lookups falling back to reference prices."""

    @pytest.mark.asyncio
    async def test_non_success_status(self):
        resolver = _resolver(Recorder({"calculator.aws": httpx.Response(503)}))

        response = await resolver.estimate(CloudPricingRequest(usage=[_usage()]))

        point = response.services[0].price_point
        assert response.data_source == PricingDataSource.STATIC
        assert point.source == PricingDataSource.STATIC
        assert point.sku == "aws-compute-t3-medium"
        assert point.price_per_unit == 0.0416
        assert point.region == "us-east-1"
        assert response.assumptions == [
            "AWS pricing API unavailable (AWS pricing API responded with 503). Fallback rates applied."
        ]

    @pytest.mark.asyncio
    async def test_timeout(self):
        resolver = _resolver(Recorder(error=httpx.ReadTimeout))

        response = await resolver.estimate(CloudPricingRequest(usage=[_usage()]))

        assert response.data_source == PricingDataSource.STATIC
        assert response.assumptions == [
            "AWS pricing API unavailable (request timed out). Fallback rates applied."
        ]

    @pytest.mark.asyncio
    async def test_connection_error(self):
        resolver = _resolver(Recorder(error=httpx.ConnectError))

        response = await resolver.estimate(CloudPricingRequest(usage=[_usage()]))

        assert response.data_source == PricingDataSource.STATIC
        assert "simulated ConnectError" in response.assumptions[0]

    @pytest.mark.asyncio
    async def test_malformed_body(self):
        bad = httpx.Response(200, content=b"<html>not json</html>")
        resolver = _resolver(Recorder({"calculator.aws": bad}))

        response = await resolver.estimate(CloudPricingRequest(usage=[_usage()]))

        assert response.services[0].price_point.source == PricingDataSource.STATIC
        assert response.assumptions[0].startswith("AWS pricing API unavailable (Malformed pricing response")

    @pytest.mark.asyncio
    async def test_unexpected_shape(self):
        resolver = _resolver(Recorder({"calculator.aws": {"products": []}}))

        response = await resolver.estimate(CloudPricingRequest(usage=[_usage()]))

        assert response.assumptions == [
            "AWS pricing API unavailable (Malformed AWS pricing response). Fallback rates applied."
        ]

    @pytest.mark.asyncio
    async def test_no_matching_product(self):
        body = {"products": {"storage-standard": {"price": {"USD": "0.02"}}}}
        resolver = _resolver(Recorder({"calculator.aws": body}))

        response = await resolver.estimate(CloudPricingRequest(usage=[_usage()]))

        assert "No matching AWS pricing product found" in response.assumptions[0]

    @pytest.mark.asyncio
    async def test_live_lookups_disabled(self):
        recorder = Recorder({"calculator.aws": AWS_BODY})
        resolver = _resolver(recorder, Settings(pricing_live_enabled=False))

        response = await resolver.estimate(CloudPricingRequest(usage=[_usage()]))

        assert recorder.requests == []
        assert response.data_source == PricingDataSource.STATIC
        assert response.assumptions == [
            "AWS pricing API unavailable (live pricing disabled). Fallback rates applied."
        ]

    @pytest.mark.asyncio
    async def test_fallback_assumption_uses_provider_display_name(self):
        resolver = _resolver(Recorder(), Settings(pricing_live_enabled=False))
        request = CloudPricingRequest(usage=[
            _usage("vm", provider="AZURE", region="westeurope", service="Virtual Machines"),
            _usage("gce", provider="GCP", region="europe-west1", service="Compute Engine"),
        ])

        response = await resolver.estimate(request)

        assert response.assumptions == [
            "Azure pricing API unavailable (live pricing disabled). Fallback rates applied.",
            "GCP pricing API unavailable (live pricing disabled). Fallback rates applied.",
        ]

    @pytest.mark.asyncio
    async def test_fallback_bucket_by_service(self):
        resolver = _resolver(Recorder())
        request = CloudPricingRequest(usage=[
            _usage("db", provider="GCP", region="europe-west1", service="Cloud SQL"),
            _usage("blob", provider="AZURE", region="westeurope", service="Blob", unit="GB-MONTH"),
        ])

        response = await resolver.estimate(request)

        db, blob = response.services
        assert db.price_point.sku == "gcp-sql-postgres"
        assert db.price_point.region == "europe-west1"
        assert db.price_point.service == "Cloud SQL"
        assert blob.price_point.sku == "azure-blob-hot"
        assert len(response.assumptions) == 2


class TestMixedSources:

    @pytest.mark.asyncio
    async def test_dominant_source_across_lines(self):
        recorder = Recorder({"calculator.aws": AWS_BODY})
        resolver = _resolver(recorder)
        request = CloudPricingRequest(usage=[
            _usage("live"),
            _usage("down", provider="GCP", region="us-central1", service="Compute Engine"),
        ])

        response = await resolver.estimate(request)

        assert [s.price_point.source for s in response.services] == [
            PricingDataSource.LIVE_API, PricingDataSource.STATIC,
        ]
        assert response.data_source == PricingDataSource.LIVE_API
        assert len(response.assumptions) == 2

    @pytest.mark.asyncio
    async def test_resolve_returns_tagged_results(self):
        recorder = Recorder({"calculator.aws": AWS_BODY})
        resolver = _resolver(recorder)

        async with httpx.AsyncClient(transport=httpx.MockTransport(recorder)) as client:
            live = await resolver.resolve(client, _usage())
            cached = await resolver.resolve(client, _usage())
            fallback = await resolver.resolve(client, _usage(provider="AZURE", region="eastus", service="VM"))

        assert isinstance(live, LivePrice)
        assert isinstance(cached, CachedPrice)
        assert isinstance(fallback, FallbackPrice)
        assert fallback.reason == "Azure pricing API responded with 404"
        assert fallback.assumption == (
            "Azure pricing API unavailable (Azure pricing API responded with 404). Fallback rates applied."
        )
        assert [r.source for r in (live, cached, fallback)] == [
            PricingDataSource.LIVE_API, PricingDataSource.CACHED, PricingDataSource.STATIC,
        ]

    @pytest.mark.parametrize("current,incoming,expected", [
        (PricingDataSource.STATIC, PricingDataSource.CACHED, PricingDataSource.CACHED),
        (PricingDataSource.CACHED, PricingDataSource.LIVE_API, PricingDataSource.LIVE_API),
        (PricingDataSource.LIVE_API, PricingDataSource.STATIC, PricingDataSource.LIVE_API),
        (PricingDataSource.CACHED, PricingDataSource.STATIC, PricingDataSource.CACHED),
    ])
    def test_dominant_source(self, current, incoming, expected):
        assert dominant_source(current, incoming) == expected


class TestServiceCost:
    """Tests for calculate_service_cost unit handling."""

    def _point(self, unit, price):
        return CloudPricePoint(
            sku="s", description="d", unit=unit, price_per_unit=price,
            provider="AWS", region="us-east-1", service="EC2",
        )

    def test_hourly_unit_uses_unit_price_as_hourly(self):
        cost = calculate_service_cost(_usage(quantity=720), self._point("hours", 0.1))

        assert cost.hourly_cost == pytest.approx(0.1)
        assert cost.monthly_cost == pytest.approx(72.0)
        assert cost.annual_cost == pytest.approx(864.0)
        assert cost.blended_discount == 0
        assert cost.notes == []

    def test_other_units_spread_monthly_cost(self):
        cost = calculate_service_cost(_usage(quantity=1000, unit="GB-MONTH"), self._point("GB-MONTH", 0.023))

        assert cost.monthly_cost == pytest.approx(23.0)
        assert cost.hourly_cost == pytest.approx(23.0 / 720)


class TestHeuristics:

    @pytest.mark.parametrize("service,expected", [
        ("AWS Lambda", "serverless"),
        ("Azure Functions", "serverless"),
        ("Kubernetes Engine", "container"),
        ("Azure SQL Database", "database"),
        ("Amazon Redshift", "datawarehouse"),
        ("Object Storage", "objectstorage"),
        ("Block Storage", "blockstorage"),
        ("Cloud Storage", "storage"),
        ("Network Egress", "network"),
        ("Log Analytics", "analytics"),
        ("CloudWatch Monitoring", "monitoring"),
        ("Identity Center", "security"),
        ("EC2", "compute"),
        ("Quantum Widget", "default"),
    ])
    def test_normalize_service_key(self, service, expected):
        assert normalize_service_key(service) == expected

    @pytest.mark.parametrize("service,expected", [
        ("S3", "storage"),
        ("Lambda", "compute"),
        ("BigQuery", "database"),
        ("Cloud SQL", "database"),
        ("DocumentDB", "database"),
        ("Glacier storage", "storage"),
        ("Virtual Machines", "compute"),
    ])
    def test_fallback_bucket(self, service, expected):
        assert fallback_bucket(service) == expected

    def test_map_aws_region_defaults_to_virginia(self):
        assert map_aws_region("eu-west-1") == "EU (Ireland)"
        assert map_aws_region("mars-north-1") == "US East (N. Virginia)"
