"""Tests for architecture and cloud cost estimation."""
import pytest

from arch_engine.analysis import estimate_cloud_costs, estimate_costs
from arch_engine.analysis.costs import (
    ADAPTER_FAILED_ASSUMPTION,
    COST_ASSUMPTIONS,
    NO_ADAPTER_ASSUMPTION,
    NO_SERVICES_ASSUMPTION,
)
from arch_engine.analysis.types import Confidence
from arch_engine.pricing import (
    CloudPricePoint,
    CloudPricingRequest,
    CloudServiceUsage,
    PricingAdapter,
    PricingDataSource,
    PricingResponse,
    calculate_service_cost,
)


def _usage(usage_id="u1", service="EC2 compute", quantity=100, provider="AWS", **kwargs):
    return CloudServiceUsage(
        id=usage_id,
        provider=provider,
        region="us-east-1",
        service=service,
        resource="m5.large",
        quantity=quantity,
        **kwargs,
    )


class FailingAdapter(PricingAdapter):
    """Adapter whose every call fails."""

    def __init__(self):
        self.calls = 0

    async def estimate(self, request):
        self.calls += 1
        raise RuntimeError("pricing backend down")


class FixedAdapter(PricingAdapter):
    """Adapter returning a canned response priced at a fixed rate."""

    def __init__(self, price=0.5, source=PricingDataSource.LIVE_API, assumptions=None):
        self.price = price
        self.source = source
        self.assumptions = assumptions or ["Adapter assumption."]

    async def estimate(self, request):
        services = []
        for usage in request.usage:
            point = CloudPricePoint(
                sku="sku-1",
                description="fixed",
                unit=usage.unit,
                price_per_unit=self.price,
                provider=usage.provider,
                region=usage.region,
                service=usage.service,
                source=self.source,
            )
            services.append(calculate_service_cost(usage, point))
        return PricingResponse(services=services, data_source=self.source, assumptions=self.assumptions)


class TestEstimateCosts:
    """Tests for layer-based cost allocation."""

    def test_layer_allocation(self, make_element):
        elements = [
            make_element("app", layer="APPLICATION", cost=1000),
            make_element("db", layer="DATA", cost=1000),
            make_element("cap", layer="BUSINESS", cost=500),
        ]

        estimation = estimate_costs(elements)
        breakdown = estimation.cost_breakdown

        assert breakdown.software.custom_development == pytest.approx(600)
        assert breakdown.software.licenses == pytest.approx(300)
        assert breakdown.services.implementation == pytest.approx(300)
        assert breakdown.operations.maintenance == pytest.approx(100)
        assert breakdown.operations.backup == pytest.approx(300)
        assert breakdown.infrastructure.cloud == pytest.approx(400)
        assert breakdown.by_layer.business == 500
        # BUSINESS cost stays out of the category totals
        assert estimation.total_cost == pytest.approx(2000)

    def test_technology_split(self, sample_elements):
        infra = estimate_costs(sample_elements).cost_breakdown.infrastructure

        assert infra.on_premise == pytest.approx(60000)
        assert infra.cloud == pytest.approx(36000)
        assert infra.hybrid == pytest.approx(24000)
        assert infra.total == pytest.approx(120000)

    def test_category_totals_reconcile(self, make_element):
        elements = [
            make_element(f"e{i}", layer=layer, cost=cost)
            for i, (layer, cost) in enumerate([
                ("APPLICATION", 1234.5), ("DATA", 777), ("TECHNOLOGY", 999.99), ("SOLUTION", 10),
            ])
        ]

        estimation = estimate_costs(elements)
        b = estimation.cost_breakdown

        assert b.infrastructure.total == pytest.approx(
            b.infrastructure.cloud + b.infrastructure.on_premise + b.infrastructure.hybrid
        )
        assert b.software.total == pytest.approx(
            b.software.licenses + b.software.subscriptions + b.software.custom_development
        )
        assert estimation.total_cost == pytest.approx(
            b.infrastructure.total + b.software.total + b.services.total + b.operations.total
        )

    def test_per_system_lines_and_metadata(self, sample_elements, id_generator, fixed_now):
        estimation = estimate_costs(sample_elements, id_generator=id_generator, now=fixed_now)

        assert [s.system_id for s in estimation.cost_breakdown.by_system] == [
            e.id for e in sample_elements
        ]
        assert estimation.cost_breakdown.by_system[-1].category == "compute-cluster"
        assert estimation.assumptions == COST_ASSUMPTIONS
        assert estimation.confidence == Confidence.MEDIUM
        assert estimation.id == "cost-1"
        assert estimation.estimation_date == fixed_now

    def test_empty_elements(self):
        estimation = estimate_costs([])

        assert estimation.total_cost == 0
        assert estimation.cost_breakdown.by_system == []


class TestCloudCostsHeuristic:
    """Tests for heuristic pricing when no adapter result is usable."""

    @pytest.mark.asyncio
    async def test_no_adapter_uses_heuristic_rates(self):
        request = CloudPricingRequest(usage=[_usage(quantity=100)])

        estimate = await estimate_cloud_costs(request)

        service = estimate.services[0]
        assert estimate.data_source == PricingDataSource.STATIC
        assert service.price_point.price_per_unit == 0.11
        assert service.monthly_cost == pytest.approx(11.0)
        assert service.hourly_cost == pytest.approx(11.0 / 720)
        assert service.annual_cost == pytest.approx(132.0)
        assert service.blended_discount == 0
        assert estimate.assumptions == [NO_ADAPTER_ASSUMPTION]

    @pytest.mark.asyncio
    async def test_failing_adapter_falls_back_per_usage_line(self):
        """An always-failing adapter yields one STATIC line per usage."""
        adapter = FailingAdapter()
        request = CloudPricingRequest(usage=[
            _usage("u1", "EC2 compute"),
            _usage("u2", "Azure SQL Database", provider="AZURE"),
            _usage("u3", "Cloud Storage", provider="GCP", unit="GB-MONTH"),
        ])

        estimate = await estimate_cloud_costs(request, adapter=adapter)

        assert adapter.calls == 1
        assert len(estimate.services) == 3
        assert all(s.price_point.source == PricingDataSource.STATIC for s in estimate.services)
        assert estimate.data_source == PricingDataSource.STATIC
        assert ADAPTER_FAILED_ASSUMPTION in estimate.assumptions
        assert estimate.services[1].price_point.price_per_unit == 0.22

    @pytest.mark.asyncio
    async def test_discount_is_capped_at_80_percent(self):
        request = CloudPricingRequest(discount_rate=150, usage=[_usage(quantity=100)])

        estimate = await estimate_cloud_costs(request)

        service = estimate.services[0]
        assert service.blended_discount == 80
        assert service.monthly_cost == pytest.approx(11.0 * 0.2)
        assert estimate.totals.discounts == pytest.approx(11.0 * 0.8)
        assert "Enterprise discount of 80% applied across eligible services." in estimate.assumptions

    @pytest.mark.asyncio
    async def test_usage_metadata_discount_when_request_has_none(self):
        request = CloudPricingRequest(usage=[_usage(quantity=100, metadata={"discountRate": 10})])

        estimate = await estimate_cloud_costs(request)

        assert estimate.services[0].blended_discount == 10
        assert estimate.services[0].monthly_cost == pytest.approx(9.9)

    @pytest.mark.asyncio
    async def test_usage_assumptions_become_notes(self):
        request = CloudPricingRequest(usage=[_usage(assumptions=["Runs 24x7"])])

        estimate = await estimate_cloud_costs(request)

        assert estimate.services[0].notes == ["Runs 24x7"]

    @pytest.mark.asyncio
    async def test_empty_request(self, id_generator, fixed_now):
        estimate = await estimate_cloud_costs(
            CloudPricingRequest(), id_generator=id_generator, now=fixed_now,
        )

        assert estimate.services == []
        assert estimate.totals.monthly == 0
        assert estimate.assumptions == [NO_ADAPTER_ASSUMPTION, NO_SERVICES_ASSUMPTION]
        assert estimate.id == "cloud-cost-1"
        assert estimate.generated_at == fixed_now


class TestCloudCostsWithAdapter:
    """Tests for adapter-priced estimates."""

    @pytest.mark.asyncio
    async def test_adapter_response_used(self):
        request = CloudPricingRequest(usage=[_usage(quantity=10)])

        estimate = await estimate_cloud_costs(request, adapter=FixedAdapter(price=0.5))

        assert estimate.data_source == PricingDataSource.LIVE_API
        assert estimate.services[0].monthly_cost == pytest.approx(5.0)
        assert estimate.services[0].hourly_cost == pytest.approx(0.5)
        assert estimate.assumptions == ["Adapter assumption."]

    @pytest.mark.asyncio
    async def test_enterprise_discount_applied_to_adapter_prices(self):
        request = CloudPricingRequest(discount_rate=25, usage=[_usage(quantity=10)])

        estimate = await estimate_cloud_costs(request, adapter=FixedAdapter(price=1.0))

        service = estimate.services[0]
        assert service.monthly_cost == pytest.approx(7.5)
        assert service.hourly_cost == pytest.approx(7.5 / 720)
        assert service.annual_cost == pytest.approx(90.0)
        assert service.blended_discount == 25
        assert service.notes == ["Enterprise discount (25%) applied."]
        assert estimate.totals.discounts == pytest.approx(2.5)

    @pytest.mark.asyncio
    async def test_assumptions_deduplicated_in_order(self):
        adapter = FixedAdapter(assumptions=["A", "B", "A"])
        request = CloudPricingRequest(discount_rate=10, usage=[_usage()])

        estimate = await estimate_cloud_costs(request, adapter=adapter)

        assert estimate.assumptions == [
            "A",
            "B",
            "Enterprise discount of 10% applied across eligible services.",
        ]

    @pytest.mark.asyncio
    async def test_element_linkage_notes(self, make_element):
        elements = [
            make_element("k8s", layer="TECHNOLOGY", name="Prod cluster", custom_fields={"cloud_service_id": "u1"}),
            make_element("batch", layer="TECHNOLOGY", name="EC2 compute fleet"),
            make_element("crm", name="CRM"),
        ]
        request = CloudPricingRequest(usage=[_usage("u1", "EC2 compute")])

        estimate = await estimate_cloud_costs(request, elements, adapter=FixedAdapter())

        assert estimate.services[0].notes == [
            "Linked to 2 architecture element(s): Prod cluster, EC2 compute fleet"
        ]
        # Linkage never changes prices
        assert estimate.services[0].monthly_cost == pytest.approx(50.0)

    @pytest.mark.asyncio
    async def test_totals_sum_services(self):
        request = CloudPricingRequest(usage=[_usage("u1", quantity=10), _usage("u2", quantity=30)])

        estimate = await estimate_cloud_costs(request, adapter=FixedAdapter(price=2.0))

        assert estimate.totals.monthly == pytest.approx(80.0)
        assert estimate.totals.annual == pytest.approx(960.0)
        assert estimate.totals.hourly == pytest.approx(4.0)
        assert estimate.totals.discounts == 0
