"""
Cost Estimator - annual architecture costs and cloud service pricing.

estimate_costs() spreads each element's declared annual cost across cost
categories by layer. estimate_cloud_costs() prices cloud usage lines through
an optional PricingAdapter and falls back to the heuristic rate table.
"""
import logging
from datetime import datetime
from typing import Iterable, Optional

from arch_engine.analysis.types import (
    CloudCostEstimate,
    CloudCostTotals,
    Confidence,
    CostBreakdown,
    CostEstimation,
    SystemCost,
    round_half_up,
)
from arch_engine.config import Settings, get_settings
from arch_engine.ids import IdGenerator, resolve_id_generator, resolve_now
from arch_engine.model import ArchitectureElement, ArchitectureLayer
from arch_engine.pricing import (
    CloudPricingRequest,
    CloudServiceCost,
    CloudServiceUsage,
    PricingAdapter,
    PricingDataSource,
)
from arch_engine.pricing.heuristics import HOURS_PER_MONTH, heuristic_price_point

logger = logging.getLogger(__name__)

COST_ASSUMPTIONS = [
    "Costs are annual estimates",
    "Based on current architecture state",
    "Does not include one-time setup costs",
]

ADAPTER_FAILED_ASSUMPTION = "Live cloud pricing API was unavailable; heuristic pricing applied."
NO_ADAPTER_ASSUMPTION = "Cloud pricing adapter not configured; heuristic pricing applied."
NO_SERVICES_ASSUMPTION = "No services provided in cost request."


# =============================================================================
# Architecture costs
# =============================================================================


def _allocate(breakdown: CostBreakdown, element: ArchitectureElement) -> None:
    cost = element.metadata.cost
    layer = element.layer

    if layer == ArchitectureLayer.BUSINESS:
        breakdown.by_layer.business += cost
    elif layer == ArchitectureLayer.APPLICATION:
        breakdown.by_layer.application += cost
        breakdown.software.custom_development += cost * 0.6
        breakdown.services.implementation += cost * 0.3
        breakdown.operations.maintenance += cost * 0.1
    elif layer == ArchitectureLayer.DATA:
        breakdown.by_layer.data += cost
        breakdown.infrastructure.cloud += cost * 0.4
        breakdown.software.licenses += cost * 0.3
        breakdown.operations.backup += cost * 0.3
    elif layer == ArchitectureLayer.TECHNOLOGY:
        breakdown.by_layer.technology += cost
        breakdown.infrastructure.on_premise += cost * 0.5
        breakdown.infrastructure.cloud += cost * 0.3
        breakdown.infrastructure.hybrid += cost * 0.2
    elif layer == ArchitectureLayer.SOLUTION:
        breakdown.by_layer.solution += cost


def _close_totals(breakdown: CostBreakdown) -> None:
    infra = breakdown.infrastructure
    infra.total = infra.cloud + infra.on_premise + infra.hybrid

    software = breakdown.software
    software.total = software.licenses + software.subscriptions + software.custom_development

    services = breakdown.services
    services.total = services.consulting + services.implementation + services.support + services.training

    ops = breakdown.operations
    ops.total = ops.maintenance + ops.monitoring + ops.backup + ops.disaster_recovery


def estimate_costs(
    elements: Iterable[ArchitectureElement],
    *,
    id_generator: Optional[IdGenerator] = None,
    now: Optional[datetime] = None,
) -> CostEstimation:
    """Break declared element costs down by category, layer and system.

    BUSINESS and SOLUTION costs only appear in ``by_layer``; they are not
    part of ``total_cost``, which is the sum of the four category totals.
    """
    breakdown = CostBreakdown()

    for element in elements:
        _allocate(breakdown, element)
        breakdown.by_system.append(SystemCost(
            system_id=element.id,
            system_name=element.name,
            cost=element.metadata.cost,
            category=element.type,
        ))

    _close_totals(breakdown)
    total_cost = (
        breakdown.infrastructure.total
        + breakdown.software.total
        + breakdown.services.total
        + breakdown.operations.total
    )

    logger.debug(f"Cost estimation over {len(breakdown.by_system)} elements: total={total_cost:.2f}")

    return CostEstimation(
        id=resolve_id_generator(id_generator).next_id("cost"),
        estimation_date=resolve_now(now),
        total_cost=total_cost,
        cost_breakdown=breakdown,
        assumptions=list(COST_ASSUMPTIONS),
        confidence=Confidence.MEDIUM,
    )


# =============================================================================
# Cloud costs
# =============================================================================


def clamp_discount(rate: Optional[float], settings: Settings) -> float:
    return min(max(rate or 0.0, 0.0), settings.max_discount_rate)


def estimate_service_cost_heuristically(
    usage: CloudServiceUsage,
    discount_rate: Optional[float],
    settings: Settings,
) -> CloudServiceCost:
    """Price one usage line from HEURISTIC_RATES.

    The request-level discount wins; the line's own ``discount_rate``
    metadata applies only when the request has none.
    """
    price_point = heuristic_price_point(usage)
    list_monthly = price_point.price_per_unit * usage.quantity
    discount = clamp_discount(discount_rate or usage.discount_rate, settings)
    multiplier = 1 - discount / 100
    monthly = list_monthly * multiplier

    return CloudServiceCost(
        usage=usage,
        price_point=price_point,
        hourly_cost=monthly / HOURS_PER_MONTH,
        monthly_cost=monthly,
        annual_cost=monthly * 12,
        blended_discount=round_half_up((1 - multiplier) * 10000) / 100,
        notes=list(usage.assumptions),
    )


def apply_enterprise_discount(service: CloudServiceCost, discount_rate: float, settings: Settings) -> CloudServiceCost:
    """Re-price a service at list price minus the clamped discount."""
    safe_discount = clamp_discount(discount_rate, settings)
    discounted_monthly = service.list_monthly_cost * (1 - safe_discount / 100)

    notes = list(service.notes)
    note = f"Enterprise discount ({safe_discount:g}%) applied."
    if note not in notes:
        notes.append(note)

    return service.model_copy(update={
        "hourly_cost": discounted_monthly / HOURS_PER_MONTH,
        "monthly_cost": discounted_monthly,
        "annual_cost": discounted_monthly * 12,
        "blended_discount": max(service.blended_discount, safe_discount),
        "notes": notes,
    })


def _link_elements(service: CloudServiceCost, elements: list[ArchitectureElement]) -> CloudServiceCost:
    usage = service.usage
    service_name = usage.service.lower()
    matches = [
        e for e in elements
        if (e.custom_fields.cloud_service_id and e.custom_fields.cloud_service_id == usage.id)
        or (service_name and service_name in e.name.lower())
    ]
    if not matches:
        return service

    names = ", ".join(m.name for m in matches)
    notes = [*service.notes, f"Linked to {len(matches)} architecture element(s): {names}"]
    return service.model_copy(update={"notes": notes})


def calculate_cloud_cost_totals(services: list[CloudServiceCost]) -> CloudCostTotals:
    totals = CloudCostTotals()
    for service in services:
        totals.hourly += service.hourly_cost
        totals.monthly += service.monthly_cost
        totals.annual += service.annual_cost
        totals.discounts += max(0.0, service.list_monthly_cost - service.monthly_cost)
    return totals


async def estimate_cloud_costs(
    request: CloudPricingRequest,
    elements: Optional[Iterable[ArchitectureElement]] = None,
    *,
    adapter: Optional[PricingAdapter] = None,
    settings: Optional[Settings] = None,
    id_generator: Optional[IdGenerator] = None,
    now: Optional[datetime] = None,
) -> CloudCostEstimate:
    """Price a cloud usage request.

    Never raises for pricing failures: an adapter error is logged, recorded
    as an assumption, and every line is then priced heuristically.

    Args:
        request: Usage lines plus currency and optional enterprise discount.
        elements: Architecture elements to link usage lines to (notes only).
        adapter: Pricing source; heuristic-only when None.
        settings: Engine settings (discount cap).
        id_generator: Report id source.
        now: Report timestamp.

    Returns:
        CloudCostEstimate with per-service costs, totals, data source and
        deduplicated assumptions.
    """
    settings = settings or get_settings()
    assumptions: dict[str, None] = {}
    services: list[CloudServiceCost] = []
    data_source = PricingDataSource.STATIC

    if adapter is not None:
        try:
            response = await adapter.estimate(request)
            services = list(response.services)
            data_source = response.data_source
            for assumption in response.assumptions:
                assumptions.setdefault(assumption, None)
        except Exception as e:
            logger.warning(f"Cloud pricing adapter failed, falling back to heuristics: {e}", exc_info=True)
            assumptions.setdefault(ADAPTER_FAILED_ASSUMPTION, None)
    else:
        assumptions.setdefault(NO_ADAPTER_ASSUMPTION, None)

    discount_rate = request.discount_rate
    if not services:
        services = [
            estimate_service_cost_heuristically(usage, discount_rate, settings)
            for usage in request.usage
        ]
        data_source = PricingDataSource.STATIC
    elif discount_rate and discount_rate > 0:
        services = [apply_enterprise_discount(s, discount_rate, settings) for s in services]

    if elements is not None:
        element_list = list(elements)
        if element_list:
            services = [_link_elements(s, element_list) for s in services]

    if discount_rate and discount_rate > 0:
        applied = clamp_discount(discount_rate, settings)
        assumptions.setdefault(
            f"Enterprise discount of {applied:g}% applied across eligible services.", None
        )

    if not services:
        assumptions.setdefault(NO_SERVICES_ASSUMPTION, None)

    return CloudCostEstimate(
        id=resolve_id_generator(id_generator).next_id("cloud-cost"),
        request=request,
        services=services,
        totals=calculate_cloud_cost_totals(services),
        data_source=data_source,
        assumptions=list(assumptions),
        generated_at=resolve_now(now),
    )
