"""
Performance Modeler - capacity plan and bottlenecks for a workload.

All figures are heuristics over the architecture snapshot: declared
capacity per unit on TECHNOLOGY elements, compute-like element counts,
integration volume and hosting platform.
"""
import logging
import math
from datetime import datetime
from typing import Iterable, Optional

from arch_engine.analysis.types import (
    BottleneckMetric,
    CapacityPlan,
    PerformanceBottleneck,
    PerformanceModel,
    ScalingStrategy,
    WorkloadProfile,
    round_half_up,
)
from arch_engine.config import Settings, get_settings
from arch_engine.ids import IdGenerator, resolve_id_generator, resolve_now
from arch_engine.model import (
    ArchitectureElement,
    ArchitectureGraph,
    ArchitectureLayer,
    ArchitectureRelationship,
    Platform,
    RelationshipType,
    RiskLevel,
)

logger = logging.getLogger(__name__)

MIN_CAPACITY_PER_UNIT = 150
MAX_UTILIZATION = 99

# Monthly cost of one capacity unit by hosting platform
UNIT_COST_CLOUD = 320
UNIT_COST_ON_PREM = 280
UNIT_COST_DEFAULT = 300


def _is_cloud(element: ArchitectureElement) -> bool:
    return element.custom_fields.platform == Platform.CLOUD or "cloud" in element.tags


def _is_compute(element: ArchitectureElement) -> bool:
    category = element.custom_fields.category or ""
    return (
        "compute" in element.type.lower()
        or "compute" in element.tags
        or category.upper() == "COMPUTE"
    )


def _utilization(value: float) -> float:
    return float(max(0, min(MAX_UTILIZATION, round_half_up(value))))


def estimate_baseline_capacity(
    workload: WorkloadProfile,
    elements: list[ArchitectureElement],
    settings: Settings,
) -> int:
    """Transactions/sec one capacity unit sustains for this workload."""
    declared = [
        e.custom_fields.capacity_per_unit
        for e in elements
        if e.layer == ArchitectureLayer.TECHNOLOGY
        and e.custom_fields.capacity_per_unit is not None
        and e.custom_fields.capacity_per_unit > 0
    ]
    baseline = sum(declared) / len(declared) if declared else settings.default_capacity_per_unit

    # Large payloads and high availability both cost throughput
    if workload.payload_size_kb > 512:
        baseline *= max(0.5, 1 - (workload.payload_size_kb - 512) / 2048)
    if workload.availability_target >= 99.9:
        baseline *= 0.9

    return max(MIN_CAPACITY_PER_UNIT, round_half_up(baseline))


def count_current_capacity_units(graph: ArchitectureGraph) -> int:
    compute = [
        e for e in graph.by_layer(ArchitectureLayer.TECHNOLOGY) if _is_compute(e)
    ]
    integrations = len(graph.relationships_of_type(RelationshipType.INTEGRATES_WITH))
    return max(1, len(compute) + math.ceil(integrations / 10))


def capacity_unit_cost(elements: list[ArchitectureElement]) -> int:
    platforms = {e.custom_fields.platform for e in elements}
    if Platform.CLOUD in platforms:
        return UNIT_COST_CLOUD
    if Platform.ON_PREM in platforms:
        return UNIT_COST_ON_PREM
    return UNIT_COST_DEFAULT


def upgrade_timeline_weeks(required_units: int, current_units: int) -> int:
    additional = max(0, required_units - current_units)
    if additional == 0:
        return 2
    if additional < 5:
        return 4
    if additional < 10:
        return 6
    return min(16, math.ceil(additional / 2))


def scaling_strategy(workload: WorkloadProfile, elements: list[ArchitectureElement]) -> ScalingStrategy:
    if any(_is_cloud(e) for e in elements) and workload.concurrency > 250:
        return ScalingStrategy.AUTO_SCALING
    if workload.peak_transactions_per_second > workload.average_transactions_per_second * 1.5:
        return ScalingStrategy.HORIZONTAL
    return ScalingStrategy.VERTICAL


def _capacity_notes(workload: WorkloadProfile, required_in_12_months: int, current_units: int) -> list[str]:
    notes = []
    if required_in_12_months > current_units * 1.5:
        notes.append("Capacity requirement grows more than 50% over 12 months. Plan phased upgrades.")
    if workload.growth_rate_monthly > 5:
        notes.append(f"High workload growth rate detected ({workload.growth_rate_monthly:g}% per month).")
    if workload.availability_target >= 99.9:
        notes.append("Availability targets require N+1 redundancy in production.")
    return notes


def identify_bottlenecks(
    workload: WorkloadProfile,
    graph: ArchitectureGraph,
    capacity_per_unit: int,
) -> list[PerformanceBottleneck]:
    bottlenecks = []
    applications = graph.by_layer(ArchitectureLayer.APPLICATION)
    data_elements = graph.by_layer(ArchitectureLayer.DATA)
    integrations = len(graph.relationships_of_type(RelationshipType.INTEGRATES_WITH))
    peak = workload.peak_transactions_per_second

    if peak > capacity_per_unit * len(applications):
        utilization = peak / (capacity_per_unit * max(len(applications), 1)) * 100
        bottlenecks.append(PerformanceBottleneck(
            id="bottleneck-compute",
            layer=ArchitectureLayer.APPLICATION,
            metric=BottleneckMetric.CPU,
            current_utilization=_utilization(utilization),
            risk_level=RiskLevel.HIGH,
            description="Peak throughput exceeds current compute capacity.",
            recommendations=[
                "Introduce auto-scaling at application tier",
                "Optimize critical transaction flows",
            ],
        ))

    if workload.concurrency > 500 or integrations > 20:
        bottlenecks.append(PerformanceBottleneck(
            id="bottleneck-integration",
            layer=ArchitectureLayer.TECHNOLOGY,
            metric=BottleneckMetric.NETWORK,
            current_utilization=_utilization(workload.concurrency / 10),
            risk_level=RiskLevel.MEDIUM,
            description="High concurrency and integration volume may saturate network links.",
            recommendations=["Implement connection pooling", "Add API gateway throttling policies"],
        ))

    if data_elements and workload.payload_size_kb > 256:
        bottlenecks.append(PerformanceBottleneck(
            id="bottleneck-data",
            layer=ArchitectureLayer.DATA,
            metric=BottleneckMetric.IO,
            current_utilization=_utilization(workload.payload_size_kb / 1024 * 80),
            risk_level=RiskLevel.HIGH if workload.payload_size_kb > 1024 else RiskLevel.MEDIUM,
            description="Large payload sizes can degrade database IO performance.",
            recommendations=[
                "Introduce caching for read-heavy flows",
                "Consider data sharding or partitioning",
            ],
        ))

    if workload.latency_target_ms < 150 and peak > 1000:
        bottlenecks.append(PerformanceBottleneck(
            id="bottleneck-latency",
            layer=ArchitectureLayer.SOLUTION,
            metric=BottleneckMetric.LATENCY,
            current_utilization=85,
            risk_level=RiskLevel.MEDIUM,
            description="Aggressive latency targets under high load may require edge acceleration.",
            recommendations=["Review CDN / edge strategy", "Implement request prioritization"],
        ))

    return bottlenecks


def _recommendations(
    workload: WorkloadProfile,
    plan: CapacityPlan,
    bottlenecks: list[PerformanceBottleneck],
) -> list[str]:
    recommendations: dict[str, None] = {}
    for bottleneck in bottlenecks:
        for rec in bottleneck.recommendations:
            recommendations.setdefault(rec, None)

    if plan.scaling_strategy == ScalingStrategy.AUTO_SCALING:
        recommendations.setdefault("Implement predictive auto-scaling policies for peak seasons.", None)
    if workload.growth_rate_monthly > 7:
        recommendations.setdefault("Review capacity every quarter to stay ahead of demand.", None)
    if plan.buffer_percentage < 25:
        recommendations.setdefault("Increase buffer capacity to absorb failover events.", None)

    return list(recommendations)


def model_performance(
    workload: WorkloadProfile,
    elements: Iterable[ArchitectureElement],
    relationships: Iterable[ArchitectureRelationship],
    *,
    settings: Optional[Settings] = None,
    id_generator: Optional[IdGenerator] = None,
    now: Optional[datetime] = None,
) -> PerformanceModel:
    """Build a 12-month capacity plan and flag likely bottlenecks.

    Args:
        workload: Throughput, concurrency, payload and target profile.
        elements: Architecture elements snapshot.
        relationships: Architecture relationships snapshot.
        settings: Engine settings (default capacity per unit).
        id_generator: Report id source.
        now: Report timestamp.
    """
    settings = settings or get_settings()
    graph = ArchitectureGraph(elements, relationships)

    capacity_per_unit = estimate_baseline_capacity(workload, graph.elements, settings)
    current_units = count_current_capacity_units(graph)
    required_now = max(1, math.ceil(workload.peak_transactions_per_second / capacity_per_unit))
    required_peak = math.ceil(required_now * (1 + min(0.5, workload.concurrency / 1000)))
    growth_multiplier = (1 + workload.growth_rate_monthly / 100) ** 12
    required_in_12_months = math.ceil(required_peak * growth_multiplier)

    plan = CapacityPlan(
        capacity_per_unit=capacity_per_unit,
        current_capacity_units=current_units,
        required_capacity_now=required_now,
        required_capacity_peak=required_peak,
        required_capacity_in_12_months=required_in_12_months,
        buffer_percentage=min(50.0, 20 + workload.availability_target / 10),
        scaling_strategy=scaling_strategy(workload, graph.elements),
        estimated_monthly_cost=required_in_12_months * capacity_unit_cost(graph.elements),
        estimated_upgrade_timeline_weeks=upgrade_timeline_weeks(required_in_12_months, current_units),
        notes=_capacity_notes(workload, required_in_12_months, current_units),
    )

    bottlenecks = identify_bottlenecks(workload, graph, capacity_per_unit)

    logger.debug(
        f"Performance model for {workload.id}: {current_units} -> {required_in_12_months} units, "
        f"{len(bottlenecks)} bottlenecks"
    )

    return PerformanceModel(
        id=resolve_id_generator(id_generator).next_id("perf"),
        generated_at=resolve_now(now),
        workload=workload,
        capacity_plan=plan,
        bottlenecks=bottlenecks,
        recommendations=_recommendations(workload, plan, bottlenecks),
    )
