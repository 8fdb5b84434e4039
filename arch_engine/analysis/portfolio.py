"""
Portfolio Dashboard Aggregator - health, maturity, debt and KPIs.

Graph-derived figures (system counts, risk spread, debt per element) are
computed from the snapshot. Telemetry-style figures (health metrics,
maturity dimensions, SLA compliance) come from a PortfolioBaseline, whose
defaults are placeholders until real monitoring data is supplied.
"""
import logging
import math
from datetime import datetime
from typing import Iterable, Optional

from arch_engine.analysis.types import (
    ArchitectureKPIs,
    DebtByCategory,
    HealthStatus,
    IntegrationMetrics,
    MaturityLevel,
    MaturityRoadmapItem,
    PortfolioBaseline,
    PortfolioDashboard,
    PortfolioHealth,
    PortfolioMaturity,
    PortfolioSummary,
    PriorityDebt,
    ReuseByType,
    ReuseRateMetrics,
    SLAComplianceMetrics,
    SystemDebt,
    SystemSLA,
    SystemsByHealth,
    TechnicalDebt,
    clamp_score,
)
from arch_engine.config import Settings, get_settings
from arch_engine.ids import IdGenerator, resolve_id_generator, resolve_now
from arch_engine.model import (
    ArchitectureElement,
    ArchitectureGraph,
    ArchitectureLayer,
    ArchitectureRelationship,
    LifecycleStage,
    RelationshipType,
    RiskLevel,
)

logger = logging.getLogger(__name__)

# Share of total debt per category; sums to 1
DEBT_SPLIT = {
    "code_quality": 0.3,
    "architecture": 0.25,
    "documentation": 0.2,
    "testing": 0.15,
    "security": 0.05,
    "performance": 0.05,
}

MATURITY_TARGET_SCORE = 60
MONTHS_PER_10_POINTS = 3

MATURITY_INITIATIVES: dict[str, list[str]] = {
    "process_maturity": ["Standardize architecture review process", "Define architecture decision records"],
    "technology_maturity": ["Publish technology radar", "Retire unsupported platforms"],
    "data_maturity": ["Establish data ownership model", "Introduce data quality monitoring"],
    "integration_maturity": ["Adopt API-first integration standards", "Consolidate point-to-point integrations"],
    "governance_maturity": ["Form architecture review board", "Track architecture compliance metrics"],
}

REUSABLE_TAG = "reusable"
REUSE_BY_TYPE_SPLIT = {"components": 0.4, "patterns": 0.3, "services": 0.2, "data_models": 0.1}
INTEGRATION_TYPE_SPLIT = {"api": 0.6, "message_queue": 0.2, "database": 0.1, "file": 0.05, "webhook": 0.05}
INTEGRATION_STATUS_SPLIT = {"active": 0.8, "inactive": 0.15, "deprecated": 0.05}
INTEGRATION_HEALTH_SPLIT = {"healthy": 0.7, "warning": 0.2, "critical": 0.1}
DOCUMENTED_DESCRIPTION_LENGTH = 50
AVERAGE_COMPLEXITY = 50.0


def maturity_level(score: float) -> MaturityLevel:
    if score >= 80:
        return MaturityLevel.OPTIMIZING
    if score >= 60:
        return MaturityLevel.MANAGED
    if score >= 40:
        return MaturityLevel.DEFINED
    if score >= 20:
        return MaturityLevel.DEVELOPING
    return MaturityLevel.INITIAL


def health_status(score: float) -> HealthStatus:
    if score >= 80:
        return HealthStatus.HEALTHY
    if score >= 60:
        return HealthStatus.WARNING
    return HealthStatus.CRITICAL


def calculate_health(graph: ArchitectureGraph, baseline: PortfolioBaseline) -> PortfolioHealth:
    """Score APPLICATION elements by declared risk: 100 healthy, 60 warning, 20 critical."""
    systems = graph.by_layer(ArchitectureLayer.APPLICATION)
    healthy = sum(1 for s in systems if s.risk in (None, RiskLevel.LOW))
    warning = sum(1 for s in systems if s.risk == RiskLevel.MEDIUM)
    critical = sum(1 for s in systems if s.risk in (RiskLevel.HIGH, RiskLevel.CRITICAL))

    score = (healthy * 100 + warning * 60 + critical * 20) / len(systems) if systems else 100.0
    score = clamp_score(score)

    return PortfolioHealth(
        overall_score=score,
        status=health_status(score),
        metrics=baseline.health_metrics.model_copy(),
        systems_by_health=SystemsByHealth(healthy=healthy, warning=warning, critical=critical),
    )


def calculate_maturity(baseline: PortfolioBaseline) -> PortfolioMaturity:
    dimensions = baseline.maturity
    scores = dimensions.model_dump()
    average = clamp_score(sum(scores.values()) / len(scores))

    roadmap = []
    for dimension, score in scores.items():
        if score >= MATURITY_TARGET_SCORE:
            continue
        roadmap.append(MaturityRoadmapItem(
            dimension=dimension,
            current_level=maturity_level(score),
            target_level=maturity_level(MATURITY_TARGET_SCORE),
            initiatives=list(MATURITY_INITIATIVES.get(dimension, [])),
            estimated_time=math.ceil((MATURITY_TARGET_SCORE - score) / 10) * MONTHS_PER_10_POINTS,
        ))

    return PortfolioMaturity(
        overall_level=maturity_level(average),
        level_score=average,
        dimensions=dimensions.model_copy(),
        roadmap=roadmap,
    )


def _priority_debt(element: ArchitectureElement, debt: float) -> Optional[PriorityDebt]:
    if element.risk in (RiskLevel.HIGH, RiskLevel.CRITICAL):
        return PriorityDebt(
            id=element.id,
            description=f"High risk element: {element.name}",
            debt=debt,
            impact=element.risk,
        )
    stage = element.metadata.lifecycle_stage
    if stage in (LifecycleStage.DEPRECATED, LifecycleStage.DECOMMISSIONED):
        return PriorityDebt(
            id=element.id,
            description=f"{stage.value.capitalize()} element: {element.name}",
            debt=debt,
            impact=RiskLevel.MEDIUM,
        )
    return None


def calculate_technical_debt(elements: list[ArchitectureElement], settings: Settings) -> TechnicalDebt:
    """Flat per-element debt split across categories; category sum equals total."""
    per_element = settings.debt_days_per_element
    total = per_element * len(elements)

    by_category = DebtByCategory(**{name: total * share for name, share in DEBT_SPLIT.items()})
    by_system = [
        SystemDebt(system_id=e.id, system_name=e.name, debt=per_element, category=e.type)
        for e in elements
    ]
    priority = [p for p in (_priority_debt(e, per_element) for e in elements) if p is not None]

    return TechnicalDebt(
        total_debt=total,
        debt_by_category=by_category,
        debt_by_system=by_system,
        priority_debt=priority,
    )


def generate_portfolio_dashboard(
    elements: Iterable[ArchitectureElement],
    relationships: Iterable[ArchitectureRelationship],
    *,
    baseline: Optional[PortfolioBaseline] = None,
    settings: Optional[Settings] = None,
    id_generator: Optional[IdGenerator] = None,
    now: Optional[datetime] = None,
) -> PortfolioDashboard:
    """Aggregate portfolio health, maturity, technical debt and counts.

    Args:
        elements: Architecture elements snapshot.
        relationships: Architecture relationships snapshot.
        baseline: Telemetry inputs; placeholder defaults when omitted.
        settings: Engine settings (debt per element).
        id_generator: Report id source.
        now: Report timestamp.
    """
    settings = settings or get_settings()
    baseline = baseline or PortfolioBaseline()
    graph = ArchitectureGraph(elements, relationships)

    summary = PortfolioSummary(
        total_systems=len(graph.by_layer(ArchitectureLayer.APPLICATION)),
        total_integrations=len(graph.relationships_of_type(RelationshipType.INTEGRATES_WITH)),
        total_data_entities=len(graph.by_layer(ArchitectureLayer.DATA)),
        total_technologies=len(graph.by_layer(ArchitectureLayer.TECHNOLOGY)),
        active_projects=0,
        completed_projects=0,
    )

    health = calculate_health(graph, baseline)
    logger.debug(f"Portfolio dashboard: {summary.total_systems} systems, health={health.overall_score:.1f}")

    return PortfolioDashboard(
        id=resolve_id_generator(id_generator).next_id("dashboard"),
        dashboard_date=resolve_now(now),
        health=health,
        maturity=calculate_maturity(baseline),
        technical_debt=calculate_technical_debt(graph.elements, settings),
        summary=summary,
    )


# =============================================================================
# KPIs
# =============================================================================


def calculate_reuse_rate(elements: list[ArchitectureElement]) -> ReuseRateMetrics:
    reused = [e.id for e in elements if REUSABLE_TAG in e.tags]
    rate = clamp_score(len(reused) / len(elements) * 100) if elements else 0.0
    return ReuseRateMetrics(
        overall_rate=rate,
        by_type=ReuseByType(**{name: rate * share for name, share in REUSE_BY_TYPE_SPLIT.items()}),
        reused_element_ids=reused,
    )


def calculate_integration_metrics(graph: ArchitectureGraph) -> IntegrationMetrics:
    count = len(graph.relationships_of_type(RelationshipType.INTEGRATES_WITH))
    return IntegrationMetrics(
        total_integrations=count,
        by_type={name: count * share for name, share in INTEGRATION_TYPE_SPLIT.items()},
        by_status={name: count * share for name, share in INTEGRATION_STATUS_SPLIT.items()},
        integration_health={name: count * share for name, share in INTEGRATION_HEALTH_SPLIT.items()},
    )


def calculate_sla_compliance(elements: list[ArchitectureElement], baseline: PortfolioBaseline) -> SLAComplianceMetrics:
    return SLAComplianceMetrics(
        overall_compliance=baseline.sla_compliance,
        by_system=[
            SystemSLA(system_id=e.id, system_name=e.name, compliance=baseline.sla_compliance, breaches=0)
            for e in elements
        ],
    )


def documentation_coverage(elements: list[ArchitectureElement]) -> float:
    """Percent of elements whose description is longer than 50 characters."""
    if not elements:
        return 0.0
    documented = sum(
        1 for e in elements
        if e.description and len(e.description) > DOCUMENTED_DESCRIPTION_LENGTH
    )
    return documented / len(elements) * 100


def calculate_kpis(
    elements: Iterable[ArchitectureElement],
    relationships: Iterable[ArchitectureRelationship],
    *,
    baseline: Optional[PortfolioBaseline] = None,
    id_generator: Optional[IdGenerator] = None,
    now: Optional[datetime] = None,
) -> ArchitectureKPIs:
    """Reuse, integration and SLA KPIs for the snapshot."""
    baseline = baseline or PortfolioBaseline()
    graph = ArchitectureGraph(elements, relationships)

    return ArchitectureKPIs(
        id=resolve_id_generator(id_generator).next_id("kpi"),
        report_date=resolve_now(now),
        reuse_rate=calculate_reuse_rate(graph.elements),
        integration_count=calculate_integration_metrics(graph),
        sla_compliance=calculate_sla_compliance(graph.elements, baseline),
        other_kpis={
            "total_components": float(len(graph.elements)),
            "average_complexity": AVERAGE_COMPLEXITY if graph.elements else 0.0,
            "documentation_coverage": documentation_coverage(graph.elements),
        },
    )
