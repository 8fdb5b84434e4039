"""
Dependency Analyzer - blast radius of changing one system.

Walks the relationship graph outward (direct and transitive dependencies)
and inward (systems that depend on the one being changed), then condenses
the result into an impact score, a risk level and recommendations.
"""
import logging
from datetime import datetime
from typing import Iterable, Optional

from arch_engine.analysis.types import (
    AffectedSystem,
    DependencyAnalysis,
    DependencyImpact,
    ImpactType,
    clamp_score,
)
from arch_engine.ids import IdGenerator, resolve_id_generator, resolve_now
from arch_engine.model import (
    ArchitectureElement,
    ArchitectureGraph,
    ArchitectureRelationship,
    RelationshipType,
    RiskLevel,
)

logger = logging.getLogger(__name__)

MAX_TRANSITIVE_DEPTH = 3
UNKNOWN_SYSTEM_NAME = "Unknown"

MITIGATION_STRATEGIES: dict[str, list[str]] = {
    RelationshipType.DEPENDS_ON.value: [
        "Implement circuit breaker",
        "Add fallback mechanisms",
        "Monitor dependency health",
    ],
    RelationshipType.INTEGRATES_WITH.value: [
        "Version APIs",
        "Implement retry logic",
        "Add integration tests",
    ],
    RelationshipType.CONSUMES.value: [
        "Cache responses",
        "Implement rate limiting",
        "Monitor consumption",
    ],
    RelationshipType.PROVIDES.value: [
        "Document API contracts",
        "Version services",
        "Monitor usage",
    ],
}
DEFAULT_MITIGATION = ["Review dependency", "Document relationship"]

DIRECT_IMPACT_POINTS = {ImpactType.BREAKING: 30, ImpactType.MODERATE: 15, ImpactType.MINOR: 5}
TRANSITIVE_IMPACT_POINTS = {ImpactType.MODERATE: 5, ImpactType.MINOR: 2}
AFFECTED_SEVERITY_POINTS = {RiskLevel.CRITICAL: 20, RiskLevel.HIGH: 10, RiskLevel.MEDIUM: 5}

DOWNTIME_HOURS = {RiskLevel.CRITICAL: 24.0, RiskLevel.HIGH: 12.0, RiskLevel.MEDIUM: 6.0}
DEFAULT_DOWNTIME_HOURS = 2.0


class SystemNotFoundError(LookupError):
    """The system to analyze is not part of the supplied elements."""

    def __init__(self, system_id: str):
        self.system_id = system_id
        super().__init__(f"System {system_id} not found")


def impact_type_for(relationship_type: str, target_risk: Optional[RiskLevel]) -> ImpactType:
    """Classify how a change propagates across one outgoing edge."""
    if relationship_type == RelationshipType.DEPENDS_ON.value and target_risk == RiskLevel.CRITICAL:
        return ImpactType.BREAKING
    if relationship_type == RelationshipType.INTEGRATES_WITH.value and target_risk == RiskLevel.HIGH:
        return ImpactType.MODERATE
    if relationship_type in (RelationshipType.CONSUMES.value, RelationshipType.PROVIDES.value):
        return ImpactType.MODERATE
    return ImpactType.MINOR


def mitigation_strategies(relationship_type: str) -> list[str]:
    return list(MITIGATION_STRATEGIES.get(relationship_type, DEFAULT_MITIGATION))


def _direct_dependencies(graph: ArchitectureGraph, system_id: str) -> list[DependencyImpact]:
    direct = []
    for rel in graph.outgoing(system_id):
        target = graph.get(rel.target_id)
        target_name = target.name if target else UNKNOWN_SYSTEM_NAME
        direct.append(DependencyImpact(
            system_id=rel.target_id,
            system_name=target_name,
            relationship_type=rel.type,
            impact_type=impact_type_for(rel.type, target.risk if target else None),
            description=rel.description or f"Dependency on {target_name}",
            mitigation=mitigation_strategies(rel.type),
        ))
    return direct


def _transitive_dependencies(graph: ArchitectureGraph, system_id: str) -> list[DependencyImpact]:
    """Dependencies of dependencies, up to MAX_TRANSITIVE_DEPTH hops past a direct one.

    The visited set is shared across the whole walk, so each element id is
    reported at most once and cycles terminate.
    """
    visited = {system_id}
    transitive: list[DependencyImpact] = []

    def traverse(current_id: str, depth: int) -> None:
        if depth > MAX_TRANSITIVE_DEPTH:
            return
        visited.add(current_id)
        for rel in graph.outgoing(current_id):
            target = graph.get(rel.target_id)
            if target is None or target.id in visited:
                continue
            visited.add(target.id)
            transitive.append(DependencyImpact(
                system_id=target.id,
                system_name=target.name,
                relationship_type=rel.type,
                impact_type=ImpactType.MODERATE if depth == 1 else ImpactType.MINOR,
                description=f"Transitive dependency (depth {depth}): {target.name}",
                depth=depth,
                mitigation=[],
            ))
            traverse(target.id, depth + 1)

    for rel in graph.outgoing(system_id):
        traverse(rel.target_id, 1)

    return transitive


def _affected_severity(relationship_type: str, source: ArchitectureElement) -> RiskLevel:
    if source.risk in (RiskLevel.CRITICAL, RiskLevel.HIGH):
        return source.risk
    if relationship_type == RelationshipType.DEPENDS_ON.value:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def _affected_systems(graph: ArchitectureGraph, system_id: str) -> list[AffectedSystem]:
    affected = []
    for rel in graph.incoming(system_id):
        source = graph.get(rel.source_id)
        if source is None:
            continue
        affected.append(AffectedSystem(
            system_id=source.id,
            system_name=source.name,
            layer=source.layer,
            impact_severity=_affected_severity(rel.type, source),
            affected_components=[source.type],
            estimated_downtime=DOWNTIME_HOURS.get(source.risk, DEFAULT_DOWNTIME_HOURS),
        ))
    return affected


def calculate_impact_score(
    direct: list[DependencyImpact],
    transitive: list[DependencyImpact],
    affected: list[AffectedSystem],
) -> float:
    score = sum(DIRECT_IMPACT_POINTS.get(dep.impact_type, 0) for dep in direct)
    score += sum(TRANSITIVE_IMPACT_POINTS.get(dep.impact_type, 0) for dep in transitive)
    score += sum(AFFECTED_SEVERITY_POINTS.get(sys.impact_severity, 0) for sys in affected)
    return clamp_score(score)


def determine_risk_level(score: float, affected: list[AffectedSystem]) -> RiskLevel:
    if score >= 70 or any(s.impact_severity == RiskLevel.CRITICAL for s in affected):
        return RiskLevel.CRITICAL
    if score >= 50 or any(s.impact_severity == RiskLevel.HIGH for s in affected):
        return RiskLevel.HIGH
    if score >= 30:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def _recommendations(
    direct: list[DependencyImpact],
    transitive: list[DependencyImpact],
    affected: list[AffectedSystem],
    risk_level: RiskLevel,
) -> list[str]:
    recommendations = []

    if risk_level in (RiskLevel.CRITICAL, RiskLevel.HIGH):
        recommendations.append("Implement comprehensive testing before deployment")
        recommendations.append("Create rollback plan")
        recommendations.append("Notify all affected stakeholders")

    if len(direct) > 10:
        recommendations.append("Consider reducing direct dependencies")
        recommendations.append("Evaluate dependency consolidation opportunities")

    if len(transitive) > 20:
        recommendations.append("Review transitive dependency chain")
        recommendations.append("Consider breaking circular dependencies")

    if len(affected) > 5:
        recommendations.append("Coordinate change with all affected systems")
        recommendations.append("Plan phased rollout")

    return recommendations


def analyze_dependencies(
    system_id: str,
    elements: Iterable[ArchitectureElement],
    relationships: Iterable[ArchitectureRelationship],
    *,
    id_generator: Optional[IdGenerator] = None,
    now: Optional[datetime] = None,
) -> DependencyAnalysis:
    """Assess the impact of changing one system.

    Args:
        system_id: Element id of the system being changed.
        elements: Architecture elements snapshot.
        relationships: Architecture relationships snapshot.
        id_generator: Report id source (UUID-based by default).
        now: Analysis timestamp (current UTC time by default).

    Returns:
        DependencyAnalysis with direct/transitive dependencies, affected
        systems, a 0-100 impact score and recommendations.

    Raises:
        SystemNotFoundError: If system_id matches no element.
    """
    graph = ArchitectureGraph(elements, relationships)
    system = graph.get(system_id)
    if system is None:
        raise SystemNotFoundError(system_id)

    direct = _direct_dependencies(graph, system_id)
    transitive = _transitive_dependencies(graph, system_id)
    affected = _affected_systems(graph, system_id)

    impact_score = calculate_impact_score(direct, transitive, affected)
    risk_level = determine_risk_level(impact_score, affected)

    logger.debug(
        f"Dependency analysis for {system_id}: {len(direct)} direct, "
        f"{len(transitive)} transitive, {len(affected)} affected, score={impact_score}"
    )

    return DependencyAnalysis(
        id=resolve_id_generator(id_generator).next_id(f"dep-{system_id}"),
        system_id=system_id,
        system_name=system.name,
        analysis_date=resolve_now(now),
        direct_dependencies=direct,
        transitive_dependencies=transitive,
        affected_systems=affected,
        impact_score=impact_score,
        risk_level=risk_level,
        recommendations=_recommendations(direct, transitive, affected, risk_level),
    )
