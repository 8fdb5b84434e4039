"""
Gap Analyzer - what the To-Be architecture needs that the As-Is lacks.

Two kinds of gaps are reported:
- component gaps: To-Be element ids absent from the As-Is snapshot
- integration gaps: To-Be INTEGRATES_WITH / DEPENDS_ON edges whose
  (source, target) pair has no As-Is counterpart of either type
"""
import logging
import math
from datetime import datetime
from typing import Iterable, Optional

from arch_engine.analysis.types import (
    ArchitectureGap,
    GapAnalysis,
    GapCategory,
    GapRecommendation,
    GapSummary,
)
from arch_engine.config import Settings, get_settings
from arch_engine.ids import IdGenerator, resolve_id_generator, resolve_now
from arch_engine.model import (
    ArchitectureElement,
    ArchitectureLayer,
    ArchitectureRelationship,
    RelationshipType,
    RiskLevel,
)

logger = logging.getLogger(__name__)

GAP_CATEGORY_BY_LAYER: dict[ArchitectureLayer, GapCategory] = {
    ArchitectureLayer.APPLICATION: GapCategory.MISSING_COMPONENT,
    ArchitectureLayer.TECHNOLOGY: GapCategory.TECHNOLOGY_GAP,
    ArchitectureLayer.DATA: GapCategory.DATA_GAP,
    ArchitectureLayer.BUSINESS: GapCategory.MISSING_CAPABILITY,
    ArchitectureLayer.SOLUTION: GapCategory.MISSING_COMPONENT,
}

# Person-days to build a missing element of each layer
EFFORT_BY_LAYER: dict[ArchitectureLayer, float] = {
    ArchitectureLayer.BUSINESS: 10,
    ArchitectureLayer.APPLICATION: 20,
    ArchitectureLayer.DATA: 15,
    ArchitectureLayer.TECHNOLOGY: 25,
    ArchitectureLayer.SOLUTION: 30,
}
DEFAULT_EFFORT = 15

INTEGRATION_GAP_EFFORT = 5
INTEGRATION_GAP_PRIORITY = 7
INTEGRATION_TYPES = (RelationshipType.INTEGRATES_WITH.value, RelationshipType.DEPENDS_ON.value)


def gap_severity(element: ArchitectureElement) -> RiskLevel:
    if element.risk in (RiskLevel.CRITICAL, RiskLevel.HIGH):
        return element.risk
    if element.layer in (ArchitectureLayer.APPLICATION, ArchitectureLayer.DATA):
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def gap_priority(element: ArchitectureElement) -> int:
    """Base 5, +3 CRITICAL, +2 HIGH, +1 for APPLICATION, capped at 10."""
    priority = 5
    if element.risk == RiskLevel.CRITICAL:
        priority += 3
    if element.risk == RiskLevel.HIGH:
        priority += 2
    if element.layer == ArchitectureLayer.APPLICATION:
        priority += 1
    return min(10, priority)


def _component_gaps(
    as_is_elements: list[ArchitectureElement],
    to_be_elements: list[ArchitectureElement],
) -> list[ArchitectureGap]:
    as_is_ids = {e.id for e in as_is_elements}
    gaps = []
    for element in to_be_elements:
        if element.id in as_is_ids:
            continue
        gaps.append(ArchitectureGap(
            id=f"gap-{element.id}",
            category=GAP_CATEGORY_BY_LAYER.get(element.layer, GapCategory.MISSING_COMPONENT),
            description=f"Missing {element.type}: {element.name}",
            severity=gap_severity(element),
            element_id=element.id,
            affected_layers=[element.layer],
            estimated_effort=EFFORT_BY_LAYER.get(element.layer, DEFAULT_EFFORT),
            priority=gap_priority(element),
            dependencies=[],
        ))
    return gaps


def _integration_gaps(
    to_be_elements: list[ArchitectureElement],
    as_is_relationships: list[ArchitectureRelationship],
    to_be_relationships: list[ArchitectureRelationship],
) -> list[ArchitectureGap]:
    existing_pairs = {
        (r.source_id, r.target_id)
        for r in as_is_relationships
        if r.type in INTEGRATION_TYPES
    }
    to_be_by_id = {}
    for element in to_be_elements:
        to_be_by_id.setdefault(element.id, element)

    gaps = []
    for rel in to_be_relationships:
        if rel.type not in INTEGRATION_TYPES or (rel.source_id, rel.target_id) in existing_pairs:
            continue
        source = to_be_by_id.get(rel.source_id)
        target = to_be_by_id.get(rel.target_id)
        source_name = source.name if source else "Unknown"
        target_name = target.name if target else "Unknown"
        gaps.append(ArchitectureGap(
            id=f"gap-int-{rel.id}",
            category=GapCategory.MISSING_INTEGRATION,
            description=f"Missing integration: {source_name} → {target_name}",
            severity=RiskLevel.MEDIUM,
            relationship_id=rel.id,
            affected_layers=[source.layer] if source else [],
            estimated_effort=INTEGRATION_GAP_EFFORT,
            priority=INTEGRATION_GAP_PRIORITY,
            dependencies=[],
        ))
    return gaps


def summarize_gaps(gaps: list[ArchitectureGap], settings: Settings) -> GapSummary:
    total_effort = sum(g.estimated_effort for g in gaps)
    return GapSummary(
        total_gaps=len(gaps),
        critical_gaps=sum(1 for g in gaps if g.severity == RiskLevel.CRITICAL),
        high_gaps=sum(1 for g in gaps if g.severity == RiskLevel.HIGH),
        medium_gaps=sum(1 for g in gaps if g.severity == RiskLevel.MEDIUM),
        low_gaps=sum(1 for g in gaps if g.severity == RiskLevel.LOW),
        estimated_total_effort=total_effort,
        estimated_cost=total_effort * settings.cost_per_effort_day,
        estimated_timeline=math.ceil(total_effort / settings.working_days_per_month),
    )


def gap_recommendation(gap: ArchitectureGap) -> str:
    """e.g. "Address missing component: Missing service: Billing"."""
    category_words = gap.category.value.lower().replace("_", " ")
    return f"Address {category_words}: {gap.description}"


def analyze_gaps(
    as_is_elements: Iterable[ArchitectureElement],
    to_be_elements: Iterable[ArchitectureElement],
    as_is_relationships: Iterable[ArchitectureRelationship],
    to_be_relationships: Iterable[ArchitectureRelationship],
    *,
    settings: Optional[Settings] = None,
    id_generator: Optional[IdGenerator] = None,
    now: Optional[datetime] = None,
) -> GapAnalysis:
    """Compare As-Is and To-Be snapshots and list what has to be built.

    Effort is in person-days; cost and timeline derive from
    ``cost_per_effort_day`` and ``working_days_per_month`` settings.
    """
    settings = settings or get_settings()
    to_be_elements = list(to_be_elements)

    gaps = _component_gaps(list(as_is_elements), to_be_elements)
    gaps.extend(_integration_gaps(to_be_elements, list(as_is_relationships), list(to_be_relationships)))

    logger.debug(f"Gap analysis found {len(gaps)} gaps")

    recommendations = [
        GapRecommendation(
            gap_id=gap.id,
            recommendation=gap_recommendation(gap),
            priority=gap.priority,
            estimated_effort=gap.estimated_effort,
            dependencies=list(gap.dependencies),
        )
        for gap in gaps
    ]

    return GapAnalysis(
        id=resolve_id_generator(id_generator).next_id("gap"),
        analysis_date=resolve_now(now),
        gaps=gaps,
        summary=summarize_gaps(gaps, settings),
        recommendations=recommendations,
    )
