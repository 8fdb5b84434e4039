"""
Risk Scorer - risk items, overall score and probability/impact heatmap.

Items come from two signals on each element:
- declared risk HIGH or CRITICAL -> TECHNICAL item
- lifecycle DEPRECATED or DECOMMISSIONED -> OPERATIONAL item
"""
import logging
from datetime import datetime
from typing import Iterable, Optional

from arch_engine.analysis.types import (
    HEATMAP_BUCKET_SIZE,
    HEATMAP_BUCKETS,
    RiskCategory,
    RiskHeatmap,
    RiskHeatmapCell,
    RiskItem,
    RiskScoring,
    RiskStatus,
    RiskTrend,
    clamp_score,
    heatmap_midpoint,
    level_for_score,
)
from arch_engine.ids import IdGenerator, resolve_id_generator, resolve_now
from arch_engine.model import ArchitectureElement, LifecycleStage, RiskLevel

logger = logging.getLogger(__name__)

# (probability, impact) per declared risk level
RISK_TABLE: dict[Optional[RiskLevel], tuple[float, float]] = {
    RiskLevel.CRITICAL: (90, 100),
    RiskLevel.HIGH: (70, 80),
    RiskLevel.MEDIUM: (50, 60),
    RiskLevel.LOW: (30, 40),
    None: (20, 30),
}

LIFECYCLE_PROBABILITY = 70
LIFECYCLE_IMPACT = 60

TECHNICAL_MITIGATION = [
    "Review architecture",
    "Implement monitoring",
    "Create contingency plan",
    "Document dependencies",
]
LIFECYCLE_MITIGATION = ["Plan migration", "Identify replacement", "Document dependencies"]

HEATMAP_RED = "#ef4444"
HEATMAP_AMBER = "#f59e0b"
HEATMAP_GREEN = "#22c55e"

CRITICAL_ITEM_SCORE = 70


def risk_score(probability: float, impact: float) -> float:
    return clamp_score(probability * impact / 100)


def _element_risks(element: ArchitectureElement) -> list[RiskItem]:
    items = []

    if element.risk in (RiskLevel.HIGH, RiskLevel.CRITICAL):
        probability, impact = RISK_TABLE[element.risk]
        items.append(RiskItem(
            id=f"risk-{element.id}",
            category=RiskCategory.TECHNICAL,
            title=f"High Risk: {element.name}",
            description=f"Element {element.name} has {element.risk.value} risk level",
            probability=probability,
            impact=impact,
            risk_score=risk_score(probability, impact),
            mitigation=list(TECHNICAL_MITIGATION),
            owner=element.metadata.owner,
            status=RiskStatus.OPEN,
        ))

    stage = element.metadata.lifecycle_stage
    if stage in (LifecycleStage.DEPRECATED, LifecycleStage.DECOMMISSIONED):
        items.append(RiskItem(
            id=f"risk-lifecycle-{element.id}",
            category=RiskCategory.OPERATIONAL,
            title=f"Deprecated System: {element.name}",
            description=f"System {element.name} is {stage.value}",
            probability=LIFECYCLE_PROBABILITY,
            impact=LIFECYCLE_IMPACT,
            risk_score=risk_score(LIFECYCLE_PROBABILITY, LIFECYCLE_IMPACT),
            mitigation=list(LIFECYCLE_MITIGATION),
            owner=element.metadata.owner,
            status=RiskStatus.OPEN,
        ))

    return items


def _cell_color(impact_floor: int, probability_floor: int) -> str:
    if impact_floor >= 60 and probability_floor >= 60:
        return HEATMAP_RED
    if impact_floor >= 40 or probability_floor >= 40:
        return HEATMAP_AMBER
    return HEATMAP_GREEN


def build_heatmap(risks: list[RiskItem]) -> RiskHeatmap:
    """5x5 impact (x) by probability (y) grid; every risk lands in exactly one cell."""
    placement: dict[tuple[int, int], list[str]] = {}
    for risk in risks:
        key = (heatmap_midpoint(risk.impact), heatmap_midpoint(risk.probability))
        placement.setdefault(key, []).append(risk.id)

    cells = []
    half = HEATMAP_BUCKET_SIZE // 2
    for i in range(HEATMAP_BUCKETS):
        impact_floor = i * HEATMAP_BUCKET_SIZE
        for j in range(HEATMAP_BUCKETS):
            probability_floor = j * HEATMAP_BUCKET_SIZE
            risk_ids = placement.get((impact_floor + half, probability_floor + half), [])
            cells.append(RiskHeatmapCell(
                x=impact_floor + half,
                y=probability_floor + half,
                risk_count=len(risk_ids),
                risk_ids=risk_ids,
                color=_cell_color(impact_floor, probability_floor),
            ))

    return RiskHeatmap(cells=cells)


def score_risks(
    elements: Iterable[ArchitectureElement],
    *,
    id_generator: Optional[IdGenerator] = None,
    now: Optional[datetime] = None,
) -> RiskScoring:
    """Derive risk items from element metadata and summarize them.

    The overall score is the mean item score (0 with no items) and maps to a
    level with the 70/50/30 thresholds.
    """
    now = resolve_now(now)
    risks: list[RiskItem] = []
    for element in elements:
        risks.extend(_element_risks(element))

    overall = sum(r.risk_score for r in risks) / len(risks) if risks else 0.0
    overall = clamp_score(overall)

    logger.debug(f"Risk scoring: {len(risks)} items, overall={overall:.1f}")

    return RiskScoring(
        id=resolve_id_generator(id_generator).next_id("risk"),
        analysis_date=now,
        overall_risk_score=overall,
        risk_level=level_for_score(overall),
        risks=risks,
        heatmap=build_heatmap(risks),
        trends=[
            RiskTrend(
                date=now,
                risk_score=overall,
                risk_count=len(risks),
                critical_risks=sum(1 for r in risks if r.risk_score >= CRITICAL_ITEM_SCORE),
            )
        ],
    )
