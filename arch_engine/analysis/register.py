"""
Risk Register Builder - one mitigation per risk plus a status summary.

Caller-supplied mitigations are reused by risk id; every other risk gets a
PLANNED default whose due date depends on the risk's impact.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from arch_engine.analysis.types import (
    MitigationStatus,
    RiskItem,
    RiskMitigation,
    RiskRegister,
    RiskRegisterSummary,
    RiskStatus,
)
from arch_engine.ids import IdGenerator, resolve_id_generator, resolve_now

logger = logging.getLogger(__name__)

URGENT_IMPACT_THRESHOLD = 70
URGENT_DUE_DAYS = 30
STANDARD_DUE_DAYS = 60
DEFAULT_REVIEW_DAYS = 30
HIGH_SEVERITY_THRESHOLD = 70
ESCALATION_SCORE = 50


def _aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so caller dates compare with ``now``."""
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def default_mitigation(risk: RiskItem, now: datetime) -> RiskMitigation:
    days = URGENT_DUE_DAYS if risk.impact > URGENT_IMPACT_THRESHOLD else STANDARD_DUE_DAYS
    return RiskMitigation(
        id=f"mitigation-{risk.id}",
        risk_id=risk.id,
        action=risk.mitigation[0] if risk.mitigation else "Define mitigation plan",
        owner=risk.owner or "Unassigned",
        status=MitigationStatus.PLANNED,
        due_date=now + timedelta(days=days),
        progress_percentage=0,
    )


def _summary(risks: list[RiskItem], mitigations: list[RiskMitigation], now: datetime) -> RiskRegisterSummary:
    pending = sorted(
        _aware(m.due_date) for m in mitigations if m.status != MitigationStatus.COMPLETE
    )
    return RiskRegisterSummary(
        open_risks=sum(1 for r in risks if r.status in (RiskStatus.OPEN, RiskStatus.MONITORING)),
        mitigated_risks=sum(1 for r in risks if r.status == RiskStatus.MITIGATED),
        accepted_risks=sum(1 for r in risks if r.status == RiskStatus.ACCEPTED),
        high_severity_open=sum(
            1 for r in risks
            if r.status == RiskStatus.OPEN
            and (r.impact >= HIGH_SEVERITY_THRESHOLD or r.probability >= HIGH_SEVERITY_THRESHOLD)
        ),
        next_review_date=pending[0] if pending else now + timedelta(days=DEFAULT_REVIEW_DAYS),
    )


def _recommendations(risks: list[RiskItem], mitigations: list[RiskMitigation], now: datetime) -> list[str]:
    recommendations = []

    overdue = [
        m for m in mitigations
        if m.status != MitigationStatus.COMPLETE and _aware(m.due_date) < now
    ]
    if overdue:
        recommendations.append(f"Expedite {len(overdue)} overdue mitigation action(s).")

    if any(r.status == RiskStatus.OPEN and r.risk_score >= ESCALATION_SCORE for r in risks):
        recommendations.append("Escalate high risk items to program steering committee.")

    if not recommendations:
        recommendations.append("Maintain weekly monitoring of mitigation progress.")

    return recommendations


def build_risk_register(
    risks: Iterable[RiskItem],
    existing_mitigations: Optional[Iterable[RiskMitigation]] = None,
    *,
    id_generator: Optional[IdGenerator] = None,
    now: Optional[datetime] = None,
) -> RiskRegister:
    """Pair every risk with a mitigation and summarize the register.

    Args:
        risks: Risk items (typically RiskScoring.risks).
        existing_mitigations: Tracked mitigations; the first one per risk id wins.
        id_generator: Report id source.
        now: Reference time for due dates and overdue checks.
    """
    now = _aware(resolve_now(now))
    risks = list(risks)

    by_risk: dict[str, RiskMitigation] = {}
    for mitigation in existing_mitigations or []:
        by_risk.setdefault(mitigation.risk_id, mitigation)

    mitigations = [by_risk.get(risk.id) or default_mitigation(risk, now) for risk in risks]

    logger.debug(
        f"Risk register: {len(risks)} risks, "
        f"{sum(1 for r in risks if r.id in by_risk)} with tracked mitigations"
    )

    return RiskRegister(
        id=resolve_id_generator(id_generator).next_id("risk-register"),
        generated_at=now,
        risks=risks,
        mitigations=mitigations,
        summary=_summary(risks, mitigations, now),
        recommendations=_recommendations(risks, mitigations, now),
    )
