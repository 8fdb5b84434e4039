"""
Compliance Evaluator - control-by-control status for each framework.

Caller coverage overrides the inferred status of a control. Without
coverage a HIGH severity control is assumed NON_COMPLIANT and anything
else PARTIAL.
"""
import logging
from datetime import datetime
from typing import Iterable, Mapping, Optional

from arch_engine.analysis.catalogs import (
    COMPLIANCE_FRAMEWORKS,
    CUSTOM_FRAMEWORK_ID,
    DEFAULT_REMEDIATION,
    REMEDIATION_ACTIONS,
)
from arch_engine.analysis.types import (
    ComplianceCheckResult,
    ComplianceControl,
    ComplianceFramework,
    ComplianceReport,
    ComplianceStatus,
    ComplianceSummary,
    ControlCoverage,
    ControlSeverity,
    clamp_score,
    round_half_up,
)
from arch_engine.ids import IdGenerator, resolve_id_generator, resolve_now

logger = logging.getLogger(__name__)

EXECUTIVE_REVIEW_THRESHOLD = 80
OPEN_STATUSES = (ComplianceStatus.NON_COMPLIANT, ComplianceStatus.PARTIAL)


def resolve_framework(
    framework_id: str,
    custom_controls: Optional[list[ComplianceControl]] = None,
) -> ComplianceFramework:
    """Look up a catalog framework; unknown ids resolve to CUSTOM."""
    framework = COMPLIANCE_FRAMEWORKS.get(framework_id.upper()) or COMPLIANCE_FRAMEWORKS[CUSTOM_FRAMEWORK_ID]
    if framework.id == CUSTOM_FRAMEWORK_ID and custom_controls:
        categories = list(dict.fromkeys(c.category for c in custom_controls))
        framework = framework.model_copy(update={
            "controls": list(custom_controls),
            "categories": categories,
        })
    return framework


def infer_status(control: ComplianceControl) -> ComplianceStatus:
    if control.severity == ControlSeverity.HIGH:
        return ComplianceStatus.NON_COMPLIANT
    return ComplianceStatus.PARTIAL


def remediation_actions(control: ComplianceControl, status: ComplianceStatus) -> list[str]:
    if status == ComplianceStatus.COMPLIANT:
        return []
    return list(REMEDIATION_ACTIONS.get(control.category, DEFAULT_REMEDIATION))


def _check_control(control: ComplianceControl, provided: Optional[ControlCoverage]) -> ComplianceCheckResult:
    status = provided.status if provided else infer_status(control)
    if provided and provided.remediation_actions is not None:
        actions = list(provided.remediation_actions)
    else:
        actions = remediation_actions(control, status)

    return ComplianceCheckResult(
        control_id=control.id,
        control=control,
        status=status,
        evidence=list(provided.evidence) if provided else [],
        owner=provided.owner if provided else None,
        due_date=provided.due_date if provided else None,
        remediation_actions=actions,
        notes=provided.notes if provided else None,
    )


def summarize_results(results: list[ComplianceCheckResult]) -> ComplianceSummary:
    """Score = (compliant + 0.5 * partial) / applicable controls, as a percentage."""
    summary = ComplianceSummary(
        compliant=sum(1 for r in results if r.status == ComplianceStatus.COMPLIANT),
        partial=sum(1 for r in results if r.status == ComplianceStatus.PARTIAL),
        non_compliant=sum(1 for r in results if r.status == ComplianceStatus.NON_COMPLIANT),
        not_applicable=sum(1 for r in results if r.status == ComplianceStatus.NOT_APPLICABLE),
    )
    applicable = max(1, len(results) - summary.not_applicable)
    summary.compliance_score = clamp_score(
        round_half_up((summary.compliant + summary.partial * 0.5) / applicable * 100)
    )
    return summary


def _recommendations(
    framework: ComplianceFramework,
    results: list[ComplianceCheckResult],
    summary: ComplianceSummary,
) -> list[str]:
    recommendations = []

    if summary.non_compliant > 0:
        recommendations.append(
            f"Address {summary.non_compliant} non-compliant control(s) in {framework.name}."
        )

    if any(r.control.severity == ControlSeverity.HIGH and r.status in OPEN_STATUSES for r in results):
        recommendations.append("Prioritize remediation of high-severity controls within the next quarter.")

    if summary.compliance_score < EXECUTIVE_REVIEW_THRESHOLD:
        recommendations.append("Schedule executive review of compliance roadmap.")

    if not any(r.status == ComplianceStatus.NOT_APPLICABLE for r in results):
        recommendations.append("Validate applicability of each control to avoid unnecessary scope.")

    return recommendations


def evaluate_compliance(
    framework_ids: Iterable[str],
    coverage: Optional[Mapping[str, ControlCoverage]] = None,
    *,
    custom_controls: Optional[list[ComplianceControl]] = None,
    id_generator: Optional[IdGenerator] = None,
    now: Optional[datetime] = None,
) -> list[ComplianceReport]:
    """Evaluate each requested framework.

    Args:
        framework_ids: SOC2 / HIPAA / GDPR / CUSTOM (anything else means CUSTOM).
        coverage: Evidence per control id.
        custom_controls: Controls for the CUSTOM framework.
        id_generator: Report id source.
        now: Report timestamp.

    Returns:
        One ComplianceReport per requested framework id, in request order.
    """
    coverage = coverage or {}
    generator = resolve_id_generator(id_generator)
    now = resolve_now(now)
    reports = []

    for framework_id in framework_ids:
        framework = resolve_framework(framework_id, custom_controls)
        results = [_check_control(c, coverage.get(c.id)) for c in framework.controls]
        summary = summarize_results(results)

        logger.debug(f"Compliance {framework.id}: score={summary.compliance_score}")

        reports.append(ComplianceReport(
            id=generator.next_id(f"compliance-{framework.id}"),
            framework=framework,
            generated_at=now,
            summary=summary,
            results=results,
            high_risk_controls=[
                r.control.title for r in results
                if r.control.severity == ControlSeverity.HIGH and r.status in OPEN_STATUSES
            ],
            recommendations=_recommendations(framework, results, summary),
        ))

    return reports
