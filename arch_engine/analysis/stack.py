"""
Stack Recommender - scores the technology catalog against requirements.

Each catalog option gets a 0-100 score from its ecosystem and compliance
ratings, skills availability, and how well it answers the requirements in
its own category. The best-scoring option per category (fit not LOW)
forms the recommended stack.
"""
import logging
from datetime import datetime
from typing import Iterable, Optional

from arch_engine.analysis.catalogs import TECHNOLOGY_CATALOG
from arch_engine.analysis.types import (
    EvaluatedOption,
    FitTier,
    RequirementPriority,
    StackRecommendation,
    StackSummary,
    TechnologyCategory,
    TechnologyOption,
    TechnologyRequirement,
    Tier,
    clamp_score,
    round_half_up,
)
from arch_engine.ids import IdGenerator, resolve_id_generator, resolve_now

logger = logging.getLogger(__name__)

SKILLS_POINTS = {Tier.HIGH: 15, Tier.MEDIUM: 8, Tier.LOW: 0}
COST_FIT_BONUS = {Tier.LOW: 0.4, Tier.MEDIUM: 0.2, Tier.HIGH: 0.0}
FAMILIARITY_BONUS = 8


def fit_for_score(score: float) -> FitTier:
    if score >= 75:
        return FitTier.HIGH
    if score >= 55:
        return FitTier.MEDIUM
    return FitTier.LOW


def _known(option: TechnologyOption, existing_technologies: list[str]) -> bool:
    name = option.name.lower()
    return any(tech.lower() == name for tech in existing_technologies)


def _fit_multiplier(option: TechnologyOption, requirement: TechnologyRequirement) -> float:
    description = requirement.description.lower()
    multiplier = 1.0
    if "regulatory" in description or "compliance" in description:
        multiplier += option.compliance_fit / 100
    if "time-to-market" in description or "speed" in description:
        multiplier += option.ecosystem_score / 120
    if "cost" in description or "budget" in description:
        multiplier += COST_FIT_BONUS[option.cost_profile]
    return multiplier


def score_option(option: TechnologyOption, requirements: list[TechnologyRequirement]) -> float:
    """Raw option score before the familiarity bonus, capped at 100."""
    relevant = [r for r in requirements if r.category == option.category]
    if not relevant:
        return option.ecosystem_score * 0.6 + option.compliance_fit * 0.4

    weight_sum = sum(r.weight for r in relevant)
    weighted_fit = sum(r.weight * _fit_multiplier(option, r) for r in relevant)
    base = (
        option.ecosystem_score * 0.5
        + option.compliance_fit * 0.3
        + SKILLS_POINTS[option.skills_availability]
    )
    return min(100.0, base + weighted_fit / max(weight_sum, 1) * 10)


def _option_gaps(
    option: TechnologyOption,
    requirements: list[TechnologyRequirement],
    existing_technologies: list[str],
) -> list[str]:
    gaps = []
    if not any(r.category == option.category for r in requirements):
        gaps.append("No explicit requirements captured for this category; validate alignment.")
    if option.cost_profile == Tier.HIGH:
        gaps.append("Higher cost profile may require additional budget approvals.")
    if not _known(option, existing_technologies):
        gaps.append("Team training and onboarding plan required.")
    return gaps


def evaluate_option(
    option: TechnologyOption,
    requirements: list[TechnologyRequirement],
    existing_technologies: list[str],
) -> EvaluatedOption:
    raw = score_option(option, requirements)
    if _known(option, existing_technologies):
        raw += FAMILIARITY_BONUS
    score = clamp_score(round_half_up(raw))
    return EvaluatedOption(
        **option.model_dump(),
        score=score,
        fit=fit_for_score(score),
        gap_analysis=_option_gaps(option, requirements, existing_technologies),
    )


def _stack_risks(stack: list[EvaluatedOption], requirements: list[TechnologyRequirement]) -> list[str]:
    risks = []
    covered = {option.category for option in stack}

    for requirement in requirements:
        if requirement.priority == RequirementPriority.MUST_HAVE and requirement.category not in covered:
            risks.append(
                f"No recommended technology covers must-have requirement: {requirement.description}"
            )

    if any(option.cost_profile == Tier.HIGH for option in stack):
        risks.append("Portfolio contains high-cost components; establish cost monitoring.")

    if TechnologyCategory.SECURITY not in covered:
        risks.append("Security tooling missing from recommended stack.")

    return risks


def _mitigation(risk: str) -> str:
    if "cost" in risk:
        return "Implement FinOps guardrails and budget alerts for high-cost services."
    if "Security" in risk:
        return "Introduce security automation (SAST/DAST) into delivery pipeline."
    if "must-have" in risk:
        return "Capture additional options for the missing requirement and reassess."
    return "Assign owner to develop mitigation plan for identified stack risk."


def _mitigation_plan(risks: list[str]) -> list[str]:
    if not risks:
        return ["Maintain quarterly architecture reviews to validate continued fit."]
    return [_mitigation(risk) for risk in risks]


def recommend_technology_stack(
    requirements: Iterable[TechnologyRequirement],
    existing_technologies: Optional[Iterable[str]] = None,
    *,
    catalog: Optional[list[TechnologyOption]] = None,
    id_generator: Optional[IdGenerator] = None,
    now: Optional[datetime] = None,
) -> StackRecommendation:
    """Score every catalog option and assemble a recommended stack.

    Args:
        requirements: Weighted technology requirements.
        existing_technologies: Names already in use (case-insensitive match
            earns a familiarity bonus and skips onboarding).
        catalog: Options to evaluate (defaults to TECHNOLOGY_CATALOG).
        id_generator: Report id source.
        now: Report timestamp.
    """
    requirements = list(requirements)
    existing = list(existing_technologies or [])
    options = [evaluate_option(o, requirements, existing) for o in (catalog or TECHNOLOGY_CATALOG)]

    recommended: list[EvaluatedOption] = []
    seen_categories: set[TechnologyCategory] = set()
    for option in sorted(options, key=lambda o: o.score, reverse=True):
        if option.category not in seen_categories and option.fit != FitTier.LOW:
            recommended.append(option)
            seen_categories.add(option.category)

    average = sum(o.score for o in options) / (len(options) or 1)
    new_technologies = [o for o in recommended if not _known(o, existing)]
    risks = _stack_risks(recommended, requirements)

    logger.debug(f"Stack recommendation: {len(recommended)} of {len(options)} options, avg={average:.1f}")

    return StackRecommendation(
        id=resolve_id_generator(id_generator).next_id("stack"),
        generated_at=resolve_now(now),
        requirements=requirements,
        options=options,
        recommended_stack=recommended,
        summary=StackSummary(
            overall_fit=fit_for_score(average),
            estimated_ramp_up_effort_weeks=max(2, len(new_technologies) * 3 + 2),
            key_risks=risks,
            mitigation_plan=_mitigation_plan(risks),
        ),
    )
