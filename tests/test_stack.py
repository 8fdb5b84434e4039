"""Tests for the technology stack recommender."""
import pytest

from arch_engine.analysis import recommend_technology_stack
from arch_engine.analysis.catalogs import TECHNOLOGY_CATALOG
from arch_engine.analysis.stack import fit_for_score, score_option
from arch_engine.analysis.types import (
    FitTier,
    Maturity,
    RequirementPriority,
    TechnologyCategory,
    TechnologyOption,
    TechnologyRequirement,
    Tier,
)


def _option(option_id, category=TechnologyCategory.SECURITY, ecosystem=30, compliance=30,
            cost=Tier.LOW, skills=Tier.LOW):
    return TechnologyOption(
        id=option_id,
        name=option_id.title(),
        category=category,
        description=option_id,
        maturity=Maturity.EMERGING,
        ecosystem_score=ecosystem,
        compliance_fit=compliance,
        cost_profile=cost,
        skills_availability=skills,
    )


def _catalog_option(option_id):
    return next(o for o in TECHNOLOGY_CATALOG if o.id == option_id)


REGULATED_BACKEND = TechnologyRequirement(
    id="req-1",
    category=TechnologyCategory.BACKEND,
    description="Regulatory compliance and audit trail",
    priority=RequirementPriority.MUST_HAVE,
    weight=3,
)


class TestScoring:
    """Tests for per-option scores."""

    def test_no_requirements_in_category(self):
        react = _catalog_option("frontend-react")

        assert score_option(react, [REGULATED_BACKEND]) == pytest.approx(86)

    def test_compliance_requirement_capped_at_100(self):
        spring = _catalog_option("backend-spring")

        assert score_option(spring, [REGULATED_BACKEND]) == 100

    def test_compliance_requirement_boost(self):
        node = _catalog_option("backend-node")

        # 42.5 + 23.4 + 15 + 1.78 * 10
        assert score_option(node, [REGULATED_BACKEND]) == pytest.approx(98.7)

    def test_budget_requirement_favours_low_cost(self):
        budget = TechnologyRequirement(id="r", category=TechnologyCategory.DATA, description="Fits budget")

        postgres = score_option(_catalog_option("data-postgres"), [budget])
        snowflake = score_option(_catalog_option("data-snowflake"), [budget])

        assert postgres == 100
        assert snowflake == pytest.approx(89.1)

    def test_speed_requirement(self):
        speed = TechnologyRequirement(id="r", category=TechnologyCategory.SECURITY, description="Speed of delivery")
        option = _option("x", ecosystem=60, compliance=50)

        # 30 + 15 + 0 + (1 + 0.5) * 10
        assert score_option(option, [speed]) == pytest.approx(60)

    def test_half_point_score_rounds_up_into_medium_fit(self):
        requirement = TechnologyRequirement(id="r", category=TechnologyCategory.SECURITY, description="Threat detection")
        option = _option("edge", ecosystem=89, compliance=0)

        # 44.5 + 0 + 0 + 1.0 * 10
        assert score_option(option, [requirement]) == 54.5

        evaluated = recommend_technology_stack([requirement], catalog=[option]).options[0]

        assert evaluated.score == 55
        assert evaluated.fit == FitTier.MEDIUM

    @pytest.mark.parametrize("score,fit", [
        (100, FitTier.HIGH),
        (75, FitTier.HIGH),
        (74.9, FitTier.MEDIUM),
        (55, FitTier.MEDIUM),
        (54, FitTier.LOW),
        (0, FitTier.LOW),
    ])
    def test_fit_tiers(self, score, fit):
        assert fit_for_score(score) == fit


class TestRecommendation:
    """Tests for stack assembly and summary."""

    def test_default_catalog(self, id_generator, fixed_now):
        recommendation = recommend_technology_stack(
            [REGULATED_BACKEND], id_generator=id_generator, now=fixed_now,
        )

        assert len(recommendation.options) == len(TECHNOLOGY_CATALOG)
        by_id = {o.id: o for o in recommendation.options}
        assert by_id["backend-spring"].score == 100
        assert by_id["backend-node"].score == 99
        assert by_id["devops-githubactions"].score == 79

        stack = recommendation.recommended_stack
        assert stack[0].id == "backend-spring"
        assert len({o.category for o in stack}) == len(stack) == 6
        assert "integration-mulesoft" in [o.id for o in stack]

        summary = recommendation.summary
        assert summary.overall_fit == FitTier.HIGH
        assert summary.estimated_ramp_up_effort_weeks == 20
        assert summary.key_risks == ["Portfolio contains high-cost components; establish cost monitoring."]
        assert summary.mitigation_plan == [
            "Implement FinOps guardrails and budget alerts for high-cost services."
        ]
        assert recommendation.id == "stack-1"
        assert recommendation.generated_at == fixed_now

    def test_existing_technology_bonus(self):
        recommendation = recommend_technology_stack([], ["angular"])

        by_id = {o.id: o for o in recommendation.options}
        assert by_id["frontend-angular"].score == 90
        assert by_id["frontend-angular"].gap_analysis == [
            "No explicit requirements captured for this category; validate alignment."
        ]
        assert by_id["frontend-react"].gap_analysis == [
            "No explicit requirements captured for this category; validate alignment.",
            "Team training and onboarding plan required.",
        ]
        frontend = [o for o in recommendation.recommended_stack if o.category == TechnologyCategory.FRONTEND]
        assert [o.id for o in frontend] == ["frontend-angular"]
        assert recommendation.summary.estimated_ramp_up_effort_weeks == 17

    def test_high_cost_gap(self):
        recommendation = recommend_technology_stack([])

        snowflake = next(o for o in recommendation.options if o.id == "data-snowflake")
        assert "Higher cost profile may require additional budget approvals." in snowflake.gap_analysis

    def test_low_fit_options_not_recommended(self):
        frontend_need = TechnologyRequirement(
            id="req-ui",
            category=TechnologyCategory.FRONTEND,
            description="Modern UI",
            priority=RequirementPriority.MUST_HAVE,
        )

        recommendation = recommend_technology_stack([frontend_need], catalog=[_option("weak")])

        assert recommendation.options[0].score == 30
        assert recommendation.options[0].fit == FitTier.LOW
        assert recommendation.recommended_stack == []
        summary = recommendation.summary
        assert summary.overall_fit == FitTier.LOW
        assert summary.estimated_ramp_up_effort_weeks == 2
        assert summary.key_risks == [
            "No recommended technology covers must-have requirement: Modern UI",
            "Security tooling missing from recommended stack.",
        ]
        assert summary.mitigation_plan == [
            "Capture additional options for the missing requirement and reassess.",
            "Introduce security automation (SAST/DAST) into delivery pipeline.",
        ]

    def test_clean_stack_keeps_review_cadence(self):
        recommendation = recommend_technology_stack(
            [], ["OWASP ASVS Controls"], catalog=[_catalog_option("security-owaspasvs")],
        )

        assert [o.id for o in recommendation.recommended_stack] == ["security-owaspasvs"]
        assert recommendation.summary.key_risks == []
        assert recommendation.summary.mitigation_plan == [
            "Maintain quarterly architecture reviews to validate continued fit."
        ]
        assert recommendation.summary.estimated_ramp_up_effort_weeks == 2
