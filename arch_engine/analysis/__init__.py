"""Architecture analyzers.

Usage:
    from arch_engine.analysis import analyze_dependencies, score_risks

    report = analyze_dependencies("sys-1", elements, relationships)
    report.impact_score  # 0-100
"""

from arch_engine.analysis.dependencies import SystemNotFoundError, analyze_dependencies
from arch_engine.analysis.gaps import analyze_gaps
from arch_engine.analysis.risk import score_risks
from arch_engine.analysis.register import build_risk_register
from arch_engine.analysis.costs import estimate_costs, estimate_cloud_costs
from arch_engine.analysis.performance import model_performance
from arch_engine.analysis.compliance import evaluate_compliance
from arch_engine.analysis.stack import recommend_technology_stack
from arch_engine.analysis.portfolio import calculate_kpis, generate_portfolio_dashboard
from arch_engine.analysis.types import (
    ArchitectureKPIs,
    CloudCostEstimate,
    ComplianceControl,
    ComplianceReport,
    ControlCoverage,
    CostEstimation,
    DependencyAnalysis,
    GapAnalysis,
    PerformanceModel,
    PortfolioBaseline,
    PortfolioDashboard,
    RiskItem,
    RiskMitigation,
    RiskRegister,
    RiskScoring,
    StackRecommendation,
    TechnologyRequirement,
    WorkloadProfile,
)

__all__ = [
    # Operations
    "analyze_dependencies",
    "analyze_gaps",
    "score_risks",
    "build_risk_register",
    "estimate_costs",
    "estimate_cloud_costs",
    "model_performance",
    "evaluate_compliance",
    "recommend_technology_stack",
    "generate_portfolio_dashboard",
    "calculate_kpis",
    # Errors
    "SystemNotFoundError",
    # Inputs
    "WorkloadProfile",
    "ControlCoverage",
    "ComplianceControl",
    "TechnologyRequirement",
    "RiskItem",
    "RiskMitigation",
    "PortfolioBaseline",
    # Reports
    "DependencyAnalysis",
    "GapAnalysis",
    "RiskScoring",
    "RiskRegister",
    "CostEstimation",
    "CloudCostEstimate",
    "PerformanceModel",
    "ComplianceReport",
    "StackRecommendation",
    "PortfolioDashboard",
    "ArchitectureKPIs",
]
