"""Report models produced by the analyzers.

Every report is built fresh per call and never persisted by the engine.
Scores documented as 0-100 are clamped before they reach these models.
"""
import math
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from arch_engine.model.types import ArchitectureLayer, ArchModel, RiskLevel
from arch_engine.pricing.types import (
    CloudPricingRequest,
    CloudServiceCost,
    PricingDataSource,
)


def clamp_score(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """Clamp a score into [low, high]."""
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (12.5 -> 13, -2.5 -> -2)."""
    return math.floor(value + 0.5)


def level_for_score(score: float) -> RiskLevel:
    """Shared 70/50/30 thresholds for risk-style scores."""
    if score >= 70:
        return RiskLevel.CRITICAL
    if score >= 50:
        return RiskLevel.HIGH
    if score >= 30:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


HEATMAP_BUCKET_SIZE = 20
HEATMAP_BUCKETS = 5


def heatmap_midpoint(value: float) -> int:
    """Midpoint of the 20-point bucket holding value; 100 falls in [80, 100]."""
    index = min(int(value // HEATMAP_BUCKET_SIZE), HEATMAP_BUCKETS - 1)
    return index * HEATMAP_BUCKET_SIZE + HEATMAP_BUCKET_SIZE // 2


class FitTier(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


# =============================================================================
# Dependencies
# =============================================================================


class ImpactType(str, Enum):
    """How hard a change propagates across one edge."""
    BREAKING = "BREAKING"
    MODERATE = "MODERATE"
    MINOR = "MINOR"
    NONE = "NONE"


class DependencyImpact(ArchModel):
    system_id: str
    system_name: str
    relationship_type: str
    impact_type: ImpactType
    description: str
    depth: int = 0  # 0 for direct dependencies
    mitigation: list[str] = Field(default_factory=list)


class AffectedSystem(ArchModel):
    system_id: str
    system_name: str
    layer: ArchitectureLayer
    impact_severity: RiskLevel
    affected_components: list[str] = Field(default_factory=list)
    estimated_downtime: float = Field(..., description="Hours")


class DependencyAnalysis(ArchModel):
    id: str
    system_id: str
    system_name: str
    analysis_date: datetime
    direct_dependencies: list[DependencyImpact] = Field(default_factory=list)
    transitive_dependencies: list[DependencyImpact] = Field(default_factory=list)
    affected_systems: list[AffectedSystem] = Field(default_factory=list)
    impact_score: float = Field(..., ge=0, le=100)
    risk_level: RiskLevel
    recommendations: list[str] = Field(default_factory=list)


# =============================================================================
# Gaps
# =============================================================================


class GapCategory(str, Enum):
    MISSING_COMPONENT = "MISSING_COMPONENT"
    MISSING_INTEGRATION = "MISSING_INTEGRATION"
    MISSING_CAPABILITY = "MISSING_CAPABILITY"
    TECHNOLOGY_GAP = "TECHNOLOGY_GAP"
    PROCESS_GAP = "PROCESS_GAP"
    DATA_GAP = "DATA_GAP"


class ArchitectureGap(ArchModel):
    id: str
    category: GapCategory
    description: str
    severity: RiskLevel
    element_id: Optional[str] = None
    relationship_id: Optional[str] = None
    affected_layers: list[ArchitectureLayer] = Field(default_factory=list)
    estimated_effort: float = Field(..., description="Person-days")
    priority: int = Field(..., ge=1, le=10)
    dependencies: list[str] = Field(default_factory=list, description="Gap ids to resolve first")


class GapSummary(ArchModel):
    total_gaps: int = 0
    critical_gaps: int = 0
    high_gaps: int = 0
    medium_gaps: int = 0
    low_gaps: int = 0
    estimated_total_effort: float = 0.0
    estimated_cost: float = 0.0
    estimated_timeline: int = Field(0, description="Months")


class GapRecommendation(ArchModel):
    gap_id: str
    recommendation: str
    priority: int
    estimated_effort: float
    dependencies: list[str] = Field(default_factory=list)


class GapAnalysis(ArchModel):
    id: str
    analysis_date: datetime
    gaps: list[ArchitectureGap] = Field(default_factory=list)
    summary: GapSummary
    recommendations: list[GapRecommendation] = Field(default_factory=list)


# =============================================================================
# Risk
# =============================================================================


class RiskCategory(str, Enum):
    TECHNICAL = "TECHNICAL"
    BUSINESS = "BUSINESS"
    SECURITY = "SECURITY"
    COMPLIANCE = "COMPLIANCE"
    OPERATIONAL = "OPERATIONAL"
    STRATEGIC = "STRATEGIC"


class RiskStatus(str, Enum):
    OPEN = "OPEN"
    MITIGATED = "MITIGATED"
    ACCEPTED = "ACCEPTED"
    MONITORING = "MONITORING"


class RiskItem(ArchModel):
    id: str
    category: RiskCategory
    title: str
    description: str = ""
    probability: float = Field(..., ge=0, le=100)
    impact: float = Field(..., ge=0, le=100)
    risk_score: float = Field(..., ge=0, le=100, description="probability * impact / 100")
    mitigation: list[str] = Field(default_factory=list)
    owner: Optional[str] = None
    status: RiskStatus = RiskStatus.OPEN


class RiskHeatmapCell(ArchModel):
    x: int = Field(..., description="Impact bucket midpoint")
    y: int = Field(..., description="Probability bucket midpoint")
    risk_count: int = 0
    risk_ids: list[str] = Field(default_factory=list)
    color: str


class RiskHeatmap(ArchModel):
    x_dimension: str = "Impact"
    y_dimension: str = "Probability"
    cells: list[RiskHeatmapCell] = Field(default_factory=list)

    def cell_for(self, impact: float, probability: float) -> Optional[RiskHeatmapCell]:
        """Find the cell whose buckets contain the given coordinates."""
        x, y = heatmap_midpoint(impact), heatmap_midpoint(probability)
        for cell in self.cells:
            if cell.x == x and cell.y == y:
                return cell
        return None


class RiskTrend(ArchModel):
    date: datetime
    risk_score: float
    risk_count: int
    critical_risks: int


class RiskScoring(ArchModel):
    id: str
    analysis_date: datetime
    overall_risk_score: float = Field(..., ge=0, le=100)
    risk_level: RiskLevel
    risks: list[RiskItem] = Field(default_factory=list)
    heatmap: RiskHeatmap
    trends: list[RiskTrend] = Field(default_factory=list)


class MitigationStatus(str, Enum):
    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETE = "COMPLETE"
    BLOCKED = "BLOCKED"


class RiskMitigation(ArchModel):
    id: str
    risk_id: str
    action: str
    owner: str = "Unassigned"
    status: MitigationStatus = MitigationStatus.PLANNED
    due_date: datetime
    progress_percentage: float = Field(0.0, ge=0, le=100)
    notes: Optional[str] = None


class RiskRegisterSummary(ArchModel):
    open_risks: int = 0
    mitigated_risks: int = 0
    accepted_risks: int = 0
    high_severity_open: int = 0
    next_review_date: datetime


class RiskRegister(ArchModel):
    id: str
    generated_at: datetime
    risks: list[RiskItem] = Field(default_factory=list)
    mitigations: list[RiskMitigation] = Field(default_factory=list)
    summary: RiskRegisterSummary
    recommendations: list[str] = Field(default_factory=list)


# =============================================================================
# Costs
# =============================================================================


class Confidence(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class InfrastructureCosts(ArchModel):
    cloud: float = 0.0
    on_premise: float = 0.0
    hybrid: float = 0.0
    total: float = 0.0


class SoftwareCosts(ArchModel):
    licenses: float = 0.0
    subscriptions: float = 0.0
    custom_development: float = 0.0
    total: float = 0.0


class ServicesCosts(ArchModel):
    consulting: float = 0.0
    implementation: float = 0.0
    support: float = 0.0
    training: float = 0.0
    total: float = 0.0


class OperationsCosts(ArchModel):
    maintenance: float = 0.0
    monitoring: float = 0.0
    backup: float = 0.0
    disaster_recovery: float = 0.0
    total: float = 0.0


class LayerCosts(ArchModel):
    business: float = 0.0
    application: float = 0.0
    data: float = 0.0
    technology: float = 0.0
    solution: float = 0.0


class SystemCost(ArchModel):
    system_id: str
    system_name: str
    cost: float
    category: str


class CostBreakdown(ArchModel):
    infrastructure: InfrastructureCosts = Field(default_factory=InfrastructureCosts)
    software: SoftwareCosts = Field(default_factory=SoftwareCosts)
    services: ServicesCosts = Field(default_factory=ServicesCosts)
    operations: OperationsCosts = Field(default_factory=OperationsCosts)
    by_layer: LayerCosts = Field(default_factory=LayerCosts)
    by_system: list[SystemCost] = Field(default_factory=list)


class CostEstimation(ArchModel):
    id: str
    estimation_date: datetime
    total_cost: float
    cost_breakdown: CostBreakdown
    assumptions: list[str] = Field(default_factory=list)
    confidence: Confidence = Confidence.MEDIUM


class CloudCostTotals(ArchModel):
    hourly: float = 0.0
    monthly: float = 0.0
    annual: float = 0.0
    discounts: float = 0.0


class CloudCostEstimate(ArchModel):
    id: str
    request: CloudPricingRequest
    services: list[CloudServiceCost] = Field(default_factory=list)
    totals: CloudCostTotals
    data_source: PricingDataSource
    assumptions: list[str] = Field(default_factory=list)
    generated_at: datetime


# =============================================================================
# Performance
# =============================================================================


class WorkloadProfile(ArchModel):
    id: str
    name: str
    description: Optional[str] = None
    peak_transactions_per_second: float = Field(..., ge=0)
    average_transactions_per_second: float = Field(..., ge=0)
    concurrency: int = Field(..., ge=0)
    payload_size_kb: float = Field(..., ge=0)
    growth_rate_monthly: float = Field(0.0, description="Percent per month")
    availability_target: float = Field(99.0, ge=0, le=100, description="Percent")
    latency_target_ms: float = Field(500.0, ge=0)


class ScalingStrategy(str, Enum):
    VERTICAL = "VERTICAL"
    HORIZONTAL = "HORIZONTAL"
    AUTO_SCALING = "AUTO_SCALING"


class BottleneckMetric(str, Enum):
    CPU = "CPU"
    MEMORY = "MEMORY"
    IO = "IO"
    NETWORK = "NETWORK"
    THROUGHPUT = "THROUGHPUT"
    LATENCY = "LATENCY"


class CapacityPlan(ArchModel):
    capacity_per_unit: int
    current_capacity_units: int
    required_capacity_now: int
    required_capacity_peak: int
    required_capacity_in_12_months: int
    buffer_percentage: float
    scaling_strategy: ScalingStrategy
    estimated_monthly_cost: float
    estimated_upgrade_timeline_weeks: int
    notes: list[str] = Field(default_factory=list)


class PerformanceBottleneck(ArchModel):
    id: str
    component_id: Optional[str] = None
    component_name: Optional[str] = None
    layer: ArchitectureLayer
    metric: BottleneckMetric
    current_utilization: float = Field(..., ge=0, le=100, description="Percent")
    risk_level: RiskLevel
    description: str
    recommendations: list[str] = Field(default_factory=list)


class PerformanceModel(ArchModel):
    id: str
    generated_at: datetime
    workload: WorkloadProfile
    capacity_plan: CapacityPlan
    bottlenecks: list[PerformanceBottleneck] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


# =============================================================================
# Compliance
# =============================================================================


class ControlSeverity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class ComplianceStatus(str, Enum):
    COMPLIANT = "COMPLIANT"
    PARTIAL = "PARTIAL"
    NON_COMPLIANT = "NON_COMPLIANT"
    NOT_APPLICABLE = "NOT_APPLICABLE"


class ComplianceControl(ArchModel):
    id: str
    category: str
    title: str
    description: str = ""
    requirement: str = ""
    severity: ControlSeverity


class ComplianceFramework(ArchModel):
    id: str = Field(..., description="SOC2 / HIPAA / GDPR / CUSTOM")
    name: str
    description: str
    categories: list[str] = Field(default_factory=list)
    controls: list[ComplianceControl] = Field(default_factory=list)


class ControlCoverage(ArchModel):
    """Caller-supplied evidence for one control."""
    status: ComplianceStatus
    evidence: list[str] = Field(default_factory=list)
    owner: Optional[str] = None
    due_date: Optional[datetime] = None
    remediation_actions: Optional[list[str]] = None
    notes: Optional[str] = None


class ComplianceCheckResult(ArchModel):
    control_id: str
    control: ComplianceControl
    status: ComplianceStatus
    evidence: list[str] = Field(default_factory=list)
    owner: Optional[str] = None
    due_date: Optional[datetime] = None
    remediation_actions: list[str] = Field(default_factory=list)
    notes: Optional[str] = None


class ComplianceSummary(ArchModel):
    compliance_score: float = Field(0.0, ge=0, le=100)
    compliant: int = 0
    partial: int = 0
    non_compliant: int = 0
    not_applicable: int = 0


class ComplianceReport(ArchModel):
    id: str
    framework: ComplianceFramework
    generated_at: datetime
    summary: ComplianceSummary
    results: list[ComplianceCheckResult] = Field(default_factory=list)
    high_risk_controls: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


# =============================================================================
# Technology stack
# =============================================================================


class TechnologyCategory(str, Enum):
    FRONTEND = "FRONTEND"
    BACKEND = "BACKEND"
    DATA = "DATA"
    DEVOPS = "DEVOPS"
    SECURITY = "SECURITY"
    INTEGRATION = "INTEGRATION"


class RequirementPriority(str, Enum):
    MUST_HAVE = "MUST_HAVE"
    SHOULD_HAVE = "SHOULD_HAVE"
    NICE_TO_HAVE = "NICE_TO_HAVE"


class Maturity(str, Enum):
    EMERGING = "EMERGING"
    ESTABLISHED = "ESTABLISHED"
    LEGACY = "LEGACY"


class Tier(str, Enum):
    """LOW/MEDIUM/HIGH scale for cost profile and skills availability."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class TechnologyRequirement(ArchModel):
    id: str
    category: TechnologyCategory
    description: str
    priority: RequirementPriority = RequirementPriority.SHOULD_HAVE
    weight: float = Field(1.0, ge=1, le=5)
    rationale: Optional[str] = None


class TechnologyOption(ArchModel):
    id: str
    name: str
    category: TechnologyCategory
    description: str
    maturity: Maturity
    ecosystem_score: float = Field(..., ge=0, le=100)
    compliance_fit: float = Field(..., ge=0, le=100)
    cost_profile: Tier
    skills_availability: Tier
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)


class EvaluatedOption(TechnologyOption):
    score: float = Field(..., ge=0, le=100)
    fit: FitTier
    gap_analysis: list[str] = Field(default_factory=list)


class StackSummary(ArchModel):
    overall_fit: FitTier
    estimated_ramp_up_effort_weeks: int
    key_risks: list[str] = Field(default_factory=list)
    mitigation_plan: list[str] = Field(default_factory=list)


class StackRecommendation(ArchModel):
    id: str
    generated_at: datetime
    requirements: list[TechnologyRequirement] = Field(default_factory=list)
    options: list[EvaluatedOption] = Field(default_factory=list)
    recommended_stack: list[EvaluatedOption] = Field(default_factory=list)
    summary: StackSummary


# =============================================================================
# Portfolio
# =============================================================================


class HealthStatus(str, Enum):
    HEALTHY = "HEALTHY"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


class MaturityLevel(str, Enum):
    INITIAL = "INITIAL"
    DEVELOPING = "DEVELOPING"
    DEFINED = "DEFINED"
    MANAGED = "MANAGED"
    OPTIMIZING = "OPTIMIZING"


class HealthMetrics(ArchModel):
    availability: float = 95.0
    performance: float = 85.0
    security: float = 90.0
    compliance: float = 88.0
    maintainability: float = 75.0

    @field_validator("*")
    @classmethod
    def _clamp(cls, value: float) -> float:
        return clamp_score(value)


class MaturityDimensions(ArchModel):
    process_maturity: float = 70.0
    technology_maturity: float = 65.0
    data_maturity: float = 60.0
    integration_maturity: float = 75.0
    governance_maturity: float = 70.0

    @field_validator("*")
    @classmethod
    def _clamp(cls, value: float) -> float:
        return clamp_score(value)


class PortfolioBaseline(ArchModel):
    """Telemetry-style inputs the graph alone cannot provide.

    Defaults are placeholder heuristics; callers with real monitoring or
    assessment data pass their own values.
    """
    health_metrics: HealthMetrics = Field(default_factory=HealthMetrics)
    maturity: MaturityDimensions = Field(default_factory=MaturityDimensions)
    sla_compliance: float = 95.0

    @field_validator("sla_compliance")
    @classmethod
    def _clamp_sla(cls, value: float) -> float:
        return clamp_score(value)


class SystemsByHealth(ArchModel):
    healthy: int = 0
    warning: int = 0
    critical: int = 0


class PortfolioHealth(ArchModel):
    overall_score: float = Field(..., ge=0, le=100)
    status: HealthStatus
    metrics: HealthMetrics
    systems_by_health: SystemsByHealth


class MaturityRoadmapItem(ArchModel):
    dimension: str
    current_level: MaturityLevel
    target_level: MaturityLevel
    initiatives: list[str] = Field(default_factory=list)
    estimated_time: int = Field(..., description="Months")


class PortfolioMaturity(ArchModel):
    overall_level: MaturityLevel
    level_score: float = Field(..., ge=0, le=100)
    dimensions: MaturityDimensions
    roadmap: list[MaturityRoadmapItem] = Field(default_factory=list)


class DebtByCategory(ArchModel):
    code_quality: float = 0.0
    architecture: float = 0.0
    documentation: float = 0.0
    testing: float = 0.0
    security: float = 0.0
    performance: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.code_quality + self.architecture + self.documentation
            + self.testing + self.security + self.performance
        )


class SystemDebt(ArchModel):
    system_id: str
    system_name: str
    debt: float
    category: str


class PriorityDebt(ArchModel):
    id: str
    description: str
    debt: float
    impact: RiskLevel


class TechnicalDebt(ArchModel):
    total_debt: float = Field(..., description="Person-days")
    debt_by_category: DebtByCategory
    debt_by_system: list[SystemDebt] = Field(default_factory=list)
    priority_debt: list[PriorityDebt] = Field(default_factory=list)


class PortfolioSummary(ArchModel):
    total_systems: int = 0
    total_integrations: int = 0
    total_data_entities: int = 0
    total_technologies: int = 0
    active_projects: int = 0
    completed_projects: int = 0


class PortfolioDashboard(ArchModel):
    id: str
    dashboard_date: datetime
    health: PortfolioHealth
    maturity: PortfolioMaturity
    technical_debt: TechnicalDebt
    summary: PortfolioSummary


class ReuseByType(ArchModel):
    components: float = 0.0
    patterns: float = 0.0
    services: float = 0.0
    data_models: float = 0.0


class ReuseRateMetrics(ArchModel):
    overall_rate: float = Field(0.0, ge=0, le=100)
    by_type: ReuseByType = Field(default_factory=ReuseByType)
    reused_element_ids: list[str] = Field(default_factory=list)


class IntegrationMetrics(ArchModel):
    total_integrations: int = 0
    by_type: dict[str, float] = Field(default_factory=dict)
    by_status: dict[str, float] = Field(default_factory=dict)
    integration_health: dict[str, float] = Field(default_factory=dict)


class SystemSLA(ArchModel):
    system_id: str
    system_name: str
    compliance: float = Field(..., ge=0, le=100)
    breaches: int = 0


class SLAComplianceMetrics(ArchModel):
    overall_compliance: float = Field(..., ge=0, le=100)
    by_system: list[SystemSLA] = Field(default_factory=list)


class ArchitectureKPIs(ArchModel):
    id: str
    report_date: datetime
    reuse_rate: ReuseRateMetrics
    integration_count: IntegrationMetrics
    sla_compliance: SLAComplianceMetrics
    other_kpis: dict[str, float] = Field(default_factory=dict)
