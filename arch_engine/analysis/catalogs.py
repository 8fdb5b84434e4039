"""Static reference catalogs: compliance frameworks and technology options."""
from arch_engine.analysis.types import (
    ComplianceControl,
    ComplianceFramework,
    ControlSeverity,
    Maturity,
    TechnologyCategory,
    TechnologyOption,
    Tier,
)


# =============================================================================
# Compliance frameworks
# =============================================================================

CUSTOM_FRAMEWORK_ID = "CUSTOM"

COMPLIANCE_FRAMEWORKS: dict[str, ComplianceFramework] = {
    "SOC2": ComplianceFramework(
        id="SOC2",
        name="SOC 2 Type II",
        description=(
            "Trust Services Criteria for security, availability, processing integrity, "
            "confidentiality, and privacy."
        ),
        categories=["Security", "Availability", "Confidentiality"],
        controls=[
            ComplianceControl(
                id="soc2-cc1",
                category="Security",
                title="Access Control Policies",
                description="Documented access management policies covering provisioning, review, and revocation.",
                requirement="Access is provisioned based on least privilege and reviewed quarterly.",
                severity=ControlSeverity.HIGH,
            ),
            ComplianceControl(
                id="soc2-cc2",
                category="Availability",
                title="Business Continuity Planning",
                description="Defined and tested business continuity and disaster recovery plans.",
                requirement="Recovery procedures are tested annually and results are documented.",
                severity=ControlSeverity.MEDIUM,
            ),
            ComplianceControl(
                id="soc2-cc3",
                category="Confidentiality",
                title="Encryption in Transit and at Rest",
                description="Sensitive data is encrypted during transmission and storage.",
                requirement="Industry-standard encryption (TLS 1.2+, AES-256) is enforced.",
                severity=ControlSeverity.HIGH,
            ),
        ],
    ),
    "HIPAA": ComplianceFramework(
        id="HIPAA",
        name="HIPAA Security Rule",
        description=(
            "Security standards protecting the confidentiality, integrity, and availability "
            "of electronic PHI."
        ),
        categories=["Administrative", "Technical", "Physical"],
        controls=[
            ComplianceControl(
                id="hipaa-164-308",
                category="Administrative",
                title="Risk Analysis and Management",
                description="Conduct an accurate assessment of potential risks to ePHI.",
                requirement="Risk analysis performed annually with documented mitigation steps.",
                severity=ControlSeverity.HIGH,
            ),
            ComplianceControl(
                id="hipaa-164-312",
                category="Technical",
                title="Access Control Mechanisms",
                description="Unique user identification and automatic logoff for systems with ePHI.",
                requirement="Sessions automatically terminate after defined inactivity period.",
                severity=ControlSeverity.MEDIUM,
            ),
            ComplianceControl(
                id="hipaa-164-316",
                category="Physical",
                title="Facility Access Controls",
                description="Policies to limit physical access to systems containing ePHI.",
                requirement="Visitor logs and access badges enforced at all data centers.",
                severity=ControlSeverity.MEDIUM,
            ),
        ],
    ),
    "GDPR": ComplianceFramework(
        id="GDPR",
        name="GDPR Data Protection",
        description="Regulation governing personal data protection for EU residents.",
        categories=["Lawfulness", "Data Subject Rights", "Security"],
        controls=[
            ComplianceControl(
                id="gdpr-6",
                category="Lawfulness",
                title="Lawful Basis for Processing",
                description="Documented lawful basis for each personal data processing activity.",
                requirement="Consent records or alternative lawful bases are captured and auditable.",
                severity=ControlSeverity.HIGH,
            ),
            ComplianceControl(
                id="gdpr-32",
                category="Security",
                title="Security of Processing",
                description="Appropriate technical and organisational measures to ensure security.",
                requirement="Security controls reviewed annually with penetration tests.",
                severity=ControlSeverity.HIGH,
            ),
            ComplianceControl(
                id="gdpr-30",
                category="Data Subject Rights",
                title="Records of Processing Activities",
                description="Maintain records of processing activities for personal data.",
                requirement="Data inventory maintained and reviewed at least annually.",
                severity=ControlSeverity.MEDIUM,
            ),
        ],
    ),
    CUSTOM_FRAMEWORK_ID: ComplianceFramework(
        id=CUSTOM_FRAMEWORK_ID,
        name="Custom Framework",
        description="Configurable compliance checklist.",
        categories=[],
        controls=[],
    ),
}

# Remediation actions per control category
REMEDIATION_ACTIONS: dict[str, list[str]] = {
    "Security": ["Perform gap assessment of security controls", "Implement missing monitoring and alerting"],
    "Availability": ["Update disaster recovery playbooks", "Schedule regular failover testing"],
    "Confidentiality": ["Review data encryption posture", "Harden access control policies"],
    "Administrative": ["Document missing policies and procedures", "Provide workforce training on updated policies"],
    "Technical": ["Enable MFA for privileged access", "Automate access review workflows"],
    "Physical": ["Review facility access logs", "Install physical security controls"],
    "Lawfulness": [
        "Update privacy notices to reflect lawful basis",
        "Maintain consent records in centralized system",
    ],
    "Data Subject Rights": ["Publish DSAR response procedure", "Implement data retention automation"],
}
DEFAULT_REMEDIATION = ["Implement missing technical safeguards"]


# =============================================================================
# Technology options
# =============================================================================

TECHNOLOGY_CATALOG: list[TechnologyOption] = [
    TechnologyOption(
        id="frontend-react",
        name="React + TypeScript",
        category=TechnologyCategory.FRONTEND,
        description="Component-driven UI framework with strong ecosystem.",
        maturity=Maturity.ESTABLISHED,
        ecosystem_score=90,
        compliance_fit=80,
        cost_profile=Tier.LOW,
        skills_availability=Tier.HIGH,
        pros=["Large talent pool", "Strong tooling support", "Rich component libraries"],
        cons=["Requires state management discipline", "Fast-moving ecosystem"],
    ),
    TechnologyOption(
        id="frontend-angular",
        name="Angular",
        category=TechnologyCategory.FRONTEND,
        description="Opinionated enterprise-ready frontend framework.",
        maturity=Maturity.ESTABLISHED,
        ecosystem_score=80,
        compliance_fit=85,
        cost_profile=Tier.MEDIUM,
        skills_availability=Tier.MEDIUM,
        pros=["Built-in architectural conventions", "Strong CLI tooling"],
        cons=["Steep learning curve", "Framework upgrades require planning"],
    ),
    TechnologyOption(
        id="backend-node",
        name="Node.js (NestJS)",
        category=TechnologyCategory.BACKEND,
        description="TypeScript backend framework with modular architecture.",
        maturity=Maturity.ESTABLISHED,
        ecosystem_score=85,
        compliance_fit=78,
        cost_profile=Tier.LOW,
        skills_availability=Tier.HIGH,
        pros=["Full-stack TypeScript", "Rich package ecosystem"],
        cons=["Requires operational hardening for CPU-intensive workloads"],
    ),
    TechnologyOption(
        id="backend-spring",
        name="Java Spring Boot",
        category=TechnologyCategory.BACKEND,
        description="Mature enterprise backend framework with strong security integrations.",
        maturity=Maturity.ESTABLISHED,
        ecosystem_score=88,
        compliance_fit=90,
        cost_profile=Tier.MEDIUM,
        skills_availability=Tier.HIGH,
        pros=["Excellent security tooling", "Robust ecosystem"],
        cons=["Higher resource footprint", "Longer developer ramp-up"],
    ),
    TechnologyOption(
        id="data-postgres",
        name="PostgreSQL",
        category=TechnologyCategory.DATA,
        description="Open-source relational database with strong community.",
        maturity=Maturity.ESTABLISHED,
        ecosystem_score=92,
        compliance_fit=85,
        cost_profile=Tier.LOW,
        skills_availability=Tier.HIGH,
        pros=["Extensible", "Strong ACID compliance"],
        cons=["Requires tuning for large-scale analytics"],
    ),
    TechnologyOption(
        id="data-snowflake",
        name="Snowflake",
        category=TechnologyCategory.DATA,
        description="Cloud-native data warehouse with elastic scaling.",
        maturity=Maturity.ESTABLISHED,
        ecosystem_score=87,
        compliance_fit=92,
        cost_profile=Tier.HIGH,
        skills_availability=Tier.MEDIUM,
        pros=["Separation of storage and compute", "Strong governance features"],
        cons=["Usage-based costs require monitoring"],
    ),
    TechnologyOption(
        id="devops-terraform",
        name="Terraform + Atlantis",
        category=TechnologyCategory.DEVOPS,
        description="Infrastructure-as-Code with workflow automation.",
        maturity=Maturity.ESTABLISHED,
        ecosystem_score=84,
        compliance_fit=88,
        cost_profile=Tier.LOW,
        skills_availability=Tier.MEDIUM,
        pros=["Multi-cloud support", "Policy enforcement capabilities"],
        cons=["State management requires diligence"],
    ),
    TechnologyOption(
        id="devops-githubactions",
        name="GitHub Actions",
        category=TechnologyCategory.DEVOPS,
        description="CI/CD automation integrated with GitHub.",
        maturity=Maturity.ESTABLISHED,
        ecosystem_score=82,
        compliance_fit=75,
        cost_profile=Tier.LOW,
        skills_availability=Tier.HIGH,
        pros=["Integrated with version control", "Marketplace of reusable actions"],
        cons=["Enterprise features require higher-tier plans"],
    ),
    TechnologyOption(
        id="security-owaspasvs",
        name="OWASP ASVS Controls",
        category=TechnologyCategory.SECURITY,
        description="Security verification standard for application security.",
        maturity=Maturity.ESTABLISHED,
        ecosystem_score=75,
        compliance_fit=95,
        cost_profile=Tier.LOW,
        skills_availability=Tier.MEDIUM,
        pros=["Aligns with industry standards", "Strong control coverage"],
        cons=["Requires disciplined implementation"],
    ),
    TechnologyOption(
        id="integration-mulesoft",
        name="MuleSoft Anypoint",
        category=TechnologyCategory.INTEGRATION,
        description="Enterprise integration platform with API management.",
        maturity=Maturity.ESTABLISHED,
        ecosystem_score=80,
        compliance_fit=88,
        cost_profile=Tier.HIGH,
        skills_availability=Tier.MEDIUM,
        pros=["Unified API management", "Prebuilt connectors"],
        cons=["License cost", "Specialized skills required"],
    ),
]
