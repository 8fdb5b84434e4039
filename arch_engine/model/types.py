"""Architecture graph data contract.

Elements and relationships are immutable snapshots handed in by the caller.
The engine reads them, never mutates them, and treats dangling relationship
references as "unknown" rather than as errors.
"""
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class ArchModel(BaseModel):
    """Base model accepting both snake_case and camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class SnapshotModel(ArchModel):
    """Base for caller-supplied snapshots (frozen)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class ArchitectureLayer(str, Enum):
    """Architectural tier an element belongs to."""
    BUSINESS = "BUSINESS"
    APPLICATION = "APPLICATION"
    DATA = "DATA"
    TECHNOLOGY = "TECHNOLOGY"
    SOLUTION = "SOLUTION"


class RiskLevel(str, Enum):
    """Four-tier risk/severity scale shared by every analyzer."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class LifecycleStage(str, Enum):
    PLANNED = "PLANNED"
    IN_DEVELOPMENT = "IN_DEVELOPMENT"
    PRODUCTION = "PRODUCTION"
    DEPRECATED = "DEPRECATED"
    DECOMMISSIONED = "DECOMMISSIONED"


class ArchitectureState(str, Enum):
    AS_IS = "AS_IS"
    TO_BE = "TO_BE"
    SCENARIO = "SCENARIO"


class RelationshipType(str, Enum):
    """Well-known relationship types.

    ArchitectureRelationship.type is an open string; these are the values the
    analyzers give special meaning to.
    """
    DEPENDS_ON = "DEPENDS_ON"
    INTEGRATES_WITH = "INTEGRATES_WITH"
    CONSUMES = "CONSUMES"
    PROVIDES = "PROVIDES"
    CONTAINS = "CONTAINS"
    GENERATES = "GENERATES"
    TRANSFORMS_TO = "TRANSFORMS_TO"
    MIGRATES_TO = "MIGRATES_TO"


class Platform(str, Enum):
    """Hosting platform declared in an element's custom fields."""
    CLOUD = "CLOUD"
    ON_PREM = "ON_PREM"
    HYBRID = "HYBRID"


# Extension keys the analyzers understand, in both spellings
_KNOWN_CUSTOM_KEYS = {
    "capacity_per_unit", "capacityPerUnit",
    "platform",
    "cloud_service_id", "cloudServiceId",
    "category",
    "extensions",
}


class CustomFields(SnapshotModel):
    """Typed element extensions.

    Known keys are validated; anything else the caller sends lands in
    ``extensions`` untouched.
    """
    capacity_per_unit: Optional[float] = Field(None, description="Transactions/sec one capacity unit sustains")
    platform: Optional[Platform] = Field(None, description="Hosting platform")
    cloud_service_id: Optional[str] = Field(None, description="Links the element to a cloud usage line id")
    category: Optional[str] = Field(None, description="Free-form category (e.g. COMPUTE)")
    extensions: dict[str, Any] = Field(default_factory=dict, description="Unrecognized extension keys")

    @model_validator(mode="before")
    @classmethod
    def _collect_extensions(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        known = {k: v for k, v in data.items() if k in _KNOWN_CUSTOM_KEYS}
        unknown = {k: v for k, v in data.items() if k not in _KNOWN_CUSTOM_KEYS}
        if unknown:
            known["extensions"] = {**data.get("extensions", {}), **unknown}
        return known


class ElementMetadata(SnapshotModel):
    owner: Optional[str] = None
    risk: Optional[RiskLevel] = None
    cost: float = Field(0.0, ge=0, description="Annual cost attributed to the element")
    lifecycle_stage: Optional[LifecycleStage] = None
    custom_fields: CustomFields = Field(default_factory=CustomFields)


class ArchitectureElement(SnapshotModel):
    """A node in the enterprise-architecture graph."""
    id: str
    layer: ArchitectureLayer
    name: str
    type: str = ""
    description: Optional[str] = None
    metadata: ElementMetadata = Field(default_factory=ElementMetadata)
    tags: set[str] = Field(default_factory=set)
    state: ArchitectureState = ArchitectureState.AS_IS

    @property
    def risk(self) -> Optional[RiskLevel]:
        return self.metadata.risk

    @property
    def custom_fields(self) -> CustomFields:
        return self.metadata.custom_fields


class ArchitectureRelationship(SnapshotModel):
    """A directed edge between two elements."""
    id: str
    source_id: str
    target_id: str
    type: str
    description: Optional[str] = None
