"""Architecture graph model shared by every analyzer."""

from arch_engine.model.types import (
    ArchModel,
    SnapshotModel,
    ArchitectureLayer,
    RiskLevel,
    LifecycleStage,
    ArchitectureState,
    RelationshipType,
    Platform,
    CustomFields,
    ElementMetadata,
    ArchitectureElement,
    ArchitectureRelationship,
)
from arch_engine.model.graph import ArchitectureGraph

__all__ = [
    "ArchModel",
    "SnapshotModel",
    "ArchitectureLayer",
    "RiskLevel",
    "LifecycleStage",
    "ArchitectureState",
    "RelationshipType",
    "Platform",
    "CustomFields",
    "ElementMetadata",
    "ArchitectureElement",
    "ArchitectureRelationship",
    "ArchitectureGraph",
]
