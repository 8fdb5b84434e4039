"""JSON snapshot documents consumed by the command-line runner."""
import json
from pathlib import Path
from typing import Optional, Union

from pydantic import Field

from arch_engine.analysis.types import (
    ComplianceControl,
    ControlCoverage,
    PortfolioBaseline,
    RiskItem,
    RiskMitigation,
    TechnologyRequirement,
    WorkloadProfile,
)
from arch_engine.model import ArchitectureElement, ArchitectureRelationship, ArchModel
from arch_engine.pricing import CloudPricingRequest


class SnapshotError(ValueError):
    """The snapshot file is unreadable or lacks a section the report needs."""


class ArchitectureSnapshot(ArchModel):
    elements: list[ArchitectureElement] = Field(default_factory=list)
    relationships: list[ArchitectureRelationship] = Field(default_factory=list)


class Snapshot(ArchitectureSnapshot):
    """An As-Is architecture plus optional inputs for specific reports."""
    to_be: Optional[ArchitectureSnapshot] = None
    workload: Optional[WorkloadProfile] = None
    cloud_request: Optional[CloudPricingRequest] = None
    coverage: dict[str, ControlCoverage] = Field(default_factory=dict)
    custom_controls: list[ComplianceControl] = Field(default_factory=list)
    requirements: list[TechnologyRequirement] = Field(default_factory=list)
    existing_technologies: list[str] = Field(default_factory=list)
    risks: Optional[list[RiskItem]] = None
    mitigations: list[RiskMitigation] = Field(default_factory=list)
    baseline: Optional[PortfolioBaseline] = None

    def require(self, section: str):
        """Return a section, raising SnapshotError when it is missing."""
        value = getattr(self, section)
        if value is None:
            raise SnapshotError(f"Snapshot has no '{section}' section")
        return value


def load_snapshot(path: Union[str, Path]) -> Snapshot:
    """Read and validate a snapshot file.

    Raises:
        SnapshotError: If the file cannot be read or is not JSON.
        pydantic.ValidationError: If the document does not match the model.
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        raise SnapshotError(f"Cannot read snapshot {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise SnapshotError(f"Snapshot {path} is not valid JSON: {e}") from e
    return Snapshot.model_validate(raw)
