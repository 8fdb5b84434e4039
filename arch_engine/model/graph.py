"""
Read-only index over an architecture snapshot.

ArchitectureGraph wraps caller-owned element/relationship lists with the
lookups the analyzers need (by id, outgoing edges, incoming edges).
"""

from collections import defaultdict
from typing import Iterable, Optional

from arch_engine.model.types import (
    ArchitectureElement,
    ArchitectureLayer,
    ArchitectureRelationship,
)


class ArchitectureGraph:
    """
    Indexed view of elements and relationships.

    Built once per analysis call; never mutates the inputs.
    """

    def __init__(
        self,
        elements: Iterable[ArchitectureElement],
        relationships: Iterable[ArchitectureRelationship] = (),
    ):
        self.elements: list[ArchitectureElement] = list(elements)
        self.relationships: list[ArchitectureRelationship] = list(relationships)

        # First occurrence wins when ids collide
        self._by_id: dict[str, ArchitectureElement] = {}
        for element in self.elements:
            self._by_id.setdefault(element.id, element)

        self._outgoing: dict[str, list[ArchitectureRelationship]] = defaultdict(list)
        self._incoming: dict[str, list[ArchitectureRelationship]] = defaultdict(list)
        for rel in self.relationships:
            self._outgoing[rel.source_id].append(rel)
            self._incoming[rel.target_id].append(rel)

    def get(self, element_id: str) -> Optional[ArchitectureElement]:
        """Get element by id, or None for dangling references."""
        return self._by_id.get(element_id)

    def __contains__(self, element_id: str) -> bool:
        return element_id in self._by_id

    def outgoing(self, element_id: str) -> list[ArchitectureRelationship]:
        """Edges whose source is element_id, in input order."""
        return self._outgoing.get(element_id, [])

    def incoming(self, element_id: str) -> list[ArchitectureRelationship]:
        """Edges whose target is element_id, in input order."""
        return self._incoming.get(element_id, [])

    def by_layer(self, layer: ArchitectureLayer) -> list[ArchitectureElement]:
        return [e for e in self.elements if e.layer == layer]

    def relationships_of_type(self, *types: str) -> list[ArchitectureRelationship]:
        wanted = {str(t.value if hasattr(t, "value") else t) for t in types}
        return [r for r in self.relationships if r.type in wanted]
