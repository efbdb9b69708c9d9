"""Concept graph model - classified concepts and the edges between them."""

from dataclasses import dataclass, field
from enum import Enum

from conceptmap.models.relation import is_symmetric

CORE_ID = "core"


class ConceptLevel(str, Enum):
    """Hierarchy tier of a concept node."""

    CORE = "core"
    MAJOR = "major"
    DETAIL = "detail"


@dataclass(frozen=True)
class ConceptNode:
    """
    A concept placed in the three-tier hierarchy.

    Examples: "allergies" (major), "histamine" (detail under "allergies")
    """

    id: str
    label: str
    level: ConceptLevel
    occurrences: float = 0  # Hit count, or importance for authored maps

    # Set only for detail nodes
    parent_major_id: str | None = None

    # Mean structural depth of the hits; classification input only
    depth: float = 0.0

    # First corpus item the concept was seen in (None for inferred concepts)
    source_id: str | None = None
    description: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON payloads."""
        return {
            "id": self.id,
            "label": self.label,
            "level": self.level.value,
            "occurrences": self.occurrences,
            "parent_major_id": self.parent_major_id,
            "depth": self.depth,
            "source_id": self.source_id,
            "description": self.description,
        }


@dataclass(frozen=True)
class ConceptEdge:
    """
    A typed, weighted relationship between two concepts.

    Example: cats --leads to--> allergies (weight: 3)
    """

    source: str
    target: str
    type: str
    weight: float = 1.0
    description: str | None = None
    evidence: str | None = None
    bidirectional: bool = False

    # Excerpts of the corpus items where the pair co-occurred
    contexts: tuple[str, ...] = ()

    # True for the hierarchy edges hanging every concept off the core
    implicit: bool = False

    @property
    def symmetric(self) -> bool:
        """Direction carries no meaning for this edge."""
        return self.bidirectional or is_symmetric(self.type)

    @property
    def key(self) -> tuple[str, str, bool]:
        """
        Deduplication key: the unordered concept pair.

        One semantic edge per pair whatever its type or direction; the
        implicit hierarchy edge is keyed apart from it.
        """
        a, b = sorted((self.source, self.target))
        return a, b, self.implicit

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON payloads."""
        return {
            "from": self.source,
            "to": self.target,
            "type": self.type,
            "weight": self.weight,
            "description": self.description,
            "evidence": self.evidence,
            "bidirectional": self.bidirectional,
            "contexts": list(self.contexts),
            "implicit": self.implicit,
        }


def dedupe_edges(edges: "list[ConceptEdge] | tuple[ConceptEdge, ...]") -> list[ConceptEdge]:
    """Keep the first edge seen for each unordered concept pair."""
    seen: set[tuple[str, str, bool]] = set()
    result: list[ConceptEdge] = []
    for edge in edges:
        if edge.key in seen:
            continue
        seen.add(edge.key)
        result.append(edge)
    return result


@dataclass(frozen=True)
class ConceptGraph:
    """
    Immutable result of graph construction, handed once to a renderer.

    Renderers layer presentation state on top; they never change this object.
    """

    title: str
    core: ConceptNode
    concepts: tuple[ConceptNode, ...]
    edges: tuple[ConceptEdge, ...]

    # Diagnostics
    truncated: bool = False
    nodes_analyzed: int = 0
    scope: str | None = None

    _index: dict[str, ConceptNode] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index = {self.core.id: self.core}
        index.update({c.id: c for c in self.concepts})
        object.__setattr__(self, "_index", index)

    @property
    def nodes(self) -> tuple[ConceptNode, ...]:
        """Core followed by every concept."""
        return (self.core, *self.concepts)

    @property
    def node_ids(self) -> frozenset[str]:
        return frozenset(self._index)

    @property
    def majors(self) -> list[ConceptNode]:
        return [c for c in self.concepts if c.level == ConceptLevel.MAJOR]

    @property
    def details(self) -> list[ConceptNode]:
        return [c for c in self.concepts if c.level == ConceptLevel.DETAIL]

    @property
    def relationships(self) -> list[ConceptEdge]:
        """Inferred or authored edges, without the implicit hierarchy edges."""
        return [e for e in self.edges if not e.implicit]

    def get(self, node_id: str) -> ConceptNode | None:
        return self._index.get(node_id)

    def details_of(self, major_id: str) -> list[ConceptNode]:
        """Detail nodes owned by a major concept."""
        return [c for c in self.details if c.parent_major_id == major_id]

    def stats(self) -> dict[str, int]:
        return {
            "concepts_rendered": len(self.concepts),
            "major_concepts": len(self.majors),
            "detail_concepts": len(self.details),
            "relationships_rendered": len(self.relationships),
        }

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON payloads."""
        return {
            "title": self.title,
            "core": self.core.to_dict(),
            "concepts": [c.to_dict() for c in self.concepts],
            "edges": [e.to_dict() for e in self.edges],
            "truncated": self.truncated,
            "nodes_analyzed": self.nodes_analyzed,
            "scope": self.scope,
        }
