"""Conceptmap data models."""

from conceptmap.models.concept import (
    CORE_ID,
    ConceptEdge,
    ConceptGraph,
    ConceptLevel,
    ConceptNode,
    dedupe_edges,
)
from conceptmap.models.content import SCOPE_TYPES, ContentNode, ScopeType
from conceptmap.models.relation import (
    CONTAINS_RELATION,
    DEFAULT_RELATION,
    DETAILS_RELATION,
    RelationFamily,
    is_symmetric,
    relation_family,
)

__all__ = [
    "CORE_ID",
    "ConceptEdge",
    "ConceptGraph",
    "ConceptLevel",
    "ConceptNode",
    "dedupe_edges",
    "ContentNode",
    "ScopeType",
    "SCOPE_TYPES",
    "CONTAINS_RELATION",
    "DEFAULT_RELATION",
    "DETAILS_RELATION",
    "RelationFamily",
    "is_symmetric",
    "relation_family",
]
