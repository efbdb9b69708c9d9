"""Relationship vocabulary shared by the builder and both renderers."""

from typing import Literal

RelationFamily = Literal[
    "causal", "structural", "temporal", "logical", "contradictory", "comparative", "related"
]

DEFAULT_RELATION = "relates to"
CONTAINS_RELATION = "contains"
DETAILS_RELATION = "details"

# Every known label or definition type, normalized with spaces instead of underscores
RELATION_FAMILIES: dict[str, RelationFamily] = {
    # Causal
    "causes": "causal",
    "leads to": "causal",
    "enables": "causal",
    "prevents": "causal",
    "triggers": "causal",
    "influences": "causal",
    "creates": "causal",
    # Structural (part-whole, hierarchy)
    "contains": "structural",
    "details": "structural",
    "includes": "structural",
    "is part of": "structural",
    "part of": "structural",
    "instance of": "structural",
    "type of": "structural",
    "derives from": "structural",
    "extends": "structural",
    "uses": "structural",
    # Temporal
    "precedes": "temporal",
    "follows": "temporal",
    "co occurs": "temporal",
    # Logical (dependency, support, definition)
    "implies": "logical",
    "requires": "logical",
    "supports": "logical",
    "refines": "logical",
    "exemplifies": "logical",
    "example of": "logical",
    "defines": "logical",
    # Contradictory
    "contradicts": "contradictory",
    "contrasts with": "contradictory",
    "opposes": "contradictory",
    "critiques": "contradictory",
    # Comparative
    "similar to": "comparative",
    "generalizes": "comparative",
    "specializes": "comparative",
}

# Relationships whose direction carries no meaning
SYMMETRIC_RELATIONS: frozenset[str] = frozenset({
    DEFAULT_RELATION,
    "related to",
    "co occurs",
    "similar to",
    "contrasts with",
})


def normalize_relation(label: str) -> str:
    """Normalize a relationship label: lowercase, underscores to spaces."""
    return " ".join(label.replace("_", " ").lower().split())


def relation_family(label: str) -> RelationFamily:
    """Map a relationship label or type to its display family."""
    return RELATION_FAMILIES.get(normalize_relation(label), "related")


def is_symmetric(label: str) -> bool:
    """Check whether a relationship reads the same in both directions."""
    return normalize_relation(label) in SYMMETRIC_RELATIONS
