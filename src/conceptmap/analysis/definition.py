"""Authored concept-map definitions.

A definition is the JSON an author (or an LLM) writes by hand: a core
concept, concepts with explicit levels, and typed relationships with
explanations. It skips corpus analysis and goes straight to a ConceptGraph.
"""

import logging
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from conceptmap.analysis.builder import BuildFailure, BuildResult, validate_vocabulary
from conceptmap.models import (
    CONTAINS_RELATION,
    CORE_ID,
    DETAILS_RELATION,
    ConceptEdge,
    ConceptGraph,
    ConceptLevel,
    ConceptNode,
    dedupe_edges,
)

logger = logging.getLogger(__name__)

DEFAULT_IMPORTANCE = 5


class CoreConceptInput(BaseModel):
    """Central concept of an authored map."""

    label: str
    description: str | None = None


class ConceptInput(BaseModel):
    """One authored concept."""

    id: str
    label: str
    level: Literal["major", "detail"]
    importance: float | None = None
    description: str | None = None
    parent_major_id: str | None = None


class RelationshipInput(BaseModel):
    """One authored relationship."""

    model_config = ConfigDict(populate_by_name=True)

    source: str = Field(alias="from")
    target: str = Field(alias="to")
    type: str = "related_to"
    description: str = ""
    evidence: str | None = None
    strength: float = Field(default=0.5, ge=0.0)
    bidirectional: bool = False


class ConceptMapDefinition(BaseModel):
    """Complete authored concept map."""

    title: str
    core_concept: CoreConceptInput
    concepts: list[ConceptInput]
    relationships: list[RelationshipInput] = Field(default_factory=list)


def definition_to_graph(definition: ConceptMapDefinition) -> BuildResult | BuildFailure:
    """
    Convert an authored definition into a ConceptGraph.

    Relationships naming unknown concepts are dropped. A detail without an
    explicit parent is owned by the major it has the strongest relationship
    with, falling back to the first major.
    """
    failure = validate_vocabulary([c.id for c in definition.concepts])
    if failure:
        return failure

    ids = {c.id for c in definition.concepts}
    if len(ids) != len(definition.concepts):
        return BuildFailure(reason="Concept ids must be unique", tip="Give every concept a distinct id.")
    if CORE_ID in ids:
        return BuildFailure(reason=f'"{CORE_ID}" is reserved for the core concept', tip="Rename that concept id.")

    known = ids | {CORE_ID}
    relationships = [r for r in definition.relationships if r.source in known and r.target in known]
    dropped = len(definition.relationships) - len(relationships)
    if dropped:
        logger.warning(f"Dropped {dropped} relationships referencing unknown concepts")

    majors = [c for c in definition.concepts if c.level == "major"]
    major_ids = {c.id for c in majors}

    concepts: list[ConceptNode] = []
    for concept in definition.concepts:
        level = ConceptLevel(concept.level)
        parent = None
        if level == ConceptLevel.DETAIL:
            if not majors:
                level = ConceptLevel.MAJOR
            else:
                parent = concept.parent_major_id if concept.parent_major_id in major_ids else None
                parent = parent or _strongest_major(concept.id, relationships, major_ids) or majors[0].id

        concepts.append(
            ConceptNode(
                id=concept.id,
                label=concept.label,
                level=level,
                occurrences=concept.importance if concept.importance is not None else DEFAULT_IMPORTANCE,
                parent_major_id=parent,
                description=concept.description,
            )
        )

    edges = [
        ConceptEdge(
            source=CORE_ID,
            target=c.id,
            type=CONTAINS_RELATION if c.level == ConceptLevel.MAJOR else DETAILS_RELATION,
            weight=c.occurrences,
            implicit=True,
        )
        for c in concepts
    ]
    edges.extend(
        dedupe_edges([
            ConceptEdge(
                source=r.source,
                target=r.target,
                type=r.type,
                weight=r.strength,
                description=r.description or None,
                evidence=r.evidence,
                bidirectional=r.bidirectional,
            )
            for r in relationships
        ])
    )

    core = ConceptNode(
        id=CORE_ID,
        label=definition.core_concept.label,
        level=ConceptLevel.CORE,
        occurrences=10,
        description=definition.core_concept.description,
    )
    return BuildResult(
        graph=ConceptGraph(
            title=definition.title,
            core=core,
            concepts=tuple(concepts),
            edges=tuple(edges),
        )
    )


def _strongest_major(
    concept_id: str, relationships: list[RelationshipInput], major_ids: set[str]
) -> str | None:
    best: str | None = None
    best_strength = -1.0
    for rel in relationships:
        if rel.source == concept_id and rel.target in major_ids:
            other = rel.target
        elif rel.target == concept_id and rel.source in major_ids:
            other = rel.source
        else:
            continue
        if rel.strength > best_strength:
            best, best_strength = other, rel.strength
    return best


def example_definition() -> ConceptMapDefinition:
    """Sample authored map, handy for trying out the renderers."""
    return ConceptMapDefinition.model_validate({
        "title": "Heidegger's Fundamental Ontology",
        "core_concept": {
            "label": "Being (Sein)",
            "description": "The central question of Heidegger's philosophy",
        },
        "concepts": [
            {"id": "dasein", "label": "Dasein", "level": "major", "importance": 9},
            {"id": "being-in-world", "label": "Being-in-the-World", "level": "major", "importance": 8},
            {"id": "temporality", "label": "Temporality", "level": "major", "importance": 8},
            {"id": "authenticity", "label": "Authenticity", "level": "major", "importance": 7},
            {"id": "das-man", "label": "Das Man (The They)", "level": "detail", "importance": 6},
            {"id": "thrownness", "label": "Thrownness", "level": "detail", "importance": 5},
            {"id": "care", "label": "Care (Sorge)", "level": "detail", "importance": 6},
            {"id": "being-toward-death", "label": "Being-toward-Death", "level": "detail", "importance": 5},
        ],
        "relationships": [
            {"from": "dasein", "to": "being-in-world", "type": "derives_from",
             "description": "Dasein's essential structure is always already being-in-the-world",
             "strength": 0.85},
            {"from": "dasein", "to": "temporality", "type": "derives_from",
             "description": "Dasein's being is fundamentally temporal", "strength": 0.85},
            {"from": "temporality", "to": "care", "type": "enables",
             "description": "Temporality is the ontological meaning of care", "strength": 0.8},
            {"from": "dasein", "to": "authenticity", "type": "enables",
             "description": "Dasein can choose to exist authentically", "strength": 0.75},
            {"from": "authenticity", "to": "das-man", "type": "contrasts_with",
             "description": "Authenticity requires breaking free from the they-self",
             "strength": 0.7, "bidirectional": True},
            {"from": "being-toward-death", "to": "authenticity", "type": "enables",
             "description": "Confronting finitude enables authentic self-ownership", "strength": 0.8},
            {"from": "thrownness", "to": "being-in-world", "type": "part_of",
             "description": "Thrownness is an existentiale of being-in-the-world", "strength": 0.7},
        ],
    })
