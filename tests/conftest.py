"""Pytest configuration and fixtures."""

import random

import pytest

from conceptmap.analysis.builder import ConceptGraphBuilder
from conceptmap.analysis.definition import definition_to_graph, example_definition
from conceptmap.config import Settings, get_test_settings
from conceptmap.models import (
    CORE_ID,
    ConceptEdge,
    ConceptGraph,
    ConceptLevel,
    ConceptNode,
    ContentNode,
)


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with small render and simulation budgets."""
    return get_test_settings()


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for reproducible layouts."""
    return random.Random(1234)


@pytest.fixture
def cats_corpus() -> list[ContentNode]:
    """Two flat notes with a causal chain cats -> allergies -> sneezing."""
    return [
        ContentNode(id="a", name="Cats cause allergies"),
        ContentNode(id="b", name="Allergies cause sneezing"),
    ]


@pytest.fixture
def allergy_corpus() -> list[ContentNode]:
    """
    Small note hierarchy under "root".

    root
    ├── a1 Cats cause allergies
    │   └── a3 Histamine (note mentions allergies and sneezing)
    │       └── a4 Sneezing
    └── a2 Pollen causes allergies in spring
    """
    return [
        ContentNode(id="root", name="Allergy notes"),
        ContentNode(id="a1", name="Cats cause allergies", parent_id="root"),
        ContentNode(id="a2", name="Pollen causes allergies in spring", parent_id="root"),
        ContentNode(
            id="a3",
            name="Histamine",
            note="Allergies release histamine which leads to sneezing",
            parent_id="a1",
        ),
        ContentNode(id="a4", name="Sneezing", note="Sneezing follows histamine release", parent_id="a3"),
    ]


@pytest.fixture
def allergy_graph(allergy_corpus: list[ContentNode], test_settings: Settings) -> ConceptGraph:
    """Graph built from allergy_corpus with a five-concept vocabulary."""
    result = ConceptGraphBuilder(config=test_settings).build(
        allergy_corpus,
        concepts=["cats", "allergies", "pollen", "histamine", "sneezing"],
        source_id="root",
    )
    assert result.success
    return result.graph


@pytest.fixture
def example_graph() -> ConceptGraph:
    """Graph of the built-in authored example."""
    result = definition_to_graph(example_definition())
    assert result.success
    return result.graph


@pytest.fixture
def three_detail_graph() -> ConceptGraph:
    """Hand-built graph: major "m1" owns three details, "m2" owns one."""
    core = ConceptNode(id=CORE_ID, label="Topic", level=ConceptLevel.CORE, occurrences=5)
    concepts = (
        ConceptNode(id="m1", label="First", level=ConceptLevel.MAJOR, occurrences=4, source_id="n1"),
        ConceptNode(id="m2", label="Second", level=ConceptLevel.MAJOR, occurrences=3),
        ConceptNode(id="d1", label="One", level=ConceptLevel.DETAIL, occurrences=2, parent_major_id="m1"),
        ConceptNode(id="d2", label="Two", level=ConceptLevel.DETAIL, occurrences=2, parent_major_id="m1"),
        ConceptNode(id="d3", label="Three", level=ConceptLevel.DETAIL, occurrences=1, parent_major_id="m1"),
        ConceptNode(id="d4", label="Four", level=ConceptLevel.DETAIL, occurrences=1, parent_major_id="m2"),
    )
    edges = [
        ConceptEdge(source=CORE_ID, target=c.id, type="contains" if c.level == ConceptLevel.MAJOR else "details",
                    weight=c.occurrences, implicit=True)
        for c in concepts
    ]
    edges += [
        ConceptEdge(source="m1", target="m2", type="leads to", weight=2),
        ConceptEdge(source="d1", target="d2", type="relates to", weight=1),
        ConceptEdge(source="d3", target="d4", type="contrasts with", weight=1),
        # Dangling reference, must never be drawn
        ConceptEdge(source="d1", target="ghost", type="supports", weight=1),
    ]
    return ConceptGraph(title="Topic map", core=core, concepts=concepts, edges=tuple(edges))
