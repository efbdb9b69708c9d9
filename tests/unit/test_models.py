"""Unit tests for data models."""

import pytest

from conceptmap.models import (
    CORE_ID,
    ConceptEdge,
    ConceptGraph,
    ConceptLevel,
    ConceptNode,
    ContentNode,
    dedupe_edges,
    is_symmetric,
    relation_family,
)
from conceptmap.models.relation import normalize_relation


class TestContentNode:
    """Tests for ContentNode."""

    def test_text_joins_name_and_note(self) -> None:
        """Test the matcher text."""
        node = ContentNode(id="a", name="Title", note="Body")
        assert node.text == "Title Body"
        assert ContentNode(id="b").text == " "

    def test_from_dict(self) -> None:
        """Test creation from a loose corpus record."""
        node = ContentNode.from_dict({"id": 5, "name": None, "parent_id": "p"})
        assert node.id == "5"
        assert node.name == ""
        assert node.note is None
        assert node.parent_id == "p"

    def test_to_dict(self) -> None:
        """Test conversion to dictionary."""
        node = ContentNode(id="a", name="Title")
        assert node.to_dict() == {"id": "a", "name": "Title", "note": None, "parent_id": None}


class TestRelations:
    """Tests for the relationship vocabulary."""

    def test_normalize(self) -> None:
        """Test case and underscores are normalized."""
        assert normalize_relation("  Leads_To ") == "leads to"

    @pytest.mark.parametrize("label,family", [
        ("causes", "causal"),
        ("derives_from", "structural"),
        ("precedes", "temporal"),
        ("requires", "logical"),
        ("contradicts", "contradictory"),
        ("similar_to", "comparative"),
        ("unheard of", "related"),
    ])
    def test_family(self, label: str, family: str) -> None:
        """Test labels map to display families."""
        assert relation_family(label) == family

    def test_symmetric(self) -> None:
        """Test which relationships have no direction."""
        assert is_symmetric("relates to")
        assert is_symmetric("contrasts_with")
        assert not is_symmetric("causes")


class TestConceptEdge:
    """Tests for ConceptEdge keys and deduplication."""

    def test_key_ignores_direction(self) -> None:
        """Test both orientations of a pair share one key."""
        forward = ConceptEdge(source="a", target="b", type="causes")
        backward = ConceptEdge(source="b", target="a", type="causes")
        assert forward.key == backward.key == ("a", "b", False)

    def test_key_ignores_type(self) -> None:
        """Test symmetric and directed types between a pair share one key."""
        similar = ConceptEdge(source="b", target="a", type="similar to")
        causal = ConceptEdge(source="a", target="b", type="causes")
        assert similar.key == causal.key

    def test_implicit_keyed_apart(self) -> None:
        """Test the hierarchy edge does not collide with a semantic edge."""
        hierarchy = ConceptEdge(source="core", target="a", type="contains", implicit=True)
        semantic = ConceptEdge(source="core", target="a", type="causes")
        assert hierarchy.key != semantic.key

    def test_symmetric_flag(self) -> None:
        """Test direction-free relationships are flagged symmetric."""
        assert ConceptEdge(source="a", target="b", type="similar to").symmetric
        assert ConceptEdge(source="a", target="b", type="causes", bidirectional=True).symmetric
        assert not ConceptEdge(source="a", target="b", type="causes").symmetric

    @pytest.mark.parametrize("edges,expected", [
        (
            [
                ConceptEdge(source="a", target="b", type="similar to"),
                ConceptEdge(source="a", target="b", type="causes"),
            ],
            [("a", "b", "similar to")],
        ),
        (
            [
                ConceptEdge(source="a", target="b", type="similar to"),
                ConceptEdge(source="b", target="a", type="causes"),
            ],
            [("a", "b", "similar to")],
        ),
        (
            [
                ConceptEdge(source="b", target="a", type="causes"),
                ConceptEdge(source="a", target="b", type="similar to"),
            ],
            [("b", "a", "causes")],
        ),
        (
            [
                ConceptEdge(source="a", target="c", type="causes"),
                ConceptEdge(source="c", target="a", type="causes"),
                ConceptEdge(source="a", target="b", type="relates to"),
            ],
            [("a", "c", "causes"), ("a", "b", "relates to")],
        ),
    ])
    def test_dedupe_one_edge_per_pair(self, edges: list[ConceptEdge], expected: list[tuple]) -> None:
        """Test one edge survives per unordered pair, the first observed."""
        assert [(e.source, e.target, e.type) for e in dedupe_edges(edges)] == expected

    def test_to_dict(self) -> None:
        """Test the payload uses from/to keys."""
        data = ConceptEdge(source="a", target="b", type="causes", contexts=("x",)).to_dict()
        assert data["from"] == "a"
        assert data["to"] == "b"
        assert data["contexts"] == ["x"]


class TestConceptGraph:
    """Tests for ConceptGraph helpers."""

    def test_lookup(self, three_detail_graph: ConceptGraph) -> None:
        """Test node lookup by id."""
        assert three_detail_graph.get(CORE_ID).level == ConceptLevel.CORE
        assert three_detail_graph.get("d1").parent_major_id == "m1"
        assert three_detail_graph.get("ghost") is None
        assert "ghost" not in three_detail_graph.node_ids

    def test_tiers(self, three_detail_graph: ConceptGraph) -> None:
        """Test majors, details and ownership."""
        assert [m.id for m in three_detail_graph.majors] == ["m1", "m2"]
        assert [d.id for d in three_detail_graph.details_of("m1")] == ["d1", "d2", "d3"]
        assert three_detail_graph.nodes[0] is three_detail_graph.core

    def test_relationships_exclude_implicit(self, three_detail_graph: ConceptGraph) -> None:
        """Test relationships hide the hierarchy edges."""
        assert all(not e.implicit for e in three_detail_graph.relationships)
        assert len(three_detail_graph.relationships) == 4

    def test_stats(self, three_detail_graph: ConceptGraph) -> None:
        """Test summary counts."""
        assert three_detail_graph.stats() == {
            "concepts_rendered": 6,
            "major_concepts": 2,
            "detail_concepts": 4,
            "relationships_rendered": 4,
        }

    def test_frozen(self, three_detail_graph: ConceptGraph) -> None:
        """Test the graph cannot be mutated."""
        with pytest.raises(AttributeError):
            three_detail_graph.title = "changed"

    def test_to_dict(self) -> None:
        """Test conversion to dictionary."""
        core = ConceptNode(id=CORE_ID, label="Topic", level=ConceptLevel.CORE)
        graph = ConceptGraph(title="T", core=core, concepts=(), edges=())
        data = graph.to_dict()
        assert data["core"]["level"] == "core"
        assert data["concepts"] == []
        assert data["truncated"] is False
