"""Unit tests for the interactive HTML renderer."""

import json
import random
import re
from dataclasses import replace

import pytest

from conceptmap.models import ConceptGraph, ConceptLevel, ConceptNode
from conceptmap.render.html import (
    build_document_data,
    deep_link,
    dumps_for_script,
    generate_interactive_html,
    short_label,
)
from conceptmap.render.layout import PhysicsParams

DATA_RE = re.compile(r'<script type="application/json" id="graph-data">(.*?)</script>', re.S)


@pytest.fixture
def params() -> PhysicsParams:
    """Short settling budget."""
    return PhysicsParams(iterations=30)


def embedded_data(document: str) -> dict:
    match = DATA_RE.search(document)
    assert match, "graph data element missing"
    return json.loads(match.group(1))


class TestHelpers:
    """Tests for escaping and label helpers."""

    def test_dumps_for_script(self) -> None:
        """Test characters that could end a script element are escaped."""
        text = dumps_for_script({"x": "</script><!-- & \u2028"})
        assert "<" not in text and ">" not in text and "&" not in text
        assert "\u2028" not in text
        assert json.loads(text) == {"x": "</script><!-- & \u2028"}

    def test_short_label(self) -> None:
        """Test long labels are shortened per level."""
        node = ConceptNode(id="d", label="A very long detail label", level=ConceptLevel.DETAIL)
        assert short_label(node) == "A very long det…"
        assert short_label(replace(node, label="Short")) == "Short"

    def test_deep_link(self) -> None:
        """Test deep links point at the originating note."""
        assert deep_link("abc", "https://notes.example/") == "https://notes.example/#/abc"
        assert deep_link(None, "https://notes.example") is None


class TestBuildDocumentData:
    """Tests for build_document_data."""

    def test_nodes_and_edges(self, three_detail_graph: ConceptGraph, params: PhysicsParams) -> None:
        """Test every node is present and dangling edges are dropped."""
        data = build_document_data(three_detail_graph, params=params, rng=random.Random(3))
        assert [n["id"] for n in data["nodes"]] == ["core", "m1", "m2", "d1", "d2", "d3", "d4"]
        assert all(e["target"] != "ghost" for e in data["edges"])
        assert len(data["edges"]) == 9

    def test_links(self, three_detail_graph: ConceptGraph, params: PhysicsParams) -> None:
        """Test only concepts with a source note get a link."""
        data = build_document_data(three_detail_graph, host="https://notes.example", params=params)
        links = {n["id"]: n["link"] for n in data["nodes"]}
        assert links["m1"] == "https://notes.example/#/n1"
        assert links["m2"] is None

    def test_edge_presentation(self, three_detail_graph: ConceptGraph, params: PhysicsParams) -> None:
        """Test edge labels, dashes and hierarchy styling."""
        data = build_document_data(three_detail_graph, params=params)
        edges = {(e["source"], e["target"]): e for e in data["edges"]}
        assert edges[("m1", "m2")]["label"] == "leads to"
        assert edges[("d1", "d2")]["label"] is None
        assert edges[("d3", "d4")]["dash"] == "8,5"
        assert edges[("core", "m1")]["implicit"]
        assert edges[("core", "m1")]["color"] == "#aab7b8"

    def test_positions_within_canvas(self, three_detail_graph: ConceptGraph, params: PhysicsParams) -> None:
        """Test pre-settled positions lie on the canvas."""
        data = build_document_data(three_detail_graph, params=params)
        for node in data["nodes"]:
            assert params.padding <= node["x"] <= params.width - params.padding
            assert params.padding <= node["y"] <= params.height - params.padding

    def test_params_and_legend(self, three_detail_graph: ConceptGraph, params: PhysicsParams) -> None:
        """Test slider parameters and the legend travel with the data."""
        data = build_document_data(three_detail_graph, params=params)
        assert data["params"]["iterations"] == 30
        assert set(data["bounds"]) == set(params.tunables())
        legend_edges = {e["label"] for e in data["legend"]["edges"]}
        assert legend_edges == {"Causal", "Contradictory", "Related"}
        assert data["stats"]["concepts_rendered"] == 6


class TestGenerateInteractiveHtml:
    """Tests for generate_interactive_html."""

    def test_standalone_document(self, example_graph: ConceptGraph, params: PhysicsParams) -> None:
        """Test the document is complete and loads nothing external."""
        document = generate_interactive_html(example_graph, params=params)
        assert document.startswith("<!DOCTYPE html>")
        assert "<title>Heidegger&#x27;s Fundamental Ontology</title>" in document
        assert "__GRAPH_DATA__" not in document
        assert "__TITLE__" not in document
        assert not re.search(r"""(?:src|href)\s*=\s*["']?https?:""", document)
        assert embedded_data(document)["title"] == "Heidegger's Fundamental Ontology"

    def test_hostile_title(self, three_detail_graph: ConceptGraph, params: PhysicsParams) -> None:
        """Test markup in titles and labels cannot escape its context."""
        graph = replace(three_detail_graph, title='</script><script>alert("x")</script>')
        document = generate_interactive_html(graph, params=params)
        assert "<script>alert" not in document
        assert "&lt;/script&gt;" in document
        assert embedded_data(document)["title"] == graph.title

    def test_placeholder_text_in_data(self, three_detail_graph: ConceptGraph, params: PhysicsParams) -> None:
        """Test placeholder-looking text in a title is inserted literally."""
        graph = replace(three_detail_graph, title="About __GRAPH_DATA__")
        document = generate_interactive_html(graph, params=params)
        assert embedded_data(document)["title"] == "About __GRAPH_DATA__"
