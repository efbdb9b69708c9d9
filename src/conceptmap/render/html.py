"""Self-contained interactive HTML documents for concept maps."""

import html
import json
import logging
import random
import re

from conceptmap.config import settings
from conceptmap.models import (
    DEFAULT_RELATION,
    ConceptGraph,
    ConceptLevel,
    ConceptNode,
    dedupe_edges,
    relation_family,
)
from conceptmap.render.dot import (
    CORE_COLOR,
    DETAIL_PALETTE,
    EDGE_STYLES,
    HIERARCHY_EDGE_COLOR,
    MAJOR_PALETTE,
    edge_penwidth,
)
from conceptmap.render.html_template import CONCEPT_MAP_HTML
from conceptmap.render.layout import (
    MAX_SPEED,
    MIN_DISTANCE,
    PARAM_BOUNDS,
    SPRING_STRENGTH,
    PhysicsParams,
    node_radius,
    settle,
)

logger = logging.getLogger(__name__)

# Characters that would let embedded JSON break out of its <script> element
_JSON_SCRIPT_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}
_JSON_SCRIPT_RE = re.compile("[<>&\u2028\u2029]")

_PLACEHOLDER_RE = re.compile(r"__(TITLE|GRAPH_DATA)__")

# Longest label drawn inside a node, per level
SHORT_LABEL_LENGTH = {
    ConceptLevel.CORE: 20,
    ConceptLevel.MAJOR: 18,
    ConceptLevel.DETAIL: 16,
}

DASH_PATTERNS = {"dotted": "2,5", "dashed": "8,5"}

FAMILY_LABELS = {
    "causal": "Causal",
    "structural": "Structural",
    "temporal": "Temporal",
    "logical": "Logical",
    "contradictory": "Contradictory",
    "comparative": "Comparative",
    "related": "Related",
}


def dumps_for_script(data: object) -> str:
    """JSON text that is safe to place inside an HTML <script> element."""
    text = json.dumps(data, ensure_ascii=False)
    return _JSON_SCRIPT_RE.sub(lambda m: _JSON_SCRIPT_ESCAPES[m.group(0)], text)


def short_label(node: ConceptNode) -> str:
    limit = SHORT_LABEL_LENGTH[node.level]
    if len(node.label) <= limit:
        return node.label
    return node.label[: limit - 1].rstrip() + "…"


def deep_link(source_id: str | None, host: str | None = None) -> str | None:
    """Link back to the originating note, or None for inferred concepts."""
    if not source_id:
        return None
    host = (host or settings.deep_link_host).rstrip("/")
    return f"{host}/#/{source_id}"


def build_document_data(
    graph: ConceptGraph,
    host: str | None = None,
    params: PhysicsParams | None = None,
    rng: random.Random | None = None,
) -> dict:
    """
    The JSON payload the browser script runs on.

    Positions are pre-settled here with the headless simulation so the first
    frame is already stable.
    """
    params = params or PhysicsParams()
    positions = settle(graph, params, rng)

    colors: dict[str, str] = {graph.core.id: CORE_COLOR}
    slots: dict[str, int] = {}
    for i, major in enumerate(graph.majors):
        slots[major.id] = i % len(MAJOR_PALETTE)
        colors[major.id] = MAJOR_PALETTE[slots[major.id]]
    for detail in graph.details:
        colors[detail.id] = DETAIL_PALETTE[slots.get(detail.parent_major_id or "", 0)]

    nodes = []
    for node in graph.nodes:
        x, y = positions[node.id]
        nodes.append({
            "id": node.id,
            "label": node.label,
            "short_label": short_label(node),
            "level": node.level.value,
            "parent": node.parent_major_id,
            "occurrences": node.occurrences,
            "description": node.description,
            "link": deep_link(node.source_id, host),
            "radius": node_radius(node),
            "color": colors[node.id],
            "x": round(x, 2),
            "y": round(y, 2),
        })

    node_ids = graph.node_ids
    edges = []
    for edge in dedupe_edges(graph.edges):
        if edge.source not in node_ids or edge.target not in node_ids:
            continue
        family = relation_family(edge.type)
        color, style = EDGE_STYLES[family]
        if edge.implicit:
            color, style = HIERARCHY_EDGE_COLOR, "solid"
        edges.append({
            "source": edge.source,
            "target": edge.target,
            "type": edge.type,
            "label": None if edge.implicit or edge.type == DEFAULT_RELATION else edge.type.replace("_", " "),
            "family": family,
            "weight": edge.weight,
            "width": 1.0 if edge.implicit else edge_penwidth(edge.weight),
            "color": color,
            "dash": DASH_PATTERNS.get(style),
            "implicit": edge.implicit,
            "bidirectional": edge.bidirectional,
            "description": edge.description,
            "evidence": edge.evidence,
        })

    used_families = {e["family"] for e in edges if not e["implicit"]}
    legend = {
        "nodes": [
            {"label": "Core concept", "color": CORE_COLOR},
            {"label": "Major concept", "color": MAJOR_PALETTE[0]},
            {"label": "Detail concept", "color": DETAIL_PALETTE[0]},
        ],
        "edges": [
            {"label": FAMILY_LABELS[family], "color": color, "style": style}
            for family, (color, style) in EDGE_STYLES.items()
            if family in used_families
        ],
    }

    return {
        "title": graph.title,
        "nodes": nodes,
        "edges": edges,
        "params": params.model_dump(),
        "bounds": PARAM_BOUNDS,
        "constants": {
            "spring_strength": SPRING_STRENGTH,
            "max_speed": MAX_SPEED,
            "min_distance": MIN_DISTANCE,
        },
        "legend": legend,
        "stats": graph.stats(),
    }


def generate_interactive_html(
    graph: ConceptGraph,
    host: str | None = None,
    params: PhysicsParams | None = None,
    rng: random.Random | None = None,
) -> str:
    """
    Render a concept graph as a standalone, interactive HTML document.

    The document has no external resources: styles, script and graph data
    are all inline.

    Args:
        graph: Concept graph to draw
        host: Deep-link host (settings.deep_link_host when omitted)
        params: Initial physics parameters
        rng: Random source for the initial jitter

    Returns:
        HTML document text
    """
    data = build_document_data(graph, host, params, rng)
    values = {
        "TITLE": html.escape(graph.title),
        "GRAPH_DATA": dumps_for_script(data),
    }
    document = _PLACEHOLDER_RE.sub(lambda m: values[m.group(1)], CONCEPT_MAP_HTML)
    logger.info(f"Generated interactive map '{graph.title}' with {len(data['nodes'])} nodes")
    return document
