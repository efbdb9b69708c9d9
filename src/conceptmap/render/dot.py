"""Graphviz DOT generation for static concept maps."""

import logging
from dataclasses import dataclass

from conceptmap.config import settings
from conceptmap.models import (
    DEFAULT_RELATION,
    ConceptEdge,
    ConceptGraph,
    ConceptNode,
    RelationFamily,
    dedupe_edges,
    relation_family,
)

logger = logging.getLogger(__name__)

ELLIPSIS = "..."

CORE_COLOR = "#1a5276"
MAJOR_PALETTE = [
    "#2874a6", "#1e8449", "#b9770e", "#6c3483",
    "#1abc9c", "#c0392b", "#2c3e50", "#7d3c98",
]
DETAIL_PALETTE = [
    "#5dade2", "#58d68d", "#f4d03f", "#bb8fce",
    "#76d7c4", "#f1948a", "#85929e", "#aed6f1",
]
HIERARCHY_EDGE_COLOR = "#aab7b8"

# (color, style) per relationship family
EDGE_STYLES: dict[RelationFamily, tuple[str, str]] = {
    "causal": ("#2980b9", "bold"),
    "structural": ("#27ae60", "solid"),
    "temporal": ("#e67e22", "dotted"),
    "logical": ("#8e44ad", "solid"),
    "contradictory": ("#c0392b", "dashed"),
    "comparative": ("#16a085", "solid"),
    "related": ("#566573", "solid"),
}


@dataclass
class DotOptions:
    """Layout and styling knobs for generate_concept_map_dot."""

    engine: str | None = None
    label_max_length: int | None = None
    font_size: int | None = None
    font_name: str = "Helvetica"

    # Fixed output size in pixels; omitted from the document when None
    width: int | None = None
    height: int | None = None
    dpi: int | None = None

    def __post_init__(self) -> None:
        self.engine = self.engine or settings.dot_engine
        self.label_max_length = self.label_max_length or settings.label_max_length
        self.font_size = self.font_size or settings.render_font_size


def escape_for_dot(text: str | None, max_length: int | None = 40) -> str:
    """
    Escape text for a double-quoted DOT string and bound its length.

    Backslashes and quotes are escaped, newlines become the two-character
    "\\n" sequence and carriage returns are dropped. When the escaped text is
    longer than max_length (None means unbounded) it is cut at a sequence
    boundary and ends with an ellipsis, so the result never exceeds max_length.
    """
    tokens: list[str] = []
    for char in text or "":
        if char == "\\":
            tokens.append("\\\\")
        elif char == '"':
            tokens.append('\\"')
        elif char == "\n":
            tokens.append("\\n")
        elif char == "\r":
            continue
        else:
            tokens.append(char)

    escaped = "".join(tokens)
    if max_length is None or len(escaped) <= max_length:
        return escaped

    budget = max(0, max_length - len(ELLIPSIS))
    kept: list[str] = []
    used = 0
    for token in tokens:
        if used + len(token) > budget:
            break
        kept.append(token)
        used += len(token)
    return ("".join(kept).rstrip() + ELLIPSIS)[:max_length]


def edge_style(edge_type: str) -> tuple[str, str]:
    """Color and line style for a relationship type."""
    return EDGE_STYLES[relation_family(edge_type)]


def edge_penwidth(weight: float) -> float:
    return round(min(1 + weight * 0.3, 3.0), 2)


def _attrs(**attrs: object) -> str:
    parts = []
    for key, value in attrs.items():
        if value is None:
            continue
        if isinstance(value, bool):
            parts.append(f"{key}={str(value).lower()}")
        elif isinstance(value, str):
            parts.append(f'{key}="{value}"')
        else:
            parts.append(f"{key}={value}")
    return ", ".join(parts)


def _node_statement(node: ConceptNode, color: str, options: DotOptions, **extra: object) -> str:
    attrs = _attrs(
        label=escape_for_dot(node.label, options.label_max_length),
        fillcolor=color,
        tooltip=escape_for_dot(node.description or node.label, None),
        **extra,
    )
    return f'    "{escape_for_dot(node.id, None)}" [{attrs}];'


def _edge_statement(edge: ConceptEdge, options: DotOptions) -> str:
    source = escape_for_dot(edge.source, None)
    target = escape_for_dot(edge.target, None)

    if edge.implicit:
        attrs = _attrs(color=HIERARCHY_EDGE_COLOR, penwidth=1.0, arrowhead="none", len=1.5)
        return f'    "{source}" -> "{target}" [{attrs}];'

    color, style = edge_style(edge.type)
    label = None if edge.type == DEFAULT_RELATION else escape_for_dot(
        edge.type.replace("_", " "), options.label_max_length
    )
    tooltip = " | ".join(t for t in (edge.description, edge.evidence) if t) or None
    attrs = _attrs(
        label=label,
        color=color,
        fontcolor=color,
        style=style,
        penwidth=edge_penwidth(edge.weight),
        dir="both" if edge.bidirectional else None,
        tooltip=escape_for_dot(tooltip, None) if tooltip else None,
    )
    return f'    "{source}" -> "{target}" [{attrs}];'


def generate_concept_map_dot(graph: ConceptGraph, options: DotOptions | None = None) -> str:
    """
    Serialize a concept graph as a Graphviz DOT document.

    The core sits pinned at the origin; majors and details are coloured
    from fixed palettes, details inheriting the palette slot of their major.

    Args:
        graph: Concept graph to draw
        options: Layout and styling options (settings defaults when omitted)

    Returns:
        UTF-8 DOT text
    """
    options = options or DotOptions()
    font = options.font_name
    font_size = options.font_size

    lines = [
        "digraph ConceptMap {",
        '    charset="UTF-8";',
        f"    layout={options.engine};",
        "    overlap=false;",
        "    splines=true;",
        '    sep="+25,25";',
        '    bgcolor="white";',
        f'    fontname="{font}";',
        f"    fontsize={font_size + 10};",
        f'    label="{escape_for_dot(graph.title, 120)}";',
        "    labelloc=t;",
    ]
    if options.width and options.height and options.dpi:
        lines.append(f'    size="{options.width / options.dpi:g},{options.height / options.dpi:g}!";')
        lines.append("    ratio=fill;")
        # Graphviz pads outside the drawing size by default
        lines.append("    pad=0;")
        lines.append("    margin=0;")
        lines.append(f"    dpi={options.dpi};")

    lines.append(f'    node [fontname="{font}", style="filled", fontcolor="white", penwidth=0];')
    lines.append(f'    edge [fontname="{font}", fontsize={max(font_size - 6, 8)}];')
    lines.append("")

    lines.append(_node_statement(
        graph.core,
        CORE_COLOR,
        options,
        shape="doubleoctagon",
        fontsize=font_size + 6,
        width=2.6,
        height=1.4,
        pos="0,0!",
        pin=True,
    ))

    palette_slot: dict[str, int] = {}
    for i, node in enumerate(graph.majors):
        palette_slot[node.id] = i % len(MAJOR_PALETTE)
        lines.append(_node_statement(
            node,
            MAJOR_PALETTE[palette_slot[node.id]],
            options,
            shape="ellipse",
            fontsize=font_size + 2,
            width=round(1.6 + min(node.occurrences, 10) * 0.08, 2),
        ))

    for node in graph.details:
        slot = palette_slot.get(node.parent_major_id or "", 0)
        lines.append(_node_statement(
            node,
            DETAIL_PALETTE[slot],
            options,
            shape="box",
            style="filled,rounded",
            fontcolor="#1b2631",
            fontsize=font_size - 2,
        ))

    lines.append("")
    node_ids = graph.node_ids
    edges = [e for e in dedupe_edges(graph.edges) if e.source in node_ids and e.target in node_ids]
    dropped = len(graph.edges) - len(edges)
    if dropped:
        logger.debug(f"Skipped {dropped} duplicate or dangling edges in DOT output")
    lines.extend(_edge_statement(edge, options) for edge in edges)

    lines.append("}")
    return "\n".join(lines) + "\n"
