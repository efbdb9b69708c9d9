"""Render module: Graphviz output and the interactive HTML map."""

from conceptmap.render.dot import DotOptions, escape_for_dot, generate_concept_map_dot
from conceptmap.render.html import generate_interactive_html
from conceptmap.render.image import RenderResult, render_concept_map_image, render_svg
from conceptmap.render.layout import (
    ForceSimulation,
    PhysicsParams,
    PresentationState,
    seed_positions,
)

__all__ = [
    "DotOptions",
    "escape_for_dot",
    "generate_concept_map_dot",
    "RenderResult",
    "render_concept_map_image",
    "render_svg",
    "generate_interactive_html",
    "ForceSimulation",
    "PhysicsParams",
    "PresentationState",
    "seed_positions",
]
