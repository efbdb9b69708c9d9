"""Rasterization of concept maps through the Graphviz toolchain."""

import logging
import subprocess
from dataclasses import dataclass
from typing import Literal

import graphviz

from conceptmap.config import settings
from conceptmap.models import ConceptGraph
from conceptmap.render.dot import DotOptions, generate_concept_map_dot

logger = logging.getLogger(__name__)

ImageFormat = Literal["png", "jpeg"]

MIME_TYPES: dict[str, str] = {
    "png": "image/png",
    "jpeg": "image/jpeg",
    "svg": "image/svg+xml",
}


@dataclass
class RenderResult:
    """Outcome of a render; failures carry the underlying error message."""

    success: bool
    data: bytes | None = None
    format: str | None = None
    width: int | None = None
    height: int | None = None
    error: str | None = None

    @property
    def mime_type(self) -> str | None:
        return MIME_TYPES.get(self.format or "")


def _pipe(dot: str, fmt: str, engine: str) -> bytes:
    return graphviz.Source(dot, engine=engine).pipe(format=fmt)


def render_dot(dot: str, fmt: str, engine: str | None = None) -> RenderResult:
    """
    Run Graphviz over a DOT document.

    Graphviz being missing, rejecting the document, or failing on I/O is
    reported as RenderResult(success=False), never raised.
    """
    engine = engine or settings.dot_engine
    if fmt not in MIME_TYPES:
        return RenderResult(success=False, format=fmt, error=f"Unsupported image format: {fmt}")

    try:
        data = _pipe(dot, fmt, engine)
    except graphviz.ExecutableNotFound as e:
        logger.error(f"Graphviz is not installed: {e}")
        return RenderResult(success=False, format=fmt, error=f"Graphviz executable not found: {e}")
    except subprocess.CalledProcessError as e:
        stderr = e.stderr.decode("utf-8", "replace").strip() if isinstance(e.stderr, bytes) else e.stderr
        logger.warning(f"Graphviz failed with exit code {e.returncode}: {stderr}")
        return RenderResult(success=False, format=fmt, error=f"Graphviz failed: {stderr or e}")
    except (OSError, ValueError) as e:
        logger.warning(f"Graphviz render error: {e}")
        return RenderResult(success=False, format=fmt, error=str(e))

    if not data:
        return RenderResult(success=False, format=fmt, error="Graphviz produced no output")
    return RenderResult(success=True, data=data, format=fmt)


def render_svg(dot: str, engine: str | None = None) -> RenderResult:
    """Render a DOT document to SVG bytes."""
    return render_dot(dot, "svg", engine)


def render_concept_map_image(
    graph: ConceptGraph,
    format: str = "png",
    width: int | None = None,
    height: int | None = None,
    dpi: int | None = None,
    engine: str | None = None,
) -> RenderResult:
    """
    Render a concept graph to a fixed-resolution PNG or JPEG.

    The bitmap is width x height pixels: the DOT document carries a forced
    size of width/dpi by height/dpi inches at the given dpi.

    Args:
        graph: Concept graph to draw
        format: "png" or "jpeg"
        width: Pixel width (settings.render_width when omitted)
        height: Pixel height (settings.render_height when omitted)
        dpi: Resolution (settings.render_dpi when omitted)
        engine: Graphviz layout engine (settings.dot_engine when omitted)

    Returns:
        RenderResult with image bytes, or an error message
    """
    fmt = "jpeg" if format == "jpg" else format
    if fmt not in ("png", "jpeg"):
        return RenderResult(success=False, format=fmt, error=f"Unsupported image format: {format}")

    width = width or settings.render_width
    height = height or settings.render_height
    dpi = dpi or settings.render_dpi

    options = DotOptions(engine=engine, width=width, height=height, dpi=dpi)
    dot = generate_concept_map_dot(graph, options)
    logger.info(f"Rendering '{graph.title}' to {fmt} at {width}x{height} ({dpi} dpi)")

    result = render_dot(dot, fmt, options.engine)
    if result.success:
        result.width, result.height = width, height
    return result
