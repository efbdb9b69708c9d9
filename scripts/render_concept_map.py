#!/usr/bin/env python3
"""Render an authored concept-map definition.

Usage:
    python scripts/render_concept_map.py --example --output map.png
    python scripts/render_concept_map.py --input map.json --html map.html --dot map.dot
    cat map.json | python scripts/render_concept_map.py --input - --output map.jpg

The definition JSON has a title, a core_concept, concepts (id, label,
level) and relationships (from, to, type). At least one of --output,
--dot, --svg or --html is required.

Options:
    --format    png or jpeg (defaults to the --output suffix, else png)
    --width     Image width in pixels
    --height    Image height in pixels
    --dpi       Image resolution
    --engine    Graphviz layout engine
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

# Load .env file from project root
project_root = Path(__file__).parent.parent
load_dotenv(project_root / ".env")

# Add src to path
sys.path.insert(0, str(project_root / "src"))

from conceptmap.analysis.definition import ConceptMapDefinition, definition_to_graph, example_definition
from conceptmap.config import settings
from conceptmap.render import (
    DotOptions,
    generate_concept_map_dot,
    generate_interactive_html,
    render_concept_map_image,
    render_svg,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def load_definition(source: str | None, use_example: bool) -> ConceptMapDefinition:
    """Read a definition from a file, stdin ("-") or the built-in example."""
    if use_example:
        return example_definition()
    if source == "-":
        raw = sys.stdin.read()
    else:
        raw = Path(source).read_text(encoding="utf-8")
    return ConceptMapDefinition.model_validate(json.loads(raw))


def image_format(args: argparse.Namespace) -> str:
    if args.format:
        return args.format
    if args.output and Path(args.output).suffix.lower() in (".jpg", ".jpeg"):
        return "jpeg"
    return "png"


def main() -> int:
    parser = argparse.ArgumentParser(description="Render a concept-map definition")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--input", "-i", help="Definition JSON file, or - for stdin")
    source.add_argument("--example", action="store_true", help="Render the built-in example map")
    parser.add_argument("--output", "-o", help="Image output path")
    parser.add_argument("--format", "-f", choices=["png", "jpeg"], help="Image format")
    parser.add_argument("--dot", help="Write the DOT source to this path")
    parser.add_argument("--svg", help="Write an SVG rendering to this path")
    parser.add_argument("--html", help="Write the interactive HTML map to this path")
    parser.add_argument("--width", type=int, default=settings.render_width, help="Image width in pixels")
    parser.add_argument("--height", type=int, default=settings.render_height, help="Image height in pixels")
    parser.add_argument("--dpi", type=int, default=settings.render_dpi, help="Image resolution")
    parser.add_argument("--engine", default=settings.definition_dot_engine, help="Graphviz layout engine")
    args = parser.parse_args()

    if not any([args.output, args.dot, args.svg, args.html]):
        parser.error("nothing to write: pass --output, --dot, --svg or --html")

    try:
        definition = load_definition(args.input, args.example)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Could not read definition: {e}", file=sys.stderr)
        return 1
    except ValidationError as e:
        print(f"Invalid definition:\n{e}", file=sys.stderr)
        return 1

    result = definition_to_graph(definition)
    if not result.success:
        print(f"Could not build concept map: {result.reason}", file=sys.stderr)
        if result.tip:
            print(f"Tip: {result.tip}", file=sys.stderr)
        return 1

    graph = result.graph
    stats = graph.stats()
    print(f"Concept map: {graph.title}")
    print(f"  {stats['major_concepts']} major, {stats['detail_concepts']} detail, "
          f"{stats['relationships_rendered']} relationships")

    dot = generate_concept_map_dot(graph, DotOptions(engine=args.engine))
    failed = False

    if args.dot:
        Path(args.dot).write_text(dot, encoding="utf-8")
        print(f"  DOT:   {args.dot}")

    if args.svg:
        svg = render_svg(dot, engine=args.engine)
        if svg.success:
            Path(args.svg).write_bytes(svg.data)
            print(f"  SVG:   {args.svg}")
        else:
            print(f"SVG rendering failed: {svg.error}", file=sys.stderr)
            failed = True

    if args.output:
        image = render_concept_map_image(
            graph,
            format=image_format(args),
            width=args.width,
            height=args.height,
            dpi=args.dpi,
            engine=args.engine,
        )
        if image.success:
            Path(args.output).write_bytes(image.data)
            print(f"  Image: {args.output} ({image.width}x{image.height} {image.format})")
        else:
            print(f"Image rendering failed: {image.error}", file=sys.stderr)
            failed = True

    if args.html:
        Path(args.html).write_text(generate_interactive_html(graph), encoding="utf-8")
        print(f"  HTML:  {args.html}")

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
