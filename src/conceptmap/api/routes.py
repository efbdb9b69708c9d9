"""API routes for Conceptmap.

Provides:
- /v1/concept-maps to build a map from a corpus or an authored definition
- Render endpoints for the interactive HTML, the static image and the DOT source
- /v1/related-nodes for keyword relevance ranking
- /health
"""

import logging
import subprocess
from typing import Literal

import graphviz
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response
from pydantic import BaseModel, Field

from conceptmap.analysis import (
    ConceptGraphBuilder,
    ConceptMapDefinition,
    compute_graph_metrics,
    definition_to_graph,
    find_related_nodes,
)
from conceptmap.api.store import MapStore, StoredMap
from conceptmap.config import settings
from conceptmap.models import ContentNode, ScopeType
from conceptmap.render import (
    DotOptions,
    generate_concept_map_dot,
    generate_interactive_html,
    render_concept_map_image,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# Request / Response Models
# ============================================================================


class ContentNodeInput(BaseModel):
    """One corpus item as supplied by the caller."""

    id: str
    name: str = ""
    note: str | None = None
    parent_id: str | None = None

    def to_content_node(self) -> ContentNode:
        return ContentNode(id=self.id, name=self.name, note=self.note, parent_id=self.parent_id)


class ConceptMapRequest(BaseModel):
    """Build a map from a corpus, or from an authored definition."""

    corpus: list[ContentNodeInput] = Field(default_factory=list)
    concepts: list[str] | None = None
    source_id: str | None = None
    scope: ScopeType = "children"
    core_concept: str | None = None
    title: str | None = None

    # Takes precedence over corpus analysis when present
    definition: ConceptMapDefinition | None = None


class RelatedNodesRequest(BaseModel):
    """Rank corpus items by keyword relevance to a source item."""

    corpus: list[ContentNodeInput]
    source_id: str
    keywords: list[str] | None = None
    max_results: int = Field(default=10, ge=1, le=100)


class RelatedNodeInfo(BaseModel):
    """A ranked related item."""

    id: str
    name: str
    note: str | None = None
    path: str
    relevance_score: int
    matched_keywords: list[str]
    link: str


class RelatedNodesResponse(BaseModel):
    """Related-node ranking."""

    source_id: str
    keywords: list[str]
    related_nodes: list[RelatedNodeInfo]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    graphviz_available: bool
    maps_stored: int


# ============================================================================
# Helper Functions
# ============================================================================


def get_store(request: Request) -> MapStore:
    """Get the map store from app state."""
    return request.app.state.store


def get_map(map_id: str, store: MapStore = Depends(get_store)) -> StoredMap:
    """Resolve a stored map or answer 404."""
    try:
        return store.get(map_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Concept map not found: {map_id}")


def map_links(map_id: str) -> dict[str, str]:
    base = f"/v1/concept-maps/{map_id}"
    return {
        "html": f"{base}/html",
        "png": f"{base}/image?format=png",
        "jpeg": f"{base}/image?format=jpeg",
        "dot": f"{base}/dot",
    }


# ============================================================================
# Concept Map Endpoints
# ============================================================================


@router.post("/v1/concept-maps")
def create_concept_map(
    body: ConceptMapRequest,
    store: MapStore = Depends(get_store),
) -> dict:
    """
    Build a concept map and keep it for the render endpoints.

    Not enough signal (too few or too many concepts, concepts missing from
    the corpus) is a normal response with success=false, not an HTTP error.
    """
    if body.definition is not None:
        result = definition_to_graph(body.definition)
        engine = settings.definition_dot_engine
    else:
        corpus = [n.to_content_node() for n in body.corpus]
        result = ConceptGraphBuilder().build(
            corpus,
            concepts=body.concepts,
            source_id=body.source_id,
            scope=body.scope,
            core_concept=body.core_concept,
            title=body.title,
        )
        engine = None

    if not result.success:
        logger.info(f"Concept map not built: {result.reason}")
        return result.to_dict()

    metrics = compute_graph_metrics(result.graph)
    stored = store.put(result.graph, metrics=metrics, engine=engine)
    logger.info(f"Stored concept map {stored.id} ({len(result.graph.concepts)} concepts)")

    return {
        **result.to_dict(),
        "map_id": stored.id,
        "metrics": metrics.to_dict(),
        "links": map_links(stored.id),
    }


@router.get("/v1/concept-maps/{map_id}/html", response_class=HTMLResponse)
def concept_map_html(stored: StoredMap = Depends(get_map)) -> str:
    """Interactive, self-contained HTML view of a stored map."""
    return generate_interactive_html(stored.graph)


@router.get("/v1/concept-maps/{map_id}/image")
def concept_map_image(
    format: Literal["png", "jpeg"] = "png",
    stored: StoredMap = Depends(get_map),
) -> Response:
    """Static image of a stored map at the configured resolution."""
    result = render_concept_map_image(stored.graph, format=format, engine=stored.engine)
    if not result.success:
        raise HTTPException(status_code=502, detail=f"Image rendering failed: {result.error}")
    return Response(content=result.data, media_type=result.mime_type)


@router.get("/v1/concept-maps/{map_id}/dot", response_class=PlainTextResponse)
def concept_map_dot(stored: StoredMap = Depends(get_map)) -> str:
    """Graphviz DOT source of a stored map."""
    return generate_concept_map_dot(stored.graph, DotOptions(engine=stored.engine))


# ============================================================================
# Related Nodes Endpoint
# ============================================================================


@router.post("/v1/related-nodes", response_model=RelatedNodesResponse)
def related_nodes(body: RelatedNodesRequest) -> RelatedNodesResponse:
    """Rank corpus items by keyword relevance to the source item."""
    corpus = [n.to_content_node() for n in body.corpus]
    source = next((n for n in corpus if n.id == body.source_id), None)
    if source is None:
        raise HTTPException(status_code=404, detail=f"Node not found: {body.source_id}")

    result = find_related_nodes(source, corpus, keywords=body.keywords, max_results=body.max_results)
    return RelatedNodesResponse(
        source_id=source.id,
        keywords=result.keywords,
        related_nodes=[RelatedNodeInfo(**r.to_dict()) for r in result.related_nodes],
    )


# ============================================================================
# Admin Endpoints
# ============================================================================


@router.get("/health", response_model=HealthResponse)
def health_check(store: MapStore = Depends(get_store)) -> HealthResponse:
    """Health check endpoint."""
    try:
        graphviz.version()
        graphviz_available = True
    except (graphviz.ExecutableNotFound, subprocess.CalledProcessError, OSError):
        graphviz_available = False

    return HealthResponse(
        status="healthy" if graphviz_available else "degraded",
        graphviz_available=graphviz_available,
        maps_stored=len(store),
    )
