"""Relevance scoring of corpus nodes against a keyword set."""

import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache

from conceptmap.analysis.keywords import extract_keywords
from conceptmap.analysis.scope import build_node_path
from conceptmap.config import settings
from conceptmap.models import ContentNode

logger = logging.getLogger(__name__)

# Title hits score this much on top of the point every hit earns
TITLE_BONUS = 2


@lru_cache(maxsize=1024)
def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(keyword)}\b", re.IGNORECASE)


def calculate_relevance(node: ContentNode, keywords: list[str], source_node_id: str | None) -> int:
    """
    Score a node against keywords; title matches are worth 3x body matches.

    Args:
        node: Candidate corpus node
        keywords: Keywords to look for (whole-word, case-insensitive)
        source_node_id: Node the keywords came from; it always scores 0

    Returns:
        Non-negative integer score
    """
    if node.id == source_node_id:
        return 0

    text = node.text
    title = node.name or ""
    score = 0

    for keyword in keywords:
        pattern = _keyword_pattern(keyword)
        hits = len(pattern.findall(text))
        if not hits:
            continue
        score += hits
        score += len(pattern.findall(title)) * TITLE_BONUS

    return score


def find_matched_keywords(node: ContentNode, keywords: list[str]) -> list[str]:
    """Keywords with at least one whole-word match anywhere in the node."""
    text = node.text
    return [kw for kw in keywords if _keyword_pattern(kw).search(text)]


def generate_link(node_id: str, name: str, host: str | None = None) -> str:
    """Markdown deep link back to a note."""
    host = (host or settings.deep_link_host).rstrip("/")
    clean_name = " ".join((name or "Untitled").replace("[", "(").replace("]", ")").split())
    return f"[{clean_name}]({host}/#/{node_id})"


@dataclass
class RelatedNode:
    """A corpus node ranked by relevance to a source node."""

    id: str
    name: str
    path: str
    relevance_score: int
    matched_keywords: list[str]
    link: str
    note: str | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "note": self.note,
            "path": self.path,
            "relevance_score": self.relevance_score,
            "matched_keywords": self.matched_keywords,
            "link": self.link,
        }


@dataclass
class RelatedNodesResult:
    """Keywords used for the search plus the ranked nodes."""

    keywords: list[str]
    related_nodes: list[RelatedNode] = field(default_factory=list)


def find_related_nodes(
    source: ContentNode,
    nodes: list[ContentNode],
    keywords: list[str] | None = None,
    max_results: int | None = None,
    host: str | None = None,
) -> RelatedNodesResult:
    """
    Rank corpus nodes by keyword relevance to a source node.

    Args:
        source: Node to find relatives for
        nodes: Whole corpus
        keywords: Custom keywords; extracted from the source when omitted
        max_results: Result cap (defaults to settings.related_max_results)
        host: Deep-link host override

    Returns:
        RelatedNodesResult, empty when no keywords are available
    """
    max_results = settings.related_max_results if max_results is None else max_results

    if keywords:
        keywords = [k.strip().lower() for k in keywords if k.strip()]
    else:
        keywords = extract_keywords(source.text)

    if not keywords:
        return RelatedNodesResult(keywords=[])

    scored: list[tuple[int, ContentNode]] = []
    for node in nodes:
        score = calculate_relevance(node, keywords, source.id)
        if score > 0:
            scored.append((score, node))

    # Stable sort keeps corpus order among equal scores
    scored.sort(key=lambda item: item[0], reverse=True)
    top = scored[:max_results]
    logger.debug(f"Related nodes for {source.id}: {len(scored)} scored, {len(top)} kept")

    node_map = {n.id: n for n in nodes}
    related = [
        RelatedNode(
            id=node.id,
            name=node.name or "",
            note=node.note,
            path=build_node_path(node, node_map),
            relevance_score=score,
            matched_keywords=find_matched_keywords(node, keywords),
            link=generate_link(node.id, node.name, host),
        )
        for score, node in top
    ]
    return RelatedNodesResult(keywords=keywords, related_nodes=related)
