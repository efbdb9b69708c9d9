"""Concept graph construction from a concept vocabulary and a scoped corpus.

Pipeline:
1. Validate (or derive) the vocabulary
2. Scope the corpus relative to the source node
3. Collect occurrences and pairwise co-occurrences in one bounded pass
4. Classify concepts as major/detail by mean hit depth (median split)
5. Label co-occurrence edges and attach every concept to the core
"""

import logging
import re
from collections import defaultdict
from dataclasses import dataclass, field, replace

from conceptmap.analysis.keywords import extract_keywords
from conceptmap.analysis.relations import PatternRelationshipClassifier, RelationshipClassifier
from conceptmap.analysis.scope import filter_nodes_by_scope, node_depth
from conceptmap.config import Settings, settings as default_settings
from conceptmap.models import (
    CONTAINS_RELATION,
    CORE_ID,
    DEFAULT_RELATION,
    DETAILS_RELATION,
    ConceptEdge,
    ConceptGraph,
    ConceptLevel,
    ConceptNode,
    ContentNode,
    ScopeType,
)

logger = logging.getLogger(__name__)

MAX_CONTEXTS_PER_EDGE = 3
CONTEXT_EXCERPT_LENGTH = 100


@dataclass
class BuildFailure:
    """Recoverable "not enough signal" outcome; never raised."""

    reason: str
    tip: str = ""
    provided: int | None = None
    maximum: int | None = None
    concepts_searched: list[str] = field(default_factory=list)
    concepts_found: list[dict] = field(default_factory=list)
    scope_used: str | None = None
    nodes_analyzed: int = 0

    success = False

    def to_dict(self) -> dict:
        data: dict = {"success": False, "message": self.reason}
        if self.tip:
            data["tip"] = self.tip
        if self.provided is not None:
            data["provided"] = self.provided
        if self.maximum is not None:
            data["maximum"] = self.maximum
        if self.concepts_searched:
            data["concepts_searched"] = self.concepts_searched
            data["concepts_found"] = self.concepts_found
            data["scope_used"] = self.scope_used
            data["nodes_analyzed"] = self.nodes_analyzed
        return data


@dataclass
class BuildResult:
    """Successful build wrapping the immutable graph."""

    graph: ConceptGraph

    success = True

    def to_dict(self) -> dict:
        graph = self.graph
        by_id = {c.id: c for c in graph.concepts}
        return {
            "success": True,
            "title": graph.title,
            "scope": graph.scope,
            "truncated": graph.truncated,
            "nodes_analyzed": graph.nodes_analyzed,
            "structure": {
                "core_concept": graph.core.label,
                "major_concepts": [
                    {"concept": c.label, "found_in": c.occurrences} for c in graph.majors
                ],
                "detail_concepts": [
                    {
                        "concept": c.label,
                        "found_in": c.occurrences,
                        "parent": by_id[c.parent_major_id].label if c.parent_major_id in by_id else None,
                    }
                    for c in graph.details
                ],
            },
            "relationships": [
                {
                    "between": [e.source, e.target],
                    "relationship": e.type,
                    "strength": e.weight,
                }
                for e in graph.relationships
            ],
            "stats": graph.stats(),
        }


@dataclass
class _Term:
    """A vocabulary entry: display text, matching text and graph id."""

    original: str
    lower: str
    id: str


@dataclass
class _PairStats:
    weight: int = 0
    labels: list[str] = field(default_factory=list)
    contexts: list[str] = field(default_factory=list)


def validate_vocabulary(
    concepts: list[str] | None,
    min_concepts: int | None = None,
    max_concepts: int | None = None,
) -> BuildFailure | None:
    """Check vocabulary size; returns a failure or None when valid."""
    min_concepts = default_settings.min_concepts if min_concepts is None else min_concepts
    max_concepts = default_settings.max_concepts if max_concepts is None else max_concepts

    if not concepts or len(concepts) < min_concepts:
        return BuildFailure(
            reason=(
                f"Please provide at least {min_concepts} concepts. Concepts become the nodes "
                "in the map, connected based on relationships found in your content."
            ),
            tip="Example: concepts: ['phenomenology', 'pragmatism', 'experience', 'being']",
            provided=len(concepts or []),
        )

    if len(concepts) > max_concepts:
        return BuildFailure(
            reason=(
                f"Too many concepts: {len(concepts)} provided, maximum is {max_concepts}. "
                "Large graphs become unreadable and may fail to render."
            ),
            tip="Split into multiple focused concept maps, or select the most important concepts.",
            provided=len(concepts),
            maximum=max_concepts,
        )

    return None


def make_concept_id(label: str, taken: set[str]) -> str:
    """Stable, unique identifier derived from a concept label."""
    base = re.sub(r"[^\w]+", "-", label.lower()).strip("-") or "concept"
    candidate = base
    suffix = 2
    while candidate in taken or candidate == CORE_ID:
        candidate = f"{base}-{suffix}"
        suffix += 1
    taken.add(candidate)
    return candidate


def _excerpt(text: str) -> str:
    text = text.strip()
    if len(text) > CONTEXT_EXCERPT_LENGTH:
        return text[:CONTEXT_EXCERPT_LENGTH] + "..."
    return text


class ConceptGraphBuilder:
    """Builds a classified, connected concept graph from a corpus."""

    def __init__(
        self,
        classifier: RelationshipClassifier | None = None,
        config: Settings | None = None,
    ) -> None:
        self.classifier = classifier or PatternRelationshipClassifier()
        self.config = config or default_settings

    def build(
        self,
        corpus: list[ContentNode],
        concepts: list[str] | None = None,
        source_id: str | None = None,
        scope: ScopeType = "children",
        core_concept: str | None = None,
        title: str | None = None,
    ) -> BuildResult | BuildFailure:
        """
        Build a concept graph.

        Args:
            corpus: Materialized corpus snapshot
            concepts: Explicit vocabulary; derived from the source node when None
            source_id: Node the map is about (scope anchor and depth root)
            scope: Which part of the corpus to analyze relative to the source
            core_concept: Core label (defaults to the source node's name)
            title: Map title (defaults to "Concept Map: <core>")

        Returns:
            BuildResult, or BuildFailure when there is not enough signal
        """
        node_map = {n.id: n for n in corpus}
        source = node_map.get(source_id) if source_id else None
        if source_id and source is None:
            return BuildFailure(reason=f'Node with ID "{source_id}" not found')

        if concepts is None:
            if source is None:
                return BuildFailure(
                    reason="No concepts supplied and no source node to derive them from",
                    tip="Pass concepts explicitly or name a source node.",
                )
            concepts = extract_keywords(source.text)[: self.config.max_concepts]
            logger.info(f"Derived {len(concepts)} concepts from node {source.id}")

        terms = self._normalize_vocabulary(concepts)
        failure = validate_vocabulary(
            [t.original for t in terms], self.config.min_concepts, self.config.max_concepts
        )
        if failure:
            return failure

        if source is not None:
            scoped = filter_nodes_by_scope(source, corpus, scope)
            nodes_to_analyze = scoped or [n for n in corpus if n.id != source.id]
        else:
            nodes_to_analyze = list(corpus)

        occurrences, pairs, scanned, truncated = self._scan(
            nodes_to_analyze, terms, node_map, source.id if source else None
        )

        found = [t for t in terms if occurrences[t.id]]
        if len(found) < self.config.min_concepts:
            return BuildFailure(
                reason=(
                    f"Less than {self.config.min_concepts} concepts were found in the content. "
                    f"Need at least {self.config.min_concepts} to create a meaningful map."
                ),
                tip="Try different concepts or use scope: 'all' to search more broadly.",
                concepts_searched=[t.original for t in terms],
                concepts_found=[
                    {
                        "concept": t.original,
                        "occurrences": len(occurrences[t.id]),
                        "avg_depth": round(self._mean_depth(occurrences[t.id]), 1),
                    }
                    for t in found
                ],
                scope_used=scope if source else "all",
                nodes_analyzed=scanned,
            )

        concept_nodes = self._classify(found, occurrences)
        concept_nodes = self._assign_detail_parents(concept_nodes, pairs)

        edges = [
            ConceptEdge(
                source=CORE_ID,
                target=node.id,
                type=CONTAINS_RELATION if node.level == ConceptLevel.MAJOR else DETAILS_RELATION,
                weight=node.occurrences,
                implicit=True,
            )
            for node in concept_nodes
        ]
        edges.extend(self._pair_edges(pairs))

        core_label = (core_concept or "").strip() or (source.name if source else "") or "Core Concept"
        core = ConceptNode(
            id=CORE_ID,
            label=core_label,
            level=ConceptLevel.CORE,
            occurrences=scanned,
            source_id=source.id if source else None,
        )

        graph = ConceptGraph(
            title=title or f"Concept Map: {core_label}",
            core=core,
            concepts=tuple(concept_nodes),
            edges=tuple(edges),
            truncated=truncated,
            nodes_analyzed=scanned,
            scope=scope if source else "all",
        )
        logger.info(
            f"Built concept graph '{graph.title}': {len(graph.majors)} major, "
            f"{len(graph.details)} detail, {len(graph.relationships)} relationships"
            + (" (truncated)" if truncated else "")
        )
        return BuildResult(graph=graph)

    def _normalize_vocabulary(self, concepts: list[str]) -> list[_Term]:
        """Trim, drop blanks and collapse case-insensitive duplicates."""
        terms: list[_Term] = []
        seen: set[str] = set()
        taken: set[str] = set()
        for concept in concepts:
            original = concept.strip()
            lower = original.lower()
            if not lower or lower in seen:
                continue
            seen.add(lower)
            terms.append(_Term(original=original, lower=lower, id=make_concept_id(original, taken)))
        return terms

    def _scan(
        self,
        nodes: list[ContentNode],
        terms: list[_Term],
        node_map: dict[str, ContentNode],
        root_id: str | None,
    ) -> tuple[dict[str, list[tuple[str, int]]], dict[tuple[str, str], _PairStats], int, bool]:
        """
        One bounded pass collecting occurrences and co-occurrence statistics.

        Returns:
            (occurrences by term id as (node id, depth) hits,
             pair statistics keyed by unordered term-id pair,
             number of nodes scanned, truncated flag)
        """
        occurrences: dict[str, list[tuple[str, int]]] = {t.id: [] for t in terms}
        pairs: dict[tuple[str, str], _PairStats] = {}
        order = {t.id: i for i, t in enumerate(terms)}
        truncated = False
        scanned = 0

        for node in nodes:
            if scanned >= self.config.max_scan_nodes:
                logger.warning(f"Scan cap of {self.config.max_scan_nodes} nodes reached")
                truncated = True
                break
            scanned += 1

            text = node.text
            lower = text.lower()
            present = [t for t in terms if t.lower in lower]
            if not present:
                continue

            depth = node_depth(node.id, node_map, root_id, self.config.max_walk_depth)
            for term in present:
                occurrences[term.id].append((node.id, depth))

            if len(present) < 2:
                continue

            for i, first in enumerate(present):
                for second in present[i + 1:]:
                    key = tuple(sorted((first.id, second.id), key=order.__getitem__))
                    stats = pairs.get(key)
                    if stats is None:
                        if len(pairs) >= self.config.max_pair_edges:
                            truncated = True
                            continue
                        stats = pairs[key] = _PairStats()

                    stats.weight += 1
                    label = self.classifier.classify(text, first.lower, second.lower)
                    if label not in stats.labels:
                        stats.labels.append(label)
                    excerpt = _excerpt(text)
                    if len(stats.contexts) < MAX_CONTEXTS_PER_EDGE and excerpt not in stats.contexts:
                        stats.contexts.append(excerpt)

            if truncated:
                logger.warning(f"Pair cap of {self.config.max_pair_edges} edges reached")
                break

        return occurrences, pairs, scanned, truncated

    @staticmethod
    def _mean_depth(hits: list[tuple[str, int]]) -> float:
        return sum(depth for _, depth in hits) / len(hits) if hits else 0.0

    def _classify(
        self, found: list[_Term], occurrences: dict[str, list[tuple[str, int]]]
    ) -> list[ConceptNode]:
        """Median split on mean hit depth: shallower concepts become major."""
        ranked = sorted(
            ((term, self._mean_depth(occurrences[term.id])) for term in found),
            key=lambda item: item[1],
        )
        median_depth = ranked[len(ranked) // 2][1]

        return [
            ConceptNode(
                id=term.id,
                label=term.original,
                level=ConceptLevel.MAJOR if depth <= median_depth else ConceptLevel.DETAIL,
                occurrences=len(occurrences[term.id]),
                depth=depth,
                source_id=occurrences[term.id][0][0],
            )
            for term, depth in ranked
        ]

    @staticmethod
    def _assign_detail_parents(
        nodes: list[ConceptNode], pairs: dict[tuple[str, str], _PairStats]
    ) -> list[ConceptNode]:
        """Attach each detail to the major it co-occurs with most (first major if none)."""
        majors = [n for n in nodes if n.level == ConceptLevel.MAJOR]
        if not majors:
            return [
                replace(n, level=ConceptLevel.MAJOR, parent_major_id=None)
                for n in nodes
            ]

        cooccurrence: dict[str, dict[str, int]] = defaultdict(dict)
        for (a, b), stats in pairs.items():
            cooccurrence[a][b] = stats.weight
            cooccurrence[b][a] = stats.weight

        result: list[ConceptNode] = []
        for node in nodes:
            if node.level != ConceptLevel.DETAIL:
                result.append(node)
                continue

            best = majors[0]
            best_weight = 0
            for major in majors:
                weight = cooccurrence[node.id].get(major.id, 0)
                if weight > best_weight:
                    best, best_weight = major, weight

            result.append(replace(node, parent_major_id=best.id))
        return result

    def _pair_edges(self, pairs: dict[tuple[str, str], _PairStats]) -> list[ConceptEdge]:
        edges = []
        for (first, second), stats in pairs.items():
            label = next((lb for lb in stats.labels if lb != DEFAULT_RELATION), DEFAULT_RELATION)
            edges.append(
                ConceptEdge(
                    source=first,
                    target=second,
                    type=label,
                    weight=stats.weight,
                    contexts=tuple(stats.contexts),
                )
            )
        return edges
