"""Centrality metrics for concept graphs."""

import logging
from dataclasses import dataclass, field

import networkx as nx

from conceptmap.models import ConceptGraph

logger = logging.getLogger(__name__)


@dataclass
class GraphMetrics:
    """Centrality scores per concept id plus whole-graph figures."""

    degree: dict[str, float] = field(default_factory=dict)
    betweenness: dict[str, float] = field(default_factory=dict)
    closeness: dict[str, float] = field(default_factory=dict)
    eigenvector: dict[str, float] = field(default_factory=dict)
    density: float = 0.0
    most_central: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "density": round(self.density, 4),
            "most_central": self.most_central,
            "centrality": {
                "degree": _rounded(self.degree),
                "betweenness": _rounded(self.betweenness),
                "closeness": _rounded(self.closeness),
                "eigenvector": _rounded(self.eigenvector),
            },
        }


def _rounded(scores: dict[str, float]) -> dict[str, float]:
    return {k: round(v, 4) for k, v in scores.items()}


def to_networkx(graph: ConceptGraph, include_implicit: bool = True) -> nx.DiGraph:
    """Convert to a weighted networkx DiGraph (symmetric edges in both directions)."""
    G = nx.DiGraph()
    for node in graph.nodes:
        G.add_node(node.id, label=node.label, level=node.level.value)

    for edge in graph.edges:
        if edge.implicit and not include_implicit:
            continue
        if edge.source not in G or edge.target not in G:
            continue
        G.add_edge(edge.source, edge.target, weight=edge.weight, type=edge.type)
        if edge.symmetric:
            G.add_edge(edge.target, edge.source, weight=edge.weight, type=edge.type)
    return G


def compute_graph_metrics(graph: ConceptGraph, top_n: int = 5) -> GraphMetrics:
    """
    Compute centrality for the semantic relationships of a concept graph.

    Hierarchy edges to the core are left out so the core does not dominate
    every measure.

    Args:
        graph: Concept graph to analyze
        top_n: Number of concepts reported in most_central

    Returns:
        GraphMetrics (empty when the graph has no concepts)
    """
    G = to_networkx(graph, include_implicit=False)
    G.remove_node(graph.core.id)
    if G.number_of_nodes() == 0:
        return GraphMetrics()

    undirected = G.to_undirected()
    metrics = GraphMetrics(
        degree=nx.degree_centrality(undirected),
        betweenness=nx.betweenness_centrality(undirected),
        closeness=nx.closeness_centrality(undirected),
        density=nx.density(undirected),
    )

    try:
        metrics.eigenvector = nx.eigenvector_centrality(undirected, max_iter=500)
    except nx.PowerIterationFailedConvergence:
        logger.warning("Eigenvector centrality did not converge; leaving it empty")

    ranked = sorted(
        metrics.degree,
        key=lambda node_id: (metrics.degree[node_id], metrics.betweenness.get(node_id, 0.0)),
        reverse=True,
    )
    metrics.most_central = ranked[:top_n]
    return metrics
