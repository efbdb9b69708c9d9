"""Analysis module: keywords, relevance, scoping and concept graph construction."""

from conceptmap.analysis.builder import (
    BuildFailure,
    BuildResult,
    ConceptGraphBuilder,
    validate_vocabulary,
)
from conceptmap.analysis.definition import (
    ConceptMapDefinition,
    definition_to_graph,
    example_definition,
)
from conceptmap.analysis.keywords import STOP_WORDS, extract_keywords
from conceptmap.analysis.metrics import GraphMetrics, compute_graph_metrics
from conceptmap.analysis.relations import (
    PatternRelationshipClassifier,
    RelationshipClassifier,
    classify_relationship,
)
from conceptmap.analysis.relevance import (
    RelatedNode,
    RelatedNodesResult,
    calculate_relevance,
    find_matched_keywords,
    find_related_nodes,
)
from conceptmap.analysis.scope import filter_nodes_by_scope, node_depth

__all__ = [
    # Graph construction
    "ConceptGraphBuilder",
    "BuildResult",
    "BuildFailure",
    "validate_vocabulary",
    "ConceptMapDefinition",
    "definition_to_graph",
    "example_definition",
    # Text analysis
    "STOP_WORDS",
    "extract_keywords",
    "calculate_relevance",
    "find_matched_keywords",
    "find_related_nodes",
    "RelatedNode",
    "RelatedNodesResult",
    "RelationshipClassifier",
    "PatternRelationshipClassifier",
    "classify_relationship",
    # Corpus structure
    "filter_nodes_by_scope",
    "node_depth",
    # Metrics
    "GraphMetrics",
    "compute_graph_metrics",
]
