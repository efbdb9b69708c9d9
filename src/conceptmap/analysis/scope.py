"""Scope filtering and structural depth over the external note hierarchy.

Every walk tracks visited node ids, so malformed or cyclic parent chains
terminate; the hop cap from settings is a second guard for very deep trees.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable

from conceptmap.config import settings
from conceptmap.models import ContentNode, ScopeType

logger = logging.getLogger(__name__)

ROOT_KEY = "root"


def build_children_index(nodes: Iterable[ContentNode]) -> dict[str, list[ContentNode]]:
    """Build a parent_id -> children lookup; parentless nodes hang off ROOT_KEY."""
    children: dict[str, list[ContentNode]] = defaultdict(list)
    for node in nodes:
        children[node.parent_id or ROOT_KEY].append(node)
    return children


def collect_descendants(
    root_id: str,
    children_index: dict[str, list[ContentNode]],
    max_depth: int | None = None,
) -> list[ContentNode]:
    """Collect all descendants of root_id in depth-first, document order."""
    max_depth = settings.max_walk_depth if max_depth is None else max_depth
    result: list[ContentNode] = []
    visited = {root_id}

    def walk(parent_id: str, depth: int) -> None:
        if depth > max_depth:
            logger.warning(f"Descendant walk below {root_id} hit depth cap {max_depth}")
            return
        for child in children_index.get(parent_id, []):
            if child.id in visited:
                continue
            visited.add(child.id)
            result.append(child)
            walk(child.id, depth + 1)

    walk(root_id, 0)
    return result


def get_subtree_nodes(root_id: str, nodes: list[ContentNode]) -> list[ContentNode]:
    """Get a node followed by all of its descendants."""
    node_map = {n.id: n for n in nodes}
    root = node_map.get(root_id)
    result = [root] if root else []
    result.extend(collect_descendants(root_id, build_children_index(nodes)))
    return result


def ancestor_chain(
    node_id: str,
    node_map: dict[str, ContentNode],
    stop_at: str | None = None,
    max_depth: int | None = None,
) -> list[ContentNode]:
    """
    Walk parent references upward from a node.

    Args:
        node_id: Starting node (not included in the result)
        node_map: id -> node lookup
        stop_at: Stop before yielding this ancestor
        max_depth: Hop cap (defaults to settings.max_walk_depth)

    Returns:
        Ancestors ordered nearest first
    """
    max_depth = settings.max_walk_depth if max_depth is None else max_depth
    chain: list[ContentNode] = []
    visited = {node_id}

    node = node_map.get(node_id)
    current_id = node.parent_id if node else None

    while current_id and current_id != stop_at and len(chain) < max_depth:
        if current_id in visited:
            logger.warning(f"Cycle in parent chain of {node_id} at {current_id}")
            break
        visited.add(current_id)

        parent = node_map.get(current_id)
        if parent is None:
            break
        chain.append(parent)
        current_id = parent.parent_id

    return chain


def node_depth(
    node_id: str,
    node_map: dict[str, ContentNode],
    root_id: str | None = None,
    max_depth: int | None = None,
) -> int:
    """
    Number of parent hops from a node up to root_id.

    Without a root the walk continues to the top of the hierarchy. A missing
    parent, a revisited node or the hop cap end the walk early.
    """
    max_depth = settings.max_walk_depth if max_depth is None else max_depth
    if node_id == root_id:
        return 0

    depth = 0
    visited = {node_id}
    node = node_map.get(node_id)

    while node is not None and node.parent_id and depth < max_depth:
        depth += 1
        if node.parent_id == root_id or node.parent_id in visited:
            break
        visited.add(node.parent_id)
        node = node_map.get(node.parent_id)

    return depth


def build_node_path(node: ContentNode, node_map: dict[str, ContentNode]) -> str:
    """Human-readable path "Top > Middle > Node" for display."""
    names = [a.name or "Untitled" for a in reversed(ancestor_chain(node.id, node_map))]
    names.append(node.name or "Untitled")
    return " > ".join(names)


def filter_nodes_by_scope(
    source: ContentNode,
    nodes: list[ContentNode],
    scope: ScopeType,
) -> list[ContentNode]:
    """
    Filter the corpus relative to a source node.

    this_node yields nothing (the caller analyzes the source alone or falls
    back to the whole corpus); all yields every node except the source.
    """
    children_index = build_children_index(nodes)

    if scope == "this_node":
        return []

    if scope == "children":
        return collect_descendants(source.id, children_index)

    if scope == "siblings":
        siblings = children_index.get(source.parent_id or ROOT_KEY, [])
        return [n for n in siblings if n.id != source.id]

    if scope == "ancestors":
        return ancestor_chain(source.id, {n.id: n for n in nodes})

    return [n for n in nodes if n.id != source.id]
