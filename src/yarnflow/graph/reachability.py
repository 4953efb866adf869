"""Reachability checks over the editor graph.

Pure functions that never modify the graph and never raise for
structural problems. Dialogue graphs legitimately contain cycles (hub
nodes revisited through different choices), so every traversal tracks
visited ids.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from yarnflow.models.graph import DialogueGraph, GraphEdge, GraphNode


def _successors(edges: Iterable[GraphEdge]) -> dict[str, list[str]]:
    successors: dict[str, list[str]] = {}
    for edge in edges:
        successors.setdefault(edge.source, []).append(edge.target)
    return successors


def is_reachable(nodes: Iterable[GraphNode], edges: Iterable[GraphEdge], start_id: str) -> bool:
    """Check that some path from ``start_id`` reaches a terminal node.

    A terminal node is an existing node with no outgoing edges. Edges into
    ids that are not nodes lead nowhere and never count as an ending.

    Args:
        nodes: Graph nodes.
        edges: Graph edges.
        start_id: Node the dialogue starts at.

    Returns:
        True if at least one ending is reachable, False otherwise
        (including when ``start_id`` is not a node).
    """
    node_ids = {node.id for node in nodes}
    if start_id not in node_ids:
        return False

    successors = _successors(edges)
    visited: set[str] = {start_id}
    queue: deque[str] = deque([start_id])
    while queue:
        current = queue.popleft()
        targets = successors.get(current, [])
        if not targets:
            return True
        for target in targets:
            if target in node_ids and target not in visited:
                visited.add(target)
                queue.append(target)

    return False


def reachable_ids(graph: DialogueGraph, start_id: str) -> set[str]:
    """Find all node ids reachable from ``start_id`` (including it).

    Returns an empty set if ``start_id`` is not a node.
    """
    node_ids = graph.node_ids()
    if start_id not in node_ids:
        return set()

    successors = _successors(graph.edges)
    visited: set[str] = set()
    queue: deque[str] = deque([start_id])
    while queue:
        current = queue.popleft()
        if current in visited:
            continue
        visited.add(current)
        for target in successors.get(current, []):
            if target in node_ids and target not in visited:
                queue.append(target)

    return visited
