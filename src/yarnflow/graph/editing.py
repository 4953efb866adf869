"""Editing operations on the dialogue graph.

These are the mutations an editor performs in response to user actions
(add a node, connect two nodes, add or retarget a choice, delete things).
Each function takes a ``DialogueGraph`` and returns a new one; the input
is never modified, so a host can keep the previous snapshot around.

Referential integrity is enforced like foreign keys: edges can only be
created between existing nodes, and removing a node removes its edges.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from yarnflow.graph.codec import edge_id as make_edge_id
from yarnflow.graph.errors import (
    EdgeEndpointError,
    EdgeNotFoundError,
    NodeExistsError,
    NodeNotFoundError,
)
from yarnflow.models.graph import DialogueGraph, GraphEdge, GraphNode, NodeData, Position
from yarnflow.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

log = get_logger(__name__)

NEW_NODE_STAGGER = 50.0
DEFAULT_CHOICE_LABEL = "choice"


def _next_node_id(graph: DialogueGraph) -> str:
    taken = graph.node_ids()
    n = len(graph.nodes) + 1
    while f"node{n}" in taken:
        n += 1
    return f"node{n}"


def _next_edge_id(graph: DialogueGraph, source: str, target: str) -> str:
    taken = {edge.id for edge in graph.edges}
    n = len(graph.edges)
    while (candidate := make_edge_id(source, target, f"e{n}")) in taken:
        n += 1
    return candidate


def _require_endpoints(graph: DialogueGraph, source: str, target: str) -> None:
    node_ids = graph.node_ids()
    source_ok = source in node_ids
    target_ok = target in node_ids
    if source_ok and target_ok:
        return

    if not source_ok and not target_ok:
        missing = "both"
    elif not source_ok:
        missing = "source"
    else:
        missing = "target"
    raise EdgeEndpointError(
        source=source,
        target=target,
        missing=missing,
        available=sorted(node_ids),
    )


def _replace_edges(graph: DialogueGraph, edges: Sequence[GraphEdge]) -> DialogueGraph:
    return DialogueGraph(graph.nodes, tuple(edges))


def add_node(
    graph: DialogueGraph,
    node_id: str | None = None,
    *,
    speaker: str = "",
    text: str = "",
    position: Position | None = None,
) -> DialogueGraph:
    """Add an empty (or pre-filled) node.

    Args:
        graph: Current graph.
        node_id: Id for the new node. Defaults to the first free ``node{n}``.
        speaker: Initial speaker.
        text: Initial text.
        position: Canvas position. Defaults to a stagger by node count.

    Returns:
        New graph with the node appended.

    Raises:
        NodeExistsError: If ``node_id`` is already taken.
    """
    if node_id is None:
        node_id = _next_node_id(graph)
    elif graph.has_node(node_id):
        raise NodeExistsError(node_id)

    count = len(graph.nodes)
    node = GraphNode(
        id=node_id,
        position=position or Position(x=NEW_NODE_STAGGER * count, y=NEW_NODE_STAGGER * count),
        data=NodeData(speaker=speaker, text=text),
    )
    log.debug("node_added", node=node_id)
    return DialogueGraph((*graph.nodes, node), graph.edges)


def update_node(
    graph: DialogueGraph,
    node_id: str,
    *,
    speaker: str | None = None,
    text: str | None = None,
) -> DialogueGraph:
    """Change a node's speaker and/or text.

    Raises:
        NodeNotFoundError: If the node does not exist.
    """
    node = graph.get_node(node_id)
    if node is None:
        raise NodeNotFoundError(node_id, available=sorted(graph.node_ids()), context="update")

    data = node.data.model_copy(
        update={
            key: value
            for key, value in (("speaker", speaker), ("text", text))
            if value is not None
        }
    )
    updated = node.model_copy(update={"data": data})
    return DialogueGraph(
        tuple(updated if n.id == node_id else n for n in graph.nodes),
        graph.edges,
    )


def move_node(graph: DialogueGraph, node_id: str, x: float, y: float) -> DialogueGraph:
    """Record a new canvas position for a node.

    Raises:
        NodeNotFoundError: If the node does not exist.
    """
    node = graph.get_node(node_id)
    if node is None:
        raise NodeNotFoundError(node_id, available=sorted(graph.node_ids()), context="move")

    moved = node.model_copy(update={"position": Position(x=x, y=y)})
    return DialogueGraph(
        tuple(moved if n.id == node_id else n for n in graph.nodes),
        graph.edges,
    )


def remove_node(graph: DialogueGraph, node_id: str) -> DialogueGraph:
    """Remove a node together with every edge touching it.

    Raises:
        NodeNotFoundError: If the node does not exist.
    """
    if not graph.has_node(node_id):
        raise NodeNotFoundError(node_id, available=sorted(graph.node_ids()), context="remove")

    nodes = tuple(n for n in graph.nodes if n.id != node_id)
    edges = tuple(e for e in graph.edges if node_id not in (e.source, e.target))
    log.debug("node_removed", node=node_id, edges_removed=len(graph.edges) - len(edges))
    return DialogueGraph(nodes, edges)


def connect(graph: DialogueGraph, source: str, target: str, label: str = "") -> DialogueGraph:
    """Add an edge between two existing nodes.

    An empty label makes a plain continuation, a non-empty one a choice.

    Raises:
        EdgeEndpointError: If either endpoint does not exist.
    """
    _require_endpoints(graph, source, target)
    edge = GraphEdge(
        id=_next_edge_id(graph, source, target),
        source=source,
        target=target,
        label=label,
    )
    log.debug("edge_added", edge=edge.id, source=source, target=target)
    return _replace_edges(graph, (*graph.edges, edge))


def add_choice(
    graph: DialogueGraph,
    source: str,
    *,
    label: str = DEFAULT_CHOICE_LABEL,
    target: str | None = None,
) -> DialogueGraph:
    """Add a labeled choice leaving ``source``.

    Without a ``target`` the choice loops back to ``source``, ready to be
    retargeted with ``change_edge``.

    Raises:
        EdgeEndpointError: If either endpoint does not exist.
    """
    return connect(graph, source, target if target is not None else source, label=label)


def change_edge(
    graph: DialogueGraph,
    edge_id: str,
    *,
    label: str | None = None,
    target: str | None = None,
) -> DialogueGraph:
    """Relabel and/or retarget an edge. The edge keeps its id.

    Raises:
        EdgeNotFoundError: If the edge does not exist.
        EdgeEndpointError: If the new target does not exist.
    """
    edge = graph.get_edge(edge_id)
    if edge is None:
        raise EdgeNotFoundError(edge_id, available=[e.id for e in graph.edges])
    if target is not None:
        _require_endpoints(graph, edge.source, target)

    updates: dict[str, str] = {}
    if label is not None:
        updates["label"] = label
    if target is not None:
        updates["target"] = target
    changed = edge.model_copy(update=updates)
    return _replace_edges(graph, [changed if e.id == edge_id else e for e in graph.edges])


def remove_edge(graph: DialogueGraph, edge_id: str) -> DialogueGraph:
    """Remove an edge.

    Raises:
        EdgeNotFoundError: If the edge does not exist.
    """
    if graph.get_edge(edge_id) is None:
        raise EdgeNotFoundError(edge_id, available=[e.id for e in graph.edges])
    return _replace_edges(graph, [e for e in graph.edges if e.id != edge_id])
