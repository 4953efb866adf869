"""Script codec: conversion between scripts and editor graphs.

``expand`` turns a linear script into nodes and edges for the editor;
``collapse`` turns the edited graph back into a script. Both are pure
and fail whole: a script or graph with dangling references or duplicate
ids raises before anything is produced.

Collapse rules for a node's outgoing edges:
- any labeled edge: the node branches over its labeled edges, in order;
  unlabeled siblings are ignored
- exactly one unlabeled edge: the node continues linearly
- otherwise the node is terminal (several unlabeled edges are dropped)
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING

from yarnflow.graph.errors import DanglingReferenceError, DuplicateEdgeError, DuplicateNodeError
from yarnflow.models.graph import DialogueGraph, GraphEdge, GraphNode, NodeData, Position
from yarnflow.models.script import Branching, Linear, ScriptChoice, ScriptNode, Terminal
from yarnflow.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

log = get_logger(__name__)

DEFAULT_X_STEP = 200.0
DEFAULT_Y_STEP = 80.0


@dataclass(frozen=True)
class Layout:
    """Diagonal stagger used to place expanded nodes."""

    x_step: float = DEFAULT_X_STEP
    y_step: float = DEFAULT_Y_STEP


def layout_position(index: int, layout: Layout | None = None) -> Position:
    """Place the node at ordinal ``index`` on a diagonal."""
    layout = layout or Layout()
    return Position(x=index * layout.x_step, y=index * layout.y_step)


def edge_id(source: str, target: str, discriminator: str) -> str:
    """Build a collision-free edge id.

    The source is length-prefixed so that no two (source, target,
    discriminator) triples map to the same id. ``discriminator`` must not
    contain ``:``.
    """
    return f"{discriminator}:{len(source)}:{source}->{target}"


def _check_unique(ids: Iterable[str], error: type[DuplicateNodeError | DuplicateEdgeError]) -> None:
    counts = Counter(ids)
    for item, count in counts.items():
        if count > 1:
            raise error(item, count)


def expand(
    script: Sequence[ScriptNode], *, layout: Layout | None = None, strict: bool = True
) -> DialogueGraph:
    """Expand a script into editor nodes and edges.

    Args:
        script: Ordered script nodes.
        layout: Optional placement steps.
        strict: Raise on duplicate ids and dangling references. With
            ``strict=False`` the graph is built as written, so that
            ``check_graph`` can report the problems instead.

    Returns:
        Graph with one node per script node, in script order.

    Raises:
        DuplicateNodeError: If two script nodes share an id.
        DanglingReferenceError: If a ``next`` or choice names no node.
    """
    if strict:
        _check_unique((node.id for node in script), DuplicateNodeError)
    known = [node.id for node in script]
    known_set = set(known)

    nodes: list[GraphNode] = []
    edges: list[GraphEdge] = []
    for index, script_node in enumerate(script):
        for target in script_node.targets():
            if strict and target not in known_set:
                raise DanglingReferenceError(
                    target, available=known, referenced_by=f"node '{script_node.id}'"
                )

        nodes.append(
            GraphNode(
                id=script_node.id,
                position=layout_position(index, layout),
                data=NodeData(speaker=script_node.speaker, text=script_node.text),
            )
        )
        if script_node.next is not None:
            edges.append(
                GraphEdge(
                    id=edge_id(script_node.id, script_node.next, "next"),
                    source=script_node.id,
                    target=script_node.next,
                )
            )
        for choice_index, choice in enumerate(script_node.choices):
            edges.append(
                GraphEdge(
                    id=edge_id(script_node.id, choice.next, f"c{choice_index}"),
                    source=script_node.id,
                    target=choice.next,
                    label=choice.text,
                )
            )

    log.debug("script_expanded", nodes=len(nodes), edges=len(edges))
    return DialogueGraph.of(nodes, edges)


def check_references(graph: DialogueGraph) -> None:
    """Raise if the graph has duplicate ids or dangling edge endpoints."""
    _check_unique((node.id for node in graph.nodes), DuplicateNodeError)
    _check_unique((edge.id for edge in graph.edges), DuplicateEdgeError)

    known = [node.id for node in graph.nodes]
    known_set = set(known)
    for edge in graph.edges:
        for endpoint in (edge.source, edge.target):
            if endpoint not in known_set:
                raise DanglingReferenceError(
                    endpoint, available=known, referenced_by=f"edge '{edge.id}'"
                )


def collapse_node(node: GraphNode, outgoing: Sequence[GraphEdge]) -> ScriptNode:
    """Collapse one node and its outgoing edges into a script node."""
    labeled = [edge for edge in outgoing if edge.is_choice]
    unlabeled = [edge for edge in outgoing if not edge.is_choice]

    flow: Terminal | Linear | Branching
    if labeled:
        if unlabeled:
            log.debug("collapse_unlabeled_ignored", node=node.id, ignored=len(unlabeled))
        flow = Branching(choices=tuple(ScriptChoice(text=e.label, next=e.target) for e in labeled))
    elif len(unlabeled) == 1:
        flow = Linear(next=unlabeled[0].target)
    else:
        if unlabeled:
            log.warning(
                "collapse_ambiguous_next",
                node=node.id,
                targets=[edge.target for edge in unlabeled],
            )
        flow = Terminal()

    return ScriptNode(id=node.id, speaker=node.data.speaker, text=node.data.text, flow=flow)


def collapse(nodes: Iterable[GraphNode], edges: Iterable[GraphEdge]) -> list[ScriptNode]:
    """Collapse an editor graph back into a script.

    A ``DialogueGraph`` unpacks into both arguments: ``collapse(*graph)``.

    Args:
        nodes: Graph nodes.
        edges: Graph edges.

    Returns:
        Script nodes in graph node order.

    Raises:
        DuplicateNodeError: If two nodes share an id.
        DuplicateEdgeError: If two edges share an id.
        DanglingReferenceError: If an edge endpoint names no node.
    """
    graph = DialogueGraph.of(nodes, edges)
    check_references(graph)

    by_source = graph.edges_by_source()
    script = [collapse_node(node, by_source.get(node.id, [])) for node in graph.nodes]

    log.debug("graph_collapsed", nodes=len(script))
    return script
