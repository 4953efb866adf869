"""Graph models: the interactive, in-memory form of a dialogue.

Nodes carry display data and an editor position; edges carry the flow.
An edge with an empty label is a plain continuation, a labeled edge is a
choice. The graph value itself is immutable: editing operations return a
new ``DialogueGraph``.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field


class Position(BaseModel):
    """Editor canvas coordinate. Cosmetic only."""

    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0


class NodeData(BaseModel):
    """Display data of a dialogue node."""

    model_config = ConfigDict(frozen=True)

    speaker: str = ""
    text: str = ""


class GraphNode(BaseModel):
    """A dialogue node on the editor canvas."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    type: str = "dialog"
    position: Position = Field(default_factory=Position)
    data: NodeData = Field(default_factory=NodeData)


class GraphEdge(BaseModel):
    """A directed edge between two dialogue nodes."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    source: str
    target: str
    label: str = ""

    @property
    def is_choice(self) -> bool:
        """True if the edge is a labeled choice rather than a plain next."""
        return bool(self.label)


class DialogueGraph(NamedTuple):
    """Caller-owned snapshot of the editor graph.

    Unpacks as ``nodes, edges``. Node and edge order is preserved and used
    for display and for choice ordering on collapse.
    """

    nodes: tuple[GraphNode, ...] = ()
    edges: tuple[GraphEdge, ...] = ()

    @classmethod
    def of(cls, nodes: Iterable[GraphNode], edges: Iterable[GraphEdge]) -> DialogueGraph:
        """Build a graph from any iterables of nodes and edges."""
        return cls(tuple(nodes), tuple(edges))

    def node_ids(self) -> set[str]:
        return {node.id for node in self.nodes}

    def has_node(self, node_id: str) -> bool:
        return any(node.id == node_id for node in self.nodes)

    def get_node(self, node_id: str) -> GraphNode | None:
        return next((node for node in self.nodes if node.id == node_id), None)

    def get_edge(self, edge_id: str) -> GraphEdge | None:
        return next((edge for edge in self.edges if edge.id == edge_id), None)

    def outgoing(self, source_id: str) -> list[GraphEdge]:
        """Edges leaving ``source_id``, in insertion order."""
        return [edge for edge in self.edges if edge.source == source_id]

    def edges_by_source(self) -> dict[str, list[GraphEdge]]:
        """Group edges by source id, preserving edge order within each group."""
        grouped: dict[str, list[GraphEdge]] = {}
        for edge in self.edges:
            grouped.setdefault(edge.source, []).append(edge)
        return grouped
