"""Editor graph format.

Saves the graph itself (nodes with positions, edges with labels) so an
editor can reopen a dialogue with its canvas layout intact::

    {"nodes": [{"id": "start", "type": "dialog", "position": {...}, "data": {...}}],
     "edges": [{"id": "...", "source": "start", "target": "end", "label": ""}]}

Used as a script format it expands on write and collapses on read.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ValidationError

from yarnflow.formats.errors import GraphFormatError
from yarnflow.graph.codec import Layout, collapse, expand
from yarnflow.models.graph import DialogueGraph, GraphEdge, GraphNode
from yarnflow.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from yarnflow.models.script import ScriptNode

log = get_logger(__name__)


class GraphDocument(BaseModel):
    """On-disk shape of an editor graph."""

    nodes: list[GraphNode]
    edges: list[GraphEdge]


def dumps_graph(graph: DialogueGraph, *, indent: int = 2) -> str:
    """Write a graph as pretty-printed JSON (with a trailing newline)."""
    document = GraphDocument(nodes=list(graph.nodes), edges=list(graph.edges))
    return document.model_dump_json(indent=indent) + "\n"


def loads_graph(text: str) -> DialogueGraph:
    """Parse a saved editor graph.

    The graph is returned as stored; referential checks happen when it is
    collapsed or validated.

    Raises:
        GraphFormatError: If the document is not valid JSON or has the
            wrong shape.
    """
    try:
        document = GraphDocument.model_validate_json(text)
    except ValidationError as e:
        raise GraphFormatError(str(e)) from e
    return DialogueGraph.of(document.nodes, document.edges)


class GraphFormat:
    """Read and write scripts through the editor graph form."""

    format_name = "graph"
    suffixes = (".graph.json",)

    def __init__(self, layout: Layout | None = None, indent: int = 2) -> None:
        self.layout = layout
        self.indent = indent

    def loads(self, text: str) -> list[ScriptNode]:
        """Read a saved graph and collapse it into a script."""
        graph = loads_graph(text)
        log.debug("graph_document_parsed", nodes=len(graph.nodes), edges=len(graph.edges))
        return collapse(*graph)

    def dumps(self, script: Iterable[ScriptNode]) -> str:
        """Expand a script and write the resulting graph."""
        return dumps_graph(expand(list(script), layout=self.layout), indent=self.indent)
