"""Structural validation of the editor graph.

Pure, deterministic checks that an editor host can run after every
mutation. Problems are reported as ``ValidationCheck`` results rather
than raised, so the host can decide whether to block saving or only warn.

Checks:
- unique_node_ids / unique_edge_ids: ids must be unique
- edge_endpoints: every edge source and target must be a node
- start_node: the start node must exist
- terminal_reachable: some path from start must reach an ending
- unreachable_nodes: nodes the player can never see (warning)
- ambiguous_next: several unlabeled edges, which collapse drops (warning)
- mixed_edges: labeled and unlabeled edges together, where collapse
  ignores the unlabeled ones (warning)
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from yarnflow.graph.reachability import is_reachable, reachable_ids
from yarnflow.graph.validation_types import ValidationCheck, ValidationReport

if TYPE_CHECKING:
    from yarnflow.models.graph import DialogueGraph

__all__ = [
    "ValidationCheck",
    "ValidationReport",
    "check_ambiguous_next",
    "check_edge_endpoints",
    "check_graph",
    "check_mixed_edges",
    "check_start_node",
    "check_terminal_reachable",
    "check_unique_edge_ids",
    "check_unique_node_ids",
    "check_unreachable_nodes",
]


def _preview(ids: list[str], limit: int = 5) -> str:
    shown = ", ".join(ids[:limit])
    if len(ids) > limit:
        shown += f", ... (+{len(ids) - limit})"
    return shown


def check_unique_node_ids(graph: DialogueGraph) -> ValidationCheck:
    """Node ids must be unique."""
    dupes = sorted(nid for nid, n in Counter(n.id for n in graph.nodes).items() if n > 1)
    if dupes:
        return ValidationCheck(
            name="unique_node_ids",
            severity="fail",
            message=f"Duplicate node ids: {_preview(dupes)}",
        )
    return ValidationCheck(name="unique_node_ids", severity="pass")


def check_unique_edge_ids(graph: DialogueGraph) -> ValidationCheck:
    """Edge ids must be unique."""
    dupes = sorted(eid for eid, n in Counter(e.id for e in graph.edges).items() if n > 1)
    if dupes:
        return ValidationCheck(
            name="unique_edge_ids",
            severity="fail",
            message=f"Duplicate edge ids: {_preview(dupes)}",
        )
    return ValidationCheck(name="unique_edge_ids", severity="pass")


def check_edge_endpoints(graph: DialogueGraph) -> ValidationCheck:
    """Every edge must connect two existing nodes."""
    node_ids = graph.node_ids()
    dangling: list[str] = []
    for edge in graph.edges:
        missing = [end for end in (edge.source, edge.target) if end not in node_ids]
        if missing:
            dangling.append(f"{edge.id} -> {'/'.join(missing)}")
    if dangling:
        return ValidationCheck(
            name="edge_endpoints",
            severity="fail",
            message=f"{len(dangling)} edge(s) reference missing nodes: {_preview(dangling)}",
        )
    return ValidationCheck(name="edge_endpoints", severity="pass")


def check_start_node(graph: DialogueGraph, start_id: str) -> ValidationCheck:
    """The start node must exist."""
    if not graph.has_node(start_id):
        return ValidationCheck(
            name="start_node",
            severity="fail",
            message=f"Start node '{start_id}' does not exist",
        )
    return ValidationCheck(name="start_node", severity="pass")


def check_terminal_reachable(graph: DialogueGraph, start_id: str) -> ValidationCheck:
    """Some path from the start node must reach an ending."""
    if is_reachable(graph.nodes, graph.edges, start_id):
        return ValidationCheck(
            name="terminal_reachable", severity="pass", message="Valid path exists"
        )
    return ValidationCheck(
        name="terminal_reachable",
        severity="fail",
        message="Dialogue has no end path",
    )


def check_unreachable_nodes(graph: DialogueGraph, start_id: str) -> ValidationCheck:
    """Nodes that cannot be reached from the start node."""
    if not graph.has_node(start_id):
        return ValidationCheck(
            name="unreachable_nodes",
            severity="pass",
            message="Skipped: no start node",
        )
    seen = reachable_ids(graph, start_id)
    unreachable = [node.id for node in graph.nodes if node.id not in seen]
    if unreachable:
        return ValidationCheck(
            name="unreachable_nodes",
            severity="warn",
            message=f"{len(unreachable)} node(s) unreachable from start: {_preview(unreachable)}",
        )
    return ValidationCheck(name="unreachable_nodes", severity="pass")


def check_ambiguous_next(graph: DialogueGraph) -> ValidationCheck:
    """Nodes with several unlabeled edges and no choices lose them on save."""
    ambiguous: list[str] = []
    for source, edges in graph.edges_by_source().items():
        if not any(e.is_choice for e in edges) and len(edges) > 1:
            ambiguous.append(source)
    if ambiguous:
        return ValidationCheck(
            name="ambiguous_next",
            severity="warn",
            message=(
                f"{len(ambiguous)} node(s) have several unlabeled edges and will be "
                f"saved as endings: {_preview(ambiguous)}"
            ),
        )
    return ValidationCheck(name="ambiguous_next", severity="pass")


def check_mixed_edges(graph: DialogueGraph) -> ValidationCheck:
    """Nodes mixing choices and plain edges drop the plain edges on save."""
    mixed: list[str] = []
    for source, edges in graph.edges_by_source().items():
        labeled = any(e.is_choice for e in edges)
        unlabeled = any(not e.is_choice for e in edges)
        if labeled and unlabeled:
            mixed.append(source)
    if mixed:
        return ValidationCheck(
            name="mixed_edges",
            severity="warn",
            message=(
                f"{len(mixed)} node(s) mix choices with unlabeled edges; "
                f"unlabeled edges are not saved: {_preview(mixed)}"
            ),
        )
    return ValidationCheck(name="mixed_edges", severity="pass")


def check_graph(graph: DialogueGraph, start_id: str) -> ValidationReport:
    """Run all structural checks.

    Args:
        graph: Graph to validate.
        start_id: Node the dialogue starts at.

    Returns:
        Report with one check per rule, in a stable order.
    """
    return ValidationReport(
        checks=[
            check_unique_node_ids(graph),
            check_unique_edge_ids(graph),
            check_edge_endpoints(graph),
            check_start_node(graph, start_id),
            check_terminal_reachable(graph, start_id),
            check_unreachable_nodes(graph, start_id),
            check_ambiguous_next(graph),
            check_mixed_edges(graph),
        ]
    )
