"""Graph package - conversion, validation and editing of dialogue graphs.

The editor graph is a caller-owned ``DialogueGraph`` value. Functions in
this package read it and return new values; none of them keep state
between calls.
"""

from yarnflow.graph.codec import Layout, collapse, edge_id, expand, layout_position
from yarnflow.graph.editing import (
    add_choice,
    add_node,
    change_edge,
    connect,
    move_node,
    remove_edge,
    remove_node,
    update_node,
)
from yarnflow.graph.errors import (
    DanglingReferenceError,
    DuplicateEdgeError,
    DuplicateNodeError,
    EdgeEndpointError,
    EdgeNotFoundError,
    GraphIntegrityError,
    NodeExistsError,
    NodeNotFoundError,
)
from yarnflow.graph.reachability import is_reachable, reachable_ids
from yarnflow.graph.validation import check_graph
from yarnflow.graph.validation_types import ValidationCheck, ValidationReport

__all__ = [
    "DanglingReferenceError",
    "DuplicateEdgeError",
    "DuplicateNodeError",
    "EdgeEndpointError",
    "EdgeNotFoundError",
    "GraphIntegrityError",
    "Layout",
    "NodeExistsError",
    "NodeNotFoundError",
    "ValidationCheck",
    "ValidationReport",
    "add_choice",
    "add_node",
    "change_edge",
    "check_graph",
    "collapse",
    "connect",
    "edge_id",
    "expand",
    "is_reachable",
    "layout_position",
    "move_node",
    "reachable_ids",
    "remove_edge",
    "remove_node",
    "update_node",
]
