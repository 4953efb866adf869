"""yarnflow: branching dialogue scripts, editor graphs and Yarn-style text."""

from yarnflow.formats.yarn import parse_dialect, serialize_dialect
from yarnflow.graph.codec import collapse, expand
from yarnflow.graph.reachability import is_reachable
from yarnflow.models import DialogueGraph, GraphEdge, GraphNode, ScriptChoice, ScriptNode

__version__ = "0.1.0"

__all__ = [
    "DialogueGraph",
    "GraphEdge",
    "GraphNode",
    "ScriptChoice",
    "ScriptNode",
    "__version__",
    "collapse",
    "expand",
    "is_reachable",
    "parse_dialect",
    "serialize_dialect",
]
