"""Data models for scripts and editor graphs."""

from yarnflow.models.graph import DialogueGraph, GraphEdge, GraphNode, NodeData, Position
from yarnflow.models.script import Branching, Flow, Linear, ScriptChoice, ScriptNode, Terminal

__all__ = [
    "Branching",
    "DialogueGraph",
    "Flow",
    "GraphEdge",
    "GraphNode",
    "Linear",
    "NodeData",
    "Position",
    "ScriptChoice",
    "ScriptNode",
    "Terminal",
]
