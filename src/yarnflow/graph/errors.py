"""Graph integrity error types with actionable feedback.

These errors are raised when a script or graph violates referential
integrity, similar to foreign key constraint violations in databases:
an edge or ``next`` pointing at a node that does not exist, or two nodes
claiming the same id.

Each error type can format itself as human-readable feedback for the
author (shown by the CLI and by editor hosts).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from difflib import get_close_matches


class GraphIntegrityError(Exception):
    """Base class for graph integrity violations.

    Subclasses must implement to_feedback() to explain what is wrong
    and how to fix it.
    """

    def to_feedback(self) -> str:
        """Format error as actionable feedback.

        Returns:
            Human-readable error message explaining what's wrong,
            why it's wrong, and how to fix it.
        """
        raise NotImplementedError


def _suggest(node_id: str, available: list[str]) -> list[str]:
    """Find similar ids that might be typos."""
    return get_close_matches(node_id, available, n=3, cutoff=0.6)


def _list_ids(title: str, ids: list[str], limit: int = 20) -> list[str]:
    lines = [title]
    for a in sorted(ids)[:limit]:
        lines.append(f"  - `{a}`")
    if len(ids) > limit:
        lines.append(f"  - ... and {len(ids) - limit} more")
    return lines


@dataclass
class NodeNotFoundError(GraphIntegrityError):
    """Raised when referencing a non-existent node.

    Attributes:
        node_id: The ID that was referenced but doesn't exist.
        available: List of valid IDs that could be used instead.
        context: Description of where the reference occurred.
    """

    node_id: str
    available: list[str] = field(default_factory=list)
    context: str = ""

    def __post_init__(self) -> None:
        msg = f"Node '{self.node_id}' not found"
        if self.context:
            msg += f" ({self.context})"
        super().__init__(msg)

    def to_feedback(self) -> str:
        """Format as actionable feedback."""
        lines = [
            "## Reference Error: Node Not Found",
            "",
            f"**You referenced**: `{self.node_id}`",
        ]
        if self.context:
            lines.append(f"**Context**: {self.context}")
        lines.extend(["", "**Problem**: This node does not exist in the graph.", ""])

        suggestions = _suggest(self.node_id, self.available)
        if suggestions:
            lines.append("**Did you mean one of these?**")
            lines.extend(f"  - `{s}`" for s in suggestions)
            lines.append("")

        if self.available:
            lines.extend(_list_ids("**Valid IDs**:", self.available))

        return "\n".join(lines)


@dataclass
class DanglingReferenceError(NodeNotFoundError):
    """Raised when a script or graph points at a node that does not exist.

    ``referenced_by`` names the node (for a ``next`` or choice) or the edge
    that holds the broken reference.
    """

    referenced_by: str = ""

    def __post_init__(self) -> None:
        if not self.context and self.referenced_by:
            self.context = f"referenced by {self.referenced_by}"
        super().__post_init__()


@dataclass
class NodeExistsError(GraphIntegrityError):
    """Raised when creating a node whose ID is already taken.

    Attributes:
        node_id: The ID that already exists.
    """

    node_id: str

    def __post_init__(self) -> None:
        super().__init__(f"Node '{self.node_id}' already exists")

    def to_feedback(self) -> str:
        """Format as actionable feedback."""
        return f"""## Error: Node Already Exists

**You tried to create**: `{self.node_id}`

**Problem**: A node with this ID already exists in the graph.

**Solutions**:
1. Use a different ID if this is meant to be a new node
2. If you want to modify the existing node, update it instead
"""


@dataclass
class DuplicateNodeError(GraphIntegrityError):
    """Raised when a script or graph contains the same node ID twice.

    Attributes:
        node_id: The duplicated ID.
        count: How many times it occurs.
    """

    node_id: str
    count: int = 2

    def __post_init__(self) -> None:
        super().__init__(f"Node id '{self.node_id}' occurs {self.count} times")

    def to_feedback(self) -> str:
        """Format as actionable feedback."""
        return "\n".join(
            [
                "## Error: Duplicate Node ID",
                "",
                f"**Node**: `{self.node_id}` appears {self.count} times.",
                "",
                "**Solution**: Node ids must be unique. Rename all but one of them.",
            ]
        )


@dataclass
class DuplicateEdgeError(GraphIntegrityError):
    """Raised when a graph contains the same edge ID twice."""

    edge_id: str
    count: int = 2

    def __post_init__(self) -> None:
        super().__init__(f"Edge id '{self.edge_id}' occurs {self.count} times")

    def to_feedback(self) -> str:
        """Format as actionable feedback."""
        return "\n".join(
            [
                "## Error: Duplicate Edge ID",
                "",
                f"**Edge**: `{self.edge_id}` appears {self.count} times.",
                "",
                "**Solution**: Edge ids must be unique. Remove or re-create the duplicates.",
            ]
        )


@dataclass
class EdgeNotFoundError(GraphIntegrityError):
    """Raised when referencing a non-existent edge."""

    edge_id: str
    available: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        super().__init__(f"Edge '{self.edge_id}' not found")

    def to_feedback(self) -> str:
        """Format as actionable feedback."""
        lines = [
            "## Reference Error: Edge Not Found",
            "",
            f"**You referenced**: `{self.edge_id}`",
            "",
        ]
        if self.available:
            lines.extend(_list_ids("**Valid edge IDs**:", self.available, limit=10))
        return "\n".join(lines)


@dataclass
class EdgeEndpointError(GraphIntegrityError):
    """Raised when an edge would reference non-existent endpoints.

    Both the source and target nodes must exist before an edge can be
    created between them.

    Attributes:
        source: Source node ID.
        target: Target node ID.
        missing: Which endpoint is missing ("source", "target", or "both").
        available: Valid node IDs.
    """

    source: str
    target: str
    missing: str  # "source", "target", or "both"
    available: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.missing == "both":
            msg = f"Edge endpoints not found: '{self.source}' and '{self.target}'"
        elif self.missing == "source":
            msg = f"Edge source not found: '{self.source}'"
        else:
            msg = f"Edge target not found: '{self.target}'"
        super().__init__(msg)

    def to_feedback(self) -> str:
        """Format as actionable feedback."""
        lines = [
            "## Error: Edge Endpoint Not Found",
            "",
            f"**Source**: `{self.source}`",
            f"**Target**: `{self.target}`",
            "",
        ]
        if self.missing in ("source", "both"):
            lines.append(f"**Problem**: Source node `{self.source}` does not exist.")
        if self.missing in ("target", "both"):
            lines.append(f"**Problem**: Target node `{self.target}` does not exist.")
        lines.append("")
        if self.available:
            lines.extend(_list_ids("**Valid node IDs**:", self.available, limit=10))
            lines.append("")
        lines.append("**Solution**: Create the nodes first, then connect them.")
        return "\n".join(lines)
