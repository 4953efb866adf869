"""ScriptFormat protocol shared by all format handlers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable

    from yarnflow.models.script import ScriptNode


class ScriptFormat(Protocol):
    """Protocol for script format handlers."""

    format_name: str
    suffixes: tuple[str, ...]

    def loads(self, text: str) -> list[ScriptNode]:
        """Parse document text into a script.

        Args:
            text: Whole document.

        Returns:
            Script nodes in document order.
        """
        ...

    def dumps(self, script: Iterable[ScriptNode]) -> str:
        """Write a script as document text.

        Args:
            script: Script nodes, written in order.

        Returns:
            Document text.
        """
        ...
