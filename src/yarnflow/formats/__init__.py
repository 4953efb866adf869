"""Script format handlers (JSON, Yarn dialect, editor graph)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from yarnflow.formats.base import ScriptFormat
from yarnflow.formats.errors import (
    DialectParseError,
    DialectSerializeError,
    FormatError,
    GraphFormatError,
    ScriptFormatError,
)
from yarnflow.formats.graph_format import GraphFormat, dumps_graph, loads_graph
from yarnflow.formats.json_format import JsonFormat, dumps_script, loads_script
from yarnflow.formats.yarn import YarnFormat, parse_dialect, serialize_dialect
from yarnflow.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from yarnflow.models.script import ScriptNode

log = get_logger(__name__)

_FORMATS: dict[str, type[JsonFormat | YarnFormat | GraphFormat]] = {
    "json": JsonFormat,
    "yarn": YarnFormat,
    "graph": GraphFormat,
}


def get_format(format_name: str) -> JsonFormat | YarnFormat | GraphFormat:
    """Get a format handler by name.

    Args:
        format_name: Format name (e.g., "json", "yarn", "graph").

    Returns:
        Format handler instance.

    Raises:
        ValueError: If the format is not supported.
    """
    cls = _FORMATS.get(format_name)
    if cls is None:
        supported = ", ".join(sorted(_FORMATS))
        msg = f"Unknown format '{format_name}'. Supported: {supported}"
        raise ValueError(msg)
    return cls()


def format_for_path(path: Path) -> JsonFormat | YarnFormat | GraphFormat:
    """Pick a format handler from a file name.

    The longest matching suffix wins, so ``dialog.graph.json`` is a graph
    document and ``dialog.json`` a plain script.

    Raises:
        ValueError: If no format claims the suffix.
    """
    name = path.name.lower()
    candidates = [
        (len(suffix), format_name)
        for format_name, cls in _FORMATS.items()
        for suffix in cls.suffixes
        if name.endswith(suffix)
    ]
    if not candidates:
        supported = ", ".join(sorted(s for cls in _FORMATS.values() for s in cls.suffixes))
        msg = f"Can't tell the format of '{path.name}'. Known suffixes: {supported}"
        raise ValueError(msg)
    return get_format(max(candidates)[1])


def load_script(path: Path, format_name: str | None = None) -> list[ScriptNode]:
    """Read a script file.

    Args:
        path: File to read (UTF-8).
        format_name: Format to use. Defaults to the one matching the suffix.

    Returns:
        Script nodes in document order.
    """
    handler = get_format(format_name) if format_name else format_for_path(path)
    script = handler.loads(path.read_text(encoding="utf-8"))
    log.info("script_loaded", path=str(path), format=handler.format_name, nodes=len(script))
    return script


def save_script(
    script: Iterable[ScriptNode],
    path: Path,
    format_name: str | None = None,
    handler: ScriptFormat | None = None,
) -> Path:
    """Write a script file, creating parent directories as needed.

    Args:
        script: Script to write.
        path: Destination file.
        format_name: Format to use. Defaults to the one matching the suffix.
        handler: Pre-configured handler; overrides ``format_name``.

    Returns:
        The written path.
    """
    if handler is None:
        handler = get_format(format_name) if format_name else format_for_path(path)
    nodes = list(script)
    text = handler.dumps(nodes)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    log.info("script_saved", path=str(path), format=handler.format_name, nodes=len(nodes))
    return path


__all__ = [
    "DialectParseError",
    "DialectSerializeError",
    "FormatError",
    "GraphFormat",
    "GraphFormatError",
    "JsonFormat",
    "ScriptFormat",
    "ScriptFormatError",
    "YarnFormat",
    "dumps_graph",
    "dumps_script",
    "format_for_path",
    "get_format",
    "load_script",
    "loads_graph",
    "loads_script",
    "parse_dialect",
    "save_script",
    "serialize_dialect",
]
