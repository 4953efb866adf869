"""JSON script format.

A script is persisted as a JSON array of flat records::

    [
      {"id": "start", "speaker": "Hero", "text": "Hi", "next": "end"},
      {"id": "end", "speaker": "", "text": "Bye"}
    ]

``speaker`` and ``text`` may be missing or null; ``next`` and ``choices``
are mutually exclusive on output, and choices win on input.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from pydantic import ValidationError

from yarnflow.formats.errors import ScriptFormatError
from yarnflow.models.script import ScriptNode
from yarnflow.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

log = get_logger(__name__)

DEFAULT_INDENT = 2


def loads_script(text: str) -> list[ScriptNode]:
    """Parse a JSON script.

    Args:
        text: JSON document holding an array of records.

    Returns:
        Script nodes in document order.

    Raises:
        ScriptFormatError: If the document is not valid JSON, is not an
            array, or a record has the wrong shape.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ScriptFormatError(f"not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise ScriptFormatError(f"expected a JSON array, got {type(data).__name__}")

    script: list[ScriptNode] = []
    for index, record in enumerate(data):
        if not isinstance(record, dict):
            raise ScriptFormatError(f"expected an object, got {type(record).__name__}", index)
        try:
            script.append(ScriptNode.model_validate(record))
        except ValidationError as e:
            errors = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'record'}: {err['msg']}"
                for err in e.errors()
            )
            raise ScriptFormatError(errors, index) from e

    log.debug("json_script_parsed", nodes=len(script))
    return script


def dumps_script(script: Iterable[ScriptNode], *, indent: int = DEFAULT_INDENT) -> str:
    """Write a script as pretty-printed JSON (with a trailing newline)."""
    records = [node.to_record() for node in script]
    return json.dumps(records, indent=indent, ensure_ascii=False) + "\n"


class JsonFormat:
    """Read and write scripts as a JSON array."""

    format_name = "json"
    suffixes = (".json",)

    def __init__(self, indent: int = DEFAULT_INDENT) -> None:
        self.indent = indent

    def loads(self, text: str) -> list[ScriptNode]:
        """Parse a JSON script."""
        return loads_script(text)

    def dumps(self, script: Iterable[ScriptNode]) -> str:
        """Write a script as JSON."""
        return dumps_script(script, indent=self.indent)
