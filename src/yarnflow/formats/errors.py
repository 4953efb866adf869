"""Errors raised while reading or writing script formats."""

from __future__ import annotations


class FormatError(Exception):
    """Base class for format errors."""


class ScriptFormatError(FormatError):
    """Raised when a JSON script can't be parsed or has an invalid shape."""

    def __init__(self, reason: str, record_index: int | None = None) -> None:
        self.reason = reason
        self.record_index = record_index
        where = f" (record {record_index})" if record_index is not None else ""
        super().__init__(f"Invalid script{where}: {reason}")


class DialectParseError(FormatError):
    """Raised when dialect text is malformed.

    Attributes:
        block_index: 0-based index of the offending block.
        line_number: 1-based line where the problem was found.
        reason: What is wrong.
    """

    def __init__(self, block_index: int, line_number: int, reason: str) -> None:
        self.block_index = block_index
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"Block {block_index} (line {line_number}): {reason}")


class DialectSerializeError(FormatError):
    """Raised when a script can't be represented as dialect text."""

    def __init__(self, node_id: str, reason: str) -> None:
        self.node_id = node_id
        self.reason = reason
        super().__init__(f"Cannot write node '{node_id}' as dialect text: {reason}")


class GraphFormatError(FormatError):
    """Raised when a saved editor graph can't be parsed."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid graph document: {reason}")
