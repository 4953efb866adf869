"""Yarn-style dialect format.

Each node is a block::

    title: start
    ---
    Hero: Hello there
    <<choice "Leave" goto:end>>
    ===

Headers (``key: value``) run until ``---``; ``title`` is required and
names the node. The body holds speech lines and ``<<command>>`` lines and
ends at ``===``. Only two commands carry meaning:

- ``<<jump <id>>>`` continues to a single node (the last jump wins)
- ``<<choice "<text>" goto:<id>>>`` adds a choice; choices win over jumps

The first speech line may start with ``Name:``, which becomes the speaker.
A first line starting with a backslash is escaped: the backslash is
dropped and no speaker is read from it.

Format reference: https://docs.yarnspinner.dev/getting-started/writing-in-yarn
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from yarnflow.formats.errors import DialectParseError, DialectSerializeError
from yarnflow.models.script import ScriptChoice, ScriptNode
from yarnflow.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

log = get_logger(__name__)

TITLE_HEADER = "title"
BODY_START = "---"
BODY_END = "==="
ESCAPE = "\\"
GOTO_PREFIX = "goto:"

HEADER_RE = re.compile(r"^\s*([A-Za-z_][\w.-]*)\s*:\s*(.*?)\s*$")
SPEAKER_RE = re.compile(r"^([^\s:\\][^:\\]*?): ?(.*)$")
SPEAKER_NAME_RE = re.compile(r"[^\s:\\][^:\\\n]*")
COMMAND_RE = re.compile(r"^\s*<<(.*)>>\s*$")
TOKEN_RE = re.compile(r'"((?:[^"\\]|\\.)*)"|(\S+)')
UNESCAPE_RE = re.compile(r"\\(.)")


@dataclass
class _Param:
    value: str
    quoted: bool


@dataclass
class _Block:
    """A block being parsed."""

    index: int
    line: int
    title: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    speech: list[str] = field(default_factory=list)
    next: str | None = None
    choices: list[ScriptChoice] = field(default_factory=list)
    in_body: bool = False

    def to_node(self) -> ScriptNode:
        speaker = ""
        lines = list(self.speech)
        if lines:
            first = lines[0]
            if first.startswith(ESCAPE):
                lines[0] = first[1:]
            elif match := SPEAKER_RE.match(first):
                speaker, lines[0] = match.group(1), match.group(2)

        return ScriptNode(
            id=self.title,
            speaker=speaker,
            text="\n".join(lines),
            next=self.next,
            choices=self.choices,
        )


def _is_command(line: str) -> bool:
    return COMMAND_RE.match(line) is not None


def _tokenize(body: str) -> list[_Param]:
    params: list[_Param] = []
    for match in TOKEN_RE.finditer(body):
        quoted, bare = match.groups()
        if quoted is not None:
            params.append(_Param(UNESCAPE_RE.sub(r"\1", quoted), quoted=True))
        else:
            params.append(_Param(bare, quoted=False))
    return params


def _apply_command(block: _Block, body: str, line_number: int) -> None:
    params = _tokenize(body)
    if not params:
        log.debug("dialect_command_ignored", block=block.index, line=line_number, command="")
        return

    name, args = params[0].value, params[1:]
    if name == "jump":
        if len(args) != 1:
            raise DialectParseError(block.index, line_number, "jump expects exactly one target")
        block.next = args[0].value
    elif name == "choice":
        goto = next(
            (p for p in args if not p.quoted and p.value.startswith(GOTO_PREFIX)),
            None,
        )
        if goto is None or len(goto.value) == len(GOTO_PREFIX):
            log.debug("dialect_choice_dropped", block=block.index, line=line_number)
            return
        label = next((p.value for p in args if p is not goto), "")
        if not label:
            raise DialectParseError(block.index, line_number, "choice needs display text")
        block.choices.append(ScriptChoice(text=label, next=goto.value[len(GOTO_PREFIX) :]))
    else:
        log.debug("dialect_command_ignored", block=block.index, line=line_number, command=name)


def _read_header(block: _Block, line: str, line_number: int, titles: dict[str, int]) -> None:
    match = HEADER_RE.match(line)
    if match is None:
        raise DialectParseError(
            block.index, line_number, f"expected a 'key: value' header, got {line.strip()!r}"
        )
    key, value = match.groups()
    if key != TITLE_HEADER:
        block.headers[key] = value
        return

    if block.title:
        raise DialectParseError(block.index, line_number, "block has more than one title header")
    if not value or any(ch.isspace() for ch in value):
        raise DialectParseError(block.index, line_number, "title must be a single non-empty word")
    if value in titles:
        raise DialectParseError(
            block.index,
            line_number,
            f"duplicate title '{value}' (first used in block {titles[value]})",
        )
    block.title = value


def parse_dialect(text: str) -> list[ScriptNode]:
    """Parse dialect text into a script.

    Args:
        text: Whole document.

    Returns:
        Script nodes in document order.

    Raises:
        DialectParseError: If any block is malformed. Nothing is returned
            for the blocks before it.
    """
    nodes: list[ScriptNode] = []
    titles: dict[str, int] = {}
    block: _Block | None = None

    for line_number, raw in enumerate(text.split("\n"), start=1):
        line = raw.removesuffix("\r")
        stripped = line.strip()

        if block is None:
            if not stripped:
                continue
            block = _Block(index=len(nodes), line=line_number)

        if not block.in_body:
            if stripped == BODY_START:
                if not block.title:
                    raise DialectParseError(block.index, line_number, "missing title header")
                block.in_body = True
            elif stripped == BODY_END:
                raise DialectParseError(block.index, line_number, "block closed before '---'")
            elif stripped:
                _read_header(block, line, line_number, titles)
            continue

        if stripped == BODY_END:
            node = block.to_node()
            titles[node.id] = block.index
            nodes.append(node)
            block = None
        elif command := COMMAND_RE.match(line):
            _apply_command(block, command.group(1), line_number)
        else:
            block.speech.append(line)

    if block is not None:
        where = f"'{block.title}'" if block.title else "untitled block"
        raise DialectParseError(
            block.index, block.line, f"unterminated block {where} (missing '{BODY_END}')"
        )

    log.debug("dialect_parsed", nodes=len(nodes))
    return nodes


def _check_id(node_id: str, owner: str, what: str) -> None:
    if not node_id or any(ch.isspace() for ch in node_id):
        raise DialectSerializeError(owner, f"{what} {node_id!r} must be a single non-empty word")


def _quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _speech_lines(node: ScriptNode) -> list[str]:
    lines = node.text.split("\n")
    first = lines[0]
    if node.speaker:
        if not SPEAKER_NAME_RE.fullmatch(node.speaker):
            raise DialectSerializeError(
                node.id, f"speaker {node.speaker!r} can't contain ':' or '\\' or a line break"
            )
        lines[0] = f"{node.speaker}: {first}"
        if _is_command(lines[0]):
            raise DialectSerializeError(
                node.id, f"speaker line {lines[0]!r} would be read as a command"
            )
    elif (
        first.startswith(ESCAPE)
        or SPEAKER_RE.match(first)
        or first.strip() == BODY_END
        or _is_command(first)
    ):
        lines[0] = ESCAPE + first

    for line in lines[1:]:
        if line.strip() == BODY_END or _is_command(line):
            raise DialectSerializeError(node.id, f"text line {line!r} would end the block")
    return lines


def _jump_target(node_id: str) -> str:
    # a bare target starting with a quote would be read back as quoted text
    return _quote(node_id) if node_id.startswith('"') else node_id


def _render_node(node: ScriptNode) -> list[str]:
    _check_id(node.id, node.id, "id")
    lines = [f"{TITLE_HEADER}: {node.id}", BODY_START, *_speech_lines(node)]

    for choice in node.choices:
        _check_id(choice.next, node.id, "choice target")
        if "\n" in choice.text:
            raise DialectSerializeError(node.id, "choice text can't contain a line break")
        lines.append(f"<<choice {_quote(choice.text)} {GOTO_PREFIX}{choice.next}>>")
    if node.next is not None:
        _check_id(node.next, node.id, "jump target")
        lines.append(f"<<jump {_jump_target(node.next)}>>")

    lines.extend([BODY_END, ""])
    return lines


def serialize_dialect(script: Iterable[ScriptNode]) -> str:
    """Write a script as dialect text.

    Args:
        script: Script nodes, written in order.

    Returns:
        Document text, one block per node separated by blank lines.

    Raises:
        DialectSerializeError: If a node can't be written without changing
            its meaning on the way back in.
    """
    blocks = [_render_node(node) for node in script]
    text = "\n".join("\n".join(block) for block in blocks)
    log.debug("dialect_serialized", nodes=len(blocks))
    return text


class YarnFormat:
    """Read and write scripts as Yarn-style dialect text."""

    format_name = "yarn"
    suffixes = (".yarn", ".yarn.txt")

    def loads(self, text: str) -> list[ScriptNode]:
        """Parse dialect text into a script."""
        return parse_dialect(text)

    def dumps(self, script: Iterable[ScriptNode]) -> str:
        """Write a script as dialect text."""
        return serialize_dialect(script)
