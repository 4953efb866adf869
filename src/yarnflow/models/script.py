"""Script models: the persisted, linear form of a dialogue.

A script is an ordered list of ``ScriptNode`` records. Each node carries
exactly one flow variant describing what follows it:

- ``Terminal``: the dialogue ends here
- ``Linear``: continue to a single successor
- ``Branching``: the player picks one of several choices

The persisted JSON shape is flat (``next`` / ``choices`` keys); the
``flow`` field is derived from it on construction. When a record carries
both ``next`` and non-empty ``choices``, choices win and ``next`` is dropped.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ScriptChoice(BaseModel):
    """A player-selectable branch: display text plus target node id."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(min_length=1)
    next: str = Field(min_length=1)


class Terminal(BaseModel):
    """Flow of a node with no successor."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["terminal"] = "terminal"


class Linear(BaseModel):
    """Flow of a node that continues to a single successor."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["linear"] = "linear"
    next: str = Field(min_length=1)


class Branching(BaseModel):
    """Flow of a node that offers ordered choices."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["branching"] = "branching"
    choices: tuple[ScriptChoice, ...] = Field(min_length=1)


Flow = Annotated[Terminal | Linear | Branching, Field(discriminator="kind")]


class ScriptNode(BaseModel):
    """One record of a dialogue script.

    Accepts either the flat persisted shape::

        {"id": "start", "speaker": "Hero", "text": "Hi", "next": "end"}

    or an explicit ``flow`` value. Nodes are immutable; use ``with_flow``
    to derive a node with a different shape.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    speaker: str = ""
    text: str = ""
    flow: Flow = Field(default_factory=Terminal)

    @model_validator(mode="before")
    @classmethod
    def _derive_flow(cls, data: Any) -> Any:
        """Map the flat ``next`` / ``choices`` keys onto a flow variant."""
        if not isinstance(data, dict):
            return data

        data = dict(data)
        next_id = data.pop("next", None)
        choices = data.pop("choices", None)
        for key in ("speaker", "text"):
            if key in data and data[key] is None:
                data[key] = ""

        if "flow" in data:
            return data
        if choices:
            data["flow"] = {"kind": "branching", "choices": choices}
        elif next_id:
            data["flow"] = {"kind": "linear", "next": next_id}
        return data

    @property
    def next(self) -> str | None:
        """Successor id for a linear node, else None."""
        if isinstance(self.flow, Linear):
            return self.flow.next
        return None

    @property
    def choices(self) -> tuple[ScriptChoice, ...]:
        """Choices of a branching node, else an empty tuple."""
        if isinstance(self.flow, Branching):
            return self.flow.choices
        return ()

    @property
    def is_terminal(self) -> bool:
        """True if nothing follows this node."""
        return isinstance(self.flow, Terminal)

    def targets(self) -> list[str]:
        """All node ids this node points at, in order."""
        if isinstance(self.flow, Linear):
            return [self.flow.next]
        return [choice.next for choice in self.choices]

    def with_flow(self, flow: Terminal | Linear | Branching) -> ScriptNode:
        """Return a copy of this node with a different flow."""
        return self.model_copy(update={"flow": flow})

    def to_record(self) -> dict[str, Any]:
        """Return the flat persisted form of this node."""
        record: dict[str, Any] = {"id": self.id, "speaker": self.speaker, "text": self.text}
        if isinstance(self.flow, Branching):
            record["choices"] = [{"text": c.text, "next": c.next} for c in self.flow.choices]
        elif isinstance(self.flow, Linear):
            record["next"] = self.flow.next
        return record
