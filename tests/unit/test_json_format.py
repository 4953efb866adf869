"""Tests for the JSON script format."""

from __future__ import annotations

import json
from typing import Any

import pytest

from yarnflow.formats import JsonFormat, ScriptFormatError, dumps_script, loads_script
from yarnflow.models import ScriptNode


class TestLoadsScript:
    def test_sample(self, sample_records: list[dict[str, Any]]) -> None:
        script = loads_script(json.dumps(sample_records))

        assert [n.id for n in script] == ["start", "friend", "fight", "gate"]
        assert script[0].choices[1].next == "fight"
        assert script[1].next == "gate"

    def test_optional_fields(self) -> None:
        [node] = loads_script('[{"id": "a"}]')

        assert (node.speaker, node.text) == ("", "")
        assert node.is_terminal

    def test_null_fields(self) -> None:
        [node] = loads_script('[{"id": "a", "speaker": null, "text": null, "next": null}]')

        assert node.speaker == ""
        assert node.is_terminal

    def test_choices_win(self) -> None:
        text = '[{"id": "a", "next": "c", "choices": [{"text": "Go", "next": "b"}]}]'

        [node] = loads_script(text)

        assert node.next is None
        assert len(node.choices) == 1

    def test_invalid_json(self) -> None:
        with pytest.raises(ScriptFormatError, match="not valid JSON"):
            loads_script("[{")

    def test_not_an_array(self) -> None:
        with pytest.raises(ScriptFormatError, match="expected a JSON array"):
            loads_script('{"id": "a"}')

    def test_record_not_an_object(self) -> None:
        with pytest.raises(ScriptFormatError) as exc_info:
            loads_script('[{"id": "a"}, 3]')

        assert exc_info.value.record_index == 1

    def test_missing_id_reports_record(self) -> None:
        with pytest.raises(ScriptFormatError) as exc_info:
            loads_script('[{"id": "a"}, {"id": "b"}, {"text": "no id"}]')

        assert exc_info.value.record_index == 2
        assert "record 2" in str(exc_info.value)
        assert "id" in exc_info.value.reason

    def test_choice_missing_next(self) -> None:
        with pytest.raises(ScriptFormatError):
            loads_script('[{"id": "a", "choices": [{"text": "Go"}]}]')


class TestDumpsScript:
    def test_two_space_indent_and_newline(self) -> None:
        text = dumps_script([ScriptNode(id="a", next="b"), ScriptNode(id="b")])

        assert text.endswith("]\n")
        assert '\n  {\n    "id": "a",' in text

    def test_never_writes_next_with_choices(self) -> None:
        node = ScriptNode.model_validate(
            {"id": "a", "next": "c", "choices": [{"text": "Go", "next": "b"}]}
        )

        [record] = json.loads(dumps_script([node]))

        assert "next" not in record

    def test_non_ascii_kept(self) -> None:
        text = dumps_script([ScriptNode(id="a", speaker="Zoë", text="¡Hola!")])

        assert "Zoë" in text
        assert "¡Hola!" in text

    def test_round_trip(self, sample_script: list[ScriptNode]) -> None:
        assert loads_script(dumps_script(sample_script)) == sample_script

    def test_custom_indent(self, sample_script: list[ScriptNode]) -> None:
        handler = JsonFormat(indent=4)

        text = handler.dumps(sample_script)

        assert '\n    {\n        "id": "start",' in text
        assert handler.loads(text) == sample_script
