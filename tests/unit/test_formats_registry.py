"""Tests for format lookup and script file I/O."""

from __future__ import annotations

from pathlib import Path

import pytest

from yarnflow.formats import (
    GraphFormat,
    JsonFormat,
    YarnFormat,
    format_for_path,
    get_format,
    load_script,
    save_script,
)
from yarnflow.models import ScriptNode


class TestGetFormat:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [("json", JsonFormat), ("yarn", YarnFormat), ("graph", GraphFormat)],
    )
    def test_known_formats(self, name: str, expected: type) -> None:
        handler = get_format(name)

        assert isinstance(handler, expected)
        assert handler.format_name == name

    def test_unknown_format(self) -> None:
        with pytest.raises(ValueError, match="Supported: graph, json, yarn"):
            get_format("twine")


class TestFormatForPath:
    @pytest.mark.parametrize(
        ("filename", "expected"),
        [
            ("dialog.json", JsonFormat),
            ("dialog.yarn", YarnFormat),
            ("dialog.yarn.txt", YarnFormat),
            ("dialog.graph.json", GraphFormat),
            ("DIALOG.YARN", YarnFormat),
        ],
    )
    def test_suffixes(self, filename: str, expected: type) -> None:
        assert isinstance(format_for_path(Path(filename)), expected)

    def test_unknown_suffix(self) -> None:
        with pytest.raises(ValueError, match="Known suffixes"):
            format_for_path(Path("dialog.txt"))


class TestLoadSave:
    @pytest.mark.parametrize("filename", ["out.json", "out.yarn", "out.graph.json"])
    def test_round_trip(
        self, tmp_path: Path, sample_script: list[ScriptNode], filename: str
    ) -> None:
        path = save_script(sample_script, tmp_path / "nested" / filename)

        assert path.exists()
        assert load_script(path) == sample_script

    def test_explicit_format_overrides_suffix(
        self, tmp_path: Path, sample_script: list[ScriptNode]
    ) -> None:
        path = save_script(sample_script, tmp_path / "dialog.txt", format_name="yarn")

        assert path.read_text(encoding="utf-8").startswith("title: start\n")
        assert load_script(path, format_name="yarn") == sample_script

    def test_handler_overrides_format(
        self, tmp_path: Path, sample_script: list[ScriptNode]
    ) -> None:
        path = save_script(sample_script, tmp_path / "dialog.json", handler=JsonFormat(indent=0))

        assert path.read_text(encoding="utf-8").startswith('[\n{\n"id": "start"')

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_script(tmp_path / "missing.json")
