"""Tests for project configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from yarnflow.config import (
    CONFIG_FILENAME,
    DEFAULT_START_NODE,
    ConfigError,
    LayoutConfig,
    ProjectConfig,
    find_config,
    load_config,
    write_default_config,
)
from yarnflow.graph import Layout

if TYPE_CHECKING:
    from pathlib import Path


class TestProjectConfig:
    """Tests for ProjectConfig class."""

    def test_defaults(self) -> None:
        config = ProjectConfig()

        assert config.start_node == DEFAULT_START_NODE
        assert config.json_indent == 2
        assert config.layout.to_layout() == Layout()

    def test_from_dict_partial(self) -> None:
        """Missing keys fall back to defaults."""
        config = ProjectConfig.from_dict({"start_node": "intro", "layout": {"x_step": 300}})

        assert config.start_node == "intro"
        assert config.json_indent == 2
        assert config.layout == LayoutConfig(x_step=300.0, y_step=80.0)

    def test_from_dict_null_layout(self) -> None:
        config = ProjectConfig.from_dict({"layout": None})

        assert config.layout == LayoutConfig()

    def test_to_dict_round_trip(self) -> None:
        config = ProjectConfig(start_node="intro", json_indent=4)

        assert ProjectConfig.from_dict(config.to_dict()) == config

    def test_env_overrides_start_node(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("YARNFLOW_START_NODE", "prologue")

        assert ProjectConfig(start_node="intro").effective_start_node == "prologue"

    def test_without_env_uses_config(self) -> None:
        assert ProjectConfig(start_node="intro").effective_start_node == "intro"


class TestLoadConfig:
    def test_load_file(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.yaml"
        path.write_text("start_node: intro\njson_indent: 4\nlayout:\n  y_step: 120\n")

        config = load_config(path)

        assert config.start_node == "intro"
        assert config.json_indent == 4
        assert config.layout.y_step == 120.0

    def test_load_directory(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("start_node: hub\n")

        assert load_config(tmp_path).start_node == "hub"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="File not found"):
            load_config(tmp_path / "nope.yaml")

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / CONFIG_FILENAME
        path.write_text("")

        with pytest.raises(ConfigError, match="Empty file"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / CONFIG_FILENAME
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / CONFIG_FILENAME
        path.write_text("start_node: [unclosed\n")

        with pytest.raises(ConfigError) as exc_info:
            load_config(path)

        assert exc_info.value.path == path

    def test_bad_value(self, tmp_path: Path) -> None:
        path = tmp_path / CONFIG_FILENAME
        path.write_text("json_indent: wide\n")

        with pytest.raises(ConfigError):
            load_config(path)


class TestFindAndWrite:
    def test_find_without_file_gives_defaults(self, tmp_path: Path) -> None:
        assert find_config(tmp_path) == ProjectConfig()

    def test_write_then_find(self, tmp_path: Path) -> None:
        path = write_default_config(tmp_path / "project")

        assert path.name == CONFIG_FILENAME
        assert "start_node: start" in path.read_text()
        assert find_config(tmp_path / "project") == ProjectConfig()

    def test_write_refuses_overwrite(self, tmp_path: Path) -> None:
        write_default_config(tmp_path)

        with pytest.raises(FileExistsError):
            write_default_config(tmp_path)
