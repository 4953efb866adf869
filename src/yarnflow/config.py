"""Project configuration loading.

Configuration lives in ``yarnflow.yaml`` next to the dialogue files::

    start_node: start
    json_indent: 2
    layout:
      x_step: 200
      y_step: 80

Resolution order for the start node:
1. Command line option (handled by the CLI)
2. Environment variable YARNFLOW_START_NODE
3. Config file
4. Default ("start")
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any

from ruamel.yaml import YAML

from yarnflow.graph.codec import DEFAULT_X_STEP, DEFAULT_Y_STEP, Layout

CONFIG_FILENAME = "yarnflow.yaml"
DEFAULT_START_NODE = "start"
DEFAULT_JSON_INDENT = 2
START_NODE_ENV = "YARNFLOW_START_NODE"


@dataclass
class LayoutConfig:
    """Placement of expanded nodes on the editor canvas."""

    x_step: float = DEFAULT_X_STEP
    y_step: float = DEFAULT_Y_STEP

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LayoutConfig:
        return cls(
            x_step=float(data.get("x_step", DEFAULT_X_STEP)),
            y_step=float(data.get("y_step", DEFAULT_Y_STEP)),
        )

    def to_layout(self) -> Layout:
        return Layout(x_step=self.x_step, y_step=self.y_step)


@dataclass
class ProjectConfig:
    """Configuration for a yarnflow project."""

    start_node: str = DEFAULT_START_NODE
    json_indent: int = DEFAULT_JSON_INDENT
    layout: LayoutConfig = field(default_factory=LayoutConfig)

    @property
    def effective_start_node(self) -> str:
        """Start node after applying the YARNFLOW_START_NODE override."""
        return os.getenv(START_NODE_ENV) or self.start_node

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProjectConfig:
        """Create config from dictionary.

        Args:
            data: Dictionary containing config fields.

        Returns:
            ProjectConfig instance.
        """
        layout_data = data.get("layout") or {}
        return cls(
            start_node=str(data.get("start_node", DEFAULT_START_NODE)),
            json_indent=int(data.get("json_indent", DEFAULT_JSON_INDENT)),
            layout=LayoutConfig.from_dict(dict(layout_data)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_node": self.start_node,
            "json_indent": self.json_indent,
            "layout": {"x_step": self.layout.x_step, "y_step": self.layout.y_step},
        }


class ConfigError(Exception):
    """Raised when project configuration cannot be loaded."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load config at {path}: {reason}")


def load_config(path: Path) -> ProjectConfig:
    """Load configuration from a YAML file.

    Args:
        path: Config file, or a directory containing ``yarnflow.yaml``.

    Returns:
        ProjectConfig instance.

    Raises:
        ConfigError: If the file is missing, empty, or invalid.
    """
    config_path = path / CONFIG_FILENAME if path.is_dir() else path

    if not config_path.exists():
        raise ConfigError(config_path, "File not found")

    yaml = YAML(typ="safe")
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.load(f)

        if data is None:
            raise ConfigError(config_path, "Empty file")
        if not isinstance(data, dict):
            raise ConfigError(config_path, "Expected a mapping at the top level")

        return ProjectConfig.from_dict(dict(data))
    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(config_path, str(e)) from e


def find_config(directory: Path) -> ProjectConfig:
    """Load ``yarnflow.yaml`` from ``directory`` if present, else defaults."""
    config_path = directory / CONFIG_FILENAME
    if config_path.exists():
        return load_config(config_path)
    return ProjectConfig()


def write_default_config(directory: Path) -> Path:
    """Write a default ``yarnflow.yaml`` into ``directory``.

    Returns:
        Path to the written file.

    Raises:
        FileExistsError: If the file already exists.
    """
    directory.mkdir(parents=True, exist_ok=True)
    config_path = directory / CONFIG_FILENAME
    if config_path.exists():
        raise FileExistsError(config_path)

    yaml_writer = YAML()
    yaml_writer.default_flow_style = False
    with config_path.open("w", encoding="utf-8") as f:
        yaml_writer.dump(ProjectConfig().to_dict(), f)
    return config_path
