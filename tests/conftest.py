"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import Any

import pytest

from yarnflow.models import ScriptNode


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer environment overrides out of test runs."""
    monkeypatch.delenv("YARNFLOW_START_NODE", raising=False)
    monkeypatch.delenv("YARNFLOW_CONFIG", raising=False)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def sample_records() -> list[dict[str, Any]]:
    """A small dialogue as persisted JSON records.

    ``start`` branches, ``fight`` loops back to ``start`` and ``gate`` ends.
    """
    return [
        {
            "id": "start",
            "speaker": "Guard",
            "text": "Halt! Who goes there?",
            "choices": [
                {"text": "A friend", "next": "friend"},
                {"text": "None of your business", "next": "fight"},
            ],
        },
        {"id": "friend", "speaker": "Guard", "text": "Then pass, friend.", "next": "gate"},
        {"id": "fight", "speaker": "Guard", "text": "Then you shall not pass!", "next": "start"},
        {"id": "gate", "speaker": "", "text": "The gate swings open.\nYou step inside."},
    ]


@pytest.fixture
def sample_script(sample_records: list[dict[str, Any]]) -> list[ScriptNode]:
    """The sample dialogue as script nodes."""
    return [ScriptNode.model_validate(record) for record in sample_records]
