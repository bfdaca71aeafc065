"""Fixtures for unit tests."""

import json
from pathlib import Path
from typing import Any, Protocol

import pytest

from devboard_runner.config import RunnerConfig


class WriteJsonFn(Protocol):
    """Protocol for JSON file creation function."""

    def __call__(self, name: str, data: Any) -> Path:
        """Write data as JSON under the project root and return its path."""


@pytest.fixture
def config(tmp_path: Path) -> RunnerConfig:
    """Configuration rooted in a temporary project directory."""
    return RunnerConfig(project_root=tmp_path, stream_output=False)


@pytest.fixture
def write_json(tmp_path: Path) -> WriteJsonFn:
    """Return a function to write JSON files into the project root."""

    def _write(name: str, data: Any) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data))
        return path

    return _write
