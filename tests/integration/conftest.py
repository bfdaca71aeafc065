"""Fixtures for integration tests."""

import json
import sys
from pathlib import Path
from typing import Any, Protocol

import pytest

from devboard_runner.config import RunnerConfig

FRAMEWORK_SCRIPT = """\
import json
import sys

REPORT = json.loads({report!r})

for arg in sys.argv[1:]:
    if arg.startswith("--outputFile=") and REPORT is not None:
        with open(arg.split("=", 1)[1], "w") as f:
            json.dump(REPORT, f)

print("PASS src/menu/menu.service.spec.ts")
print("  \\u2713 lists dishes (3 ms)")
print("Tests: {summary}", file=sys.stderr)
sys.exit({exit_code})
"""

COLLECTION_SCRIPT = """\
import json
import sys

REPORTS = json.loads({reports!r})

collection = sys.argv[1]
name = collection.rsplit("/", 1)[-1].removesuffix(".json")
export = sys.argv[sys.argv.index("--reporter-json-export") + 1]

if REPORTS.get(name) is not None:
    with open(export, "w") as f:
        json.dump(REPORTS[name], f)

print("newman")
print(name)
print({transcript!r})
sys.exit(0)
"""


class FrameworkFn(Protocol):
    """Protocol for fake framework creation function."""

    def __call__(
        self,
        report: dict[str, Any] | None,
        *,
        summary: str = "2 passed, 2 total",
        exit_code: int = 0,
    ) -> list[str]:
        """Write a fake framework and return the command running it."""


class CollectionToolFn(Protocol):
    """Protocol for fake collection runner creation function."""

    def __call__(
        self,
        reports: dict[str, dict[str, Any] | None],
        *,
        transcript: str = "",
    ) -> list[str]:
        """Write a fake collection runner and return the command running it."""


class CreateCollectionFn(Protocol):
    """Protocol for collection definition creation function."""

    def __call__(self, name: str) -> Path:
        """Create a collection definition file and return its path."""


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Create a backend project directory."""
    root = tmp_path / "backend"
    (root / "postman").mkdir(parents=True)
    return root


@pytest.fixture
def config(project_root: Path) -> RunnerConfig:
    """Configuration rooted in the project directory, streaming output."""
    return RunnerConfig(project_root=project_root, stream_output=True)


@pytest.fixture
def fake_framework(tmp_path: Path) -> FrameworkFn:
    """Return a function to write a fake structured-report framework."""
    counter = iter(range(1000))

    def _create(
        report: dict[str, Any] | None,
        *,
        summary: str = "2 passed, 2 total",
        exit_code: int = 0,
    ) -> list[str]:
        script = tmp_path / f"framework_{next(counter)}.py"
        script.write_text(
            FRAMEWORK_SCRIPT.format(
                report=json.dumps(report), summary=summary, exit_code=exit_code
            )
        )
        return [sys.executable, str(script)]

    return _create


@pytest.fixture
def fake_collection_tool(tmp_path: Path) -> CollectionToolFn:
    """Return a function to write a fake collection runner."""
    counter = iter(range(1000))

    def _create(
        reports: dict[str, dict[str, Any] | None],
        *,
        transcript: str = "",
    ) -> list[str]:
        script = tmp_path / f"collection_{next(counter)}.py"
        script.write_text(
            COLLECTION_SCRIPT.format(
                reports=json.dumps(reports), transcript=transcript
            )
        )
        return [sys.executable, str(script)]

    return _create


@pytest.fixture
def create_collection(project_root: Path) -> CreateCollectionFn:
    """Return a function to create collection definition files."""

    def _create(name: str) -> Path:
        path = project_root / "postman" / f"{name}.json"
        path.write_text(json.dumps({"info": {"name": name}, "item": []}))
        return path

    return _create
