"""Configuration for the test execution orchestrator."""

from collections.abc import Mapping, Sequence
from pathlib import Path

from pydantic import BaseModel, Field, PositiveFloat

JEST_BASE_COMMAND = (
    "node",
    "--max-old-space-size=1024",
    "node_modules/.bin/jest",
    "--runInBand",
    "--json",
    "--forceExit",
)


class RunnerConfig(BaseModel):
    """Configuration for the orchestrator.

    Relative paths are resolved against ``project_root``, the directory of
    the backend whose tests are run.
    """

    project_root: Path = Path(".")

    unit_command: Sequence[str] = JEST_BASE_COMMAND
    unit_report: str = "test-results-unit.json"
    end_to_end_command: Sequence[str] = (
        *JEST_BASE_COMMAND,
        "--config",
        "./test/jest-e2e.json",
    )
    end_to_end_report: str = "test-results-e2e.json"
    framework_env: Mapping[str, str] = Field(
        default_factory=lambda: {"NODE_ENV": "test", "FORCE_COLOR": "0"}
    )
    # None lets a framework run as long as it needs
    framework_timeout: PositiveFloat | None = None

    collection_dir: str = "postman"
    collections: Sequence[str] = ("auth", "orders", "admin")
    collection_command: Sequence[str] = ("npx", "newman", "run")
    collection_env: Mapping[str, str] = Field(
        default_factory=lambda: {"NODE_ENV": "test"}
    )
    collection_timeout: PositiveFloat = 60.0

    run_all_collections: bool = False
    stream_output: bool = True

    def resolve(self, relative: str | Path) -> Path:
        """Resolve a configured path against the project root."""
        return self.project_root / relative

    def collection_report(self, collection: str) -> Path:
        """Scratch report path for one collection run."""
        return self.resolve(f"newman-{collection}.json")
