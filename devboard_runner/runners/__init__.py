"""Suite runners and the run ids they are registered under."""

from collections.abc import Mapping

from devboard_runner.config import RunnerConfig
from devboard_runner.runners.base import SuiteOutcome, SuiteRunner
from devboard_runner.runners.collection import CollectionRunner
from devboard_runner.runners.structured import StructuredReportRunner

UNIT = "unit"
END_TO_END = "end-to-end"
COLLECTION = "collection"


def default_runners(config: RunnerConfig) -> Mapping[str, SuiteRunner]:
    """Build the runners for every run id, in execution order."""
    return {
        UNIT: StructuredReportRunner(
            config=config,
            name="Unit Tests",
            kind="unit-framework",
            command=config.unit_command,
            report=config.unit_report,
        ),
        END_TO_END: StructuredReportRunner(
            config=config,
            name="E2E Tests",
            kind="end-to-end-framework",
            command=config.end_to_end_command,
            report=config.end_to_end_report,
        ),
        COLLECTION: CollectionRunner(
            config=config,
            name="API Collections",
            kind="api-collection",
        ),
    }


__all__ = [
    "COLLECTION",
    "END_TO_END",
    "UNIT",
    "CollectionRunner",
    "StructuredReportRunner",
    "SuiteOutcome",
    "SuiteRunner",
    "default_runners",
]
