"""Unified result model shared by every report format."""

from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Literal

from pydantic import Field, NonNegativeInt, computed_field

from devboard_runner.models.base import Model

type TestStatus = Literal["passed", "failed", "skipped", "running", "idle"]
type SuiteKind = Literal["unit-framework", "end-to-end-framework", "api-collection"]


class TestResult(Model):
    """Outcome of a single assertion or request."""

    __test__ = False

    id: str
    name: str
    status: TestStatus
    duration_ms: NonNegativeInt = 0
    error_message: str | None = None
    raw_output: str | None = None


class TestSuite(Model):
    """Named group of results sharing one origin (a file or a collection).

    Totals are derived from ``results`` so they can never disagree with it.
    """

    __test__ = False

    name: str
    kind: SuiteKind
    results: Sequence[TestResult] = Field(default_factory=tuple)

    @computed_field(alias="totalPassed")  # type: ignore[prop-decorator]
    @property
    def total_passed(self) -> int:
        """Number of passed results."""
        return sum(1 for r in self.results if r.status == "passed")

    @computed_field(alias="totalFailed")  # type: ignore[prop-decorator]
    @property
    def total_failed(self) -> int:
        """Number of failed results."""
        return sum(1 for r in self.results if r.status == "failed")

    @computed_field(alias="totalDurationMs")  # type: ignore[prop-decorator]
    @property
    def total_duration_ms(self) -> int:
        """Sum of result durations."""
        return sum(r.duration_ms for r in self.results)

    @property
    def total_skipped(self) -> int:
        """Results that neither passed nor failed."""
        return len(self.results) - self.total_passed - self.total_failed


class RunSummary(Model):
    """Totals across all suites of one run."""

    total: int = 0
    passed: int = 0
    failed: int = 0
    duration_ms: int = 0

    @classmethod
    def from_suites(cls, suites: Sequence[TestSuite]) -> "RunSummary":
        """Sum the totals of the given suites."""
        return cls(
            total=sum(len(s.results) for s in suites),
            passed=sum(s.total_passed for s in suites),
            failed=sum(s.total_failed for s in suites),
            duration_ms=sum(s.total_duration_ms for s in suites),
        )


class RunResponse(Model):
    """Everything one run produced, as served to the dashboard."""

    suites: Sequence[TestSuite] = Field(default_factory=tuple)
    summary: RunSummary = Field(default_factory=RunSummary)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    combined_raw_output: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def success(self) -> bool:
        """A run succeeds when nothing failed."""
        return self.summary.failed == 0

    @classmethod
    def build(
        cls,
        suites: Sequence[TestSuite],
        raw_output: str | None = None,
    ) -> "RunResponse":
        """Build a response from executed suites.

        When ``raw_output`` is given (verbose runs) it is also attached to
        every result that has no output of its own, so the dashboard can show
        it when a single test is expanded.
        """
        if raw_output is not None:
            suites = [
                suite.model_copy(
                    update={
                        "results": tuple(
                            r
                            if r.raw_output
                            else r.model_copy(update={"raw_output": raw_output})
                            for r in suite.results
                        )
                    }
                )
                for suite in suites
            ]

        return cls(
            suites=tuple(suites),
            summary=RunSummary.from_suites(suites),
            combined_raw_output=raw_output,
        )


class RunStatus(Model):
    """Snapshot of the coordinator's run state."""

    running: bool
    current_run_id: str | None = None
