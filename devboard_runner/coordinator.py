"""Run coordinator: serialises test runs and keeps the latest results."""

import logging
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, replace

from devboard_runner.config import RunnerConfig
from devboard_runner.errors import RunInProgressError, UnknownTestError
from devboard_runner.models.reports import StructuredReport
from devboard_runner.models.result import RunResponse, RunStatus, SuiteKind, TestSuite
from devboard_runner.reports.readers import read_report
from devboard_runner.reports.structured import parse_structured_report
from devboard_runner.runners import (
    COLLECTION,
    END_TO_END,
    UNIT,
    SuiteOutcome,
    SuiteRunner,
    default_runners,
)

log = logging.getLogger(__name__)

ALL = "all"
RAW_OUTPUT_SEPARATOR = "\n\n========================================\n\n"


@dataclass(frozen=True, kw_only=True)
class RunState:
    """Whether a run is in flight, and which one."""

    is_running: bool = False
    current_run_id: str | None = None


class RunCoordinator:
    """Runs suites one at a time and caches the most recent response.

    The coordinator is the only owner of the run state and the result cache.
    It is driven from a single event loop: the check-and-set in ``_claim``
    contains no ``await``, so two requests can never both start a run.
    """

    def __init__(
        self,
        config: RunnerConfig,
        runners: Mapping[str, SuiteRunner] | None = None,
    ) -> None:
        self.config = config
        self.runners = runners if runners is not None else default_runners(config)
        self._state = RunState()
        self._cached: RunResponse | None = None

    def status(self) -> RunStatus:
        """Current run state."""
        return RunStatus(
            running=self._state.is_running,
            current_run_id=self._state.current_run_id,
        )

    def cached_results(self) -> RunResponse | None:
        """Most recent response, or None if nothing has completed yet."""
        return self._cached

    async def run_one(self, test_id: str, *, verbose: bool = False) -> RunResponse:
        """Run a single suite.

        Args:
            test_id: One of the registered run ids
            verbose: Include the combined console output in the response

        Returns:
            The response, which also replaces the cached one

        Raises:
            UnknownTestError: If no runner is registered for ``test_id``
            RunInProgressError: If another run is in flight
            ExecutionError: If the test tool cannot be spawned; the cache is
                left untouched

        """
        if test_id not in self.runners:
            raise UnknownTestError(test_id, list(self.runners))

        with self._claim(test_id):
            log.info("Running %s tests...", test_id)
            outcome = await self.runners[test_id].run()
            return self._complete(
                outcome.suites, outcome.raw_output if verbose else None
            )

    async def run_all(self, *, verbose: bool = False) -> RunResponse:
        """Run the unit suite, then the end-to-end suite.

        The collection batch follows when ``run_all_collections`` is set. A
        sub-run that raises is recorded as a failing suite and the remaining
        sub-runs still execute.

        Raises:
            RunInProgressError: If another run is in flight

        """
        test_ids = [UNIT, END_TO_END]
        if self.config.run_all_collections:
            test_ids.append(COLLECTION)

        with self._claim(ALL):
            log.info("Running all tests: %s", ", ".join(test_ids))
            suites: list[TestSuite] = []
            outputs: list[str] = []

            for test_id in test_ids:
                self._state = replace(self._state, current_run_id=test_id)
                outcome = await self._run_captured(self.runners[test_id])
                suites.extend(outcome.suites)
                outputs.append(outcome.raw_output)

            return self._complete(
                suites, RAW_OUTPUT_SEPARATOR.join(outputs) if verbose else None
            )

    async def load_boot_results(self) -> RunResponse | None:
        """Seed the cache from the framework reports baked in ahead of time.

        The unit report is read first, then the end-to-end report. Missing or
        unreadable reports are skipped; if neither can be read the cache stays
        empty.
        """
        boot_reports: Sequence[tuple[str, SuiteKind, str]] = (
            (self.config.unit_report, "unit-framework", "Unit Tests"),
            (self.config.end_to_end_report, "end-to-end-framework", "E2E Tests"),
        )
        suites: list[TestSuite] = []
        found = 0

        for report_name, kind, suite_name in boot_reports:
            path = self.config.resolve(report_name)
            report = await read_report(path, StructuredReport)
            if report is None:
                log.info("No pre-built %s report at %s", suite_name, path)
                continue
            found += 1
            suites.extend(parse_structured_report(report, kind, suite_name))

        if not found:
            log.warning(
                "No pre-built test results found in %s, run tests to populate",
                self.config.project_root,
            )
            return None

        response = RunResponse.build(suites)
        if self._cached is None:
            self._cached = response
        log.info(
            "Loaded pre-built test results: %d passed, %d failed, %d total",
            response.summary.passed,
            response.summary.failed,
            response.summary.total,
        )
        return response

    @contextmanager
    def _claim(self, run_id: str) -> Iterator[None]:
        """Hold the run state for the duration of a run."""
        if self._state.is_running:
            raise RunInProgressError(self._state.current_run_id)

        self._state = RunState(is_running=True, current_run_id=run_id)
        try:
            yield
        except Exception as e:
            log.error("Test run %s failed: %s", run_id, e, exc_info=e)
            raise
        finally:
            self._state = RunState()

    async def _run_captured(self, runner: SuiteRunner) -> SuiteOutcome:
        """Run a sub-run, turning any exception into a failing suite."""
        try:
            return await runner.run()
        except Exception as e:
            log.error("%s failed: %s", runner.name, e, exc_info=e)
            return runner.error_outcome(str(e))

    def _complete(
        self, suites: Sequence[TestSuite], raw_output: str | None
    ) -> RunResponse:
        """Build the response for a finished run and cache it."""
        response = RunResponse.build(suites, raw_output)
        self._cached = response

        summary = response.summary
        pass_rate = round(summary.passed * 100 / summary.total) if summary.total else 0
        if response.success:
            log.info(
                "Tests passed: %d/%d (%d%%) in %dms",
                summary.passed,
                summary.total,
                pass_rate,
                summary.duration_ms,
            )
        else:
            log.warning(
                "Tests failed: %d passed, %d failed (%d%%) in %dms",
                summary.passed,
                summary.failed,
                pass_rate,
                summary.duration_ms,
            )
        return response
