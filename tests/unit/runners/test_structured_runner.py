"""Tests for the structured report runner."""

from collections.abc import Generator
from unittest.mock import AsyncMock, patch

import pytest

from devboard_runner.config import RunnerConfig
from devboard_runner.errors import ExecutionError
from devboard_runner.executor import CommandSpec, ProcessOutput
from devboard_runner.runners import StructuredReportRunner, default_runners
from devboard_runner.testing.payloads import assertion, report_file, structured_report

from ..conftest import WriteJsonFn


@pytest.fixture
def execute_mock() -> Generator[AsyncMock]:
    """Patch process execution for the structured runner."""
    with patch(
        "devboard_runner.runners.structured.execute", new_callable=AsyncMock
    ) as mock:
        yield mock


@pytest.fixture
def runner(config: RunnerConfig) -> StructuredReportRunner:
    """Unit test runner over the temporary project."""
    unit = default_runners(config)["unit"]
    assert isinstance(unit, StructuredReportRunner)
    return unit


async def test_parses_report_written_by_framework(
    runner: StructuredReportRunner,
    execute_mock: AsyncMock,
    write_json: WriteJsonFn,
) -> None:
    """Runs the framework and parses the report it wrote."""

    async def run(command: CommandSpec, *, stream: bool) -> ProcessOutput:
        write_json(
            "test-results-unit.json",
            structured_report(
                [
                    report_file(
                        "/app/src/diet/diet.service.spec.ts",
                        [assertion(), assertion("fails", status="failed")],
                    )
                ]
            ),
        )
        return ProcessOutput(exit_code=1, output="FAIL src/diet/diet.service.spec.ts")

    execute_mock.side_effect = run

    outcome = await runner.run()

    [suite] = outcome.suites
    assert suite.name == "diet.service.spec.ts"
    assert suite.kind == "unit-framework"
    assert (suite.total_passed, suite.total_failed) == (1, 1)
    assert outcome.raw_output.startswith("$ node ")
    assert "FAIL src/diet/diet.service.spec.ts" in outcome.raw_output


async def test_command_writes_report_to_configured_path(
    runner: StructuredReportRunner,
    config: RunnerConfig,
    execute_mock: AsyncMock,
) -> None:
    """The report path is passed to the framework as an argument."""
    execute_mock.return_value = ProcessOutput(exit_code=0, output="")

    await runner.run()

    command = execute_mock.call_args.args[0]
    assert command.executable == "node"
    assert command.args[-1] == "--outputFile=test-results-unit.json"
    assert command.cwd == config.project_root
    assert command.env["FORCE_COLOR"] == "0"


async def test_missing_report_falls_back_to_console_output(
    runner: StructuredReportRunner, execute_mock: AsyncMock
) -> None:
    """Without a report, results are recovered from the console output."""
    execute_mock.return_value = ProcessOutput(
        exit_code=1,
        output="FAIL src/a.spec.ts\n  ✕ breaks (3 ms)\nTests: 1 failed, 1 total",
    )

    outcome = await runner.run()

    [suite] = outcome.suites
    assert suite.name == "a.spec.ts"
    assert suite.total_failed == 1
    assert suite.results[0].name == "breaks"
    assert suite.results[0].duration_ms == 3


async def test_crash_without_output_is_failing(
    runner: StructuredReportRunner, execute_mock: AsyncMock
) -> None:
    """A framework that dies before reporting anything yields a failing suite."""
    execute_mock.return_value = ProcessOutput(exit_code=1, output="SyntaxError")

    outcome = await runner.run()

    [suite] = outcome.suites
    assert suite.name == "Unit Tests"
    assert suite.total_failed == 1
    assert "SyntaxError" in outcome.raw_output


async def test_malformed_report_falls_back_to_console_output(
    runner: StructuredReportRunner,
    config: RunnerConfig,
    execute_mock: AsyncMock,
) -> None:
    """A truncated report is treated like a missing one."""

    async def run(command: CommandSpec, *, stream: bool) -> ProcessOutput:
        (config.project_root / "test-results-unit.json").write_text(
            '{"testResults": [{'
        )
        return ProcessOutput(exit_code=1, output="Tests: 2 passed, 2 total")

    execute_mock.side_effect = run

    outcome = await runner.run()

    [suite] = outcome.suites
    assert suite.name == "Unit Tests"
    assert suite.total_passed == 2


async def test_stale_report_is_not_reused(
    runner: StructuredReportRunner,
    write_json: WriteJsonFn,
    execute_mock: AsyncMock,
) -> None:
    """A report left by an earlier run is removed before the framework starts."""
    stale = write_json(
        "test-results-unit.json",
        structured_report([report_file(assertions=[assertion()])]),
    )

    async def run(command: CommandSpec, *, stream: bool) -> ProcessOutput:
        assert not stale.exists()
        return ProcessOutput(exit_code=1, output="")

    execute_mock.side_effect = run

    outcome = await runner.run()

    [suite] = outcome.suites
    assert suite.results[0].name == "No tests found"
    assert suite.total_failed == 1


async def test_spawn_failure_propagates(
    runner: StructuredReportRunner, execute_mock: AsyncMock
) -> None:
    """A framework that cannot be started raises an execution error."""
    execute_mock.side_effect = ExecutionError("Failed to start node")

    with pytest.raises(ExecutionError, match="Failed to start node"):
        await runner.run()


def test_end_to_end_runner_uses_its_own_report(config: RunnerConfig) -> None:
    """Unit and end-to-end runs write to distinct report files."""
    runners = default_runners(config)
    unit = runners["unit"]
    end_to_end = runners["end-to-end"]
    assert isinstance(unit, StructuredReportRunner)
    assert isinstance(end_to_end, StructuredReportRunner)

    assert unit.build_command().args[-1] != end_to_end.build_command().args[-1]
    assert "./test/jest-e2e.json" in end_to_end.build_command().args
    assert end_to_end.kind == "end-to-end-framework"
