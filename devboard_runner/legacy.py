"""Adapter to the response shape of the legacy results endpoints."""

from collections.abc import Sequence
from pathlib import Path

from devboard_runner.config import RunnerConfig
from devboard_runner.models.legacy import LegacySuite, LegacySummary, LegacyTest
from devboard_runner.models.reports import StructuredReport
from devboard_runner.models.result import SuiteKind, TestResult, TestSuite
from devboard_runner.reports.readers import read_report
from devboard_runner.reports.structured import parse_structured_report


def to_legacy_test(result: TestResult) -> LegacyTest:
    """Convert a result; statuses other than passed and failed become skipped."""
    return LegacyTest(
        name=result.name,
        status=result.status if result.status in ("passed", "failed") else "skipped",
        duration_ms=result.duration_ms,
        error_message=result.error_message,
    )


def to_legacy_suite(suite: TestSuite) -> LegacySuite:
    """Convert a suite, counting statuses from the converted tests."""
    tests = [to_legacy_test(result) for result in suite.results]
    return LegacySuite(
        name=suite.name,
        tests=tests,
        passed_count=sum(1 for t in tests if t.status == "passed"),
        failed_count=sum(1 for t in tests if t.status == "failed"),
        skipped_count=sum(1 for t in tests if t.status == "skipped"),
    )


def to_legacy_shape(suites: Sequence[TestSuite]) -> Sequence[LegacySuite]:
    """Convert unified suites into the legacy shape."""
    return [to_legacy_suite(suite) for suite in suites]


async def load_legacy_suites(
    path: Path, kind: SuiteKind, suite_name: str
) -> Sequence[LegacySuite]:
    """Re-derive legacy suites from a structured report file, [] if absent."""
    report = await read_report(path, StructuredReport)
    if report is None:
        return []
    return to_legacy_shape(parse_structured_report(report, kind, suite_name))


async def load_legacy_summary(config: RunnerConfig) -> LegacySummary:
    """Legacy view of both the unit and end-to-end reports."""
    return LegacySummary(
        unit=await load_legacy_suites(
            config.resolve(config.unit_report), "unit-framework", "Unit Tests"
        ),
        end_to_end=await load_legacy_suites(
            config.resolve(config.end_to_end_report),
            "end-to-end-framework",
            "E2E Tests",
        ),
    )
