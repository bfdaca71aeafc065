"""Convert framework reports, or failing that their console output, into results."""

import logging
import re
from collections.abc import Mapping, Sequence
from pathlib import PurePath

from devboard_runner.models.reports import (
    StructuredAssertion,
    StructuredReport,
    StructuredTestFile,
)
from devboard_runner.models.result import SuiteKind, TestResult, TestStatus, TestSuite

log = logging.getLogger(__name__)

STATUS_MAP: Mapping[str, TestStatus] = {
    "passed": "passed",
    "failed": "failed",
}

KIND_PREFIXES: Mapping[SuiteKind, str] = {
    "unit-framework": "unit",
    "end-to-end-framework": "e2e",
    "api-collection": "collection",
}

SUMMARY_PLACEHOLDER_DURATION_MS = 10

FILE_HEADER_PATTERN = re.compile(r"^\s*(?:PASS|FAIL)\s+(?P<path>\S+)")
TRANSCRIPT_ASSERTION_PATTERN = re.compile(
    r"^\s*(?P<symbol>[✓✔✕✗○])\s+(?P<name>.+?)(?:\s*\((?P<duration>\d+)\s*ms\))?\s*$"
)
TESTS_SUMMARY_PREFIX = "Tests:"
PASSED_COUNT_PATTERN = re.compile(r"(\d+)\s+passed")
FAILED_COUNT_PATTERN = re.compile(r"(\d+)\s+failed")
TRANSCRIPT_SYMBOLS: Mapping[str, TestStatus] = {
    "✓": "passed",
    "✔": "passed",
    "✕": "failed",
    "✗": "failed",
    "○": "skipped",
}


def map_status(status: str) -> TestStatus:
    """Map a framework status string; anything not passed or failed is skipped."""
    return STATUS_MAP.get(status, "skipped")


def format_name(assertion: StructuredAssertion) -> str:
    """Prefer the full name, else join ancestor titles with the title."""
    if assertion.full_name:
        return assertion.full_name
    return " › ".join([*assertion.ancestor_titles, assertion.title])


def parse_assertion(
    assertion: StructuredAssertion, result_id: str
) -> TestResult:
    """Convert one assertion into a result."""
    status = map_status(assertion.status)
    error = "\n".join(assertion.failure_messages) if assertion.failure_messages else None

    return TestResult(
        id=result_id,
        name=format_name(assertion),
        status=status,
        duration_ms=max(0, round(assertion.duration or 0)),
        error_message=error if status == "failed" else None,
    )


def parse_test_file(test_file: StructuredTestFile, kind: SuiteKind) -> TestSuite:
    """Build the suite of one test file, named after its base name."""
    file_name = PurePath(test_file.name).name
    prefix = KIND_PREFIXES[kind]

    return TestSuite(
        name=file_name,
        kind=kind,
        results=tuple(
            parse_assertion(assertion, f"{prefix}-{file_name}-{index}")
            for index, assertion in enumerate(test_file.assertion_results)
        ),
    )


def parse_structured_report(
    report: StructuredReport, kind: SuiteKind, suite_name: str
) -> Sequence[TestSuite]:
    """Convert a structured report into one suite per test file.

    Args:
        report: Validated framework report
        kind: Suite kind to tag the resulting suites with
        suite_name: Name of the placeholder suite used when the report only
            carries top-level counts

    Returns:
        Suites in report order

    """
    if not report.test_results and (
        report.num_passed_tests or report.num_failed_tests
    ):
        log.info(
            "Report for %s has counts but no per-file results, using counts",
            suite_name,
        )
        return [suite_from_counts(report, kind, suite_name)]

    return [parse_test_file(test_file, kind) for test_file in report.test_results]


def suite_from_counts(
    report: StructuredReport, kind: SuiteKind, suite_name: str
) -> TestSuite:
    """Synthesise placeholder results from a report's top-level counts."""
    return placeholder_suite(
        report.num_passed_tests, report.num_failed_tests, kind, suite_name
    )


def placeholder_suite(
    passed: int, failed: int, kind: SuiteKind, suite_name: str
) -> TestSuite:
    """Suite of anonymous results standing in for known pass and fail counts."""
    prefix = KIND_PREFIXES[kind]
    statuses: list[TestStatus] = ["passed"] * passed + ["failed"] * failed

    return TestSuite(
        name=suite_name,
        kind=kind,
        results=tuple(
            TestResult(
                id=f"{prefix}-summary-{index}",
                name=f"Test {index + 1}",
                status=status,
                duration_ms=SUMMARY_PLACEHOLDER_DURATION_MS,
            )
            for index, status in enumerate(statuses)
        ),
    )


def no_tests_suite(kind: SuiteKind, suite_name: str) -> TestSuite:
    """Suite recording a run that reported no tests at all."""
    return TestSuite(
        name=suite_name,
        kind=kind,
        results=(
            TestResult(
                id=f"{KIND_PREFIXES[kind]}-none",
                name="No tests found",
                status="failed",
                error_message=(
                    "The framework wrote no report and its output contains "
                    "no test results"
                ),
            ),
        ),
    )


def summary_count(pattern: re.Pattern[str], line: str) -> int:
    """Count matched on a summary line, 0 if the line does not mention it."""
    match = pattern.search(line)
    return int(match[1]) if match else 0


def parse_structured_transcript(
    transcript: str, kind: SuiteKind, suite_name: str
) -> Sequence[TestSuite]:
    """Recover results from the framework's console output.

    Used when no report was written. Assertion lines are grouped under the
    ``PASS``/``FAIL`` file header preceding them; assertions printed before
    any header belong to a suite named ``suite_name``. Without assertion
    lines the ``Tests:`` summary counts become placeholders, and without
    those a single failing result records that nothing ran.
    """
    prefix = KIND_PREFIXES[kind]
    files: dict[str, list[TestResult]] = {}
    current = suite_name
    passed = failed = 0

    for line in transcript.splitlines():
        if match := FILE_HEADER_PATTERN.match(line):
            current = PurePath(match["path"]).name
            continue
        if match := TRANSCRIPT_ASSERTION_PATTERN.match(line):
            results = files.setdefault(current, [])
            status = TRANSCRIPT_SYMBOLS[match["symbol"]]
            results.append(
                TestResult(
                    id=f"{prefix}-{current}-{len(results)}",
                    name=match["name"],
                    status=status,
                    duration_ms=int(match["duration"] or 0),
                )
            )
            continue
        if line.lstrip().startswith(TESTS_SUMMARY_PREFIX):
            passed = summary_count(PASSED_COUNT_PATTERN, line)
            failed = summary_count(FAILED_COUNT_PATTERN, line)

    if files:
        return [
            TestSuite(name=name, kind=kind, results=tuple(results))
            for name, results in files.items()
        ]

    if passed or failed:
        log.info("No test lines in %s output, using summary counts", suite_name)
        return [placeholder_suite(passed, failed, kind, suite_name)]

    log.warning("No test results in %s output", suite_name)
    return [no_tests_suite(kind, suite_name)]
