"""Parse API collection runs from their JSON report or console transcript."""

import re
from collections.abc import Sequence

from devboard_runner.models.reports import CollectionExecution, CollectionReport
from devboard_runner.models.result import TestResult, TestStatus

PASSING_PATTERN = re.compile(r"(\d+)\s+passing")
FAILING_PATTERN = re.compile(r"(\d+)\s+failing")

PLACEHOLDER_DURATION_MS = 100


def parse_execution(
    execution: CollectionExecution, collection: str, index: int
) -> TestResult:
    """Convert one executed request; it passes iff none of its assertions erred."""
    failures = [a for a in execution.assertions if a.error is not None]
    messages = [
        f"{a.assertion}: {a.error.message}" if a.assertion else a.error.message
        for a in failures
        if a.error is not None
    ]

    return TestResult(
        id=f"collection-{collection}-{index}",
        name=execution.item.name,
        status="failed" if failures else "passed",
        duration_ms=execution.response.response_time if execution.response else 0,
        error_message="\n".join(messages) if failures else None,
    )


def parse_collection_report(
    report: CollectionReport, collection: str
) -> Sequence[TestResult]:
    """One result per executed request of the collection report."""
    return [
        parse_execution(execution, collection, index)
        for index, execution in enumerate(report.run.executions)
    ]


def scan_count(pattern: re.Pattern[str], transcript: str) -> int:
    """Return the last count matched in the transcript, 0 if none."""
    matches = pattern.findall(transcript)
    return int(matches[-1]) if matches else 0


def parse_collection_transcript(
    transcript: str, collection: str
) -> Sequence[TestResult]:
    """Synthesise placeholder results from the console summary counts.

    Per-request names are lost on this path; only the aggregate pass and fail
    counts survive.
    """
    passing = scan_count(PASSING_PATTERN, transcript)
    failing = scan_count(FAILING_PATTERN, transcript)
    statuses: list[TestStatus] = ["passed"] * passing + ["failed"] * failing

    return [
        TestResult(
            id=f"collection-{collection}-{index}",
            name=f"{collection} #{index + 1}",
            status=status,
            duration_ms=PLACEHOLDER_DURATION_MS,
            error_message=(
                f"{collection}: failure reported in console output"
                if status == "failed"
                else None
            ),
        )
        for index, status in enumerate(statuses)
    ]
