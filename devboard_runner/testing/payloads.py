"""Raw report payloads as the external test tools write them."""

from collections.abc import Sequence
from typing import Any


def assertion(
    title: str = "works",
    *,
    status: str = "passed",
    ancestor_titles: Sequence[str] = ("Service",),
    duration: float | None = 5,
    failure_messages: Sequence[str] = (),
    full_name: str | None = None,
) -> dict[str, Any]:
    """Create an assertion entry of a structured report."""
    return {
        "ancestorTitles": list(ancestor_titles),
        "title": title,
        "fullName": full_name
        if full_name is not None
        else " ".join([*ancestor_titles, title]),
        "status": status,
        "duration": duration,
        "failureMessages": list(failure_messages),
        "failureDetails": [],
    }


def report_file(
    name: str = "/app/src/menu/menu.service.spec.ts",
    assertions: Sequence[dict[str, Any]] = (),
) -> dict[str, Any]:
    """Create a per-file entry of a structured report."""
    return {
        "name": name,
        "status": "failed"
        if any(a["status"] == "failed" for a in assertions)
        else "passed",
        "startTime": 1700000000000,
        "endTime": 1700000001000,
        "message": "",
        "assertionResults": list(assertions),
    }


def structured_report(files: Sequence[dict[str, Any]] = ()) -> dict[str, Any]:
    """Create a structured report with top-level counts matching its files."""
    statuses = [a["status"] for f in files for a in f["assertionResults"]]
    return {
        "numFailedTestSuites": sum(1 for f in files if f["status"] == "failed"),
        "numPassedTestSuites": sum(1 for f in files if f["status"] == "passed"),
        "numTotalTestSuites": len(files),
        "numFailedTests": statuses.count("failed"),
        "numPassedTests": statuses.count("passed"),
        "numPendingTests": len(statuses)
        - statuses.count("failed")
        - statuses.count("passed"),
        "numTotalTests": len(statuses),
        "success": "failed" not in statuses,
        "startTime": 1700000000000,
        "testResults": list(files),
    }


def execution(
    name: str = "Login",
    *,
    assertions: Sequence[tuple[str, str | None]] = (("Status code is 200", None),),
    response_time: int | None = 120,
) -> dict[str, Any]:
    """Create an executed request of a collection report.

    ``assertions`` holds (assertion, error message or None) pairs.
    """
    entry: dict[str, Any] = {
        "item": {"name": name},
        "assertions": [
            {"assertion": text, **({"error": {"message": error}} if error else {})}
            for text, error in assertions
        ],
    }
    if response_time is not None:
        entry["response"] = {"responseTime": response_time, "code": 200}
    return entry


def collection_report(
    name: str = "auth", executions: Sequence[dict[str, Any]] = ()
) -> dict[str, Any]:
    """Create a collection report."""
    return {
        "collection": {"info": {"name": name}},
        "run": {
            "stats": {"requests": {"total": len(executions), "failed": 0}},
            "executions": list(executions),
            "timings": {"started": 1700000000000, "completed": 1700000001000},
        },
    }
