"""Pydantic models for the report files written by the external test tools.

Only the fields the parsers read are declared; anything else in a report is
ignored and every declared field has a default, so a partially-written
report validates to empty collections rather than failing on access.
"""

from collections.abc import Sequence

from pydantic import Field

from devboard_runner.models.base import Model


class StructuredAssertion(Model):
    """One assertion inside a test file of a structured report."""

    ancestor_titles: Sequence[str] = Field(default_factory=tuple)
    title: str = ""
    full_name: str = ""
    status: str = "pending"
    duration: float | None = None
    failure_messages: Sequence[str] = Field(default_factory=tuple)


class StructuredTestFile(Model):
    """Results of one test file."""

    name: str
    assertion_results: Sequence[StructuredAssertion] = Field(default_factory=tuple)


class StructuredReport(Model):
    """Native JSON report of the unit / end-to-end test framework."""

    num_total_tests: int = 0
    num_passed_tests: int = 0
    num_failed_tests: int = 0
    test_results: Sequence[StructuredTestFile] = Field(default_factory=tuple)


class CollectionItem(Model):
    """Request definition referenced by an execution."""

    name: str = "Unknown Request"


class CollectionAssertionError(Model):
    """Failure detail of a collection assertion."""

    message: str = ""


class CollectionAssertion(Model):
    """One assertion evaluated against a request's response."""

    assertion: str = ""
    error: CollectionAssertionError | None = None


class CollectionResponse(Model):
    """Response timing of an executed request."""

    response_time: int = 0


class CollectionExecution(Model):
    """One executed request of a collection run."""

    item: CollectionItem = Field(default_factory=CollectionItem)
    assertions: Sequence[CollectionAssertion] = Field(default_factory=tuple)
    response: CollectionResponse | None = None


class CollectionRun(Model):
    """Run section of a collection report."""

    executions: Sequence[CollectionExecution] = Field(default_factory=tuple)


class CollectionInfo(Model):
    """Descriptive header of a collection."""

    name: str = ""


class CollectionMeta(Model):
    """Collection section of a collection report."""

    info: CollectionInfo = Field(default_factory=CollectionInfo)


class CollectionReport(Model):
    """JSON report exported by the API collection runner."""

    collection: CollectionMeta = Field(default_factory=CollectionMeta)
    run: CollectionRun = Field(default_factory=CollectionRun)


type Report = StructuredReport | CollectionReport
