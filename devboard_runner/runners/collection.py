"""Runner for API test collections executed by the collection runner tool."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from devboard_runner.executor import CommandSpec, execute
from devboard_runner.models.reports import CollectionReport
from devboard_runner.models.result import TestResult, TestSuite
from devboard_runner.reports.collection import (
    parse_collection_report,
    parse_collection_transcript,
)
from devboard_runner.reports.readers import read_report, remove_report
from devboard_runner.runners.base import SuiteOutcome, SuiteRunner, format_raw_output

log = logging.getLogger(__name__)

OUTPUT_SEPARATOR = "\n\n---\n\n"


@dataclass(frozen=True, kw_only=True)
class CollectionOutcome:
    """Results of one collection run."""

    collection: str
    results: Sequence[TestResult]
    raw_output: str


@dataclass(frozen=True, kw_only=True)
class CollectionRunner(SuiteRunner):
    """Runs every configured collection concurrently and merges the results."""

    async def run(self) -> SuiteOutcome:
        """Run all configured collections as one suite."""
        return await self.run_collections(self.config.collections)

    async def run_collections(self, collections: Sequence[str]) -> SuiteOutcome:
        """Run the named collections concurrently.

        Args:
            collections: Collection names, without the ``.json`` suffix

        Returns:
            A single suite holding every collection's results in the given
            order. A collection that raised contributes one failing result;
            if nothing produced any result the suite holds one failing
            "no tests available" result.

        """
        log.info("Running %d collection(s)...", len(collections))
        outcomes = await asyncio.gather(
            *(self.run_collection(name) for name in collections),
            return_exceptions=True,
        )
        processed = self._process_outcomes(collections, outcomes)

        results = [r for outcome in processed for r in outcome.results]
        raw_output = OUTPUT_SEPARATOR.join(o.raw_output for o in processed)

        if not results:
            log.warning("No collection tests available")
            results = [self._no_tests_result()]
            raw_output = raw_output or "No collections found or runner not installed"

        suite = TestSuite(name=self.name, kind=self.kind, results=results)
        log.info(
            "Collections: %d passed, %d failed",
            suite.total_passed,
            suite.total_failed,
        )
        return SuiteOutcome(suites=[suite], raw_output=raw_output)

    def _process_outcomes(
        self,
        collections: Sequence[str],
        outcomes: Sequence[CollectionOutcome | BaseException],
    ) -> Sequence[CollectionOutcome]:
        """Replace collections that raised with a single failing result."""
        processed: list[CollectionOutcome] = []

        for collection, outcome in zip(collections, outcomes, strict=True):
            if isinstance(outcome, CollectionOutcome):
                processed.append(outcome)
            elif isinstance(outcome, Exception):
                log.error(
                    "Collection %s failed: %s", collection, outcome, exc_info=outcome
                )
                processed.append(
                    CollectionOutcome(
                        collection=collection,
                        results=[
                            TestResult(
                                id=f"collection-{collection}-error",
                                name=f"{collection} (error)",
                                status="failed",
                                error_message=str(outcome),
                            )
                        ],
                        raw_output=f"# {collection}\nERROR: {outcome}",
                    )
                )
            else:
                raise outcome

        return processed

    async def run_collection(self, collection: str) -> CollectionOutcome:
        """Run one collection and parse its results.

        The collection's JSON report is preferred and deleted once read; the
        console transcript is the fallback when no usable report was written.
        """
        collection_file = self.config.resolve(self.config.collection_dir) / (
            f"{collection}.json"
        )
        if not collection_file.exists():
            log.info("Collection not found: %s", collection_file)
            return CollectionOutcome(
                collection=collection,
                results=[],
                raw_output=f"# {collection}\nCollection not found",
            )

        report_path = self.config.collection_report(collection)
        await remove_report(report_path)

        executable, *args = self.config.collection_command
        command = CommandSpec(
            executable=executable,
            args=(
                *args,
                str(collection_file),
                "--reporters",
                "cli,json",
                "--reporter-json-export",
                str(report_path),
            ),
            cwd=self.config.project_root,
            env=self.config.collection_env,
            timeout=self.config.collection_timeout,
        )
        result = await execute(command, stream=self.config.stream_output)
        raw_output = format_raw_output(command, result)

        report = await read_report(report_path, CollectionReport)
        await remove_report(report_path)

        if report is not None:
            results = parse_collection_report(report, collection)
        else:
            log.info("No report for collection %s, parsing console output", collection)
            results = parse_collection_transcript(result.output, collection)

        return CollectionOutcome(
            collection=collection, results=results, raw_output=raw_output
        )

    def _no_tests_result(self) -> TestResult:
        return TestResult(
            id="collection-none",
            name="No collection tests available",
            status="failed",
            error_message="No collections found or the collection runner is not installed",
        )
