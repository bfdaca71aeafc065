"""Runner for test frameworks that write a structured JSON report."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from devboard_runner.executor import CommandSpec, execute
from devboard_runner.models.reports import StructuredReport
from devboard_runner.reports.readers import read_report, remove_report
from devboard_runner.reports.structured import (
    parse_structured_report,
    parse_structured_transcript,
)
from devboard_runner.runners.base import SuiteOutcome, SuiteRunner, format_raw_output

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class StructuredReportRunner(SuiteRunner):
    """Runs a framework command and parses the report it writes."""

    command: Sequence[str]
    report: str

    def build_command(self) -> CommandSpec:
        """Command line with the report output path appended."""
        executable, *args = self.command
        return CommandSpec(
            executable=executable,
            args=(*args, f"--outputFile={self.report}"),
            cwd=self.config.project_root,
            env=self.config.framework_env,
            timeout=self.config.framework_timeout,
        )

    async def run(self) -> SuiteOutcome:
        """Run the framework and parse its report.

        A report left by an earlier run is removed first. When the framework
        writes no readable report its console output is parsed instead, so a
        crashed run shows up as failing rather than as an empty success.
        """
        report_path = self.config.resolve(self.report)
        await remove_report(report_path)

        command = self.build_command()
        result = await execute(command, stream=self.config.stream_output)
        raw_output = format_raw_output(command, result)

        report = await read_report(report_path, StructuredReport)
        if report is None:
            log.warning(
                "%s produced no readable report (exit code %d), parsing console output",
                self.name,
                result.exit_code,
            )
            suites = parse_structured_transcript(result.output, self.kind, self.name)
        else:
            suites = parse_structured_report(report, self.kind, self.name)

        log.info(
            "%s: %d passed, %d failed",
            self.name,
            sum(s.total_passed for s in suites),
            sum(s.total_failed for s in suites),
        )
        return SuiteOutcome(suites=suites, raw_output=raw_output)
