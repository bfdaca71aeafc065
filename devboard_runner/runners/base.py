"""Abstract base class for suite runners."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from devboard_runner.config import RunnerConfig
from devboard_runner.executor import CommandSpec, ProcessOutput
from devboard_runner.models.result import SuiteKind, TestResult, TestSuite


@dataclass(frozen=True, kw_only=True)
class SuiteOutcome:
    """Suites produced by one runner invocation and its console output."""

    suites: Sequence[TestSuite]
    raw_output: str


@dataclass(frozen=True, kw_only=True)
class SuiteRunner(ABC):
    """Runs one external test tool and converts its results.

    Implementations own the command they spawn and the report they parse;
    they hold no state between invocations.
    """

    config: RunnerConfig
    name: str
    kind: SuiteKind

    @abstractmethod
    async def run(self) -> SuiteOutcome:
        """Run the tool to completion and parse its results.

        Returns:
            Parsed suites and the combined console output

        Raises:
            ExecutionError: If the tool cannot be spawned

        """

    def error_outcome(self, message: str) -> SuiteOutcome:
        """Outcome recording a runner that raised instead of completing."""
        return SuiteOutcome(
            suites=[
                TestSuite(
                    name=self.name,
                    kind=self.kind,
                    results=[
                        TestResult(
                            id=f"{self.kind}-error",
                            name=f"{self.name} (error)",
                            status="failed",
                            error_message=message,
                        )
                    ],
                )
            ],
            raw_output=f"ERROR: {message}",
        )


def format_raw_output(command: CommandSpec, result: ProcessOutput) -> str:
    """Render a command and its output the way a terminal would show them."""
    return f"$ {command.display()}\n\n{result.output}".rstrip()
