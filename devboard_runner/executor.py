"""Run one external test tool process and capture its console output."""

import asyncio
import contextlib
import logging
import os
import shlex
from collections.abc import AsyncIterator, Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from devboard_runner.errors import ExecutionError, ExecutionTimeoutError

log = logging.getLogger(__name__)

# Test tools print long single-line JSON and stack traces
STREAM_LIMIT = 1024 * 1024


@dataclass(frozen=True, kw_only=True)
class CommandSpec:
    """An executable with its arguments, never a shell string."""

    executable: str
    args: Sequence[str] = ()
    cwd: Path | None = None
    env: Mapping[str, str] = field(default_factory=dict)
    timeout: float | None = None

    @property
    def argv(self) -> Sequence[str]:
        """Full argument vector."""
        return (self.executable, *self.args)

    def display(self) -> str:
        """Shell-quoted rendering for logs and raw output."""
        return shlex.join(self.argv)


@dataclass(frozen=True, kw_only=True)
class ProcessOutput:
    """Exit code and combined stdout/stderr of a finished process."""

    exit_code: int
    output: str


@dataclass(frozen=True, kw_only=True)
class OutputLine:
    """One line read from a process stream."""

    text: str
    stderr: bool = False


class LineKind(StrEnum):
    """Cosmetic classification of a console line, used for logging only."""

    SUITE_PASS = "suite-pass"
    SUITE_FAIL = "suite-fail"
    ASSERTION_PASS = "assertion-pass"
    ASSERTION_FAIL = "assertion-fail"
    SUMMARY = "summary"
    ERROR = "error"
    NOISE = "noise"
    GENERIC = "generic"


LOG_LEVELS: Mapping[LineKind, int] = {
    LineKind.SUITE_PASS: logging.INFO,
    LineKind.SUITE_FAIL: logging.ERROR,
    LineKind.ASSERTION_PASS: logging.INFO,
    LineKind.ASSERTION_FAIL: logging.ERROR,
    LineKind.SUMMARY: logging.INFO,
    LineKind.ERROR: logging.ERROR,
    LineKind.GENERIC: logging.DEBUG,
}

SUMMARY_PREFIXES = ("Test Suites:", "Tests:", "Time:")
SUMMARY_MARKERS = (" passing", " failing", "assertions", "requests")


def classify_line(line: OutputLine) -> LineKind:
    """Tag a console line with the kind of test event it reports."""
    text = line.text.strip()

    if not text or text.startswith(">") or "node_modules" in text:
        return LineKind.NOISE
    if text.startswith("PASS "):
        return LineKind.SUITE_PASS
    if text.startswith("FAIL "):
        return LineKind.SUITE_FAIL
    if "✓" in text or "✔" in text:
        return LineKind.ASSERTION_PASS
    if "✕" in text or "✗" in text:
        return LineKind.ASSERTION_FAIL
    if text.startswith(SUMMARY_PREFIXES) or any(m in text for m in SUMMARY_MARKERS):
        return LineKind.SUMMARY
    if line.stderr and "error" in text.lower():
        return LineKind.ERROR
    return LineKind.GENERIC


def log_line(line: OutputLine) -> None:
    """Forward a console line to the log at the level of its kind."""
    kind = classify_line(line)
    if (level := LOG_LEVELS.get(kind)) is not None:
        log.log(level, "  %s", line.text.strip())


async def iter_lines(stream: asyncio.StreamReader) -> AsyncIterator[bytes]:
    """Yield the lines of a stream, including lines longer than its limit.

    ``StreamReader`` iteration gives up on a line exceeding the buffer limit;
    here the oversized part is drained and joined with the rest of the line.
    """
    pending = bytearray()
    while True:
        try:
            chunk = await stream.readuntil(b"\n")
        except asyncio.LimitOverrunError as e:
            pending += await stream.readexactly(e.consumed)
            continue
        except asyncio.IncompleteReadError as e:
            if pending or e.partial:
                yield bytes(pending + e.partial)
            return
        yield bytes(pending + chunk)
        pending.clear()


async def iter_output(process: asyncio.subprocess.Process) -> AsyncIterator[OutputLine]:
    """Yield lines from stdout and stderr as they arrive.

    Both streams are pumped concurrently so a tool writing heavily to one of
    them cannot block on a full pipe while the other is being read. A pump
    that fails re-raises its error once the other stream is exhausted.
    """
    queue: asyncio.Queue[OutputLine | None] = asyncio.Queue()

    async def pump(stream: asyncio.StreamReader | None, stderr: bool) -> None:
        try:
            if stream is not None:
                async for raw in iter_lines(stream):
                    text = raw.decode(errors="replace").rstrip("\r\n")
                    await queue.put(OutputLine(text=text, stderr=stderr))
        finally:
            await queue.put(None)

    tasks = [
        asyncio.create_task(pump(process.stdout, stderr=False)),
        asyncio.create_task(pump(process.stderr, stderr=True)),
    ]
    open_streams = len(tasks)
    try:
        while open_streams:
            if (line := await queue.get()) is None:
                open_streams -= 1
                continue
            yield line
        for task in tasks:
            await task
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


async def execute(command: CommandSpec, *, stream: bool = False) -> ProcessOutput:
    """Run a command to completion and capture its output.

    Args:
        command: Executable, arguments and working directory
        stream: Log each output line as it arrives

    Returns:
        Exit code and combined output. A non-zero exit code is a normal
        outcome: test tools exit non-zero when tests fail.

    Raises:
        ExecutionError: If the process cannot be spawned
        ExecutionTimeoutError: If the command's timeout expires

    """
    log.info("Running: %s", command.display())

    try:
        process = await asyncio.create_subprocess_exec(
            *command.argv,
            cwd=command.cwd,
            env={**os.environ, **command.env},
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            limit=STREAM_LIMIT,
        )
    except OSError as e:
        raise ExecutionError(f"Failed to start {command.executable}: {e}") from e

    lines: list[str] = []
    try:
        async with asyncio.timeout(command.timeout):
            async with contextlib.aclosing(iter_output(process)) as output:
                async for line in output:
                    lines.append(line.text)
                    if stream:
                        log_line(line)
            exit_code = await process.wait()
    except TimeoutError as e:
        raise ExecutionTimeoutError(
            f"{command.display()} did not complete within {command.timeout} seconds"
        ) from e
    finally:
        if process.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()

    log.info("Process %s exited with code %d", command.executable, exit_code)
    return ProcessOutput(exit_code=exit_code, output="\n".join(lines))
