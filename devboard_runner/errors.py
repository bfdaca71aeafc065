"""Exceptions raised by the orchestrator."""


class RunnerError(Exception):
    """Base class for orchestrator errors."""


class ExecutionError(RunnerError):
    """Raised when a test tool process cannot be spawned."""


class ExecutionTimeoutError(ExecutionError):
    """Raised when a test tool process exceeds its wall-clock timeout."""


class RunInProgressError(RunnerError):
    """Raised when a run is requested while another one is in flight."""

    def __init__(self, current_run_id: str | None) -> None:
        super().__init__(f"Tests are already running: {current_run_id}")
        self.current_run_id = current_run_id


class UnknownTestError(RunnerError):
    """Raised when a run is requested for a test id that does not exist."""

    def __init__(self, test_id: str, available: list[str]) -> None:
        super().__init__(
            f"Unknown test id '{test_id}'. Available test ids: {available}"
        )
        self.test_id = test_id
