"""CLI entry point for the test execution orchestrator."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from aiohttp import web

from devboard_runner.config import RunnerConfig
from devboard_runner.coordinator import ALL, RunCoordinator
from devboard_runner.errors import RunnerError
from devboard_runner.models.result import RunResponse
from devboard_runner.server import create_app

STATUS_SYMBOLS = {
    "passed": "✓",
    "failed": "✗",
    "skipped": "○",
}


def log_results_summary(log: logging.Logger, response: RunResponse) -> None:
    """Log a formatted summary of a run's results."""
    log.info("=" * 80)
    log.info("Test Results Summary:")
    log.info("=" * 80)

    for suite in response.suites:
        log.info(
            "%s (%s): %d passed, %d failed, %d skipped (%dms)",
            suite.name,
            suite.kind,
            suite.total_passed,
            suite.total_failed,
            suite.total_skipped,
            suite.total_duration_ms,
        )
        for result in suite.results:
            if result.status == "failed":
                symbol = STATUS_SYMBOLS.get(result.status, "?")
                log.info("  %s %s", symbol, result.name)
                if result.error_message:
                    log.info("    Message: %s", result.error_message.splitlines()[0])

    summary = response.summary
    log.info(
        "Total: %d, passed: %d, failed: %d (%dms)",
        summary.total,
        summary.passed,
        summary.failed,
        summary.duration_ms,
    )


def load_config(config_json: str, project_root: Path | None) -> RunnerConfig:
    """Build the configuration from a JSON string and an optional root override."""
    config_dict = json.loads(config_json)
    if project_root is not None:
        config_dict["project_root"] = project_root
    return RunnerConfig(**config_dict)


async def run(config: RunnerConfig, test_id: str, verbose: bool = False) -> int:
    """Run tests once and return exit code."""
    log = logging.getLogger("devboard_runner")

    coordinator = RunCoordinator(config)
    try:
        if test_id == ALL:
            response = await coordinator.run_all(verbose=verbose)
        else:
            response = await coordinator.run_one(test_id, verbose=verbose)
    except RunnerError as e:
        log.error("Test run failed: %s", e)
        return 1

    log_results_summary(log, response)
    print(json.dumps(response.to_json_dict(), indent=2))

    return 0 if response.success else 1


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Run backend test tools and serve their results"
    )
    parser.add_argument(
        "--config",
        default="{}",
        help="JSON configuration for the orchestrator",
    )
    parser.add_argument(
        "--project-root",
        type=Path,
        default=None,
        help="Directory of the backend whose tests are run",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    serve_parser = commands.add_parser("serve", help="Serve the test endpoints")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8080, help="Bind port")

    run_parser = commands.add_parser("run", help="Run tests once and print results")
    run_parser.add_argument(
        "test_id",
        help="Suite to run (unit, end-to-end, collection) or 'all'",
    )
    run_parser.add_argument(
        "--verbose",
        action="store_true",
        help="Include raw console output in the results",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    config = load_config(args.config, args.project_root)

    if args.command == "serve":
        web.run_app(create_app(config), host=args.host, port=args.port)
        return

    exit_code = asyncio.run(run(config, args.test_id, verbose=args.verbose))
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
