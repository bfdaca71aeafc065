"""HTTP endpoints serving test runs and results to the dashboard."""

import json
import logging

from aiohttp import web
from pydantic import ValidationError

from devboard_runner.config import RunnerConfig
from devboard_runner.coordinator import RunCoordinator
from devboard_runner.errors import RunInProgressError, UnknownTestError
from devboard_runner.legacy import load_legacy_suites, load_legacy_summary
from devboard_runner.models.base import Model
from devboard_runner.models.result import RunResponse

log = logging.getLogger(__name__)

API_PREFIX = "/api/tests"

COORDINATOR_KEY = web.AppKey("coordinator", RunCoordinator)
CONFIG_KEY = web.AppKey("config", RunnerConfig)

routes = web.RouteTableDef()


class RunTestRequest(Model):
    """Body of a single-suite run request."""

    test_id: str
    verbose: bool = False


class RunAllRequest(Model):
    """Body of a run-all request."""

    verbose: bool = False


class BadRequestError(Exception):
    """Raised when a request body cannot be decoded."""


def error_response(message: str, status: int) -> web.Response:
    """JSON error body in the shape the dashboard expects."""
    return web.json_response({"success": False, "message": message}, status=status)


def run_response(response: RunResponse) -> web.Response:
    """Serialise a run response."""
    return web.json_response(response.to_json_dict())


async def read_body[M: Model](request: web.Request, model: type[M]) -> M:
    """Decode and validate a JSON request body; an empty body means defaults."""
    try:
        data = await request.json() if request.can_read_body else {}
        return model.model_validate(data or {})
    except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
        raise BadRequestError(str(e)) from e


@routes.post("/run")
async def run_test(request: web.Request) -> web.Response:
    """Run one suite and return its results."""
    coordinator = request.config_dict[COORDINATOR_KEY]
    try:
        body = await read_body(request, RunTestRequest)
        return run_response(
            await coordinator.run_one(body.test_id, verbose=body.verbose)
        )
    except (BadRequestError, UnknownTestError) as e:
        return error_response(str(e), web.HTTPBadRequest.status_code)
    except RunInProgressError as e:
        return error_response(str(e), web.HTTPConflict.status_code)
    except Exception as e:
        log.error("Test execution failed: %s", e, exc_info=e)
        return error_response(
            str(e) or "Test execution failed", web.HTTPInternalServerError.status_code
        )


@routes.post("/run-all")
async def run_all_tests(request: web.Request) -> web.Response:
    """Run every suite and return the combined results."""
    coordinator = request.config_dict[COORDINATOR_KEY]
    try:
        body = await read_body(request, RunAllRequest)
        return run_response(await coordinator.run_all(verbose=body.verbose))
    except BadRequestError as e:
        return error_response(str(e), web.HTTPBadRequest.status_code)
    except RunInProgressError as e:
        return error_response(str(e), web.HTTPConflict.status_code)
    except Exception as e:
        log.error("Test execution failed: %s", e, exc_info=e)
        return error_response(
            str(e) or "Test execution failed", web.HTTPInternalServerError.status_code
        )


@routes.get("/results")
async def get_results(request: web.Request) -> web.Response:
    """Latest cached results, or null when nothing has run yet."""
    cached = request.config_dict[COORDINATOR_KEY].cached_results()
    return web.json_response(cached.to_json_dict() if cached else None)


@routes.get("/status")
async def get_status(request: web.Request) -> web.Response:
    """Whether a run is in flight."""
    status = request.config_dict[COORDINATOR_KEY].status()
    return web.json_response(status.to_json_dict())


@routes.get("/unit")
async def get_unit_results(request: web.Request) -> web.Response:
    """Unit report in the legacy shape."""
    config = request.config_dict[CONFIG_KEY]
    suites = await load_legacy_suites(
        config.resolve(config.unit_report), "unit-framework", "Unit Tests"
    )
    return web.json_response([suite.to_json_dict() for suite in suites])


@routes.get("/e2e")
async def get_end_to_end_results(request: web.Request) -> web.Response:
    """End-to-end report in the legacy shape."""
    config = request.config_dict[CONFIG_KEY]
    suites = await load_legacy_suites(
        config.resolve(config.end_to_end_report), "end-to-end-framework", "E2E Tests"
    )
    return web.json_response([suite.to_json_dict() for suite in suites])


@routes.get("/summary")
async def get_summary(request: web.Request) -> web.Response:
    """Both reports in the legacy shape."""
    summary = await load_legacy_summary(request.config_dict[CONFIG_KEY])
    return web.json_response(summary.to_json_dict())


async def load_boot_results(app: web.Application) -> None:
    """Seed the result cache when the application starts."""
    await app[COORDINATOR_KEY].load_boot_results()


def create_app(
    config: RunnerConfig, coordinator: RunCoordinator | None = None
) -> web.Application:
    """Create the application serving the test endpoints under ``API_PREFIX``."""
    app = web.Application()
    app[CONFIG_KEY] = config
    app[COORDINATOR_KEY] = coordinator or RunCoordinator(config)
    app.on_startup.append(load_boot_results)

    tests_app = web.Application()
    tests_app.add_routes(routes)
    app.add_subapp(API_PREFIX, tests_app)

    return app
