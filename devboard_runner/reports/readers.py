"""Read report files written by the test tools.

A missing or unreadable report is "no data", not an error: readers return
``None`` and the caller decides what an absent report means.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from devboard_runner.models.reports import Report

log = logging.getLogger(__name__)


async def read_json_file(path: Path) -> Any | None:
    """Read and decode a JSON file, or return None if absent or malformed."""
    try:
        content = await asyncio.to_thread(path.read_bytes)
    except FileNotFoundError:
        log.debug("Report file not found: %s", path)
        return None
    except OSError as e:
        log.warning("Failed to read report file %s: %s", path, e)
        return None

    # A report cut off mid-write can end inside a multi-byte character
    try:
        return json.loads(content.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        log.warning("Malformed JSON in report file %s: %s", path, e)
        return None


async def read_report[R: Report](path: Path, model: type[R]) -> R | None:
    """Read a report file and validate it into its report model.

    Args:
        path: Report file location
        model: Report variant the file is expected to hold

    Returns:
        The validated report, or None if the file is absent, is not JSON, or
        does not have the report's shape.

    """
    data = await read_json_file(path)
    if data is None:
        return None

    try:
        return model.model_validate(data)
    except ValidationError as e:
        log.warning(
            "Report file %s is not a valid %s: %s", path, model.__name__, e
        )
        return None


async def remove_report(path: Path) -> None:
    """Delete a single-use report file if it exists."""
    await asyncio.to_thread(path.unlink, missing_ok=True)
