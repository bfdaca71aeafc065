"""Response shape of the legacy results endpoints."""

from collections.abc import Sequence
from typing import Literal

from pydantic import Field

from devboard_runner.models.base import Model


class LegacyTest(Model):
    """One test entry in the legacy shape."""

    __test__ = False

    name: str
    status: Literal["passed", "failed", "skipped"]
    duration_ms: int = 0
    error_message: str | None = None


class LegacySuite(Model):
    """Suite entry in the legacy shape, counts derived from ``tests``."""

    name: str
    tests: Sequence[LegacyTest] = Field(default_factory=tuple)
    passed_count: int = 0
    failed_count: int = 0
    skipped_count: int = 0


class LegacySummary(Model):
    """Combined legacy view of the unit and end-to-end reports."""

    unit: Sequence[LegacySuite] = Field(default_factory=tuple)
    end_to_end: Sequence[LegacySuite] = Field(default_factory=tuple)
