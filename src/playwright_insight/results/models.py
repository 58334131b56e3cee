"""Data models for Playwright run results.

Two families live here:

* The *raw* tree (``RawRunResult`` → ``RawSuite`` → ``RawSpec`` →
  ``RawTest`` → ``RawResult``) mirrors the JSON reporter output. It is
  built once at the file boundary by the ``from_dict`` constructors, which
  turn absent or malformed branches into empty subtrees instead of raising
  further down.
* The *derived* records (``FlatExecution``, ``DashboardMetrics``,
  ``RunFile``) are what the aggregation code and the API payloads use.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

PASSED = "passed"
FAILED = "failed"
SKIPPED = "skipped"
STATUSES = (PASSED, FAILED, SKIPPED)

NOT_EXECUTED = "Not executed"

LIVE = "live"
ARCHIVE = "archive"


def normalize_status(raw: Optional[str]) -> str:
    """Collapse a reporter status into passed / failed / skipped.

    ``timedOut``, ``interrupted`` and any unknown value count as failed;
    a missing status counts as skipped.
    """
    if raw is None or raw == "":
        return SKIPPED
    if raw == PASSED:
        return PASSED
    if raw == SKIPPED:
        return SKIPPED
    return FAILED


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _as_number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    if math.isnan(value) or math.isinf(value):
        return 0.0
    return float(value)


# ── Raw reporter tree ────────────────────────────────────────────────


@dataclass
class RawStep:
    title: str
    duration: float = 0.0  # milliseconds
    error: Any = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional["RawStep"]:
        if not isinstance(data, dict):
            return None
        return cls(
            title=_as_str(data.get("title")),
            duration=_as_number(data.get("duration")),
            error=data.get("error"),
        )


@dataclass
class RawResult:
    """One execution attempt of a test (retries produce more of these)."""

    status: Optional[str] = None
    duration: float = 0.0  # milliseconds
    start_time: Optional[str] = None  # ISO-8601
    steps: list[RawStep] = field(default_factory=list)
    error: Optional[Any] = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional["RawResult"]:
        if not isinstance(data, dict):
            return None
        status = data.get("status")
        error = data.get("error")
        if error is None:
            errors = _as_list(data.get("errors"))
            error = errors[0] if errors else None
        start_time = data.get("startTime")
        return cls(
            status=status if isinstance(status, str) and status else None,
            duration=_as_number(data.get("duration")),
            start_time=start_time if isinstance(start_time, str) and start_time else None,
            steps=[s for s in map(RawStep.from_dict, _as_list(data.get("steps"))) if s],
            error=error,
        )


@dataclass
class RawTest:
    """A spec executed under one project (browser/config)."""

    project_name: str = ""
    results: list[RawResult] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> Optional["RawTest"]:
        if not isinstance(data, dict):
            return None
        return cls(
            project_name=_as_str(data.get("projectName")),
            results=[r for r in map(RawResult.from_dict, _as_list(data.get("results"))) if r],
        )

    @property
    def first_result(self) -> Optional[RawResult]:
        return self.results[0] if self.results else None


@dataclass
class RawSpec:
    title: str = ""
    file: str = ""
    tests: list[RawTest] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> Optional["RawSpec"]:
        if not isinstance(data, dict):
            return None
        return cls(
            title=_as_str(data.get("title")),
            file=_as_str(data.get("file")),
            tests=[t for t in map(RawTest.from_dict, _as_list(data.get("tests"))) if t],
        )


@dataclass
class RawSuite:
    """A describe block or a spec file; nests without a depth limit."""

    title: str = ""
    file: str = ""
    specs: list[RawSpec] = field(default_factory=list)
    suites: list["RawSuite"] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> Optional["RawSuite"]:
        if not isinstance(data, dict):
            return None
        return cls(
            title=_as_str(data.get("title")),
            file=_as_str(data.get("file")),
            specs=[s for s in map(RawSpec.from_dict, _as_list(data.get("specs"))) if s],
            suites=[s for s in map(RawSuite.from_dict, _as_list(data.get("suites"))) if s],
        )


@dataclass
class RawRunResult:
    """Root of one results file."""

    suites: list[RawSuite] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "RawRunResult":
        """Build the tree from decoded JSON.

        Raises:
            ValueError: If the top level is not a JSON object
        """
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return cls(
            suites=[s for s in map(RawSuite.from_dict, _as_list(data.get("suites"))) if s],
        )


# ── Derived records ──────────────────────────────────────────────────


@dataclass
class StepRecord:
    title: str
    duration: float  # milliseconds, as reported
    error: Any = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"title": self.title, "duration": self.duration}
        if self.error is not None:
            d["error"] = self.error
        return d


@dataclass
class FlatExecution:
    """One (spec × test) pair reduced to its first result.

    ``id`` is positional within a single flattening pass. Use :attr:`key`
    for identity across files.
    """

    id: str
    name: str
    status: str
    duration_seconds: float
    timestamp: str
    file: str = ""
    project_name: str = ""
    steps: list[StepRecord] = field(default_factory=list)
    manual: bool = False

    @property
    def duration(self) -> str:
        return f"{self.duration_seconds:.2f}s"

    @property
    def identity(self) -> tuple[str, str, str]:
        return (self.project_name, self.name, self.file)

    @property
    def key(self) -> str:
        return "::".join(self.identity)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "key": self.key,
            "name": self.name,
            "status": self.status,
            "duration": self.duration,
            "durationSeconds": self.duration_seconds,
            "timestamp": self.timestamp,
            "file": self.file,
            "projectName": self.project_name,
            "steps": [s.to_dict() for s in self.steps],
            "manual": self.manual,
        }


@dataclass
class DashboardMetrics:
    total_tests: int = 0
    passed_tests: int = 0
    failed_tests: int = 0
    skipped_tests: int = 0
    avg_duration: float = 0.0
    pass_rate: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalTests": self.total_tests,
            "passedTests": self.passed_tests,
            "failedTests": self.failed_tests,
            "skippedTests": self.skipped_tests,
            "avgDuration": self.avg_duration,
            "passRate": self.pass_rate,
        }


@dataclass(frozen=True)
class RunFile:
    """A results file and the calendar day it belongs to (``YYYY-MM-DD``)."""

    path: Path
    date: str
    source: str = LIVE

    @property
    def name(self) -> str:
        return self.path.name


@dataclass
class LoadedRun:
    run_file: RunFile
    result: RawRunResult

    @property
    def date(self) -> str:
        return self.run_file.date
