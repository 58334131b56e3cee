"""Merge live and archived runs into date-keyed series.

One traversal, three uses. :func:`merge_runs` owns the precedence rule
and the per-date accumulation; callers only supply how a single run is
reduced (``reduce_run``) and how two reductions for the same date are
combined (``combine``):

* pass/fail trend counts       -> :func:`trend_series`
* per-spec-file durations      -> :func:`suite_duration_series`
* one test's execution history -> :func:`execution_history`

Precedence: a date that appears in any live file is taken from the live
files only. Archived files for that date are ignored wholesale, never
merged in. Files from the same source that share a date are summed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

from .flatten import iter_leaves
from .models import FAILED, PASSED, SKIPPED, LoadedRun, normalize_status

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class DateSeries(Generic[T]):
    """Mapping of ``YYYY-MM-DD`` to an aggregated value."""

    values: dict[str, T] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.values)

    def __contains__(self, day: object) -> bool:
        return day in self.values

    def __getitem__(self, day: str) -> T:
        return self.values[day]

    def dates(self, descending: bool = False) -> list[str]:
        return sorted(self.values, reverse=descending)

    def items(self, descending: bool = False) -> list[tuple[str, T]]:
        return [(day, self.values[day]) for day in self.dates(descending)]


def merge_runs(
    live: Iterable[LoadedRun],
    archive: Iterable[LoadedRun],
    reduce_run: Callable[[LoadedRun], T],
    combine: Callable[[T, T], T],
) -> DateSeries[T]:
    """Reduce every run and fold the reductions into a :class:`DateSeries`.

    Args:
        live: Runs from the live results directory (higher precedence)
        archive: Runs from the archive directory
        reduce_run: Computes one run's contribution
        combine: Adds two contributions for the same date

    Returns:
        Series holding, per date, the live contributions if any live run
        has that date, otherwise the archived contributions.
    """
    values: dict[str, T] = {}

    def accumulate(run: LoadedRun) -> None:
        contribution = reduce_run(run)
        if run.date in values:
            values[run.date] = combine(values[run.date], contribution)
        else:
            values[run.date] = contribution

    live_dates: set[str] = set()
    for run in live:
        accumulate(run)
        live_dates.add(run.date)

    shadowed = 0
    for run in archive:
        if run.date in live_dates:
            shadowed += 1
            continue
        accumulate(run)

    if shadowed:
        logger.debug("Ignored %d archived files shadowed by live results", shadowed)
    return DateSeries(values)


# ── Pass/fail trend ──────────────────────────────────────────────────


@dataclass
class TrendCounts:
    passed: int = 0
    failed: int = 0
    skipped: int = 0

    def __add__(self, other: "TrendCounts") -> "TrendCounts":
        return TrendCounts(
            passed=self.passed + other.passed,
            failed=self.failed + other.failed,
            skipped=self.skipped + other.skipped,
        )

    @property
    def total(self) -> int:
        return self.passed + self.failed

    @property
    def pass_rate(self) -> float:
        return (self.passed / self.total) * 100 if self.total else 0

    def to_dict(self, day: str) -> dict[str, Any]:
        return {
            "date": day,
            "passed": self.passed,
            "failed": self.failed,
            "skipped": self.skipped,
            "total": self.total,
            "passRate": self.pass_rate,
        }


def trend_counts(run: LoadedRun) -> TrendCounts:
    """Status counts over executed tests (tests without a result are ignored)."""
    counts = TrendCounts()
    for leaf in iter_leaves(run.result):
        if not leaf.executed:
            continue
        status = leaf.status
        if status == PASSED:
            counts.passed += 1
        elif status == FAILED:
            counts.failed += 1
        elif status == SKIPPED:
            counts.skipped += 1
    return counts


def trend_series(live: Iterable[LoadedRun], archive: Iterable[LoadedRun]) -> DateSeries[TrendCounts]:
    return merge_runs(live, archive, trend_counts, lambda a, b: a + b)


def trend_payload(series: DateSeries[TrendCounts]) -> list[dict[str, Any]]:
    """Chart rows, oldest date first."""
    return [counts.to_dict(day) for day, counts in series.items()]


# ── Suite durations ──────────────────────────────────────────────────


@dataclass
class SuiteStat:
    duration: float = 0.0  # seconds
    test_count: int = 0

    def __add__(self, other: "SuiteStat") -> "SuiteStat":
        return SuiteStat(self.duration + other.duration, self.test_count + other.test_count)


def spec_file_name(file: str) -> str:
    """Base name of a spec file path, for either separator style."""
    return file.replace("\\", "/").rsplit("/", 1)[-1]


def suite_durations(run: LoadedRun) -> dict[str, SuiteStat]:
    """Seconds spent and tests counted per spec file name in one run.

    Every test counts toward ``test_count``; only first results with a
    duration add time. Tests with no known file are left out.
    """
    stats: dict[str, SuiteStat] = {}
    for leaf in iter_leaves(run.result):
        if not leaf.file:
            continue
        name = spec_file_name(leaf.file)
        stat = stats.setdefault(name, SuiteStat())
        stat.test_count += 1
        result = leaf.result
        if result is not None and result.duration:
            stat.duration += result.duration / 1000
    return stats


def combine_suite_durations(
    a: dict[str, SuiteStat], b: dict[str, SuiteStat]
) -> dict[str, SuiteStat]:
    merged = dict(a)
    for name, stat in b.items():
        merged[name] = merged[name] + stat if name in merged else stat
    return merged


def suite_duration_series(
    live: Iterable[LoadedRun], archive: Iterable[LoadedRun]
) -> DateSeries[dict[str, SuiteStat]]:
    return merge_runs(live, archive, suite_durations, combine_suite_durations)


def suite_duration_payload(series: DateSeries[dict[str, SuiteStat]]) -> dict[str, Any]:
    """Chart rows ``{date, <suite>: seconds, <suite>_count: n}``, oldest first."""
    chart_data = []
    suite_names: set[str] = set()
    for day, suites in series.items():
        row: dict[str, Any] = {"date": day}
        for name, stat in suites.items():
            suite_names.add(name)
            row[name] = stat.duration
            row[f"{name}_count"] = stat.test_count
        chart_data.append(row)
    return {
        "chartData": chart_data,
        "suiteNames": sorted(suite_names),
        "totalDates": len(chart_data),
    }


# ── Per-test history ─────────────────────────────────────────────────

TEST_ID_SEPARATOR = "::"


def make_test_id(file: str, title: str) -> str:
    return f"{file}{TEST_ID_SEPARATOR}{title}"


def split_test_id(test_id: str) -> tuple[str, str]:
    """Split ``<file>::<title>``; the title may itself contain ``::``."""
    file, sep, title = test_id.partition(TEST_ID_SEPARATOR)
    if not sep:
        raise ValueError(f"test id must look like '<file>::<title>', got {test_id!r}")
    return file, title


@dataclass
class CaseExecution:
    date: str
    duration: float  # seconds
    status: str

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date, "duration": self.duration, "status": self.status}


def _first_execution(run: LoadedRun, file: str, title: str) -> Optional[CaseExecution]:
    for leaf in iter_leaves(run.result):
        if leaf.file != file or leaf.spec.title != title:
            continue
        result = leaf.result
        if result is None:
            continue
        return CaseExecution(
            date=run.date,
            duration=round(result.duration / 1000, 2),
            status=normalize_status(result.status),
        )
    return None


def execution_history(
    live: Iterable[LoadedRun], archive: Iterable[LoadedRun], test_id: str
) -> dict[str, Any]:
    """Execution history of one test across runs, oldest date first.

    Each run contributes at most its first matching execution.

    Raises:
        ValueError: If *test_id* is not ``<file>::<title>``
    """
    file, title = split_test_id(test_id)

    def reduce_run(run: LoadedRun) -> list[CaseExecution]:
        found = _first_execution(run, file, title)
        return [found] if found else []

    series = merge_runs(live, archive, reduce_run, lambda a, b: a + b)
    executions = [e for _, found in series.items() for e in found]
    logger.debug("Found %d executions for %s", len(executions), test_id)
    return {
        "testId": test_id,
        "testName": title,
        "filePath": file,
        "executions": [e.to_dict() for e in executions],
    }


def file_test_groups(runs: Iterable[LoadedRun]) -> list[dict[str, Any]]:
    """Spec files seen in *runs* with the distinct tests each declares."""
    files: dict[str, dict[str, str]] = {}
    for run in runs:
        for leaf in iter_leaves(run.result):
            file = leaf.file or "unknown.spec.ts"
            test_id = make_test_id(file, leaf.spec.title)
            files.setdefault(file, {})[test_id] = leaf.spec.title
    return [
        {
            "fileName": file,
            "tests": [{"testId": tid, "testName": name} for tid, name in tests.items()],
        }
        for file, tests in sorted(files.items())
        if tests
    ]
