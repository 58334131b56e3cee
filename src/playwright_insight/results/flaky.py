"""Flaky-test detection over a rolling window of dated archive runs.

A test is identified by ``(projectName, title, file)``. Within the window
(today and the previous days, by wall clock) each test gets at most one
status per date; it is flaky when those statuses are not all the same.
A test seen on a single date has one status and is never flaky.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any, Optional

from ..exceptions import InsufficientDataError
from .flatten import iter_leaves, parse_iso
from .models import LoadedRun

logger = logging.getLogger(__name__)

DATE_FORMAT = "%m/%d/%Y"
TIME_FORMAT = "%I:%M:%S %p"

RunLookup = Callable[[str], Optional[LoadedRun]]


@dataclass
class StatusPoint:
    run_date: str  # YYYY-MM-DD of the results file
    status: str
    date: str  # display date
    time: str  # display time

    def to_dict(self) -> dict[str, Any]:
        return {"runDate": self.run_date, "date": self.date, "time": self.time, "status": self.status}


@dataclass
class FlakyRecord:
    project_name: str
    title: str
    file: str
    statuses: list[StatusPoint] = field(default_factory=list)  # newest first

    @property
    def identity(self) -> tuple[str, str, str]:
        return (self.project_name, self.title, self.file)

    def to_dict(self) -> dict[str, Any]:
        return {
            "testName": self.title,
            "projectName": self.project_name,
            "filePath": self.file,
            "statuses": [s.to_dict() for s in self.statuses],
        }


@dataclass
class FlakyReport:
    flaky_tests: list[FlakyRecord]
    dates_analyzed: list[str]  # newest first
    dates_found: list[str]
    total_tests_analyzed: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "flakyTests": [f.to_dict() for f in self.flaky_tests],
            "datesAnalyzed": self.dates_analyzed,
            "datesFound": self.dates_found,
            "totalTestsAnalyzed": self.total_tests_analyzed,
            "insufficientData": False,
        }


def window_dates(today: date, days: int = 3) -> list[str]:
    """``today`` and the ``days - 1`` preceding dates, newest first."""
    return [(today - timedelta(days=offset)).isoformat() for offset in range(days)]


def _status_point(
    run_date: str, status: str, start_time: Optional[str], tz: Optional[tzinfo]
) -> StatusPoint:
    moment = parse_iso(start_time) if start_time else None
    if moment is None:
        moment = datetime.combine(date.fromisoformat(run_date), time())
    else:
        moment = moment.astimezone(tz)
    return StatusPoint(
        run_date=run_date,
        status=status,
        date=moment.strftime(DATE_FORMAT),
        time=moment.strftime(TIME_FORMAT),
    )


def find_flaky_tests(
    lookup: RunLookup,
    today: date,
    window_days: int = 3,
    min_runs: int = 2,
    tz: Optional[tzinfo] = None,
) -> FlakyReport:
    """Compare per-test statuses across the dated runs in the window.

    Args:
        lookup: Returns the parsed run for a ``YYYY-MM-DD`` date, or None
        today: Last day of the window
        window_days: Number of dates compared
        min_runs: Dates that must have a run before anything is compared

    Raises:
        InsufficientDataError: If fewer than *min_runs* dates have a run
    """
    dates = window_dates(today, window_days)

    runs: dict[str, LoadedRun] = {}
    for day in dates:
        run = lookup(day)
        if run is not None:
            runs[day] = run
    logger.debug("Flaky window %s: runs found for %s", dates, sorted(runs))

    if len(runs) < min_runs:
        raise InsufficientDataError(
            f"need results for at least {min_runs} of the last {window_days} days",
            minimum_required=min_runs,
            found=len(runs),
        )

    by_test: dict[tuple[str, str, str], dict[str, StatusPoint]] = {}
    for day, run in runs.items():
        for leaf in iter_leaves(run.result):
            result = leaf.result
            if result is None:
                continue
            by_test.setdefault(leaf.identity, {})[day] = _status_point(
                day, leaf.status, result.start_time, tz
            )

    flaky = []
    for (project_name, title, file), per_date in by_test.items():
        statuses = [per_date[day] for day in dates if day in per_date]
        if len({s.status for s in statuses}) > 1:
            flaky.append(FlakyRecord(project_name, title, file, statuses))

    flaky.sort(key=lambda f: (f.title.casefold(), f.title, f.project_name, f.file))
    logger.info("Found %d flaky tests among %d", len(flaky), len(by_test))

    return FlakyReport(
        flaky_tests=flaky,
        dates_analyzed=dates,
        dates_found=[day for day in dates if day in runs],
        total_tests_analyzed=len(by_test),
    )
