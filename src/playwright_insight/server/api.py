"""Build the JSON payloads served by the dashboard API.

``DashboardService`` is the single place where configuration, the file
store, the run repository and the override store meet. It holds no state
between requests: every payload is computed from the files on disk.
"""

from __future__ import annotations

import logging
from datetime import date, tzinfo
from pathlib import Path
from typing import Any, Optional

from ..config import DashboardConfig
from ..exceptions import InsufficientDataError, ResultsError, ResultsNotFoundError
from ..file_ops import FileStore
from ..results.archive import archive_results
from ..results.flaky import find_flaky_tests
from ..results.flatten import flatten
from ..results.merge import (
    execution_history,
    file_test_groups,
    suite_duration_payload,
    suite_duration_series,
    trend_payload,
    trend_series,
)
from ..results.metrics import apply_overrides, compute_metrics, slowest_tests
from ..results.models import LIVE, RawRunResult
from ..results.overrides import JsonOverrideStore, OverrideStore
from ..results.runs import JSON_SUFFIX, RunRepository, load_run, make_run_file
from ..specs.coverage import build_coverage, coverage_summary, load_mapping
from ..specs.parser import parse_spec_files
from ..specs.status import annotate_suites

logger = logging.getLogger(__name__)

INSUFFICIENT_FLAKY_MESSAGE = "Not enough test result files found (need at least {n} days)"


class DashboardService:
    """Payload builders for every dashboard view.

    Args:
        config: Paths and tunables
        store: File access layer (built from *config* when omitted)
        overrides: Manual status override store (JSON file under the root
            when omitted)
        today: Last day of the flaky window (the wall-clock date when omitted)
        tz: Zone used to render timestamps (local time when omitted)
    """

    def __init__(
        self,
        config: DashboardConfig,
        store: Optional[FileStore] = None,
        overrides: Optional[OverrideStore] = None,
        today: Optional[date] = None,
        tz: Optional[tzinfo] = None,
    ):
        self.config = config
        self.store = store or FileStore(max_file_size_bytes=config.max_file_size_bytes)
        self.repo = RunRepository(config, self.store)
        self.overrides = overrides or JsonOverrideStore(config.overrides_path, self.store)
        self.today = today
        self.tz = tz

    # ── Results ────────────────────────────────────────────────────

    def _results_payload(self, result: RawRunResult) -> dict[str, Any]:
        executions = apply_overrides(flatten(result, self.tz), self.overrides.load())
        return {
            "metrics": compute_metrics(executions).to_dict(),
            "testResults": [e.to_dict() for e in executions],
        }

    def latest_results(self, day: Optional[str] = None) -> dict[str, Any]:
        """Metrics and flat executions of the latest (or a given day's) run.

        Raises:
            ResultsNotFoundError: If no results file matches
            FileAccessError: If the chosen file cannot be read
            MalformedResultsError: If the chosen file is not a results object
        """
        if day is not None:
            date.fromisoformat(day)
        run = self.repo.load_latest(day)
        payload = self._results_payload(run.result)
        payload["fileName"] = run.run_file.name
        payload["date"] = run.date
        payload["source"] = run.run_file.source
        return payload

    def all_live_documents(self) -> dict[str, Any]:
        """Raw content of every JSON file in the live results directory.

        Unreadable files are left out of both lists.

        Raises:
            ResultsNotFoundError: If the live results directory is missing
        """
        results_dir = self.config.results_path
        if not results_dir.is_dir():
            raise ResultsNotFoundError("results directory not found", path=results_dir)
        files, documents = [], []
        for name in self.store.list_files(results_dir, suffix=JSON_SUFFIX):
            try:
                documents.append(self.store.read_json(results_dir / name))
            except ResultsError as e:
                logger.warning("Skipping %s: %s", name, e)
                continue
            files.append(name)
        return {"files": files, "results": documents}

    def available_dates(self) -> dict[str, Any]:
        return {"dates": self.repo.available_dates()}

    def archive_history(self) -> list[dict[str, Any]]:
        """Every archived run, newest first, with its metrics and executions."""
        runs = self.repo.load_archive()
        runs.sort(key=lambda r: r.run_file.name, reverse=True)
        history = []
        for run in runs:
            entry = {"date": run.date, "fileName": run.run_file.name}
            entry.update(self._results_payload(run.result))
            history.append(entry)
        return history

    def trends(self) -> list[dict[str, Any]]:
        series = trend_series(self.repo.load_live(), self.repo.load_archive())
        return trend_payload(series)

    def suite_durations(self) -> dict[str, Any]:
        series = suite_duration_series(self.repo.load_live(), self.repo.load_archive())
        return suite_duration_payload(series)

    def slowest(self, limit: Optional[int] = None) -> dict[str, Any]:
        limit = limit if limit is not None else self.config.slowest_limit
        if limit < 1:
            raise ValueError("limit must be at least 1")
        run = self.repo.load_latest()
        executions = apply_overrides(flatten(run.result, self.tz), self.overrides.load())
        payload = slowest_tests(executions, limit)
        payload["fileName"] = run.run_file.name
        return payload

    def archive(self) -> dict[str, Any]:
        """Copy dated live results into the archive.

        Raises:
            ResultsNotFoundError: If there is nothing to archive
        """
        outcome = archive_results(self.store, self.config.results_path, self.config.archive_path)
        return outcome.to_dict()

    # ── Flaky tests ────────────────────────────────────────────────

    def flaky_tests(self) -> dict[str, Any]:
        """Flaky report over the archived runs of the last few days.

        Too few dated runs is not an error for callers: the payload then
        has ``insufficientData: True`` and an explanatory ``message``.
        """
        today = self.today or date.today()
        try:
            report = find_flaky_tests(
                self.repo.archived_run,
                today,
                window_days=self.config.flaky_window_days,
                min_runs=self.config.flaky_min_runs,
                tz=self.tz,
            )
        except InsufficientDataError as e:
            logger.info("Flaky analysis skipped: %s", e)
            return {
                "flakyTests": [],
                "insufficientData": True,
                "message": INSUFFICIENT_FLAKY_MESSAGE.format(n=self.config.flaky_min_runs),
                "runsFound": e.found,
            }
        return report.to_dict()

    # ── Per-test history ───────────────────────────────────────────

    def case_time_files(self) -> dict[str, Any]:
        runs = self.repo.load_live() + self.repo.load_archive()
        return {"files": file_test_groups(runs)}

    def case_time_history(self, test_id: str) -> dict[str, Any]:
        """Executions of one ``<file>::<title>`` test across all runs.

        Raises:
            ValueError: If *test_id* is malformed
        """
        return execution_history(self.repo.load_live(), self.repo.load_archive(), test_id)

    # ── Spec sources ───────────────────────────────────────────────

    def _newest_live_run(self) -> Optional[RawRunResult]:
        names = self.repo.dated_live_names()
        if not names:
            return None
        path = self.config.results_path / names[-1]
        try:
            return load_run(self.store, make_run_file(self.store, path, LIVE)).result
        except ResultsError as e:
            logger.warning("No results to annotate test cases with: %s", e)
            return None

    def test_cases(self) -> dict[str, Any]:
        """Parsed test-case narratives, annotated with the latest outcomes.

        Raises:
            ResultsNotFoundError: If the tests directory does not exist
        """
        tests_dir = self._require_tests_dir()
        paths = self.store.walk(tests_dir, self.config.spec_suffix)
        parsed = parse_spec_files(self.store, paths, self.config.root_path)
        suites = [p.suite for p in parsed if p.suite is not None and p.suite.test_cases]
        annotate_suites(suites, self._newest_live_run())
        return {
            "suites": [s.to_dict() for s in suites],
            "totalTests": sum(len(s.test_cases) for s in suites),
            "totalSuites": len(suites),
        }

    def coverage(self) -> dict[str, Any]:
        """Requirement coverage per spec file.

        Raises:
            ResultsNotFoundError: If the tests directory does not exist
        """
        tests_dir = self._require_tests_dir()
        mapping = load_mapping(self.store, self.config.mapping_path)
        records = build_coverage(self.store, tests_dir, mapping, self.config.spec_suffix)
        return coverage_summary(records, mapping)

    def _require_tests_dir(self) -> Path:
        tests_dir = self.config.tests_path
        if not tests_dir.is_dir():
            raise ResultsNotFoundError("tests directory not found", path=tests_dir)
        return tests_dir

    # ── Manual overrides ───────────────────────────────────────────

    def list_overrides(self) -> dict[str, Any]:
        return {"overrides": self.overrides.load()}

    def set_override(self, key: str, status: str) -> dict[str, Any]:
        """Raises ValueError for an empty key or an unknown status."""
        if not key:
            raise ValueError("override key is required")
        return {"overrides": self.overrides.set(key, status)}

    def clear_overrides(self) -> dict[str, Any]:
        self.overrides.clear()
        return {"overrides": {}}
