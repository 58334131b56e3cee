"""Discovery and loading of dated results files.

Two directories feed the dashboard: the *live* results directory (the
most recent runs, possibly not archived yet) and the *archive* (historical
copies). Both use the ``results.json`` / ``results-YYYY-MM-DD.json``
naming convention.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date
from pathlib import Path
from typing import Optional

from ..config import DashboardConfig
from ..exceptions import MalformedResultsError, ResultsError, ResultsNotFoundError
from ..file_ops import FileStore
from ..logging_config import get_logger
from .models import ARCHIVE, LIVE, LoadedRun, RawRunResult, RunFile

logger = get_logger(__name__)

DATED_NAME = re.compile(r"^results-(\d{4}-\d{2}-\d{2})\.json$")
RESULTS_PREFIX = "results"
DATED_PREFIX = "results-"
JSON_SUFFIX = ".json"
DEFAULT_RESULTS_NAME = "results.json"


def date_from_name(name: str) -> Optional[str]:
    """Extract ``YYYY-MM-DD`` from ``results-YYYY-MM-DD.json``, or None."""
    match = DATED_NAME.match(name)
    if not match:
        return None
    try:
        date.fromisoformat(match.group(1))
    except ValueError:
        return None
    return match.group(1)


def dated_name(day: str) -> str:
    return f"{DATED_PREFIX}{day}{JSON_SUFFIX}"


def make_run_file(store: FileStore, path: Path, source: str) -> RunFile:
    """Date a file by its name, falling back to its modification day."""
    day = date_from_name(path.name)
    if day is None:
        day = store.mtime_date(path).isoformat()
    return RunFile(path=path, date=day, source=source)


def load_run(store: FileStore, run_file: RunFile) -> LoadedRun:
    """Read and parse one results file.

    Raises:
        FileAccessError: If the file cannot be read
        MalformedResultsError: If it is not a results JSON object
    """
    data = store.read_json(run_file.path)
    try:
        result = RawRunResult.from_dict(data)
    except ValueError as e:
        raise MalformedResultsError(run_file.path, str(e))
    return LoadedRun(run_file=run_file, result=result)


def load_runs(store: FileStore, run_files: Iterable[RunFile]) -> list[LoadedRun]:
    """Load every file that parses; failures are logged and dropped."""
    runs = []
    failures = 0
    for run_file in run_files:
        try:
            runs.append(load_run(store, run_file))
        except ResultsError as e:
            failures += 1
            logger.warning("Skipping %s results file: %s", run_file.source, e)
    if failures:
        logger.info("Loaded %d results files, skipped %d", len(runs), failures)
    return runs


class RunRepository:
    """Lists and loads live and archived runs for one configuration."""

    def __init__(self, config: DashboardConfig, store: Optional[FileStore] = None):
        self.config = config
        self.store = store or FileStore(max_file_size_bytes=config.max_file_size_bytes)

    @property
    def live_dir(self) -> Path:
        return self.config.results_path

    @property
    def archive_dir(self) -> Path:
        return self.config.archive_path

    def _run_files(self, directory: Path, source: str, prefix: str) -> list[RunFile]:
        files = []
        for name in self.store.list_files(directory, prefix=prefix, suffix=JSON_SUFFIX):
            try:
                files.append(make_run_file(self.store, directory / name, source))
            except ResultsError as e:
                logger.warning("Cannot date %s: %s", name, e)
        return files

    def live_files(self) -> list[RunFile]:
        """``results*.json`` in the live directory."""
        return self._run_files(self.live_dir, LIVE, RESULTS_PREFIX)

    def archive_files(self) -> list[RunFile]:
        """Every ``*.json`` in the archive directory."""
        return self._run_files(self.archive_dir, ARCHIVE, "")

    def dated_live_names(self) -> list[str]:
        """Dated ``results-*.json`` names in the live directory, newest last."""
        return self.store.list_files(self.live_dir, prefix=DATED_PREFIX, suffix=JSON_SUFFIX)

    def load_live(self) -> list[LoadedRun]:
        return load_runs(self.store, self.live_files())

    def load_archive(self) -> list[LoadedRun]:
        return load_runs(self.store, self.archive_files())

    def archived_run(self, day: str) -> Optional[LoadedRun]:
        """The archive's ``results-<day>.json`` if present and readable."""
        path = self.archive_dir / dated_name(day)
        if not self.store.exists(path):
            logger.debug("No archived results for %s", day)
            return None
        try:
            return load_run(self.store, RunFile(path=path, date=day, source=ARCHIVE))
        except ResultsError as e:
            logger.warning("Skipping archived results for %s: %s", day, e)
            return None

    def available_dates(self) -> list[str]:
        """Dates with a dated results file in either directory, newest first."""
        days = set()
        for directory in (self.live_dir, self.archive_dir):
            for name in self.store.list_files(directory, prefix=DATED_PREFIX, suffix=JSON_SUFFIX):
                day = date_from_name(name)
                if day:
                    days.add(day)
        return sorted(days, reverse=True)

    def find_latest(self, day: Optional[str] = None) -> RunFile:
        """Pick the results file a dashboard view should show.

        With *day*: the archived copy first, then the live one. Without:
        live ``results.json``, then the newest dated live file, then the
        newest dated archive file.

        Raises:
            ResultsNotFoundError: If no candidate exists
        """
        if day is not None:
            for directory, source in ((self.archive_dir, ARCHIVE), (self.live_dir, LIVE)):
                path = directory / dated_name(day)
                if self.store.exists(path):
                    return RunFile(path=path, date=day, source=source)
            raise ResultsNotFoundError(
                "no results file for date", path=self.archive_dir / dated_name(day), date=day
            )

        default = self.live_dir / DEFAULT_RESULTS_NAME
        if self.store.exists(default):
            return make_run_file(self.store, default, LIVE)

        for directory, source in ((self.live_dir, LIVE), (self.archive_dir, ARCHIVE)):
            names = self.store.list_files(directory, prefix=DATED_PREFIX, suffix=JSON_SUFFIX)
            if names:
                return make_run_file(self.store, directory / names[-1], source)

        raise ResultsNotFoundError("no results files in live or archive directory", path=default)

    def load_latest(self, day: Optional[str] = None) -> LoadedRun:
        return load_run(self.store, self.find_latest(day))
