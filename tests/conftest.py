"""Shared fixtures: Playwright reporter document builders and a project tree."""

import json
from datetime import date, timezone
from pathlib import Path

import pytest

from playwright_insight.config import DashboardConfig
from playwright_insight.file_ops import FileStore
from playwright_insight.results.overrides import MemoryOverrideStore
from playwright_insight.server.api import DashboardService

TODAY = date(2024, 5, 3)


class ResultsBuilder:
    """Builds Playwright JSON reporter documents as plain dicts."""

    @staticmethod
    def result(status="passed", duration=1000, start_time="2024-05-01T10:00:00.000Z", **extra):
        d = {"status": status, "duration": duration, "retry": 0}
        if start_time is not None:
            d["startTime"] = start_time
        d.update(extra)
        return d

    @staticmethod
    def test(*results, project="chromium"):
        return {"projectName": project, "results": list(results)}

    @staticmethod
    def spec(title, *tests, file=None):
        d = {"title": title, "tests": list(tests)}
        if file is not None:
            d["file"] = file
        return d

    @staticmethod
    def suite(title="", file=None, specs=(), suites=()):
        d = {"title": title, "specs": list(specs), "suites": list(suites)}
        if file is not None:
            d["file"] = file
        return d

    @staticmethod
    def run(*suites):
        return {"config": {}, "suites": list(suites), "stats": {}}

    @classmethod
    def simple_run(cls, outcomes, file="checkout.spec.ts", start_time="2024-05-01T10:00:00.000Z"):
        """One file suite with a single-result spec per ``title: status`` entry."""
        specs = [
            cls.spec(title, cls.test(cls.result(status, start_time=start_time)))
            for title, status in outcomes.items()
        ]
        return cls.run(cls.suite(title=file, file=file, specs=specs))


def write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def rb():
    """The results document builder."""
    return ResultsBuilder


@pytest.fixture
def write(tmp_path):
    """Write JSON (or raw text) under the temporary project root."""

    def _write(relative: str, data) -> Path:
        path = tmp_path / relative
        if isinstance(data, str):
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(data, encoding="utf-8")
            return path
        return write_json(path, data)

    return _write


@pytest.fixture
def config(tmp_path):
    return DashboardConfig(root_dir=str(tmp_path))


@pytest.fixture
def store():
    return FileStore()


@pytest.fixture
def overrides():
    return MemoryOverrideStore()


@pytest.fixture
def service(config, overrides):
    return DashboardService(config, overrides=overrides, today=TODAY, tz=timezone.utc)
