"""Tests for the typer commands, run in-process against a temporary project."""

import json

import pytest
from typer.testing import CliRunner

from playwright_insight.cli import app

runner = CliRunner()


@pytest.fixture
def invoke(tmp_path):
    """Run a command with ``--root`` pointing at the temporary project."""

    def _invoke(*args):
        return runner.invoke(app, ["--quiet", "--root", str(tmp_path), *args])

    return _invoke


def _json(result):
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


class TestSummary:
    def test_json(self, invoke, write, rb):
        write("test-results/results.json", rb.simple_run({"a": "passed", "b": "failed"}))

        payload = _json(invoke("summary", "--json"))

        assert payload["metrics"]["totalTests"] == 2
        assert payload["metrics"]["failedTests"] == 1

    def test_table_lists_failures(self, invoke, write, rb):
        write("test-results/results.json", rb.simple_run({"login works": "failed"}))

        result = invoke("summary")

        assert result.exit_code == 0
        assert "Failed tests" in result.stdout
        assert "login works" in result.stdout

    def test_given_date(self, invoke, write, rb):
        write("archive/results-2024-05-01.json", rb.simple_run({"a": "skipped"}))
        payload = _json(invoke("summary", "--date", "2024-05-01", "--json"))
        assert payload["source"] == "archive"

    def test_no_results(self, invoke):
        result = invoke("summary")
        assert result.exit_code == 1
        assert "No data" in result.stdout

    def test_bad_date(self, invoke):
        assert invoke("summary", "--date", "May 1st").exit_code == 2


class TestSeriesCommands:
    def test_trends_json(self, invoke, write, rb):
        write("archive/results-2024-05-01.json", rb.simple_run({"a": "passed"}))
        rows = _json(invoke("trends", "--json"))
        assert rows == [
            {"date": "2024-05-01", "passed": 1, "failed": 0, "skipped": 0, "total": 1, "passRate": 100.0}
        ]

    def test_trends_empty(self, invoke):
        result = invoke("trends")
        assert result.exit_code == 0
        assert "No dated results" in result.stdout

    def test_durations_table(self, invoke, write, rb):
        write("archive/results-2024-05-01.json", rb.simple_run({"a": "passed"}))
        result = invoke("durations")
        assert result.exit_code == 0
        assert "checkout.spec.ts" in result.stdout

    def test_dates_json(self, invoke, write, rb):
        write("archive/results-2024-05-01.json", rb.run())
        write("test-results/results-2024-05-02.json", rb.run())
        assert _json(invoke("dates", "--json")) == {"dates": ["2024-05-02", "2024-05-01"]}


class TestFlaky:
    def test_reported(self, invoke, write, rb):
        write("archive/results-2024-05-01.json", rb.simple_run({"checkout": "passed"}))
        write("archive/results-2024-05-02.json", rb.simple_run({"checkout": "failed"}))

        report = _json(invoke("flaky", "--today", "2024-05-03", "--json"))

        assert [f["testName"] for f in report["flakyTests"]] == ["checkout"]

    def test_insufficient_data_message(self, invoke):
        result = invoke("flaky", "--today", "2024-05-03")
        assert result.exit_code == 0
        assert "Not enough test result files found" in result.stdout


class TestArchive:
    def test_archive(self, invoke, write, rb, tmp_path):
        write("test-results/results-2024-05-02.json", rb.run())

        payload = _json(invoke("archive", "--json"))

        assert payload["archived"] == ["results-2024-05-02.json"]
        assert (tmp_path / "archive" / "results-2024-05-02.json").exists()

    def test_nothing_to_archive(self, invoke):
        assert invoke("archive").exit_code == 1

    def test_unreadable_file_reported(self, invoke, write, rb):
        write("test-results/results-2024-05-01.json", "{broken")
        write("test-results/results-2024-05-02.json", rb.run())

        result = invoke("archive")

        assert result.exit_code == 0
        assert "results-2024-05-01.json" in result.stdout
        assert "not archived" in result.stdout


class TestSpecCommands:
    SPEC = "test.describe('Cart', () => {\n  test('Add item REQ-SHOP-CART-UI-001', {}, async () => {});\n});\n"

    def test_cases_json(self, invoke, write):
        write("tests/shop/cart.spec.ts", self.SPEC)
        payload = _json(invoke("cases", "--json"))
        assert payload["totalTests"] == 1
        assert payload["suites"][0]["testCases"][0]["feature"] == "shop"

    def test_coverage_table(self, invoke, write):
        write("tests/shop/cart.spec.ts", self.SPEC)
        write("mapping.json", {"REQ-SHOP-CART-UI-001": "Add", "REQ-SHOP-CART-UI-002": "Remove"})

        result = invoke("coverage")

        assert result.exit_code == 0
        assert "50%" in result.stdout

    def test_missing_tests_dir(self, invoke):
        assert invoke("cases").exit_code == 1


class TestGlobalOptions:
    def test_config_file_applied(self, invoke, write, rb, tmp_path):
        write("runs/results.json", rb.simple_run({"a": "passed"}))
        config_file = tmp_path / "custom.toml"
        config_file.write_text('results_dir = "runs"\n', encoding="utf-8")

        payload = _json(invoke("--config", str(config_file), "summary", "--json"))

        assert payload["metrics"]["totalTests"] == 1

    def test_invalid_config_file(self, invoke, tmp_path):
        config_file = tmp_path / "bad.toml"
        config_file.write_text("slowest_limit = 0\n", encoding="utf-8")

        result = invoke("--config", str(config_file), "dates")

        assert result.exit_code == 1
        assert "Configuration error" in result.stdout

    def test_log_file(self, write, rb, tmp_path):
        write("test-results/results-2024-05-02.json", rb.run())
        log_file = tmp_path / "insight.log"

        result = runner.invoke(
            app, ["--verbose", "--log-file", str(log_file), "--root", str(tmp_path), "archive", "--json"]
        )

        assert result.exit_code == 0
        assert "Archived results-2024-05-02.json" in log_file.read_text(encoding="utf-8")

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "summary" in result.output


class TestServe:
    def test_runs_uvicorn_with_configured_logging(self, invoke, monkeypatch):
        import uvicorn

        calls = []
        monkeypatch.setattr(uvicorn, "run", lambda app, **kwargs: calls.append(kwargs))

        result = invoke("serve", "--port", "9001")

        assert result.exit_code == 0, result.output
        (kwargs,) = calls
        assert kwargs == {"host": "127.0.0.1", "port": 9001, "log_config": None}
