"""Tests for results.metrics: summary metrics, slowest tests, overrides."""

import pytest

from playwright_insight.results.metrics import apply_overrides, compute_metrics, slowest_tests
from playwright_insight.results.models import FlatExecution


def _execution(name, status="passed", seconds=1.0, project="chromium", file="a.spec.ts"):
    return FlatExecution(
        id=f"TEST-{name}",
        name=name,
        status=status,
        duration_seconds=seconds,
        timestamp="Not executed",
        file=file,
        project_name=project,
    )


class TestComputeMetrics:
    def test_empty_input_is_all_zero(self):
        m = compute_metrics([])
        assert m.total_tests == 0
        assert m.pass_rate == 0
        assert m.avg_duration == 0

    def test_counts_and_rates(self):
        m = compute_metrics(
            [
                _execution("a", "passed", 1.0),
                _execution("b", "passed", 2.0),
                _execution("c", "failed", 3.0),
                _execution("d", "skipped", 0.0),
            ]
        )
        assert (m.total_tests, m.passed_tests, m.failed_tests, m.skipped_tests) == (4, 2, 1, 1)
        assert m.pass_rate == 50.0
        assert m.avg_duration == pytest.approx(1.5)

    def test_status_counts_sum_to_total(self):
        executions = [_execution(str(i), s) for i, s in enumerate(["passed", "failed"] * 3 + ["skipped"])]
        m = compute_metrics(executions)
        assert m.passed_tests + m.failed_tests + m.skipped_tests == m.total_tests

    def test_payload_keys(self):
        payload = compute_metrics([_execution("a")]).to_dict()
        assert set(payload) == {
            "totalTests",
            "passedTests",
            "failedTests",
            "skippedTests",
            "avgDuration",
            "passRate",
        }


class TestSlowestTests:
    def test_sorted_and_limited(self):
        executions = [_execution("fast", seconds=0.5), _execution("slow", seconds=9.0), _execution("mid", seconds=3.0)]
        payload = slowest_tests(executions, limit=2)
        assert [t["name"] for t in payload["tests"]] == ["slow", "mid"]
        assert payload["limit"] == 2
        assert payload["avgDuration"] == 6.0

    def test_empty(self):
        assert slowest_tests([], limit=5) == {"tests": [], "limit": 5, "avgDuration": 0}


class TestApplyOverrides:
    def test_override_marks_manual(self):
        original = _execution("login", "failed")
        (result,) = apply_overrides([original], {original.key: "passed"})
        assert result.status == "passed"
        assert result.manual is True
        assert original.status == "failed"

    def test_key_is_project_title_file(self):
        assert _execution("login").key == "chromium::login::a.spec.ts"

    def test_other_project_not_affected(self):
        chromium = _execution("login", "failed", project="chromium")
        firefox = _execution("login", "failed", project="firefox")
        result = apply_overrides([chromium, firefox], {chromium.key: "passed"})
        assert [r.status for r in result] == ["passed", "failed"]
        assert [r.manual for r in result] == [True, False]

    def test_unknown_status_ignored(self):
        original = _execution("login", "failed")
        (result,) = apply_overrides([original], {original.key: "flaky"})
        assert result is original

    def test_recomputed_metrics_follow_overrides(self):
        executions = [_execution("a", "failed"), _execution("b", "passed")]
        overridden = apply_overrides(executions, {executions[0].key: "passed"})
        assert compute_metrics(overridden).pass_rate == 100.0
