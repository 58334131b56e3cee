"""Tests for specs.coverage: source analysis and requirement coverage."""

import json

import pytest

from playwright_insight.file_ops import FileStore
from playwright_insight.specs.coverage import (
    analyze_spec_source,
    build_coverage,
    coverage_summary,
    load_mapping,
    requirement_coverage,
    requirement_prefix,
)

MAPPING = {
    "REQ-PAY-CARD-UI-001": "Card number field",
    "REQ-PAY-CARD-UI-002": "Expiry field",
    "REQ-PAY-CARD-UI-003": "CVV field",
    "REQ-PAY-CARD-UI-004": "Submit button",
    "REQ-PAY-CARD-UIX-001": "Different prefix",
    "REQ-FX-RATE-API-001": "Rates endpoint",
}

SPEC = """
test.describe('Card', () => {
  test.beforeEach(async ({ page }) => {});
  test('REQ-PAY-CARD-UI-001 number', async () => {
    await test.step('type', async () => {});
    await test.step('submit', async () => {});
  });
  test.only('REQ-PAY-CARD-UI-002 expiry', async () => {});
  // REQ-PAY-CARD-UI-001 mentioned again
  helpers.test('not a test');
});
"""


class TestAnalyzeSpecSource:
    def test_counts(self):
        analysis = analyze_spec_source(SPEC)
        assert analysis.test_count == 2
        assert analysis.step_count == 2

    def test_requirement_ids_distinct_in_order(self):
        assert analyze_spec_source(SPEC).requirement_ids == [
            "REQ-PAY-CARD-UI-001",
            "REQ-PAY-CARD-UI-002",
        ]

    def test_empty_source(self):
        analysis = analyze_spec_source("")
        assert (analysis.test_count, analysis.step_count, analysis.requirement_ids) == (0, 0, [])


class TestRequirementCoverage:
    def test_prefix(self):
        assert requirement_prefix("REQ-PAY-CARD-UI-001") == "REQ-PAY-CARD-UI"

    def test_share_of_prefix_siblings(self):
        pct, uncovered = requirement_coverage(
            ["REQ-PAY-CARD-UI-001", "REQ-PAY-CARD-UI-002"], 2, MAPPING
        )
        assert pct == 50.0
        assert uncovered == ["REQ-PAY-CARD-UI-003", "REQ-PAY-CARD-UI-004"]

    def test_duplicates_count_once(self):
        pct, _ = requirement_coverage(["REQ-FX-RATE-API-001", "REQ-FX-RATE-API-001"], 1, MAPPING)
        assert pct == 100.0

    def test_no_ids_with_tests_is_full(self):
        assert requirement_coverage([], 3, MAPPING) == (100.0, [])

    def test_no_ids_no_tests_is_zero(self):
        assert requirement_coverage([], 0, MAPPING) == (0.0, [])

    def test_ids_missing_from_mapping_fall_back(self):
        assert requirement_coverage(["REQ-NEW-AREA-UI-001"], 1, MAPPING) == (100.0, [])

    @pytest.mark.parametrize("test_count", [0, 1])
    def test_bounded(self, test_count):
        pct, _ = requirement_coverage(["REQ-PAY-CARD-UI-001"], test_count, MAPPING)
        assert 0 <= pct <= 100


class TestLoadMapping:
    def test_missing(self, tmp_path):
        assert load_mapping(FileStore(), tmp_path / "mapping.json") == {}

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "mapping.json"
        path.write_text("{nope", encoding="utf-8")
        assert load_mapping(FileStore(), path) == {}

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "mapping.json"
        path.write_text("[]", encoding="utf-8")
        assert load_mapping(FileStore(), path) == {}

    def test_valid(self, tmp_path):
        path = tmp_path / "mapping.json"
        path.write_text(json.dumps(MAPPING), encoding="utf-8")
        assert load_mapping(FileStore(), path) == MAPPING


class TestBuildCoverage:
    def test_records_sorted_by_relative_path(self, tmp_path):
        tests_dir = tmp_path / "tests"
        (tests_dir / "payment").mkdir(parents=True)
        (tests_dir / "payment" / "card.spec.ts").write_text(SPEC, encoding="utf-8")
        (tests_dir / "auth.spec.ts").write_text("test('x', async () => {});", encoding="utf-8")
        (tests_dir / "helpers.ts").write_text("export const x = 1;", encoding="utf-8")

        records = build_coverage(FileStore(), tests_dir, MAPPING)

        assert [r.relative_path for r in records] == ["auth.spec.ts", "payment/card.spec.ts"]
        auth, card = records
        assert auth.requirement_coverage == 100.0
        assert card.file_name == "card.spec.ts"
        assert card.requirement_coverage == 50.0
        assert card.size > 0
        assert card.modified

    def test_summary_payload(self, tmp_path):
        tests_dir = tmp_path / "tests"
        tests_dir.mkdir()
        (tests_dir / "card.spec.ts").write_text(SPEC, encoding="utf-8")

        summary = coverage_summary(build_coverage(FileStore(), tests_dir, MAPPING), MAPPING)

        assert summary["count"] == 1
        assert summary["totalTests"] == 2
        assert summary["totalSteps"] == 2
        assert summary["totalRequirements"] == len(MAPPING)
        (record,) = summary["files"]
        assert record["coveragePercentage"] == record["requirementCoverage"] == 50.0
        assert record["uncoveredRequirements"] == ["REQ-PAY-CARD-UI-003", "REQ-PAY-CARD-UI-004"]
