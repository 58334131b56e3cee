"""Spec source analysis: test-case extraction and requirement coverage."""

from .coverage import build_coverage, load_mapping, requirement_coverage
from .models import CoverageRecord, TestCase, TestStep, TestSuite
from .parser import generate_test_case_id, parse_spec_files, parse_test_cases
from .status import annotate_suites

__all__ = [
    "build_coverage",
    "load_mapping",
    "requirement_coverage",
    "CoverageRecord",
    "TestCase",
    "TestStep",
    "TestSuite",
    "generate_test_case_id",
    "parse_spec_files",
    "parse_test_cases",
    "annotate_suites",
]
