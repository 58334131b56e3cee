"""
Playwright Insight - test-run reporting dashboard

Reads Playwright JSON reporter output from a live results directory and
an archive, and serves aggregated views: pass/fail trends, per-suite
durations, flaky tests, per-test history, parsed test-case narratives
and requirement coverage.
"""

__version__ = "0.1.0"

from .config import DashboardConfig, load_config
from .results import compute_metrics, flatten
from .server.api import DashboardService
from .specs import parse_test_cases

__all__ = [
    "DashboardConfig",
    "DashboardService",
    "load_config",
    "flatten",
    "compute_metrics",
    "parse_test_cases",
]
