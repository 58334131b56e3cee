"""Run-result ingestion and aggregation."""

from .flatten import flatten, iter_leaves
from .metrics import compute_metrics
from .models import DashboardMetrics, FlatExecution, LoadedRun, RawRunResult, RunFile

__all__ = [
    "flatten",
    "iter_leaves",
    "compute_metrics",
    "DashboardMetrics",
    "FlatExecution",
    "LoadedRun",
    "RawRunResult",
    "RunFile",
]
