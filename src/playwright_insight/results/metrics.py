"""Summary metrics over flattened executions."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import Any

from .models import FAILED, PASSED, SKIPPED, STATUSES, DashboardMetrics, FlatExecution


def compute_metrics(executions: Sequence[FlatExecution]) -> DashboardMetrics:
    """Counts, pass rate and average duration. Empty input yields zeros."""
    total = len(executions)
    passed = sum(1 for e in executions if e.status == PASSED)
    failed = sum(1 for e in executions if e.status == FAILED)
    skipped = sum(1 for e in executions if e.status == SKIPPED)
    total_duration = sum(e.duration_seconds for e in executions)

    return DashboardMetrics(
        total_tests=total,
        passed_tests=passed,
        failed_tests=failed,
        skipped_tests=skipped,
        avg_duration=total_duration / total if total > 0 else 0,
        pass_rate=(passed / total) * 100 if total > 0 else 0,
    )


def slowest_tests(executions: Sequence[FlatExecution], limit: int = 10) -> dict[str, Any]:
    """Top *limit* executions by duration, slowest first, with their mean."""
    ranked = sorted(executions, key=lambda e: e.duration_seconds, reverse=True)[:limit]
    avg = sum(e.duration_seconds for e in ranked) / len(ranked) if ranked else 0
    return {
        "tests": [e.to_dict() for e in ranked],
        "limit": limit,
        "avgDuration": round(avg, 2),
    }


def apply_overrides(
    executions: Sequence[FlatExecution], overrides: Mapping[str, str]
) -> list[FlatExecution]:
    """Return executions with manually set statuses applied.

    *overrides* maps :attr:`FlatExecution.key` to a status. Overridden
    records are copies flagged ``manual=True``; unknown statuses are ignored.
    """
    if not overrides:
        return list(executions)
    out = []
    for execution in executions:
        status = overrides.get(execution.key)
        if status in STATUSES and status != execution.status:
            out.append(replace(execution, status=status, manual=True))
        else:
            out.append(execution)
    return out
