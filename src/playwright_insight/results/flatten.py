"""Flatten a nested suite tree into one record per (spec × test).

The walk is depth-first and pre-order: a suite's own specs come before
any of its nested suites, so ``TEST-<n>`` ids are deterministic for a
given file. Every other per-run computation (trend counts, suite
durations, flaky statuses, per-test history) reads the same walk through
:func:`iter_leaves`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Optional, Union

from .models import (
    NOT_EXECUTED,
    SKIPPED,
    FlatExecution,
    RawResult,
    RawRunResult,
    RawSpec,
    RawSuite,
    RawTest,
    StepRecord,
    normalize_status,
)

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%m/%d/%Y, %I:%M:%S %p"


@dataclass(frozen=True)
class SpecLeaf:
    """A test under a spec, with the file it inherited from its suites."""

    spec: RawSpec
    test: RawTest
    file: str

    @property
    def result(self) -> Optional[RawResult]:
        """First result only; retries are ignored."""
        return self.test.first_result

    @property
    def executed(self) -> bool:
        return self.result is not None

    @property
    def status(self) -> str:
        result = self.result
        return normalize_status(result.status if result else None)

    @property
    def duration_ms(self) -> float:
        result = self.result
        if result is None or result.status is None:
            return 0.0
        return result.duration

    @property
    def identity(self) -> tuple[str, str, str]:
        return (self.test.project_name, self.spec.title, self.file)


def iter_leaves(roots: Union[RawRunResult, Iterable[RawSuite]]) -> Iterator[SpecLeaf]:
    """Yield every test leaf in pre-order.

    A leaf's file is the nearest non-empty ``file`` walking up from the
    spec's suite; the spec's own ``file`` is used only when no suite in
    the chain has one.
    """
    suites = roots.suites if isinstance(roots, RawRunResult) else list(roots)

    # Explicit stack so arbitrarily deep trees cannot hit the recursion limit.
    stack: list[tuple[RawSuite, str]] = [(s, "") for s in reversed(suites)]
    while stack:
        suite, inherited = stack.pop()
        suite_file = suite.file or inherited
        for spec in suite.specs:
            file = suite_file or spec.file
            for test in spec.tests:
                yield SpecLeaf(spec=spec, test=test, file=file)
        for child in reversed(suite.suites):
            stack.append((child, suite_file))


def format_timestamp(start_time: Optional[str], tz: Optional[tzinfo] = None) -> str:
    """Render an ISO start time as ``MM/DD/YYYY, hh:mm:ss AM``.

    Times are shown in *tz* (local time when omitted). A missing start
    time renders as ``"Not executed"``; an unparseable one is returned as-is.
    """
    if not start_time:
        return NOT_EXECUTED
    parsed = parse_iso(start_time)
    if parsed is None:
        return start_time
    return parsed.astimezone(tz).strftime(TIMESTAMP_FORMAT)


def parse_iso(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp, accepting a trailing ``Z``."""
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def to_execution(leaf: SpecLeaf, index: int, tz: Optional[tzinfo] = None) -> FlatExecution:
    """Reduce one leaf to a :class:`FlatExecution` numbered ``TEST-<index>``."""
    result = leaf.result
    if result is None or result.status is None:
        status = SKIPPED
        duration = 0.0
    else:
        status = normalize_status(result.status)
        duration = round(result.duration / 1000, 2)

    steps = []
    if result is not None:
        steps = [StepRecord(title=s.title, duration=s.duration, error=s.error) for s in result.steps]

    return FlatExecution(
        id=f"TEST-{index}",
        name=leaf.spec.title or "Untitled Test",
        status=status,
        duration_seconds=duration,
        timestamp=format_timestamp(result.start_time if result else None, tz),
        file=leaf.file,
        project_name=leaf.test.project_name,
        steps=steps,
    )


def flatten(
    roots: Union[RawRunResult, Iterable[RawSuite]], tz: Optional[tzinfo] = None
) -> list[FlatExecution]:
    """Flatten one run (or a sequence of suite roots) into ordered executions."""
    executions = [
        to_execution(leaf, index, tz) for index, leaf in enumerate(iter_leaves(roots), start=1)
    ]
    logger.debug("Flattened %d test executions", len(executions))
    return executions
