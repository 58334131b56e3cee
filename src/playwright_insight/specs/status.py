"""Attach the latest run outcome to parsed test cases, matched by title."""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from typing import Optional

from ..results.models import FAILED, RawRunResult, RawSuite, normalize_status
from .models import TestSuite

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*m")
# Escape sequences that lost their ESC byte on the way through a reporter.
BARE_ANSI_RE = re.compile(r"\[\[?[0-9;]*m")


def strip_ansi(text: str) -> str:
    return BARE_ANSI_RE.sub("", ANSI_ESCAPE_RE.sub("", text))


def error_message(error) -> Optional[str]:
    """Display text for a reporter error object, colour codes removed."""
    if error is None:
        return None
    if isinstance(error, dict) and isinstance(error.get("message"), str) and error["message"]:
        raw = error["message"]
    elif isinstance(error, str):
        raw = error
    else:
        raw = json.dumps(error, default=str)
    return strip_ansi(raw)


def find_test_result(
    suites: Iterable[RawSuite], title: str
) -> Optional[tuple[str, Optional[str]]]:
    """First ``(status, error_message)`` for a spec titled *title*.

    Only a spec whose first test has at least one result matches. Suites
    are searched depth-first, a suite's own specs before its children.
    """
    stack = list(reversed(list(suites)))
    while stack:
        suite = stack.pop()
        for spec in suite.specs:
            if spec.title != title or not spec.tests:
                continue
            result = spec.tests[0].first_result
            if result is None:
                continue
            status = normalize_status(result.status)
            message = error_message(result.error) if status == FAILED else None
            return status, message
        stack.extend(reversed(suite.suites))
    return None


def annotate_suites(suites: Iterable[TestSuite], run: Optional[RawRunResult]) -> None:
    """Set ``status``/``error_message`` in place on every matching test case."""
    if run is None:
        return
    for suite in suites:
        for case in suite.test_cases:
            found = find_test_result(run.suites, case.title)
            if found is not None:
                case.status, case.error_message = found
