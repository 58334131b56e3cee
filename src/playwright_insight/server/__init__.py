"""HTTP API for the Playwright Insight dashboard.

Requires the optional ``[serve]`` dependencies::

    pip install playwright-insight[serve]
"""

from __future__ import annotations

import importlib.util

SERVE_REQUIREMENTS = ("starlette", "uvicorn")


def missing_serve_requirements() -> list[str]:
    """Names from ``SERVE_REQUIREMENTS`` that are not importable."""
    return [name for name in SERVE_REQUIREMENTS if importlib.util.find_spec(name) is None]


def _check_deps() -> None:
    """Raise ImportError naming the missing ``[serve]`` packages, if any."""
    missing = missing_serve_requirements()
    if missing:
        raise ImportError(
            f"Missing serve dependencies: {', '.join(missing)}. "
            "Install with: pip install playwright-insight[serve]"
        )
