"""Shared CLI helpers."""

import json
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import typer
from rich.console import Console

from ..config import DashboardConfig
from ..exceptions import PlaywrightInsightError, ResultsNotFoundError
from ..server.api import DashboardService

console = Console()

STATUS_STYLES = {"passed": "green", "failed": "red", "skipped": "yellow"}


def resolve_config(ctx: typer.Context) -> DashboardConfig:
    """Configuration built by the top-level callback."""
    return ctx.obj["config"]


def make_service(ctx: typer.Context, **kwargs: Any) -> DashboardService:
    return DashboardService(resolve_config(ctx), **kwargs)


@contextmanager
def reporting_errors() -> Iterator[None]:
    """Turn dashboard errors into a red message and exit status 1."""
    try:
        yield
    except ResultsNotFoundError as e:
        console.print(f"[yellow]No data:[/yellow] {e}")
        raise typer.Exit(1)
    except PlaywrightInsightError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Invalid input:[/red] {e}")
        raise typer.Exit(2)


def print_json(data: Any) -> None:
    print(json.dumps(data, indent=2))


def styled_status(status: str) -> str:
    style = STATUS_STYLES.get(status)
    return f"[{style}]{status}[/{style}]" if style else status
