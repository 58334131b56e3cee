"""``playwright-insight flaky`` — tests whose status changed across recent days."""

from datetime import datetime
from typing import Optional

import typer
from rich.table import Table

from . import app
from ._common import console, make_service, print_json, reporting_errors, styled_status


@app.command()
def flaky(
    ctx: typer.Context,
    today: Optional[datetime] = typer.Option(
        None,
        "--today",
        help="Last day of the window (default: today)",
        formats=["%Y-%m-%d"],
    ),
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """
    List flaky tests from the archived runs of the last few days.

    A test is flaky when its first-attempt status differs between dates.

    [bold cyan]Examples:[/bold cyan]

      playwright-insight flaky

      playwright-insight --root e2e flaky --today 2024-05-03 --json
    """
    service = make_service(ctx, today=today.date() if today else None)
    with reporting_errors():
        report = service.flaky_tests()

    if json_output:
        print_json(report)
        return

    if report.get("insufficientData"):
        console.print(f"[yellow]{report['message']}[/yellow]")
        return

    dates_analyzed = report["datesAnalyzed"]
    console.print(
        f"[bold]{len(report['flakyTests'])}[/bold] flaky of "
        f"{report['totalTestsAnalyzed']} tests "
        f"[dim](runs found for {', '.join(report['datesFound'])})[/dim]"
    )
    if not report["flakyTests"]:
        return

    table = Table()
    table.add_column("Test")
    table.add_column("Project")
    table.add_column("File", style="cyan")
    for day in dates_analyzed:
        table.add_column(day, justify="center")
    for record in report["flakyTests"]:
        by_day = {s["runDate"]: s["status"] for s in record["statuses"]}
        table.add_row(
            record["testName"],
            record["projectName"],
            record["filePath"],
            *(styled_status(by_day[d]) if d in by_day else "-" for d in dates_analyzed),
        )
    console.print(table)
