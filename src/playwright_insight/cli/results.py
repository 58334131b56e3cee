"""Results commands: ``summary``, ``trends``, ``durations``, ``dates``."""

from typing import Optional

import typer
from rich.table import Table

from . import app
from ._common import console, make_service, print_json, reporting_errors, styled_status


@app.command()
def summary(
    ctx: typer.Context,
    date: Optional[str] = typer.Option(None, "--date", "-d", help="Show a dated run (YYYY-MM-DD)"),
    slowest: int = typer.Option(5, "--slowest", help="Number of slowest tests to list", min=0),
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Metrics and failures of the latest run."""
    service = make_service(ctx)
    with reporting_errors():
        payload = service.latest_results(date)

    if json_output:
        print_json(payload)
        return

    m = payload["metrics"]
    console.print()
    console.print(f"[bold]{payload['fileName']}[/bold] [dim]({payload['source']})[/dim]")
    console.print(
        f"  {m['totalTests']} tests  "
        f"[green]{m['passedTests']} passed[/green]  "
        f"[red]{m['failedTests']} failed[/red]  "
        f"[yellow]{m['skippedTests']} skipped[/yellow]"
    )
    console.print(f"  pass rate {m['passRate']:.1f}%  avg {m['avgDuration']:.2f}s")

    failed = [t for t in payload["testResults"] if t["status"] == "failed"]
    if failed:
        table = Table(title="Failed tests", show_lines=False)
        table.add_column("ID", style="dim")
        table.add_column("Test")
        table.add_column("File", style="cyan")
        table.add_column("Project")
        table.add_column("Duration", justify="right")
        for t in failed:
            table.add_row(t["id"], t["name"], t["file"], t["projectName"], t["duration"])
        console.print()
        console.print(table)

    if slowest > 0:
        ranked = sorted(payload["testResults"], key=lambda t: t["durationSeconds"], reverse=True)
        table = Table(title=f"Slowest {min(slowest, len(ranked))} tests")
        table.add_column("Test")
        table.add_column("Status")
        table.add_column("Duration", justify="right")
        for t in ranked[:slowest]:
            table.add_row(t["name"], styled_status(t["status"]), t["duration"])
        console.print()
        console.print(table)
    console.print()


@app.command()
def trends(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Pass/fail counts per date across live and archived runs."""
    service = make_service(ctx)
    with reporting_errors():
        rows = service.trends()

    if json_output:
        print_json(rows)
        return
    if not rows:
        console.print("[yellow]No dated results found.[/yellow]")
        return

    table = Table(title="Pass/fail trend")
    table.add_column("Date")
    table.add_column("Passed", justify="right", style="green")
    table.add_column("Failed", justify="right", style="red")
    table.add_column("Skipped", justify="right", style="yellow")
    table.add_column("Pass rate", justify="right")
    for row in rows:
        table.add_row(
            row["date"],
            str(row["passed"]),
            str(row["failed"]),
            str(row["skipped"]),
            f"{row['passRate']:.1f}%",
        )
    console.print(table)


@app.command()
def durations(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Seconds spent per spec file per date."""
    service = make_service(ctx)
    with reporting_errors():
        payload = service.suite_durations()

    if json_output:
        print_json(payload)
        return
    if not payload["chartData"]:
        console.print("[yellow]No dated results found.[/yellow]")
        return

    table = Table(title="Suite durations (s)")
    table.add_column("Suite", style="cyan")
    for row in payload["chartData"]:
        table.add_column(row["date"], justify="right")
    for name in payload["suiteNames"]:
        cells = []
        for row in payload["chartData"]:
            cells.append(f"{row[name]:.2f}" if name in row else "-")
        table.add_row(name, *cells)
    console.print(table)


@app.command()
def dates(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Dates with a results file, newest first."""
    service = make_service(ctx)
    with reporting_errors():
        payload = service.available_dates()

    if json_output:
        print_json(payload)
        return
    if not payload["dates"]:
        console.print("[yellow]No dated results found.[/yellow]")
        return
    for day in payload["dates"]:
        console.print(day)
