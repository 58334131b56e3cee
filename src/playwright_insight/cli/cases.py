"""Spec source commands: ``cases`` and ``coverage``."""

import typer
from rich.table import Table

from . import app
from ._common import console, make_service, print_json, reporting_errors, styled_status


@app.command()
def cases(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Test cases parsed from spec files, with their latest status."""
    service = make_service(ctx)
    with reporting_errors():
        payload = service.test_cases()

    if json_output:
        print_json(payload)
        return

    if not payload["suites"]:
        console.print("[yellow]No test cases found.[/yellow]")
        return

    for suite in payload["suites"]:
        table = Table(title=f"{suite['name']} [dim]{suite['filePath']}[/dim]", title_justify="left")
        table.add_column("ID", style="dim")
        table.add_column("Title")
        table.add_column("Tags", style="magenta")
        table.add_column("Steps", justify="right")
        table.add_column("Status")
        for case in suite["testCases"]:
            table.add_row(
                case["id"],
                case["title"],
                " ".join(case["tags"]),
                str(len(case["steps"])),
                styled_status(case.get("status", "-")),
            )
        console.print(table)
    console.print(
        f"[bold]{payload['totalTests']}[/bold] test cases in "
        f"[bold]{payload['totalSuites']}[/bold] suites"
    )


@app.command()
def coverage(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Requirement coverage per spec file."""
    service = make_service(ctx)
    with reporting_errors():
        payload = service.coverage()

    if json_output:
        print_json(payload)
        return

    table = Table(title="Requirement coverage")
    table.add_column("File", style="cyan")
    table.add_column("Tests", justify="right")
    table.add_column("Steps", justify="right")
    table.add_column("Requirements", justify="right")
    table.add_column("Coverage", justify="right")
    for f in payload["files"]:
        pct = f["requirementCoverage"]
        style = "green" if pct >= 80 else "yellow" if pct >= 50 else "red"
        table.add_row(
            f["relativePath"],
            str(f["testCount"]),
            str(f["stepCount"]),
            str(len(f["requirementIds"])),
            f"[{style}]{pct:.0f}%[/{style}]",
        )
    console.print(table)
    console.print(
        f"{payload['count']} files, {payload['totalTests']} tests, "
        f"{payload['totalSteps']} steps, {payload['totalRequirements']} mapped requirements"
    )
