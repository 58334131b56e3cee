"""``playwright-insight archive`` — copy dated live results into the archive."""

import typer

from . import app
from ._common import console, make_service, print_json, reporting_errors


@app.command()
def archive(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Archive every results-YYYY-MM-DD.json from the live results directory."""
    service = make_service(ctx)
    with reporting_errors():
        outcome = service.archive()

    if json_output:
        print_json(outcome)
        return

    console.print(f"[green]{outcome['message']}[/green]")
    for name in outcome["archived"]:
        console.print(f"  [green]+[/green] {name}")
    for name in outcome["merged"]:
        console.print(f"  [cyan]~[/cyan] {name}")
    if outcome["duplicateSuitesSkipped"]:
        console.print(f"[dim]{outcome['duplicateSuitesSkipped']} duplicate suite(s) skipped[/dim]")
    for name in outcome["failed"]:
        console.print(f"  [red]![/red] {name} [dim](unreadable, not archived)[/dim]")
