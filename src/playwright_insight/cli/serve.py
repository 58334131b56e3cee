"""``playwright-insight serve`` — dashboard HTTP API."""

import typer

from ..logging_config import get_logger
from . import app
from ._common import console, resolve_config

logger = get_logger(__name__)


@app.command()
def serve(
    ctx: typer.Context,
    port: int = typer.Option(8765, help="Port to listen on"),
    host: str = typer.Option("127.0.0.1", help="Host to bind to"),
) -> None:
    """Serve the dashboard JSON API."""
    try:
        from ..server import _check_deps

        _check_deps()
    except ImportError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)

    import uvicorn

    from ..server.app import create_app

    config = resolve_config(ctx)
    console.print(f"[bold]Results[/bold] {config.results_path}")
    console.print(f"[bold]Archive[/bold] {config.archive_path}")

    url = f"http://{host}:{port}"
    console.print(f"[bold]API[/bold] → [link={url}/api/test-results]{url}/api/test-results[/link]")
    console.print("[dim]Press Ctrl+C to stop[/dim]")

    try:
        uvicorn.run(
            create_app(config),
            host=host,
            port=port,
            log_config=None,
        )
    except KeyboardInterrupt:
        pass
    finally:
        logger.debug("Server on %s stopped", url)
        console.print("\n[dim]Stopped.[/dim]")
