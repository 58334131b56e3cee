"""CLI entry point — registers all subcommands."""

from pathlib import Path
from typing import Optional

import typer

from ..config import load_config
from ..exceptions import ConfigurationError
from ..logging_config import setup_logging
from ._common import console

app = typer.Typer(
    name="playwright-insight",
    help="Playwright Insight - test-run reporting dashboard",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    root: Optional[Path] = typer.Option(
        None,
        "-C",
        "--root",
        help="Playwright project root (default: current directory)",
        exists=True,
        file_okay=False,
        dir_okay=True,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Also append log records to this file", dir_okay=False
    ),
) -> None:
    """Report on Playwright JSON results: trends, durations, flaky tests, coverage."""
    setup_logging(verbose=verbose, quiet=quiet, log_file=str(log_file) if log_file else None)
    try:
        settings = load_config(
            config_file=config,
            root_dir=str(root) if root is not None else None,
            verbose=verbose,
            quiet=quiet,
        )
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)
    ctx.obj = {"config": settings}


# Import subcommands to register them
from .serve import serve as _serve  # noqa: F401, E402
from .results import summary as _summary, trends as _trends  # noqa: F401, E402
from .results import durations as _durations, dates as _dates  # noqa: F401, E402
from .flaky import flaky as _flaky  # noqa: F401, E402
from .archive import archive as _archive  # noqa: F401, E402
from .cases import cases as _cases, coverage as _coverage  # noqa: F401, E402
