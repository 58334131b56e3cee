"""
Logging for the CLI and the dashboard server.

Everything goes to stderr through one ``RichHandler`` so command output on
stdout stays parseable with ``--json``. The server's uvicorn loggers share
the same handlers; request lines from ``uvicorn.access`` only show with
``--verbose``.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "playwright_insight"
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error")
ACCESS_LOGGER = "uvicorn.access"

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _level(verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return logging.WARNING


def _route_server_loggers(verbose: bool, quiet: bool) -> None:
    """Send uvicorn's records through the root handlers at matching levels."""
    server_level = logging.ERROR if quiet else (logging.INFO if verbose else logging.WARNING)
    for name in UVICORN_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.propagate = True
        server_logger.setLevel(server_level)

    access = logging.getLogger(ACCESS_LOGGER)
    access.handlers.clear()
    access.propagate = True
    access.setLevel(logging.INFO if verbose else logging.ERROR)


def setup_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure the package and server loggers.

    Args:
        verbose: DEBUG for the package, INFO for uvicorn including access lines
        quiet: ERROR only, everywhere; wins over *verbose*
        log_file: Also append records to this file

    Returns:
        The ``playwright_insight`` logger
    """
    level = _level(verbose, quiet)

    handlers: list[logging.Handler] = [
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            markup=False,
            show_time=True,
            show_path=verbose,
        )
    ]
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handlers.append(file_handler)

    logging.basicConfig(
        level=level, format="%(message)s", datefmt="[%X]", handlers=handlers, force=True
    )
    _route_server_loggers(verbose, quiet)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Logger under ``playwright_insight``.

    Short names such as ``results.merge`` are prefixed; module ``__name__``
    values pass through unchanged.
    """
    if name is None:
        return logging.getLogger(PACKAGE_LOGGER)
    if not name.startswith(PACKAGE_LOGGER):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
