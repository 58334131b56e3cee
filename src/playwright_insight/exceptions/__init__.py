"""Exception hierarchy for Playwright Insight."""

from .base import PlaywrightInsightError
from .config import ConfigurationError, InvalidConfigError, InvalidPathError
from .results import (
    FileAccessError,
    InsufficientDataError,
    MalformedResultsError,
    ResultsError,
    ResultsNotFoundError,
)

__all__ = [
    "PlaywrightInsightError",
    "ResultsError",
    "FileAccessError",
    "MalformedResultsError",
    "ResultsNotFoundError",
    "InsufficientDataError",
    "ConfigurationError",
    "InvalidPathError",
    "InvalidConfigError",
]
