"""Result-file exceptions: access, malformed content, missing data."""

from pathlib import Path
from typing import Dict, Optional

from .base import PlaywrightInsightError


class ResultsError(PlaywrightInsightError):
    """Base class for errors while reading run results or spec files."""
    pass


class FileAccessError(ResultsError):
    """Raised when a file cannot be accessed or read."""

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Cannot access file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class MalformedResultsError(ResultsError):
    """Raised when a file is not valid JSON or has the wrong top-level shape."""

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Malformed results file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class ResultsNotFoundError(ResultsError):
    """Raised when the primary data source of a request is absent."""

    http_status = 404

    def __init__(self, reason: str, path: Optional[Path] = None, date: Optional[str] = None):
        details: Dict[str, str] = {"reason": reason}
        if path is not None:
            details["path"] = str(path)
        if date is not None:
            details["date"] = date
        super().__init__("Test results not found", details=details)
        self.reason = reason
        self.path = path
        self.date = date


class InsufficientDataError(ResultsError):
    """Raised when there are too few dated runs for a comparison."""

    def __init__(self, reason: str, minimum_required: Optional[int] = None, found: int = 0):
        details: Dict[str, str] = {"reason": reason, "found": str(found)}
        if minimum_required is not None:
            details["minimum_required"] = str(minimum_required)

        super().__init__(f"Insufficient data: {reason}", details=details)
        self.reason = reason
        self.minimum_required = minimum_required
        self.found = found
