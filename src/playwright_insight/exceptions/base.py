"""Base exception for Playwright Insight.

Every error carries a short ``message``, string ``details`` and the HTTP
status the dashboard API answers with, so the CLI and the server report
the same failure the same way.
"""

from typing import Dict, Optional


class PlaywrightInsightError(Exception):
    """Base exception for all Playwright Insight errors."""

    http_status = 500

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        return f"{self.message} ({', '.join(f'{k}={v}' for k, v in self.details.items())})"

    @property
    def is_client_visible(self) -> bool:
        """True for conditions the caller can fix (missing data), not server faults."""
        return self.http_status < 500

    def to_payload(self) -> Dict[str, object]:
        """``{"error": message, "details": {...}}`` body for API responses."""
        payload: Dict[str, object] = {"error": self.message}
        if self.details:
            payload["details"] = dict(self.details)
        return payload
