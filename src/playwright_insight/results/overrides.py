"""Manual status overrides, persisted as a small JSON object.

Keys are :attr:`FlatExecution.key` values (``project::title::file``) so an
override follows a test across results files. The store is handed to the
service layer explicitly.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from ..exceptions import ResultsError
from ..file_ops import FileStore
from .models import STATUSES

logger = logging.getLogger(__name__)


class OverrideStore(Protocol):
    def load(self) -> dict[str, str]: ...

    def set(self, key: str, status: str) -> dict[str, str]: ...

    def clear(self) -> None: ...


class JsonOverrideStore:
    """Override store backed by one JSON file."""

    def __init__(self, path: Path, store: FileStore):
        self.path = path
        self.store = store

    def load(self) -> dict[str, str]:
        """Current overrides; a missing or unreadable file means none."""
        if not self.store.exists(self.path):
            return {}
        try:
            data = self.store.read_json(self.path)
        except ResultsError as e:
            logger.warning("Ignoring status overrides: %s", e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring status overrides in %s: not a JSON object", self.path)
            return {}
        return {str(k): v for k, v in data.items() if v in STATUSES}

    def set(self, key: str, status: str) -> dict[str, str]:
        if status not in STATUSES:
            raise ValueError(f"unknown status {status!r}, expected one of {', '.join(STATUSES)}")
        overrides = self.load()
        overrides[key] = status
        self.store.write_json(self.path, overrides)
        return overrides

    def clear(self) -> None:
        self.store.write_json(self.path, {})


class MemoryOverrideStore:
    """Non-persistent override store."""

    def __init__(self, overrides: dict[str, str] | None = None):
        self._overrides = dict(overrides or {})

    def load(self) -> dict[str, str]:
        return dict(self._overrides)

    def set(self, key: str, status: str) -> dict[str, str]:
        if status not in STATUSES:
            raise ValueError(f"unknown status {status!r}, expected one of {', '.join(STATUSES)}")
        self._overrides[key] = status
        return self.load()

    def clear(self) -> None:
        self._overrides.clear()
