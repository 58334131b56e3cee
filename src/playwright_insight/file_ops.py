"""
File store for Playwright Insight.

The dashboard treats the filesystem as its database. ``FileStore`` is the
only place that lists, reads, stats, and writes files; everything else
receives paths and parsed content from it.
"""

import json
import shutil
from collections.abc import Iterator
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional

from .exceptions import FileAccessError, MalformedResultsError


class FileStore:
    """Size-limited, error-normalizing access to the results tree.

    Missing directories are reported as empty listings. Read failures are
    raised as :class:`FileAccessError` or :class:`MalformedResultsError`
    so callers can drop a single file and keep going.
    """

    def __init__(self, max_file_size_bytes: Optional[int] = None, encoding: str = "utf-8"):
        self.max_file_size_bytes = max_file_size_bytes
        self.encoding = encoding

    def exists(self, path: Path) -> bool:
        return path.is_file()

    def list_files(self, directory: Path, prefix: str = "", suffix: str = "") -> list[str]:
        """Return sorted file names directly inside *directory*.

        Args:
            directory: Directory to list
            prefix: Keep names starting with this prefix
            suffix: Keep names ending with this suffix

        Returns:
            Sorted file names; ``[]`` when the directory does not exist.
        """
        if not directory.is_dir():
            return []
        try:
            names = [
                entry.name
                for entry in directory.iterdir()
                if entry.is_file() and entry.name.startswith(prefix) and entry.name.endswith(suffix)
            ]
        except OSError as e:
            raise FileAccessError(directory, f"Directory listing failed: {e}")
        return sorted(names)

    def walk(self, directory: Path, suffix: str = "") -> Iterator[Path]:
        """Yield files under *directory* recursively, in sorted path order."""
        if not directory.is_dir():
            return
        try:
            paths = sorted(p for p in directory.rglob(f"*{suffix}") if p.is_file())
        except OSError as e:
            raise FileAccessError(directory, f"Directory scan failed: {e}")
        yield from paths

    def _check_size(self, path: Path) -> int:
        try:
            size = path.stat().st_size
        except OSError as e:
            raise FileAccessError(path, f"OS error: {e}")
        if self.max_file_size_bytes is not None and size > self.max_file_size_bytes:
            raise FileAccessError(
                path, f"File size {size} exceeds limit {self.max_file_size_bytes}"
            )
        return size

    def size(self, path: Path) -> int:
        return self._check_size(path)

    def read_text(self, path: Path) -> str:
        """Read a text file.

        Raises:
            FileAccessError: If the file is missing, too large, or unreadable
        """
        self._check_size(path)
        try:
            with open(path, encoding=self.encoding, errors="replace") as f:
                return f.read()
        except OSError as e:
            raise FileAccessError(path, f"OS error: {e}")

    def read_json(self, path: Path) -> Any:
        """Read and decode a JSON file.

        Raises:
            FileAccessError: If the file cannot be read
            MalformedResultsError: If the content is not valid JSON
        """
        text = self.read_text(path)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedResultsError(path, f"Invalid JSON: {e}")

    def modified(self, path: Path) -> datetime:
        try:
            return datetime.fromtimestamp(path.stat().st_mtime)
        except OSError as e:
            raise FileAccessError(path, f"OS error: {e}")

    def mtime_date(self, path: Path) -> date:
        """Last-modified timestamp truncated to a calendar day."""
        return self.modified(path).date()

    def write_json(self, path: Path, data: Any) -> None:
        """Write *data* as indented JSON, creating parent directories."""
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding=self.encoding) as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            raise FileAccessError(path, f"Write failed: {e}")

    def copy(self, source: Path, destination: Path) -> None:
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, destination)
        except OSError as e:
            raise FileAccessError(source, f"Copy to {destination} failed: {e}")
