"""Copy dated live results into the archive.

New files are copied as-is. When the archive already holds a file with
the same name, the two documents are merged: the live document's
top-level fields win and the ``suites`` arrays are unioned. The union
skips any incoming suite whose content is identical to one already
archived, so archiving the same live file twice leaves the archive
unchanged instead of doubling its tests.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..exceptions import ResultsError, ResultsNotFoundError
from ..file_ops import FileStore
from ..logging_config import get_logger
from .runs import DATED_PREFIX, JSON_SUFFIX

logger = get_logger(__name__)


def suite_fingerprint(suite: Any) -> str:
    """Content hash of one suite; equal suites (same runs) hash equal."""
    canonical = json.dumps(suite, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def union_suites(existing: Sequence[Any], incoming: Sequence[Any]) -> tuple[list[Any], int]:
    """Append incoming suites not already present.

    Returns:
        The merged list and the number of incoming suites skipped as duplicates.
    """
    merged = list(existing)
    seen = {suite_fingerprint(s) for s in existing}
    skipped = 0
    for suite in incoming:
        fp = suite_fingerprint(suite)
        if fp in seen:
            skipped += 1
            continue
        seen.add(fp)
        merged.append(suite)
    return merged, skipped


def merge_documents(existing: Any, incoming: Any) -> tuple[dict[str, Any], int, int]:
    """Merge two results documents.

    Returns:
        ``(merged, added, skipped)`` where *added* counts incoming suites
        appended and *skipped* counts duplicates left out.

    Raises:
        ValueError: If either document is not a JSON object
    """
    if not isinstance(existing, dict) or not isinstance(incoming, dict):
        raise ValueError("both documents must be JSON objects")
    old_suites = existing.get("suites") if isinstance(existing.get("suites"), list) else []
    new_suites = incoming.get("suites") if isinstance(incoming.get("suites"), list) else []
    suites, skipped = union_suites(old_suites, new_suites)
    merged = dict(incoming)
    merged["suites"] = suites
    return merged, len(suites) - len(old_suites), skipped


@dataclass
class ArchiveOutcome:
    archived: list[str] = field(default_factory=list)  # newly copied
    merged: list[str] = field(default_factory=list)  # existing archive file extended
    unchanged: list[str] = field(default_factory=list)  # everything already archived
    failed: list[str] = field(default_factory=list)  # unreadable live file, archive untouched
    duplicate_suites: int = 0

    @property
    def count(self) -> int:
        return len(self.archived) + len(self.merged)

    @property
    def message(self) -> str:
        msg = f"Archived {len(self.archived)} new file(s)"
        if self.merged:
            msg += f" and merged {len(self.merged)} existing file(s)"
        if self.unchanged:
            msg += f"; {len(self.unchanged)} file(s) already up to date"
        if self.failed:
            msg += f"; skipped {len(self.failed)} unreadable file(s)"
        return msg

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "archived": self.archived,
            "merged": self.merged,
            "unchanged": self.unchanged,
            "failed": self.failed,
            "duplicateSuitesSkipped": self.duplicate_suites,
            "count": self.count,
            "message": self.message,
        }


def _read_document(store: FileStore, path: Path) -> dict[str, Any]:
    """Read a results document that must be a JSON object.

    Raises:
        ResultsError: If the file cannot be read or decoded
        ValueError: If the content is not a JSON object
    """
    data = store.read_json(path)
    if not isinstance(data, dict):
        raise ValueError("not a JSON object")
    return data


def archive_results(store: FileStore, live_dir: Path, archive_dir: Path) -> ArchiveOutcome:
    """Copy or merge every ``results-*.json`` from *live_dir* into *archive_dir*.

    A live file that cannot be read is reported in ``failed`` and never
    touches the archive. An archived copy that cannot be read is replaced
    by the live file.

    Raises:
        ResultsNotFoundError: If there is no dated live results file
    """
    names = store.list_files(live_dir, prefix=DATED_PREFIX, suffix=JSON_SUFFIX)
    if not names:
        raise ResultsNotFoundError("no results to archive", path=live_dir)

    outcome = ArchiveOutcome()
    for name in names:
        source = live_dir / name
        destination = archive_dir / name

        try:
            incoming = _read_document(store, source)
        except (ResultsError, ValueError) as e:
            logger.warning("Skipping %s: %s", name, e)
            outcome.failed.append(name)
            continue

        if not store.exists(destination):
            store.copy(source, destination)
            outcome.archived.append(name)
            logger.info("Archived %s", name)
            continue

        try:
            existing = _read_document(store, destination)
        except (ResultsError, ValueError) as e:
            logger.warning("Replacing unreadable archive copy of %s: %s", name, e)
            store.copy(source, destination)
            outcome.archived.append(name)
            continue

        merged, added, skipped = merge_documents(existing, incoming)
        outcome.duplicate_suites += skipped
        if added == 0:
            outcome.unchanged.append(name)
            logger.info("%s already archived (%d duplicate suites skipped)", name, skipped)
            continue

        store.write_json(destination, merged)
        outcome.merged.append(name)
        logger.info("Merged %s: %d suites added, %d duplicates skipped", name, added, skipped)

    return outcome
