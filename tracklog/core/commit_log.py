"""Append-only, hash-chained commit log backed by a JSON Lines file.

The commit log is the source of truth. Commit history and the file-version
map are projections of this log — they are rebuilt from it, never stored.

Design:
- Append-only: only ``append()`` writes; no update, no delete.
- One schema-versioned JSON object per line. JSON string escaping keeps
  newlines or other delimiters inside messages and filenames harmless.
- Hash-chained: each record carries the record_hash of its predecessor
  and is sealed with its own record_hash.
- Each append rewrites the file through a temp file + rename, so a crash
  never leaves a partial record behind.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from tracklog.core.atomic import atomic_write_bytes, read_bytes
from tracklog.core.errors import CorruptLogError, DuplicateCommitError
from tracklog.core.hasher import compute_record_hash
from tracklog.models.commit import LOG_SCHEMA_VERSION, Commit, FileEntry

logger = logging.getLogger(__name__)


def commit_to_record(commit: Commit) -> dict[str, Any]:
    """Serialize a Commit into its on-disk record form."""
    return {
        "schema": commit.schema_version,
        "commit_id": commit.commit_id,
        "message": commit.message,
        "timestamp": commit.timestamp.isoformat(),
        "files": [[entry.filename, entry.content_hash] for entry in commit.files],
        "previous_record_hash": commit.previous_record_hash,
        "record_hash": commit.record_hash,
    }


def record_to_commit(record: dict[str, Any], line_number: int) -> Commit:
    """Parse an on-disk record, checking its schema and seal."""
    schema = record.get("schema")
    if schema != LOG_SCHEMA_VERSION:
        raise CorruptLogError(line_number, f"unsupported schema version {schema!r}")
    if record.get("record_hash") != compute_record_hash(record):
        raise CorruptLogError(line_number, "record seal does not match its content")
    try:
        return Commit(
            commit_id=record["commit_id"],
            message=record["message"],
            timestamp=record["timestamp"],
            files=tuple(
                FileEntry(filename=name, content_hash=digest)
                for name, digest in record["files"]
            ),
            schema_version=schema,
            previous_record_hash=record["previous_record_hash"],
            record_hash=record["record_hash"],
        )
    except (KeyError, TypeError, ValueError, ValidationError) as exc:
        raise CorruptLogError(line_number, f"malformed record: {exc}") from exc


class CommitLog:
    """Append-only commit log.

    Parameters
    ----------
    log_path:
        Path to the log file. An absent file is an empty log.
    fsync:
        Whether appends are fsynced before the rename.
    """

    def __init__(self, log_path: Path, *, fsync: bool = True) -> None:
        self._path = Path(log_path)
        self._fsync = fsync

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # Core: append-only write
    # ------------------------------------------------------------------

    def append(self, commit: Commit) -> Commit:
        """Append a commit, computing its chain link and seal.

        Returns the sealed commit. This is the ONLY write method.
        """
        existing = self._read_raw()
        commits = list(self._parse(existing))
        if any(c.commit_id == commit.commit_id for c in commits):
            raise DuplicateCommitError(commit.commit_id)

        previous_hash = commits[-1].record_hash if commits else ""
        unsealed = commit.model_copy(
            update={"previous_record_hash": previous_hash, "record_hash": ""}
        )
        record = commit_to_record(unsealed)
        record["record_hash"] = compute_record_hash(record)
        sealed = unsealed.model_copy(update={"record_hash": record["record_hash"]})

        line = json.dumps(record, ensure_ascii=False, separators=(",", ": "))
        atomic_write_bytes(
            self._path, existing + line.encode("utf-8") + b"\n", fsync=self._fsync
        )
        logger.debug(
            "Appended commit %s (%d files) to %s",
            sealed.commit_id, len(sealed.files), self._path,
        )
        return sealed

    # ------------------------------------------------------------------
    # Query methods (read-only)
    # ------------------------------------------------------------------

    def iter_commits(self) -> Iterator[Commit]:
        """Yield commits in log (append) order, checking every link."""
        yield from self._parse(self._read_raw())

    def read_commits(self) -> list[Commit]:
        return list(self.iter_commits())

    def commit_ids(self) -> list[str]:
        return [c.commit_id for c in self.iter_commits()]

    def contains(self, commit_id: str) -> bool:
        return any(c.commit_id == commit_id for c in self.iter_commits())

    def get_latest(self) -> Commit | None:
        """Return the most recently appended commit, or None."""
        latest = None
        for latest in self.iter_commits():
            pass
        return latest

    def next_commit_id(
        self, now: datetime | None = None, existing: Iterable[str] | None = None
    ) -> str:
        """Allocate a time-derived identifier not yet used in the log.

        The base identifier is the UTC epoch second; commits created within
        the same second get a ``-N`` suffix. ``existing`` saves a rescan when
        the caller already holds the log's identifiers.
        """
        now = now or datetime.now(timezone.utc)
        base = str(int(now.timestamp()))
        taken = set(existing) if existing is not None else set(self.commit_ids())
        if base not in taken:
            return base
        n = 1
        while f"{base}-{n}" in taken:
            n += 1
        return f"{base}-{n}"

    # ------------------------------------------------------------------
    # Chain verification
    # ------------------------------------------------------------------

    def verify(self) -> int:
        """Verify every record's seal and chain link.

        Returns the number of records verified; raises ``CorruptLogError``
        otherwise.
        """
        seen: set[str] = set()
        count = 0
        for count, commit in enumerate(self.iter_commits(), start=1):
            if commit.commit_id in seen:
                raise CorruptLogError(count, f"duplicate commit id {commit.commit_id}")
            seen.add(commit.commit_id)
        return count

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _read_raw(self) -> bytes:
        if not self._path.exists():
            return b""
        return read_bytes(self._path)

    @staticmethod
    def _parse(raw: bytes) -> Iterator[Commit]:
        if raw and not raw.endswith(b"\n"):
            last_line = raw.count(b"\n") + 1
            raise CorruptLogError(last_line, "truncated record at end of log")

        prev_hash = ""
        for line_number, line in enumerate(raw.split(b"\n"), start=1):
            if not line.strip():
                continue
            try:
                record = json.loads(line.decode("utf-8"))
            except (UnicodeDecodeError, json.JSONDecodeError) as exc:
                raise CorruptLogError(line_number, f"unparseable record: {exc}") from exc
            if not isinstance(record, dict):
                raise CorruptLogError(line_number, "record is not an object")

            commit = record_to_commit(record, line_number)
            if commit.previous_record_hash != prev_hash:
                raise CorruptLogError(
                    line_number,
                    f"chain broken at {commit.commit_id}: expected previous hash "
                    f"{prev_hash!r}, got {commit.previous_record_hash!r}",
                )
            prev_hash = commit.record_hash
            yield commit
