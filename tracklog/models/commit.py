"""Commit model — one sealed record of the append-only commit log.

A commit binds a message and the exact staging set at commit time
(filename -> content hash, in staging order) to a point in history.
Commits are immutable once written.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

LOG_SCHEMA_VERSION = 1


class FileEntry(BaseModel):
    """A staged filename paired with the hash of its content at commit time."""

    model_config = ConfigDict(frozen=True)

    filename: str
    content_hash: str


class Commit(BaseModel):
    """A single record in the commit log."""

    model_config = ConfigDict(frozen=True)

    commit_id: str
    message: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    files: tuple[FileEntry, ...] = ()
    schema_version: int = LOG_SCHEMA_VERSION
    previous_record_hash: str = ""  # record_hash of the preceding record
    record_hash: str = ""  # computed on append, seals this record

    def hash_for(self, filename: str) -> str | None:
        """Content hash recorded for ``filename`` in this commit, if any."""
        for entry in self.files:
            if entry.filename == filename:
                return entry.content_hash
        return None
