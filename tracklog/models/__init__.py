"""Tracklog data models — all Pydantic v2, all frozen (immutable)."""

from tracklog.models.commit import LOG_SCHEMA_VERSION, Commit, FileEntry
from tracklog.models.diff import ChangeKind, LineChange
from tracklog.models.reports import (
    CheckoutReport,
    FileRestore,
    FileStatus,
    InitResult,
    RestoreOutcome,
    StatusReport,
    VerifyReport,
)

__all__ = [
    # commit
    "LOG_SCHEMA_VERSION",
    "Commit",
    "FileEntry",
    # diff
    "ChangeKind",
    "LineChange",
    # reports
    "CheckoutReport",
    "FileRestore",
    "FileStatus",
    "InitResult",
    "RestoreOutcome",
    "StatusReport",
    "VerifyReport",
]
