"""Error hierarchy for repository operations.

Every error raised by the core derives from ``TracklogError`` and carries
the filename, identifier or fragment needed to diagnose it. The CLI turns
any ``TracklogError`` into a non-zero exit code.
"""

from __future__ import annotations

from pathlib import Path


class TracklogError(RuntimeError):
    """Base class for all repository errors."""


class NotARepositoryError(TracklogError):
    """Raised when no control directory is found."""

    def __init__(self, path: Path | str) -> None:
        self.path = str(path)
        super().__init__(
            f"Not a tracklog repository (or any parent): {self.path}. "
            "Run 'tracklog init' first."
        )


class FileNotFoundInWorkdirError(TracklogError):
    """Raised when a staged or working file does not exist."""

    def __init__(self, filename: str) -> None:
        self.filename = filename
        super().__init__(f"File '{filename}' does not exist.")


class UnreadableFileError(FileNotFoundInWorkdirError):
    """Raised when a file exists but its content cannot be read."""

    def __init__(self, filename: str, reason: str = "") -> None:
        self.filename = filename
        self.reason = reason
        TracklogError.__init__(
            self,
            f"File '{filename}' cannot be read" + (f": {reason}" if reason else "."),
        )


class InvalidPathError(TracklogError):
    """Raised when a filename cannot be tracked."""

    def __init__(self, filename: str, reason: str) -> None:
        self.filename = filename
        self.reason = reason
        super().__init__(f"Cannot track {filename!r}: {reason}")


class AlreadyStagedError(TracklogError):
    """Raised when a filename is already in the staging index."""

    def __init__(self, filename: str) -> None:
        self.filename = filename
        super().__init__(f"{filename} is already added.")


class NothingToCommitError(TracklogError):
    """Raised when committing with an empty staging index."""

    def __init__(self) -> None:
        super().__init__("No changes to commit. Use 'tracklog add <file>' first.")


class InvalidMessageError(TracklogError):
    """Raised when a commit message exceeds the configured bound."""

    def __init__(self, length: int, limit: int) -> None:
        self.length = length
        self.limit = limit
        super().__init__(
            f"Commit message is {length} characters; the limit is {limit}."
        )


class ObjectNotFoundError(TracklogError):
    """Raised when a referenced hash is absent from the object store."""

    def __init__(self, object_id: str) -> None:
        self.object_id = object_id
        super().__init__(f"Object {object_id} not found.")


class ObjectIntegrityError(TracklogError):
    """Raised when a stored object's content does not match its hash."""

    def __init__(self, object_id: str) -> None:
        self.object_id = object_id
        super().__init__(f"Object {object_id} failed its integrity check.")


class CommitNotFoundError(TracklogError):
    """Raised when no commit matches the given identifier fragment."""

    def __init__(self, fragment: str) -> None:
        self.fragment = fragment
        super().__init__(f"Commit ID {fragment} not found.")


class AmbiguousCommitError(TracklogError):
    """Raised when a fragment matches more than one commit."""

    def __init__(self, fragment: str, candidates: list[str]) -> None:
        self.fragment = fragment
        self.candidates = list(candidates)
        super().__init__(
            f"Commit fragment {fragment!r} is ambiguous; it matches "
            f"{', '.join(self.candidates)}."
        )


class CorruptLogError(TracklogError):
    """Raised when the commit log cannot be parsed or its chain is broken."""

    def __init__(self, line_number: int, reason: str) -> None:
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"Commit log corrupt at line {line_number}: {reason}")


class RepositoryIOError(TracklogError):
    """Raised when a durable read or write on a persisted file fails."""

    def __init__(self, path: Path | str, operation: str, reason: str) -> None:
        self.path = str(path)
        self.operation = operation
        self.reason = reason
        super().__init__(f"Failed to {operation} {self.path}: {reason}")


class ResourceExhaustedError(TracklogError):
    """Raised when memory runs out while rebuilding commit history."""

    def __init__(self, what: str) -> None:
        self.what = what
        super().__init__(f"Out of memory while {what}.")


class LockTimeoutError(TracklogError):
    """Raised when the repository lock cannot be acquired in time."""

    def __init__(self, path: Path | str, timeout: float) -> None:
        self.path = str(path)
        self.timeout = timeout
        super().__init__(
            f"Could not lock {self.path} within {timeout:g} seconds; "
            "another tracklog process may be running."
        )


class DuplicateCommitError(TracklogError):
    """Raised when appending a commit whose identifier is already logged."""

    def __init__(self, commit_id: str) -> None:
        self.commit_id = commit_id
        super().__init__(f"Commit ID {commit_id} is already in the log.")


class UnknownLookupModeError(TracklogError):
    """Raised when commit lookup is asked for a mode it does not know."""

    def __init__(self, mode: str) -> None:
        self.mode = mode
        super().__init__(
            f"Unknown commit lookup mode {mode!r}; use 'unique' or 'first-match'."
        )
