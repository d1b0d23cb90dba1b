"""Result values returned by repository commands."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from tracklog.models.diff import LineChange


class RestoreOutcome(str, Enum):
    RESTORED = "restored"
    MISSING_OBJECT = "missing_object"


class FileRestore(BaseModel):
    """Per-file result of a checkout."""

    model_config = ConfigDict(frozen=True)

    filename: str
    content_hash: str
    outcome: RestoreOutcome


class CheckoutReport(BaseModel):
    """Result of ``checkout``. A partial checkout is still a success."""

    model_config = ConfigDict(frozen=True)

    commit_id: str
    fragment: str
    files: tuple[FileRestore, ...] = ()

    @property
    def restored(self) -> list[str]:
        return [f.filename for f in self.files if f.outcome == RestoreOutcome.RESTORED]

    @property
    def missing(self) -> list[FileRestore]:
        return [f for f in self.files if f.outcome == RestoreOutcome.MISSING_OBJECT]

    @property
    def is_partial(self) -> bool:
        return bool(self.missing)


class FileStatus(BaseModel):
    """Working-file state against its last committed blob."""

    model_config = ConfigDict(frozen=True)

    filename: str
    current_hash: str | None = None  # None if the working file is missing
    committed_hash: str | None = None  # None if never committed
    committed_object_missing: bool = False
    changes: tuple[LineChange, ...] = ()

    @property
    def is_new(self) -> bool:
        return self.committed_hash is None

    @property
    def is_missing(self) -> bool:
        return self.current_hash is None

    @property
    def is_modified(self) -> bool:
        return (
            self.committed_hash is not None
            and self.current_hash is not None
            and self.current_hash != self.committed_hash
        )


class StatusReport(BaseModel):
    """Result of ``status``."""

    model_config = ConfigDict(frozen=True)

    head: str | None = None
    staged: tuple[FileStatus, ...] = ()
    modified: tuple[FileStatus, ...] = ()

    @property
    def has_pending_changes(self) -> bool:
        return bool(self.staged)


class InitResult(BaseModel):
    """Result of ``init``."""

    model_config = ConfigDict(frozen=True)

    control_dir: str
    created: bool


class VerifyReport(BaseModel):
    """Result of ``verify`` — log chain and object integrity."""

    model_config = ConfigDict(frozen=True)

    commits_verified: int
    objects_checked: int
    missing_objects: tuple[str, ...] = ()
    corrupt_objects: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.missing_objects and not self.corrupt_objects
