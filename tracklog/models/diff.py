"""Line-level change records produced by the diff engine."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ChangeKind(str, Enum):
    CHANGED = "changed"
    ADDED = "added"
    REMOVED = "removed"


class LineChange(BaseModel):
    """One positional difference between two line sequences.

    ``old_line`` is set for CHANGED and REMOVED, ``new_line`` for CHANGED
    and ADDED. Lines are stored without their terminators.
    """

    model_config = ConfigDict(frozen=True)

    kind: ChangeKind
    line_number: int = Field(ge=1)
    old_line: str | None = None
    new_line: str | None = None
