"""Positional line diff.

Both inputs are walked in lockstep. Where both have a line at the same
position the lines are compared; once one side runs out, every remaining
line of the other side is reported as added or removed. This is not an
LCS diff: an insertion near the top shows up as a run of changed lines
followed by one added line.
"""

from __future__ import annotations

import io
from itertools import zip_longest
from pathlib import Path

from tracklog.core.atomic import read_bytes
from tracklog.models.diff import ChangeKind, LineChange


def _split_lines(data: bytes) -> list[str]:
    # Only "\n" ends a line. Terminators are kept so "a" and "a\n" compare unequal.
    return [
        line.decode("utf-8", errors="replace") for line in io.BytesIO(data).readlines()
    ]


def _strip_eol(line: str) -> str:
    return line.rstrip("\r\n")


def diff_lines(old: bytes, new: bytes) -> list[LineChange]:
    """Compare ``old`` against ``new`` and return the line-level changes."""
    changes: list[LineChange] = []
    old_lines = _split_lines(old)
    new_lines = _split_lines(new)

    for lineno, (a, b) in enumerate(zip_longest(old_lines, new_lines), start=1):
        if a is not None and b is not None:
            if a != b:
                changes.append(LineChange(
                    kind=ChangeKind.CHANGED, line_number=lineno,
                    old_line=_strip_eol(a), new_line=_strip_eol(b),
                ))
        elif a is not None:
            changes.append(LineChange(
                kind=ChangeKind.REMOVED, line_number=lineno, old_line=_strip_eol(a),
            ))
        else:
            changes.append(LineChange(
                kind=ChangeKind.ADDED, line_number=lineno, new_line=_strip_eol(b),
            ))
    return changes


def diff_files(old_path: Path, new_path: Path) -> list[LineChange]:
    """Diff two files on disk."""
    return diff_lines(read_bytes(old_path), read_bytes(new_path))
