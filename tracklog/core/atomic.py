"""Rename-based atomic file writes.

A write goes to a sibling temp file which is flushed (and optionally
fsynced) before being renamed over the target, so readers see either the
old content or the new content, never a truncated file.
"""

from __future__ import annotations

import logging
import os
import stat
import uuid
from pathlib import Path

from tracklog.core.errors import RepositoryIOError

logger = logging.getLogger(__name__)


def atomic_write_bytes(
    path: Path, data: bytes, *, fsync: bool = True, keep_mode: bool = False
) -> None:
    """Atomically replace ``path`` with ``data``.

    With ``keep_mode`` an existing target's permission bits carry over to
    the replacement. Raises ``RepositoryIOError`` on failure; the temp file
    is removed.
    """
    path = Path(path)
    tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex[:8]}.tmp")
    try:
        with open(tmp_path, "wb") as fh:
            fh.write(data)
            fh.flush()
            if fsync:
                os.fsync(fh.fileno())
        if keep_mode and path.exists():
            os.chmod(tmp_path, stat.S_IMODE(path.stat().st_mode))
        tmp_path.replace(path)
    except OSError as exc:
        if tmp_path.exists():
            tmp_path.unlink()
        raise RepositoryIOError(path, "write", str(exc)) from exc
    logger.debug("Atomically wrote %d bytes to %s", len(data), path)


def atomic_write_text(path: Path, text: str, *, fsync: bool = True) -> None:
    """Atomically replace ``path`` with UTF-8 encoded ``text``."""
    atomic_write_bytes(path, text.encode("utf-8"), fsync=fsync)


def read_bytes(path: Path) -> bytes:
    """Read a persisted file, wrapping OS failures in ``RepositoryIOError``."""
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise RepositoryIOError(path, "read", str(exc)) from exc


def read_text(path: Path) -> str:
    """Read a persisted UTF-8 file, wrapping OS failures."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise RepositoryIOError(path, "read", str(exc)) from exc
