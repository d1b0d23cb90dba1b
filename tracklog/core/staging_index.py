"""Staging index — the ordered set of filenames queued for the next commit.

Persisted as one filename per line. Every change rewrites the file
atomically, so a crash leaves either the old or the new index.
"""

from __future__ import annotations

import logging
from pathlib import Path

from tracklog.core.atomic import atomic_write_text, read_text
from tracklog.core.errors import AlreadyStagedError, InvalidPathError

logger = logging.getLogger(__name__)


class StagingIndex:
    """Persisted, insertion-ordered set of staged filenames.

    Membership is exact string match; no path normalization happens here.
    """

    def __init__(self, index_path: Path, *, fsync: bool = True) -> None:
        self._path = Path(index_path)
        self._fsync = fsync

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> list[str]:
        if not self._path.exists():
            return []
        return [line for line in read_text(self._path).split("\n") if line]

    def _save(self, filenames: list[str]) -> None:
        text = "".join(f"{name}\n" for name in filenames)
        atomic_write_text(self._path, text, fsync=self._fsync)

    def add(self, filename: str) -> None:
        """Append ``filename``; raises ``AlreadyStagedError`` if present."""
        if not filename:
            raise InvalidPathError(filename, "empty filename")
        if "\n" in filename or "\r" in filename:
            raise InvalidPathError(filename, "filenames may not contain line breaks")
        try:
            filename.encode("utf-8")
        except UnicodeEncodeError:
            raise InvalidPathError(filename, "filename is not valid UTF-8") from None

        filenames = self._load()
        if filename in filenames:
            raise AlreadyStagedError(filename)
        filenames.append(filename)
        self._save(filenames)
        logger.debug("Staged %s (%d staged)", filename, len(filenames))

    def list(self) -> list[str]:
        """Staged filenames in insertion order."""
        return self._load()

    def clear(self) -> None:
        self._save([])
        logger.debug("Cleared staging index")

    def __contains__(self, filename: object) -> bool:
        return isinstance(filename, str) and filename in self._load()

    def __len__(self) -> int:
        return len(self._load())
