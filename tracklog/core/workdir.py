"""Working tree access — the live files next to the control directory."""

from __future__ import annotations

import logging
from pathlib import Path

from tracklog.core.atomic import atomic_write_bytes
from tracklog.core.errors import (
    FileNotFoundInWorkdirError,
    InvalidPathError,
    RepositoryIOError,
    UnreadableFileError,
)
from tracklog.core.hasher import hash_file

logger = logging.getLogger(__name__)


class WorkingTree:
    """Resolves tracked filenames against the repository root.

    Filenames are kept exactly as the user gave them; they are resolved
    relative to ``root`` and must stay inside it and outside the control
    directory.
    """

    def __init__(self, root: Path, control_dir: Path, *, fsync: bool = True) -> None:
        self.root = Path(root).resolve()
        self.control_dir = Path(control_dir).resolve()
        self._fsync = fsync

    def path_for(self, filename: str) -> Path:
        if not filename:
            raise InvalidPathError(filename, "empty filename")
        path = (self.root / filename).resolve()
        if path != self.root and self.root not in path.parents:
            raise InvalidPathError(filename, "path is outside the repository")
        if path == self.control_dir or self.control_dir in path.parents:
            raise InvalidPathError(filename, "path is inside the control directory")
        return path

    def exists(self, filename: str) -> bool:
        return self.path_for(filename).is_file()

    def hash(self, filename: str) -> str:
        """Content hash of the working file; raises if missing or unreadable."""
        return hash_file(self.path_for(filename), display_name=filename)

    def read(self, filename: str) -> bytes:
        path = self.path_for(filename)
        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            raise FileNotFoundInWorkdirError(filename) from exc
        except OSError as exc:
            raise UnreadableFileError(filename, exc.strerror or str(exc)) from exc

    def check_readable(self, filename: str) -> None:
        """Raise unless ``filename`` is an existing, readable regular file."""
        path = self.path_for(filename)
        if not path.exists():
            raise FileNotFoundInWorkdirError(filename)
        if not path.is_file():
            raise UnreadableFileError(filename, "not a regular file")
        try:
            with open(path, "rb"):
                pass
        except OSError as exc:
            raise UnreadableFileError(filename, exc.strerror or str(exc)) from exc

    def write(self, filename: str, data: bytes) -> None:
        """Overwrite the working file with ``data``, creating parent dirs."""
        path = self.path_for(filename)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise RepositoryIOError(path.parent, "create directory", str(exc)) from exc
        atomic_write_bytes(path, data, fsync=self._fsync, keep_mode=True)
        logger.debug("Wrote working file %s", filename)
