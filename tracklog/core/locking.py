"""Exclusive repository lock.

Mutating commands (init, add, commit, checkout) hold an advisory
``fcntl.flock`` on ``<control>/lock`` for their whole duration, so two
processes cannot interleave writes to the log, index, HEAD or objects.
"""

from __future__ import annotations

import fcntl
import logging
import time
from pathlib import Path
from types import TracebackType
from typing import IO

from tracklog.core.errors import LockTimeoutError, RepositoryIOError

logger = logging.getLogger(__name__)

_POLL_INTERVAL = 0.05


class RepositoryLock:
    """Context manager holding an exclusive lock on a lock file.

    Parameters
    ----------
    lock_path:
        File used as the lock target. Created if missing.
    timeout:
        Seconds to keep retrying before raising ``LockTimeoutError``.
    """

    def __init__(self, lock_path: Path, timeout: float = 10.0) -> None:
        self._path = Path(lock_path)
        self._timeout = timeout
        self._handle: IO[bytes] | None = None

    @property
    def is_held(self) -> bool:
        return self._handle is not None

    def acquire(self) -> None:
        try:
            handle = open(self._path, "ab")
        except OSError as exc:
            raise RepositoryIOError(self._path, "open lock file", str(exc)) from exc

        start = time.monotonic()
        while True:
            try:
                fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                break
            except BlockingIOError:
                if time.monotonic() - start >= self._timeout:
                    handle.close()
                    raise LockTimeoutError(self._path, self._timeout)
                time.sleep(_POLL_INTERVAL)
            except OSError as exc:
                handle.close()
                raise RepositoryIOError(self._path, "lock", str(exc)) from exc

        self._handle = handle
        logger.debug("Acquired repository lock %s", self._path)

    def release(self) -> None:
        if self._handle is None:
            return
        try:
            fcntl.flock(self._handle.fileno(), fcntl.LOCK_UN)
        finally:
            # Closing the handle drops the lock even if LOCK_UN failed.
            self._handle.close()
            self._handle = None
        logger.debug("Released repository lock %s", self._path)

    def __enter__(self) -> RepositoryLock:
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()
