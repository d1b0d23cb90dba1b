"""In-memory projections of the commit log.

``CommitHistory`` and ``FileVersionMap`` are disposable values rebuilt by
``replay_log()`` for every command that needs them. Nothing here is
persisted or shared between invocations.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping

from tracklog.core.commit_log import CommitLog
from tracklog.core.errors import CommitNotFoundError, ResourceExhaustedError
from tracklog.models.commit import Commit

logger = logging.getLogger(__name__)


class CommitHistory:
    """Ordered, doubly-traversable sequence of commits in log order."""

    def __init__(self, commits: Iterable[Commit] = ()) -> None:
        self._commits: list[Commit] = list(commits)
        self._positions: dict[str, int] = {
            c.commit_id: i for i, c in enumerate(self._commits)
        }

    def append(self, commit: Commit) -> None:
        self._positions[commit.commit_id] = len(self._commits)
        self._commits.append(commit)

    @property
    def first(self) -> Commit | None:
        return self._commits[0] if self._commits else None

    @property
    def last(self) -> Commit | None:
        return self._commits[-1] if self._commits else None

    def get(self, commit_id: str) -> Commit:
        try:
            return self._commits[self._positions[commit_id]]
        except KeyError:
            raise CommitNotFoundError(commit_id) from None

    def previous(self, commit_id: str) -> Commit | None:
        """The commit appended just before ``commit_id``, if any."""
        pos = self._position(commit_id)
        return self._commits[pos - 1] if pos > 0 else None

    def next(self, commit_id: str) -> Commit | None:
        """The commit appended just after ``commit_id``, if any."""
        pos = self._position(commit_id)
        return self._commits[pos + 1] if pos + 1 < len(self._commits) else None

    def _position(self, commit_id: str) -> int:
        try:
            return self._positions[commit_id]
        except KeyError:
            raise CommitNotFoundError(commit_id) from None

    def __iter__(self) -> Iterator[Commit]:
        return iter(self._commits)

    def __reversed__(self) -> Iterator[Commit]:
        return reversed(self._commits)

    def __len__(self) -> int:
        return len(self._commits)

    def __getitem__(self, index: int) -> Commit:
        return self._commits[index]

    def __contains__(self, commit_id: object) -> bool:
        return commit_id in self._positions


class FileVersionMap(Mapping[str, str]):
    """filename -> content hash from the most recent commit mentioning it."""

    def __init__(self) -> None:
        self._versions: dict[str, str] = {}

    def apply(self, commit: Commit) -> None:
        """Replay one commit; later commits overwrite earlier hashes."""
        for entry in commit.files:
            self._versions[entry.filename] = entry.content_hash

    def __getitem__(self, filename: str) -> str:
        return self._versions[filename]

    def __iter__(self) -> Iterator[str]:
        return iter(self._versions)

    def __len__(self) -> int:
        return len(self._versions)


def replay_commits(commits: Iterable[Commit]) -> tuple[CommitHistory, FileVersionMap]:
    """Build history and version map in a single pass over ``commits``."""
    history = CommitHistory()
    versions = FileVersionMap()
    try:
        for commit in commits:
            history.append(commit)
            versions.apply(commit)
    except MemoryError as exc:
        raise ResourceExhaustedError("rebuilding commit history") from exc
    return history, versions


def replay_log(log: CommitLog) -> tuple[CommitHistory, FileVersionMap]:
    """Full linear scan of ``log`` into fresh history and version map."""
    history, versions = replay_commits(log.iter_commits())
    logger.debug(
        "Replayed %d commits (%d tracked files) from %s",
        len(history), len(versions), log.path,
    )
    return history, versions
