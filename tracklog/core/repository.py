"""Repository — the central coordinator for tracklog commands.

The Repository wires together the ObjectStore, StagingIndex, CommitLog,
WorkingTree and the checkout/diff engines, and implements the command
surface: init, add, commit, log, status, checkout and verify.

Every command rebuilds what it needs from the persisted files; nothing is
cached between calls. Mutating commands run under the repository lock and
first finish any commit a previous process left half-done.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from tracklog.config import TracklogSettings, settings as default_settings
from tracklog.core.atomic import atomic_write_text, read_text
from tracklog.core.checkout import resolve_commit, restore_commit
from tracklog.core.commit_log import CommitLog
from tracklog.core.diff import diff_lines
from tracklog.core.errors import (
    FileNotFoundInWorkdirError,
    InvalidMessageError,
    NotARepositoryError,
    NothingToCommitError,
    RepositoryIOError,
)
from tracklog.core.hasher import hash_bytes
from tracklog.core.history import CommitHistory, FileVersionMap, replay_log
from tracklog.core.locking import RepositoryLock
from tracklog.core.object_store import ObjectStore
from tracklog.core.staging_index import StagingIndex
from tracklog.core.workdir import WorkingTree
from tracklog.models.commit import Commit, FileEntry
from tracklog.models.reports import (
    CheckoutReport,
    FileStatus,
    InitResult,
    StatusReport,
    VerifyReport,
)

logger = logging.getLogger(__name__)

OBJECTS_DIR = "objects"
INDEX_FILE = "index"
LOG_FILE = "log"
HEAD_FILE = "HEAD"
LOCK_FILE = "lock"
JOURNAL_FILE = "journal"


class Repository:
    """A working directory tracked by a tracklog control directory.

    Parameters
    ----------
    root:
        The working directory root. The control directory lives directly
        inside it.
    settings:
        Configuration. Uses the environment-driven defaults if not provided.
    """

    def __init__(self, root: Path | str = ".", settings: TracklogSettings | None = None) -> None:
        self.settings = settings or default_settings
        self.root = Path(root).resolve()
        self.control_dir = self.root / self.settings.control_dir

        fsync = self.settings.fsync
        self.objects = ObjectStore(self.control_dir / OBJECTS_DIR, fsync=fsync)
        self.index = StagingIndex(self.control_dir / INDEX_FILE, fsync=fsync)
        self.log = CommitLog(self.control_dir / LOG_FILE, fsync=fsync)
        self.tree = WorkingTree(self.root, self.control_dir, fsync=fsync)

        self._head_path = self.control_dir / HEAD_FILE
        self._journal_path = self.control_dir / JOURNAL_FILE
        self._lock_path = self.control_dir / LOCK_FILE

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    @classmethod
    def open(
        cls, path: Path | str = ".", settings: TracklogSettings | None = None
    ) -> Repository:
        """Open the repository containing ``path``, searching upwards.

        Raises ``NotARepositoryError`` if no control directory is found.
        """
        settings = settings or default_settings
        start = Path(path).resolve()
        for candidate in (start, *start.parents):
            if (candidate / settings.control_dir).is_dir():
                return cls(candidate, settings=settings)
        raise NotARepositoryError(start)

    @property
    def is_initialized(self) -> bool:
        return self.control_dir.is_dir()

    def _require_repository(self) -> None:
        if not self.is_initialized:
            raise NotARepositoryError(self.root)

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        """Hold the repository lock and recover any interrupted commit."""
        self._require_repository()
        with RepositoryLock(self._lock_path, timeout=self.settings.lock_timeout_seconds):
            self._recover()
            yield

    # ------------------------------------------------------------------
    # init
    # ------------------------------------------------------------------

    def init(self) -> InitResult:
        """Create the control directory layout.

        Idempotent: missing pieces are created, existing state is never
        truncated or overwritten.
        """
        created = not self.control_dir.exists()
        try:
            (self.control_dir / OBJECTS_DIR).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise RepositoryIOError(self.control_dir, "create", str(exc)) from exc

        with self._transaction():
            for path in (self.index.path, self.log.path, self._head_path):
                if not path.exists():
                    atomic_write_text(path, "", fsync=self.settings.fsync)
                    created = True

        if created:
            logger.info("Initialized tracklog repository in %s", self.control_dir)
        else:
            logger.info("Repository already exists in %s", self.control_dir)
        return InitResult(control_dir=str(self.control_dir), created=created)

    # ------------------------------------------------------------------
    # HEAD
    # ------------------------------------------------------------------

    def head(self) -> str | None:
        """The current commit identifier, or None before the first commit."""
        self._require_repository()
        if not self._head_path.exists():
            return None
        return read_text(self._head_path).strip() or None

    def _set_head(self, commit_id: str) -> None:
        atomic_write_text(self._head_path, commit_id, fsync=self.settings.fsync)

    # ------------------------------------------------------------------
    # add
    # ------------------------------------------------------------------

    def add(self, filename: str) -> None:
        """Stage ``filename`` for the next commit.

        Raises ``FileNotFoundInWorkdirError`` if the file is absent or
        unreadable and ``AlreadyStagedError`` if it is already staged.
        """
        with self._transaction():
            self.tree.check_readable(filename)
            self.index.add(filename)
        logger.info("Added %s", filename)

    # ------------------------------------------------------------------
    # commit
    # ------------------------------------------------------------------

    def commit(self, message: str) -> Commit:
        """Record every staged file's current content as a new commit.

        Sequence: read all staged files (failing before any write if one
        is missing), store blobs, journal the pending id, append the log
        record, move HEAD, clear the index, drop the journal.
        """
        self._require_repository()
        limit = self.settings.max_message_length
        if len(message) > limit:
            raise InvalidMessageError(len(message), limit)

        with self._transaction():
            staged = self.index.list()
            if not staged:
                raise NothingToCommitError()

            contents = [(name, self.tree.read(name)) for name in staged]

            history, versions = replay_log(self.log)
            now = datetime.now(timezone.utc)
            commit_id = self.log.next_commit_id(now, existing=[c.commit_id for c in history])

            entries = tuple(
                FileEntry(filename=name, content_hash=self.objects.put(data))
                for name, data in contents
            )
            commit = Commit(commit_id=commit_id, message=message, timestamp=now, files=entries)
            versions.apply(commit)

            self._write_journal(commit_id)
            sealed = self.log.append(commit)
            self._finish_commit(commit_id)

        logger.info(
            "Committed %s (%d files, %d tracked)", commit_id, len(entries), len(versions)
        )
        return sealed

    def _write_journal(self, commit_id: str) -> None:
        payload = json.dumps({"commit_id": commit_id})
        atomic_write_text(self._journal_path, payload, fsync=self.settings.fsync)

    def _finish_commit(self, commit_id: str) -> None:
        self._set_head(commit_id)
        self.index.clear()
        self._clear_journal()

    def _clear_journal(self) -> None:
        try:
            self._journal_path.unlink(missing_ok=True)
        except OSError as exc:
            raise RepositoryIOError(self._journal_path, "remove", str(exc)) from exc

    def _recover(self) -> None:
        """Complete or discard a commit interrupted by a crash."""
        if not self._journal_path.exists():
            return
        try:
            commit_id = json.loads(read_text(self._journal_path))["commit_id"]
        except (ValueError, KeyError, TypeError):
            logger.warning("Discarding unreadable commit journal %s", self._journal_path)
            self._clear_journal()
            return

        if self.log.contains(commit_id):
            logger.warning("Completing interrupted commit %s", commit_id)
            self._finish_commit(commit_id)
        else:
            logger.warning("Discarding commit %s that never reached the log", commit_id)
            self._clear_journal()

    # ------------------------------------------------------------------
    # log
    # ------------------------------------------------------------------

    def history(self) -> CommitHistory:
        """Commit history rebuilt from the log, oldest first."""
        self._require_repository()
        history, _ = replay_log(self.log)
        return history

    def file_versions(self) -> FileVersionMap:
        """filename -> hash of its most recently committed content."""
        self._require_repository()
        _, versions = replay_log(self.log)
        return versions

    # ------------------------------------------------------------------
    # status
    # ------------------------------------------------------------------

    def status(self) -> StatusReport:
        """Staged files with diffs against their last committed blobs.

        Tracked files that are not staged but differ from their last
        committed blob are listed separately as modified.
        """
        self._require_repository()
        staged_names = self.index.list()
        _, versions = replay_log(self.log)

        staged = [self._file_status(name, versions.get(name)) for name in staged_names]

        modified = []
        for name, committed_hash in versions.items():
            if name in staged_names:
                continue
            file_status = self._file_status(name, committed_hash)
            if file_status.is_missing or file_status.is_modified:
                modified.append(file_status)

        return StatusReport(head=self.head(), staged=tuple(staged), modified=tuple(modified))

    def _file_status(self, filename: str, committed_hash: str | None) -> FileStatus:
        try:
            current = self.tree.read(filename)
        except FileNotFoundInWorkdirError:
            current = None

        current_hash = hash_bytes(current) if current is not None else None
        object_missing = False
        changes = ()
        if committed_hash is not None:
            if not self.objects.exists(committed_hash):
                object_missing = True
            elif current is not None and current_hash != committed_hash:
                changes = tuple(diff_lines(self.objects.get(committed_hash), current))

        return FileStatus(
            filename=filename,
            current_hash=current_hash,
            committed_hash=committed_hash,
            committed_object_missing=object_missing,
            changes=changes,
        )

    # ------------------------------------------------------------------
    # checkout
    # ------------------------------------------------------------------

    def checkout(self, fragment: str) -> CheckoutReport:
        """Restore the files of the commit ``fragment`` identifies.

        Files whose objects are missing are skipped and reported; HEAD
        moves to the matched commit even if the checkout is partial.
        """
        with self._transaction():
            history, _ = replay_log(self.log)
            commit = resolve_commit(history, fragment, self.settings.commit_lookup)
            report = restore_commit(commit, self.objects, self.tree, fragment=fragment)
            self._set_head(commit.commit_id)

        logger.info(
            "Checked out %s (%d restored, %d missing)",
            commit.commit_id, len(report.restored), len(report.missing),
        )
        return report

    # ------------------------------------------------------------------
    # verify
    # ------------------------------------------------------------------

    def verify(self) -> VerifyReport:
        """Check the log chain and every object the log references."""
        self._require_repository()
        commits_verified = self.log.verify()

        referenced: list[str] = []
        for commit in self.log.iter_commits():
            for entry in commit.files:
                if entry.content_hash not in referenced:
                    referenced.append(entry.content_hash)

        missing = [oid for oid in referenced if not self.objects.exists(oid)]
        corrupt = [
            oid for oid in referenced
            if oid not in missing and not self.objects.verify(oid)
        ]
        return VerifyReport(
            commits_verified=commits_verified,
            objects_checked=len(referenced),
            missing_objects=tuple(missing),
            corrupt_objects=tuple(corrupt),
        )
