"""Shared test fixtures for tracklog."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from tracklog.config import TracklogSettings
from tracklog.core.commit_log import CommitLog
from tracklog.core.object_store import ObjectStore
from tracklog.core.repository import Repository
from tracklog.core.staging_index import StagingIndex
from tracklog.models.commit import Commit, FileEntry


@pytest.fixture
def settings() -> TracklogSettings:
    """Deterministic settings, independent of the caller's environment."""
    return TracklogSettings(
        _env_file=None,
        control_dir=".tracklog",
        log_level="WARNING",
        max_message_length=255,
        commit_lookup="unique",
        lock_timeout_seconds=0.5,
        fsync=False,
    )


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    """An empty working directory."""
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def repo(workdir: Path, settings: TracklogSettings) -> Repository:
    """An initialized repository in ``workdir``."""
    repository = Repository(workdir, settings=settings)
    repository.init()
    return repository


@pytest.fixture
def object_store(tmp_path: Path) -> ObjectStore:
    """Provide a fresh ObjectStore in a temp directory."""
    objects = tmp_path / "objects"
    objects.mkdir()
    return ObjectStore(objects, fsync=False)


@pytest.fixture
def staging_index(tmp_path: Path) -> StagingIndex:
    """Provide a StagingIndex backed by a temp file."""
    return StagingIndex(tmp_path / "index", fsync=False)


@pytest.fixture
def commit_log(tmp_path: Path) -> CommitLog:
    """Provide an empty CommitLog backed by a temp file."""
    return CommitLog(tmp_path / "log", fsync=False)


@pytest.fixture
def write_file(workdir: Path) -> Callable[[str, str | bytes], Path]:
    """Factory fixture: write a working file relative to ``workdir``."""

    def _write(name: str, content: str | bytes) -> Path:
        path = workdir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            path.write_text(content, encoding="utf-8")
        else:
            path.write_bytes(content)
        return path

    return _write


@pytest.fixture
def make_commit() -> Callable[..., Commit]:
    """Factory fixture: build an unsealed Commit with sensible defaults."""

    def _factory(
        commit_id: str = "1700000000",
        message: str = "test commit",
        files: dict[str, str] | None = None,
    ) -> Commit:
        entries = tuple(
            FileEntry(filename=name, content_hash=digest)
            for name, digest in (files or {"a.txt": "a" * 64}).items()
        )
        return Commit(commit_id=commit_id, message=message, files=entries)

    return _factory
