"""Tests for the Repository command surface."""

from __future__ import annotations

import os
import stat
import sys
from pathlib import Path

import pytest

from tracklog.config import TracklogSettings
from tracklog.core.errors import (
    AlreadyStagedError,
    AmbiguousCommitError,
    CommitNotFoundError,
    FileNotFoundInWorkdirError,
    InvalidMessageError,
    InvalidPathError,
    NotARepositoryError,
    NothingToCommitError,
)
from tracklog.core.hasher import hash_bytes
from tracklog.core.repository import Repository
from tracklog.models.diff import ChangeKind


class TestInit:
    def test_creates_layout(self, workdir: Path, settings: TracklogSettings):
        result = Repository(workdir, settings=settings).init()
        control = workdir / ".tracklog"
        assert result.created is True
        assert (control / "objects").is_dir()
        assert (control / "index").read_text() == ""
        assert (control / "log").read_text() == ""
        assert (control / "HEAD").read_text() == ""

    def test_idempotent(self, repo: Repository, write_file):
        write_file("a.txt", "hello")
        repo.add("a.txt")
        repo.commit("first")

        result = repo.init()
        assert result.created is False
        assert len(repo.history()) == 1
        assert repo.head() is not None

    def test_restores_missing_piece(self, repo: Repository):
        (repo.control_dir / "index").unlink()
        assert repo.init().created is True
        assert (repo.control_dir / "index").exists()


class TestOpen:
    def test_walks_up(self, repo: Repository, workdir: Path, settings: TracklogSettings):
        nested = workdir / "a" / "b"
        nested.mkdir(parents=True)
        assert Repository.open(nested, settings=settings).root == repo.root

    def test_not_a_repository(self, tmp_path: Path, settings: TracklogSettings):
        with pytest.raises(NotARepositoryError):
            Repository.open(tmp_path, settings=settings)

    def test_commands_require_init(self, workdir: Path, settings: TracklogSettings):
        bare = Repository(workdir, settings=settings)
        with pytest.raises(NotARepositoryError):
            bare.add("a.txt")
        with pytest.raises(NotARepositoryError):
            bare.status()
        with pytest.raises(NotARepositoryError):
            bare.commit("msg")


class TestAdd:
    def test_stages_file(self, repo: Repository, write_file):
        write_file("a.txt", "hello")
        repo.add("a.txt")
        assert repo.index.list() == ["a.txt"]

    def test_missing_file(self, repo: Repository):
        with pytest.raises(FileNotFoundInWorkdirError):
            repo.add("nope.txt")
        assert repo.index.list() == []

    def test_already_staged_leaves_index(self, repo: Repository, write_file):
        write_file("a.txt", "hello")
        repo.add("a.txt")
        with pytest.raises(AlreadyStagedError):
            repo.add("a.txt")
        assert repo.index.list() == ["a.txt"]

    def test_control_dir_rejected(self, repo: Repository):
        with pytest.raises(InvalidPathError):
            repo.add(".tracklog/HEAD")

    @pytest.mark.skipif(
        not sys.platform.startswith("linux"), reason="needs byte-string filenames"
    )
    def test_non_utf8_filename_rejected(self, repo: Repository, workdir: Path):
        name = os.fsdecode(b"\xff.txt")
        (workdir / name).write_bytes(b"x")
        with pytest.raises(InvalidPathError):
            repo.add(name)
        assert repo.index.list() == []

    def test_add_does_not_store_objects(self, repo: Repository, write_file):
        write_file("a.txt", "hello")
        repo.add("a.txt")
        assert len(repo.objects) == 0


class TestCommit:
    def test_records_staged_content(self, repo: Repository, write_file):
        write_file("a.txt", "hello")
        write_file("b.txt", "bye")
        repo.add("a.txt")
        repo.add("b.txt")
        commit = repo.commit("first")

        assert [e.filename for e in commit.files] == ["a.txt", "b.txt"]
        assert commit.hash_for("a.txt") == hash_bytes(b"hello")
        assert repo.objects.get(hash_bytes(b"bye")) == b"bye"
        assert repo.head() == commit.commit_id
        assert repo.index.list() == []
        assert not (repo.control_dir / "journal").exists()

    def test_nothing_to_commit(self, repo: Repository):
        with pytest.raises(NothingToCommitError):
            repo.commit("empty")
        assert repo.history().last is None

    def test_message_too_long(self, repo: Repository, write_file):
        write_file("a.txt", "x")
        repo.add("a.txt")
        with pytest.raises(InvalidMessageError) as exc_info:
            repo.commit("m" * 256)
        assert exc_info.value.limit == 255
        assert repo.index.list() == ["a.txt"]

    def test_message_at_limit(self, repo: Repository, write_file):
        write_file("a.txt", "x")
        repo.add("a.txt")
        assert repo.commit("m" * 255).message == "m" * 255

    def test_missing_staged_file_writes_nothing(self, repo: Repository, write_file):
        write_file("a.txt", "a")
        path = write_file("b.txt", "b")
        repo.add("a.txt")
        repo.add("b.txt")
        path.unlink()

        with pytest.raises(FileNotFoundInWorkdirError):
            repo.commit("broken")
        assert len(repo.objects) == 0
        assert repo.log.read_commits() == []
        assert repo.head() is None
        assert repo.index.list() == ["a.txt", "b.txt"]

    def test_identical_content_stored_once(self, repo: Repository, write_file):
        write_file("a.txt", "same")
        write_file("b.txt", "same")
        repo.add("a.txt")
        repo.add("b.txt")
        repo.commit("dup")
        assert len(repo.objects) == 1

    def test_same_second_ids_are_distinct(self, repo: Repository, write_file):
        ids = []
        for i in range(3):
            write_file("a.txt", f"v{i}")
            repo.add("a.txt")
            ids.append(repo.commit(f"c{i}").commit_id)
        assert len(set(ids)) == 3
        assert [c.commit_id for c in repo.history()] == ids

    def test_file_versions_follow_latest(self, repo: Repository, write_file):
        write_file("a.txt", "one")
        repo.add("a.txt")
        repo.commit("1")
        write_file("a.txt", "two")
        repo.add("a.txt")
        repo.commit("2")
        assert repo.file_versions()["a.txt"] == hash_bytes(b"two")


class TestStatus:
    def test_clean(self, repo: Repository):
        report = repo.status()
        assert report.head is None
        assert report.has_pending_changes is False
        assert report.modified == ()

    def test_new_file_has_no_diff(self, repo: Repository, write_file):
        write_file("a.txt", "hello")
        repo.add("a.txt")
        (entry,) = repo.status().staged
        assert entry.is_new
        assert entry.changes == ()
        assert entry.current_hash == hash_bytes(b"hello")

    def test_staged_change_diffed(self, repo: Repository, write_file):
        write_file("a.txt", "hello")
        repo.add("a.txt")
        repo.commit("first")
        write_file("a.txt", "world")
        repo.add("a.txt")

        (entry,) = repo.status().staged
        (change,) = entry.changes
        assert change.kind == ChangeKind.CHANGED
        assert (change.old_line, change.new_line) == ("hello", "world")

    def test_unstaged_modification_listed(self, repo: Repository, write_file):
        write_file("a.txt", "hello")
        repo.add("a.txt")
        repo.commit("first")
        write_file("a.txt", "world")

        report = repo.status()
        assert report.has_pending_changes is False
        (entry,) = report.modified
        assert entry.filename == "a.txt"
        assert len(entry.changes) == 1

    def test_missing_staged_file_reported(self, repo: Repository, write_file):
        path = write_file("a.txt", "hello")
        repo.add("a.txt")
        path.unlink()
        (entry,) = repo.status().staged
        assert entry.is_missing

    def test_missing_committed_object_reported(self, repo: Repository, write_file):
        write_file("a.txt", "hello")
        repo.add("a.txt")
        repo.commit("first")
        (repo.objects.path / hash_bytes(b"hello")).unlink()
        write_file("a.txt", "world")
        repo.add("a.txt")

        (entry,) = repo.status().staged
        assert entry.committed_object_missing is True
        assert entry.changes == ()


class TestCheckout:
    def test_restores_and_moves_head(self, repo: Repository, write_file, workdir: Path):
        write_file("a.txt", "hello")
        repo.add("a.txt")
        first = repo.commit("first")
        write_file("a.txt", "world")
        repo.add("a.txt")
        repo.commit("second")

        report = repo.checkout(first.commit_id)
        assert (workdir / "a.txt").read_text() == "hello"
        assert report.restored == ["a.txt"]
        assert repo.head() == first.commit_id

    def test_keeps_permission_bits(self, repo: Repository, write_file):
        path = write_file("run.sh", "#!/bin/sh\necho one\n")
        path.chmod(0o755)
        repo.add("run.sh")
        first = repo.commit("first")
        path.write_text("#!/bin/sh\necho two\n")

        repo.checkout(first.commit_id)
        assert path.read_text() == "#!/bin/sh\necho one\n"
        assert stat.S_IMODE(path.stat().st_mode) == 0o755

    def test_does_not_touch_index(self, repo: Repository, write_file):
        write_file("a.txt", "hello")
        repo.add("a.txt")
        first = repo.commit("first")
        write_file("b.txt", "b")
        repo.add("b.txt")
        repo.checkout(first.commit_id)
        assert repo.index.list() == ["b.txt"]

    def test_partial_checkout(self, repo: Repository, write_file, workdir: Path):
        write_file("a.txt", "alpha")
        write_file("b.txt", "beta")
        repo.add("a.txt")
        repo.add("b.txt")
        commit = repo.commit("two files")
        (repo.objects.path / hash_bytes(b"alpha")).unlink()
        write_file("b.txt", "changed")

        report = repo.checkout(commit.commit_id)
        assert report.is_partial
        assert report.restored == ["b.txt"]
        assert (workdir / "b.txt").read_text() == "beta"
        assert repo.head() == commit.commit_id

    def test_unknown_fragment(self, repo: Repository):
        with pytest.raises(CommitNotFoundError):
            repo.checkout("123")

    def test_ambiguous_fragment(self, repo: Repository, write_file):
        for i in range(2):
            write_file("a.txt", str(i))
            repo.add("a.txt")
            repo.commit(str(i))
        with pytest.raises(AmbiguousCommitError):
            repo.checkout("1")

    def test_first_match_mode(self, workdir: Path, settings: TracklogSettings, write_file):
        repo = Repository(workdir, settings=settings.model_copy(
            update={"commit_lookup": "first-match"}
        ))
        repo.init()
        for i in range(2):
            write_file("a.txt", str(i))
            repo.add("a.txt")
            repo.commit(str(i))
        first = repo.history().first
        assert repo.checkout("1").commit_id == first.commit_id
        assert (workdir / "a.txt").read_text() == "0"


class TestVerify:
    def test_clean_repository(self, repo: Repository, write_file):
        write_file("a.txt", "hello")
        repo.add("a.txt")
        repo.commit("first")
        report = repo.verify()
        assert report.ok
        assert report.commits_verified == 1
        assert report.objects_checked == 1

    def test_missing_object(self, repo: Repository, write_file):
        write_file("a.txt", "hello")
        repo.add("a.txt")
        repo.commit("first")
        (repo.objects.path / hash_bytes(b"hello")).unlink()
        report = repo.verify()
        assert not report.ok
        assert report.missing_objects == (hash_bytes(b"hello"),)
