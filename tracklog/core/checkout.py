"""Checkout/restore engine.

Resolves an identifier fragment to one commit, then rewrites every file
recorded in that commit from the object store. A missing object skips
that one file and is reported; it never aborts the other restores.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from tracklog.core.errors import (
    AmbiguousCommitError,
    CommitNotFoundError,
    ObjectNotFoundError,
    UnknownLookupModeError,
)
from tracklog.core.object_store import ObjectStore
from tracklog.core.workdir import WorkingTree
from tracklog.models.commit import Commit
from tracklog.models.reports import CheckoutReport, FileRestore, RestoreOutcome

logger = logging.getLogger(__name__)

LOOKUP_UNIQUE = "unique"
LOOKUP_FIRST_MATCH = "first-match"


def resolve_commit(
    commits: Iterable[Commit], fragment: str, mode: str = LOOKUP_UNIQUE
) -> Commit:
    """Find the commit ``fragment`` refers to.

    ``unique``: an exact identifier wins; otherwise exactly one identifier
    must start with the fragment. ``first-match``: the earliest commit in
    log order whose identifier contains the fragment.
    """
    if not fragment:
        raise CommitNotFoundError(fragment)

    if mode == LOOKUP_FIRST_MATCH:
        for commit in commits:
            if fragment in commit.commit_id:
                return commit
        raise CommitNotFoundError(fragment)

    if mode != LOOKUP_UNIQUE:
        raise UnknownLookupModeError(mode)

    candidates: list[Commit] = []
    for commit in commits:
        if commit.commit_id == fragment:
            return commit
        if commit.commit_id.startswith(fragment):
            candidates.append(commit)

    if not candidates:
        raise CommitNotFoundError(fragment)
    if len(candidates) > 1:
        raise AmbiguousCommitError(fragment, [c.commit_id for c in candidates])
    return candidates[0]


def restore_commit(
    commit: Commit, store: ObjectStore, tree: WorkingTree, *, fragment: str = ""
) -> CheckoutReport:
    """Overwrite the working files recorded in ``commit``."""
    results: list[FileRestore] = []
    for entry in commit.files:
        try:
            data = store.get(entry.content_hash)
        except ObjectNotFoundError:
            logger.warning(
                "Object %s for %s not found; skipping restore",
                entry.content_hash, entry.filename,
            )
            results.append(FileRestore(
                filename=entry.filename,
                content_hash=entry.content_hash,
                outcome=RestoreOutcome.MISSING_OBJECT,
            ))
            continue

        tree.write(entry.filename, data)
        results.append(FileRestore(
            filename=entry.filename,
            content_hash=entry.content_hash,
            outcome=RestoreOutcome.RESTORED,
        ))

    return CheckoutReport(
        commit_id=commit.commit_id,
        fragment=fragment or commit.commit_id,
        files=tuple(results),
    )
