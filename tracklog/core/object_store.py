"""Content-addressed, write-once blob store.

Storage layout: {objects_dir}/{sha256}
No update or delete method — blobs are immutable once stored.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from tracklog.core.atomic import atomic_write_bytes, read_bytes
from tracklog.core.errors import ObjectIntegrityError, ObjectNotFoundError
from tracklog.core.hasher import hash_bytes, is_object_id

logger = logging.getLogger(__name__)


class ObjectStore:
    """SHA-256 keyed, immutable blob store.

    Every blob is stored under its SHA-256 digest. Storing the same
    content twice is a no-op (idempotent). There is no update or delete.

    Parameters
    ----------
    objects_dir:
        Directory holding one file per stored blob.
    fsync:
        Whether new objects are fsynced before being renamed into place.
    """

    def __init__(self, objects_dir: Path, *, fsync: bool = True) -> None:
        self._dir = Path(objects_dir)
        self._fsync = fsync

    @property
    def path(self) -> Path:
        return self._dir

    def _object_path(self, object_id: str) -> Path:
        if not is_object_id(object_id):
            raise ObjectNotFoundError(object_id)
        return self._dir / object_id

    # ------------------------------------------------------------------
    # Store
    # ------------------------------------------------------------------

    def put(self, data: bytes, object_id: str | None = None) -> str:
        """Store ``data`` and return its identifier.

        If ``object_id`` is given it must equal the hash of ``data``.
        If an object with that identifier already exists the write is a
        no-op.
        """
        digest = hash_bytes(data)
        if object_id is not None and object_id != digest:
            raise ObjectIntegrityError(object_id)

        path = self._dir / digest
        if path.exists():
            logger.debug("Object %s already stored; skipping write", digest)
            return digest

        atomic_write_bytes(path, data, fsync=self._fsync)
        logger.debug("Stored object %s (%d bytes)", digest, len(data))
        return digest

    # ------------------------------------------------------------------
    # Retrieve
    # ------------------------------------------------------------------

    def get(self, object_id: str) -> bytes:
        """Return the bytes stored under ``object_id``.

        Raises ``ObjectNotFoundError`` if absent.
        """
        path = self._object_path(object_id)
        if not path.is_file():
            raise ObjectNotFoundError(object_id)
        return read_bytes(path)

    # ------------------------------------------------------------------
    # Check and verify
    # ------------------------------------------------------------------

    def exists(self, object_id: str) -> bool:
        """Check if an object exists in the store."""
        return is_object_id(object_id) and (self._dir / object_id).is_file()

    def verify(self, object_id: str) -> bool:
        """Re-hash stored data and compare against its identifier.

        Returns True if the stored bytes match the expected hash.
        """
        if not self.exists(object_id):
            return False
        return hash_bytes(read_bytes(self._dir / object_id)) == object_id

    def iter_ids(self) -> Iterator[str]:
        """Yield the identifiers of all stored objects, sorted."""
        if not self._dir.is_dir():
            return
        for entry in sorted(self._dir.iterdir()):
            if entry.is_file() and is_object_id(entry.name):
                yield entry.name

    def __contains__(self, object_id: object) -> bool:
        return isinstance(object_id, str) and self.exists(object_id)

    def __len__(self) -> int:
        return sum(1 for _ in self.iter_ids())
