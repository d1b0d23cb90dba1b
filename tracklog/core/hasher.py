"""Canonical hashing helpers for content addressing and log sealing.

Blobs are keyed by the SHA-256 hex digest of their raw bytes. Log records
are sealed with the digest of their canonical JSON form.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

from tracklog.core.errors import FileNotFoundInWorkdirError, UnreadableFileError

HASH_HEX_LENGTH = 64

_CHUNK_SIZE = 64 * 1024
_HEX_DIGITS = frozenset("0123456789abcdef")


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce canonical JSON bytes — deterministic, sorted, compact.

    - sorted keys
    - no whitespace separators (",", ":")
    - ensure_ascii=True
    - UTF-8 encoding
    """
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def hash_bytes(data: bytes) -> str:
    """Content identifier for a blob. Pure and deterministic."""
    return sha256_hex(data)


def hash_file(path: Path, display_name: str | None = None) -> str:
    """Hash a file's content in chunks.

    Raises ``FileNotFoundInWorkdirError`` if the file is absent and
    ``UnreadableFileError`` if it exists but cannot be read. There is no
    sentinel hash for unreadable input.
    """
    name = display_name or str(path)
    digest = hashlib.sha256()
    try:
        with open(path, "rb") as fh:
            for chunk in iter(lambda: fh.read(_CHUNK_SIZE), b""):
                digest.update(chunk)
    except FileNotFoundError as exc:
        raise FileNotFoundInWorkdirError(name) from exc
    except (IsADirectoryError, PermissionError) as exc:
        raise UnreadableFileError(name, exc.strerror or str(exc)) from exc
    except OSError as exc:
        raise UnreadableFileError(name, str(exc)) from exc
    return digest.hexdigest()


def is_object_id(value: str) -> bool:
    """Whether ``value`` looks like a blob identifier."""
    return len(value) == HASH_HEX_LENGTH and all(c in _HEX_DIGITS for c in value)


def compute_record_hash(record: dict[str, Any]) -> str:
    """SHA-256 of a log record, excluding the record_hash field itself.

    This is the seal that makes torn or edited records detectable.
    """
    d = {k: v for k, v in record.items() if k != "record_hash"}
    return sha256_hex(canonical_json_bytes(d))
