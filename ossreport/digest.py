"""Content digests for scanned files."""

from __future__ import annotations

import hashlib
from pathlib import Path

_CHUNK_SIZE = 64 * 1024


def file_digest(path: Path) -> str:
    """Return the SHA-1 hex digest of the full byte content of *path*.

    Raises :class:`OSError` if the file cannot be read.
    """
    sha = hashlib.sha1()
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(_CHUNK_SIZE), b""):
            sha.update(chunk)
    return sha.hexdigest()
