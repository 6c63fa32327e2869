"""Content fingerprinting for scanned files.

The checksum covers the complete file bytes, so timestamp-only changes leave it
untouched; the modification time is recorded alongside it so the classifier can
decide which side of a mismatch is newer.
"""

from __future__ import annotations

import hashlib
import os
from pathlib import Path

from .models import FileFingerprint

DEFAULT_CHUNK_SIZE = 1024 * 1024


def compute_file_fingerprint(
    path: str | Path, *, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> FileFingerprint:
    """Hash the file in chunks and capture its mtime from the open handle."""

    hasher = hashlib.sha256()
    with open(path, "rb") as handle:
        mod_time = os.fstat(handle.fileno()).st_mtime_ns
        for chunk in iter(lambda: handle.read(chunk_size), b""):
            hasher.update(chunk)
    return FileFingerprint(
        path=os.fspath(path),
        checksum=hasher.hexdigest(),
        mod_time=mod_time,
    )
