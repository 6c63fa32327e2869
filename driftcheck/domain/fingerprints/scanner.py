"""Depth-first directory scanner producing file fingerprints."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence

from .fingerprint import DEFAULT_CHUNK_SIZE, compute_file_fingerprint
from .models import FileFingerprint
from ...infra.logging import get_logger

__all__ = [
    "ScanError",
    "ScanResult",
    "ScanRootError",
    "has_ignored_prefix",
    "scan_tree",
]

logger = get_logger(__name__)


class ScanRootError(OSError):
    """The scan root itself could not be listed."""


@dataclass(frozen=True)
class ScanError:
    """A single directory or file the scan could not read."""

    path: str
    detail: str

    def __str__(self) -> str:
        return f"scan failed for {self.path}: {self.detail}"


@dataclass
class ScanResult:
    fingerprints: List[FileFingerprint] = field(default_factory=list)
    errors: List[ScanError] = field(default_factory=list)


def has_ignored_prefix(name: str, prefixes: Iterable[str]) -> bool:
    return any(name.startswith(prefix) for prefix in prefixes)


def scan_tree(
    root: str | Path,
    ignored_prefixes: Sequence[str] = (".",),
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> ScanResult:
    """Walk `root` depth-first and fingerprint every regular file.

    Directories whose name starts with one of `ignored_prefixes` are not
    descended into. Entries inside a directory are visited in name order.
    Unreadable files and unlistable subdirectories are recorded as
    `ScanError` items and the walk continues; only an unlistable root raises.
    """

    root_path = os.fspath(root)
    try:
        root_entries = _sorted_entries(root_path)
    except OSError as exc:
        raise ScanRootError(
            exc.errno, f"cannot list scan root: {exc.strerror or exc}", root_path
        ) from exc

    result = ScanResult()
    prefixes = tuple(ignored_prefixes)
    stack: List[Iterator[os.DirEntry]] = [iter(root_entries)]
    parents: List[str] = [root_path]

    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            parents.pop()
            continue

        path = os.path.normpath(os.path.join(parents[-1], entry.name))
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
            is_file = not is_dir and entry.is_file(follow_symlinks=False)
        except OSError as exc:
            _record_failure(result, path, exc)
            continue

        if is_dir:
            if has_ignored_prefix(entry.name, prefixes):
                logger.debug(
                    "scan_entry_skipped",
                    extra={"path": path, "reason": "ignored_prefix"},
                )
                continue
            try:
                children = _sorted_entries(path)
            except OSError as exc:
                _record_failure(result, path, exc)
                continue
            stack.append(iter(children))
            parents.append(path)
            continue

        if not is_file:
            logger.debug(
                "scan_entry_skipped",
                extra={"path": path, "reason": "not_regular_file"},
            )
            continue

        try:
            result.fingerprints.append(
                compute_file_fingerprint(path, chunk_size=chunk_size)
            )
        except OSError as exc:
            _record_failure(result, path, exc)

    return result


def _sorted_entries(directory: str) -> List[os.DirEntry]:
    with os.scandir(directory) as entries:
        return sorted(entries, key=lambda entry: entry.name)


def _record_failure(result: ScanResult, path: str, exc: OSError) -> None:
    detail = exc.strerror or str(exc)
    result.errors.append(ScanError(path=path, detail=detail))
    logger.warning("scan_entry_failed", extra={"path": path, "error": detail})
