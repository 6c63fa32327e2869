"""Tests for the depth-first fingerprint scanner."""

import hashlib
import os

import pytest

from driftcheck.domain.fingerprints import scanner
from driftcheck.domain.fingerprints.scanner import (
    ScanRootError,
    has_ignored_prefix,
    scan_tree,
)
from tests.helpers.logging import RecordingLogger, assert_extra_contains, find_log

pytestmark = [pytest.mark.scanner]


def _write(path, content: bytes = b"data"):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


def test_scan_tree_visits_entries_depth_first_in_name_order(tmp_path):
    _write(tmp_path / "b.txt")
    _write(tmp_path / "a" / "z.txt")
    _write(tmp_path / "a" / "inner" / "y.txt")
    _write(tmp_path / "c" / "x.txt")

    result = scan_tree(tmp_path, ignored_prefixes=())

    relative = [os.path.relpath(fp.path, tmp_path) for fp in result.fingerprints]
    assert relative == [
        os.path.join("a", "inner", "y.txt"),
        os.path.join("a", "z.txt"),
        "b.txt",
        os.path.join("c", "x.txt"),
    ]
    assert result.errors == []


def test_scan_tree_skips_directories_with_ignored_prefix(tmp_path):
    _write(tmp_path / ".save" / "level.db" / "fingerprints.sqlite3")
    _write(tmp_path / "_build" / "out.o")
    _write(tmp_path / "src" / "main.py", b"print('hi')")

    result = scan_tree(tmp_path, ignored_prefixes=(".", "_"))

    assert [os.path.relpath(fp.path, tmp_path) for fp in result.fingerprints] == [
        os.path.join("src", "main.py")
    ]
    assert result.fingerprints[0].checksum == hashlib.sha256(b"print('hi')").hexdigest()


def test_scan_tree_still_hashes_files_with_ignored_prefix(tmp_path):
    _write(tmp_path / ".env", b"SECRET=1")

    result = scan_tree(tmp_path, ignored_prefixes=(".",))

    assert [os.path.basename(fp.path) for fp in result.fingerprints] == [".env"]


def test_scan_tree_relative_root_yields_clean_paths(tmp_path, monkeypatch):
    _write(tmp_path / "a.txt")
    _write(tmp_path / "sub" / "b.txt")
    monkeypatch.chdir(tmp_path)

    result = scan_tree(".", ignored_prefixes=(".",))

    assert [fp.path for fp in result.fingerprints] == [
        "a.txt",
        os.path.join("sub", "b.txt"),
    ]


def test_scan_tree_collects_unreadable_files_and_continues(tmp_path, monkeypatch):
    _write(tmp_path / "bad.txt")
    _write(tmp_path / "good.txt")
    original = scanner.compute_file_fingerprint

    def flaky(path, *, chunk_size):
        if path.endswith("bad.txt"):
            raise PermissionError(13, "Permission denied", path)
        return original(path, chunk_size=chunk_size)

    log = RecordingLogger()
    monkeypatch.setattr(scanner, "compute_file_fingerprint", flaky)
    monkeypatch.setattr(scanner, "logger", log)

    result = scan_tree(tmp_path, ignored_prefixes=())

    assert [os.path.basename(fp.path) for fp in result.fingerprints] == ["good.txt"]
    assert len(result.errors) == 1
    assert result.errors[0].path.endswith("bad.txt")
    assert result.errors[0].detail == "Permission denied"
    record = find_log(log.records, level="warning", event="scan_entry_failed")
    assert_extra_contains(record, path=result.errors[0].path)


def test_scan_tree_collects_unlistable_subdirectories(tmp_path, monkeypatch):
    _write(tmp_path / "locked" / "secret.txt")
    _write(tmp_path / "open" / "visible.txt")
    original = scanner._sorted_entries

    def guarded(directory):
        if directory.endswith("locked"):
            raise PermissionError(13, "Permission denied", directory)
        return original(directory)

    monkeypatch.setattr(scanner, "_sorted_entries", guarded)

    result = scan_tree(tmp_path, ignored_prefixes=())

    assert [os.path.basename(fp.path) for fp in result.fingerprints] == ["visible.txt"]
    assert [os.path.basename(err.path) for err in result.errors] == ["locked"]


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
def test_scan_tree_skips_symlinks(tmp_path):
    target = _write(tmp_path / "real.txt")
    try:
        os.symlink(target, tmp_path / "link.txt")
    except OSError:
        pytest.skip("symlink creation not permitted")

    result = scan_tree(tmp_path, ignored_prefixes=())

    assert [os.path.basename(fp.path) for fp in result.fingerprints] == ["real.txt"]


def test_scan_tree_raises_when_root_is_missing(tmp_path):
    with pytest.raises(ScanRootError):
        scan_tree(tmp_path / "missing")


def test_has_ignored_prefix():
    assert has_ignored_prefix(".git", (".",))
    assert has_ignored_prefix("node_modules", (".", "node_"))
    assert not has_ignored_prefix("src", (".",))
    assert not has_ignored_prefix(".git", ())


def test_scan_tree_keeps_files_whose_names_are_not_valid_utf8(tmp_path):
    raw_name = b"bad\xff.txt"
    try:
        with open(os.path.join(os.fsencode(tmp_path), raw_name), "wb") as handle:
            handle.write(b"raw bytes")
    except OSError:
        pytest.skip("filesystem rejects names that are not valid UTF-8")
    _write(tmp_path / "good.txt", b"good")

    result = scan_tree(tmp_path, ignored_prefixes=())

    names = sorted(os.fsencode(os.path.basename(fp.path)) for fp in result.fingerprints)
    assert names == [raw_name, b"good.txt"]
    odd = next(fp for fp in result.fingerprints if os.fsencode(fp.path).endswith(raw_name))
    assert odd.checksum == hashlib.sha256(b"raw bytes").hexdigest()
    assert result.errors == []
