"""Fingerprint data model and the persisted record codec."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass

__all__ = [
    "FileFingerprint",
    "FingerprintDecodeError",
    "decode_fingerprint",
    "encode_fingerprint",
]

_RECORD_FIELDS = ("path", "checksum", "mod_time")


class FingerprintDecodeError(ValueError):
    """Raised when persisted bytes do not describe a valid fingerprint."""


@dataclass(frozen=True)
class FileFingerprint:
    """One file's observed state: path, content digest and mtime in nanoseconds."""

    path: str
    checksum: str
    mod_time: int


def encode_fingerprint(fingerprint: FileFingerprint) -> bytes:
    """Serialize a fingerprint into the stored record format (UTF-8 JSON)."""

    return json.dumps(asdict(fingerprint), sort_keys=True).encode("utf-8")


def decode_fingerprint(raw: bytes) -> FileFingerprint:
    """Parse a stored record back into a `FileFingerprint`."""

    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise FingerprintDecodeError(f"stored record is not valid JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise FingerprintDecodeError("stored record must be a JSON object")
    missing = [name for name in _RECORD_FIELDS if name not in payload]
    if missing:
        raise FingerprintDecodeError(f"stored record is missing fields: {missing}")

    path, checksum, mod_time = (payload[name] for name in _RECORD_FIELDS)
    if not isinstance(path, str) or not isinstance(checksum, str):
        raise FingerprintDecodeError("stored path and checksum must be strings")
    # bool is an int subclass; reject it explicitly.
    if not isinstance(mod_time, int) or isinstance(mod_time, bool):
        raise FingerprintDecodeError("stored mod_time must be an integer")
    return FileFingerprint(path=path, checksum=checksum, mod_time=mod_time)
