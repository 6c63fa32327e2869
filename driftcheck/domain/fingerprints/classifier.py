"""Classification of fresh fingerprints against the persisted baseline.

Every fresh fingerprint ends up in exactly one bucket of the
`ClassificationResult`:

* ``hits``: no stored record exists, or the stored checksum matches;
* ``misses``: the checksums differ; `Miss.reason` tells which side is newer;
* ``errors``: the stored record could not be read or decoded.

The classifier only reads from the store. Writes for `MissReason.PASSED_NEWER`
misses are left to the caller (see `ClassificationResult.pending_writes`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Union

from .models import FileFingerprint, FingerprintDecodeError, decode_fingerprint
from .store import FingerprintReader, StoreError
from ...infra.logging import get_logger

__all__ = [
    "ClassificationError",
    "ClassificationResult",
    "ErrorKind",
    "Hit",
    "Miss",
    "MissReason",
    "Outcome",
    "classify",
    "classify_one",
]

logger = get_logger(__name__)


class MissReason(str, Enum):
    PASSED_NEWER = "passed_newer"
    STORED_NEWER = "stored_newer"


class ErrorKind(str, Enum):
    STORE_READ = "store_read"
    RECORD_DECODE = "record_decode"


@dataclass(frozen=True)
class Hit:
    fingerprint: FileFingerprint

    @property
    def path(self) -> str:
        return self.fingerprint.path


@dataclass(frozen=True)
class Miss:
    """Stored and fresh checksums differ for the same path."""

    fresh: FileFingerprint
    stored: FileFingerprint

    @property
    def path(self) -> str:
        return self.fresh.path

    @property
    def reason(self) -> MissReason:
        # Equal timestamps favour the fresh observation.
        if self.fresh.mod_time < self.stored.mod_time:
            return MissReason.STORED_NEWER
        return MissReason.PASSED_NEWER


@dataclass(frozen=True)
class ClassificationError:
    path: str
    kind: ErrorKind
    detail: str

    def __str__(self) -> str:
        return f"{self.kind.value} error for {self.path}: {self.detail}"


Outcome = Union[Hit, Miss, ClassificationError]


@dataclass
class ClassificationResult:
    hits: List[FileFingerprint] = field(default_factory=list)
    misses: List[Miss] = field(default_factory=list)
    errors: List[ClassificationError] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.hits) + len(self.misses) + len(self.errors)

    def add(self, outcome: Outcome) -> None:
        if isinstance(outcome, Hit):
            self.hits.append(outcome.fingerprint)
        elif isinstance(outcome, Miss):
            self.misses.append(outcome)
        elif isinstance(outcome, ClassificationError):
            self.errors.append(outcome)
        else:
            raise TypeError(f"unknown classification outcome: {outcome!r}")

    def misses_by_reason(self, reason: MissReason) -> List[Miss]:
        return [miss for miss in self.misses if miss.reason is reason]

    @property
    def pending_writes(self) -> List[FileFingerprint]:
        """Fresh fingerprints that should replace their stored baseline."""

        return [miss.fresh for miss in self.misses_by_reason(MissReason.PASSED_NEWER)]


def classify_one(fresh: FileFingerprint, store: FingerprintReader) -> Outcome:
    """Classify a single fresh fingerprint against the store."""

    try:
        stored_raw = _lookup(store, fresh.path)
    except StoreError as exc:
        logger.warning(
            "classifier_store_read_failed",
            extra={"path": fresh.path, "error": str(exc)},
        )
        return ClassificationError(fresh.path, ErrorKind.STORE_READ, str(exc))

    if stored_raw is None:
        return Hit(fresh)

    try:
        stored = decode_fingerprint(stored_raw)
    except FingerprintDecodeError as exc:
        logger.warning(
            "classifier_record_decode_failed",
            extra={"path": fresh.path, "error": str(exc)},
        )
        return ClassificationError(fresh.path, ErrorKind.RECORD_DECODE, str(exc))

    if stored.checksum == fresh.checksum:
        return Hit(fresh)
    return Miss(fresh=fresh, stored=stored)


def classify(
    fresh: Iterable[FileFingerprint], store: FingerprintReader
) -> ClassificationResult:
    """Partition fresh fingerprints into hits, misses and errors, in input order."""

    result = ClassificationResult()
    for fingerprint in fresh:
        result.add(classify_one(fingerprint, store))
    return result


def _lookup(store: FingerprintReader, key: str) -> Optional[bytes]:
    if not store.has(key):
        return None
    return store.get(key)
