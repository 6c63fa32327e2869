"""Fingerprint change-detection domain package."""

from .classifier import (
    ClassificationError,
    ClassificationResult,
    ErrorKind,
    Hit,
    Miss,
    MissReason,
    classify,
)
from .detector import ChangeDetector, PersistError, RunReport, run_detection_once
from .models import (
    FileFingerprint,
    FingerprintDecodeError,
    decode_fingerprint,
    encode_fingerprint,
)
from .scanner import ScanError, ScanResult, ScanRootError, scan_tree
from .store import (
    InMemoryFingerprintStore,
    SqlFingerprintStore,
    StoreError,
    StoreOpenError,
    open_fingerprint_store,
)

__all__ = [
    "ChangeDetector",
    "ClassificationError",
    "ClassificationResult",
    "ErrorKind",
    "FileFingerprint",
    "FingerprintDecodeError",
    "Hit",
    "InMemoryFingerprintStore",
    "Miss",
    "MissReason",
    "PersistError",
    "RunReport",
    "ScanError",
    "ScanResult",
    "ScanRootError",
    "SqlFingerprintStore",
    "StoreError",
    "StoreOpenError",
    "classify",
    "decode_fingerprint",
    "encode_fingerprint",
    "open_fingerprint_store",
    "run_detection_once",
    "scan_tree",
]
