"""Run orchestration: scan, classify, persist accepted updates."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence

from .classifier import ClassificationResult, MissReason, classify
from .fingerprint import DEFAULT_CHUNK_SIZE
from .models import encode_fingerprint
from .scanner import ScanResult, scan_tree
from .store import FingerprintStore, StoreError
from ...infra.logging import get_logger
from ...infra.metrics import MetricsClient, get_metrics_client

__all__ = ["ChangeDetector", "PersistError", "RunReport", "run_detection_once"]

logger = get_logger(__name__)


@dataclass(frozen=True)
class PersistError:
    path: str
    detail: str

    def __str__(self) -> str:
        return f"persist failed for {self.path}: {self.detail}"


@dataclass
class RunReport:
    """Everything a single detection run observed and changed."""

    scan: ScanResult
    classification: ClassificationResult
    persisted: List[str] = field(default_factory=list)
    persist_errors: List[PersistError] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return (
            len(self.scan.errors)
            + len(self.classification.errors)
            + len(self.persist_errors)
        )


@dataclass
class ChangeDetector:
    """Coordinates one change-detection pass over a directory tree."""

    store: FingerprintStore
    metrics: MetricsClient = field(default_factory=get_metrics_client)
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def run(
        self, root: str | Path = ".", ignored_prefixes: Sequence[str] = (".",)
    ) -> RunReport:
        scan = scan_tree(root, ignored_prefixes, chunk_size=self.chunk_size)
        self.metrics.gauge("fingerprints_scanned", len(scan.fingerprints))
        self.metrics.increment("fingerprints_scan_failed", len(scan.errors))

        classification = classify(scan.fingerprints, self.store)
        report = RunReport(scan=scan, classification=classification)
        self._record_classification_metrics(classification)

        for miss in classification.misses_by_reason(MissReason.STORED_NEWER):
            logger.warning(
                "detector_time_regression",
                extra={
                    "path": miss.path,
                    "stored_checksum": miss.stored.checksum,
                    "stored_mod_time": miss.stored.mod_time,
                    "fresh_mod_time": miss.fresh.mod_time,
                },
            )

        for fresh in classification.pending_writes:
            try:
                self.store.put(fresh.path, encode_fingerprint(fresh))
            except StoreError as exc:
                report.persist_errors.append(PersistError(fresh.path, str(exc)))
                self.metrics.increment("fingerprints_persist_failed")
                logger.error(
                    "detector_persist_failed",
                    extra={"path": fresh.path, "error": str(exc)},
                )
                continue
            report.persisted.append(fresh.path)
            self.metrics.increment("fingerprints_persisted")
            logger.info(
                "detector_fingerprint_persisted",
                extra={"path": fresh.path, "checksum": fresh.checksum},
            )

        logger.info(
            "detector_run_completed",
            extra={
                "scanned": len(scan.fingerprints),
                "hits": len(classification.hits),
                "misses": len(classification.misses),
                "errors": report.error_count,
                "persisted": len(report.persisted),
            },
        )
        return report

    def _record_classification_metrics(self, result: ClassificationResult) -> None:
        self.metrics.increment("fingerprints_hit", len(result.hits))
        self.metrics.increment(
            "fingerprints_miss_passed_newer",
            len(result.misses_by_reason(MissReason.PASSED_NEWER)),
        )
        self.metrics.increment(
            "fingerprints_miss_stored_newer",
            len(result.misses_by_reason(MissReason.STORED_NEWER)),
        )
        self.metrics.increment("fingerprints_error", len(result.errors))


def run_detection_once(
    store: FingerprintStore,
    root: str | Path = ".",
    ignored_prefixes: Sequence[str] = (".",),
    *,
    metrics: MetricsClient | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> RunReport:
    """Execute a single detection pass against an already opened store."""

    detector = ChangeDetector(
        store=store,
        metrics=metrics or get_metrics_client(),
        chunk_size=chunk_size,
    )
    return detector.run(root, ignored_prefixes)
