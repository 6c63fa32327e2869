"""Plain-text rendering of a detection run for a human operator."""

from __future__ import annotations

import sys
from typing import TextIO

from .classifier import MissReason
from .detector import RunReport

__all__ = ["render_report"]


def render_report(report: RunReport, stream: TextIO | None = None) -> None:
    out = stream or sys.stdout
    result = report.classification

    def emit(line: str) -> None:
        print(_printable(line), file=out)

    emit("Hits")
    for hit in result.hits:
        emit(f"  {hit.path} {hit.checksum}")

    emit("Misses")
    for miss in result.misses:
        if miss.reason is MissReason.PASSED_NEWER:
            emit(f"  Need Update {miss.fresh.path} {miss.fresh.checksum}")
        else:
            emit(f"  Time regression {miss.stored.path} {miss.stored.checksum}")

    emit("Errors")
    for error in (*report.scan.errors, *result.errors, *report.persist_errors):
        emit(f"  {error}")

    emit(
        f"{len(result.hits)} unchanged, {len(result.misses)} changed, "
        f"{report.error_count} errors, {len(report.persisted)} updated"
    )


def _printable(line: str) -> str:
    # Undecodable file names carry lone surrogates that strict encoders reject.
    return line.encode("utf-8", "backslashreplace").decode("utf-8")
