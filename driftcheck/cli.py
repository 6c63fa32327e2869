"""Command-line entry point: detect changed files under the working directory."""

from __future__ import annotations

import os
import sys

from .config import load_settings
from .domain.fingerprints.detector import run_detection_once
from .domain.fingerprints.reporting import render_report
from .domain.fingerprints.scanner import ScanRootError
from .domain.fingerprints.store import StoreOpenError, open_fingerprint_store
from .infra.logging import configure_logging, get_logger
from .infra.metrics import get_metrics_client

__all__ = ["main"]

logger = get_logger(__name__)


def main() -> int:
    try:
        workdir = os.getcwd()
    except OSError as exc:
        configure_logging()
        logger.critical("cli_fatal_error", extra={"stage": "workdir", "error": str(exc)})
        return 1

    try:
        settings = load_settings()
        configure_logging(settings.logging.level)
    except (RuntimeError, ValueError) as exc:
        configure_logging()
        logger.critical("cli_fatal_error", extra={"stage": "config", "error": str(exc)})
        return 1
    logger.debug(
        "cli_started",
        extra={"workdir": workdir, "store_dir": str(settings.store_dir)},
    )

    try:
        with open_fingerprint_store(
            settings.store_dir, filename=settings.store.filename
        ) as store:
            report = run_detection_once(
                store,
                settings.scan.root,
                settings.scan.ignored_prefixes,
                metrics=get_metrics_client(),
                chunk_size=settings.scan.chunk_size,
            )
    except StoreOpenError as exc:
        logger.critical("cli_fatal_error", extra={"stage": "store", "error": str(exc)})
        return 1
    except ScanRootError as exc:
        logger.critical("cli_fatal_error", extra={"stage": "scan", "error": str(exc)})
        return 1

    render_report(report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
