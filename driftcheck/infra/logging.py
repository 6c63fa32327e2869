"""Structured logging helpers shared across driftcheck modules.

Call sites log a stable event name as the message and attach context through
``extra=``. The formatter installed by :func:`configure_logging` renders those
extra fields as ``key=value`` pairs after the event name.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

__all__ = ["StructuredFormatter", "configure_logging", "get_logger"]

ROOT_LOGGER_NAME = "driftcheck"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Attributes every LogRecord carries; anything else arrived through `extra=`.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


class StructuredFormatter(logging.Formatter):
    """Append `extra` fields to the rendered message."""

    def format(self, record: logging.LogRecord) -> str:
        rendered = super().format(record)
        fields = {
            key: value
            for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        if not fields:
            return rendered
        pairs = " ".join(f"{key}={_render_value(value)}" for key, value in fields.items())
        return f"{rendered} {pairs}"


def _render_value(value: Any) -> str:
    text = str(value)
    if not text or any(ch.isspace() for ch in text):
        return repr(text)
    return text


def get_logger(name: str) -> logging.Logger:
    """Return a stdlib logger for the given module name."""

    return logging.getLogger(name)


def configure_logging(level: str | int = "INFO", stream: TextIO | None = None) -> logging.Logger:
    """Install a single structured handler on the package logger."""

    root = logging.getLogger(ROOT_LOGGER_NAME)
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level!r}")
        level = resolved
    root.setLevel(level)
    for handler in list(root.handlers):
        if getattr(handler, "_driftcheck_handler", False):
            root.removeHandler(handler)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter(DEFAULT_FORMAT))
    handler._driftcheck_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.propagate = False
    return root
