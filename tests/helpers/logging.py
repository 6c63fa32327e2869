"""Test helpers for asserting on structured log events."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

LogRecord = Dict[str, Any]


class RecordingLogger:
    """Stand-in for a module logger that keeps every call for inspection."""

    def __init__(self) -> None:
        self.records: List[LogRecord] = []

    def _record(self, level: str, event: str, *args: Any, **kwargs: Any) -> None:
        self.records.append(
            {
                "level": level,
                "event": event,
                "args": args,
                "extra": dict(kwargs.get("extra") or {}),
            }
        )

    def debug(self, event: str, *args: Any, **kwargs: Any) -> None:
        self._record("debug", event, *args, **kwargs)

    def info(self, event: str, *args: Any, **kwargs: Any) -> None:
        self._record("info", event, *args, **kwargs)

    def warning(self, event: str, *args: Any, **kwargs: Any) -> None:
        self._record("warning", event, *args, **kwargs)

    def error(self, event: str, *args: Any, **kwargs: Any) -> None:
        self._record("error", event, *args, **kwargs)

    def critical(self, event: str, *args: Any, **kwargs: Any) -> None:
        self._record("critical", event, *args, **kwargs)


def find_logs(records: Iterable[LogRecord], *, level: str, event: str) -> List[LogRecord]:
    return [
        record
        for record in records
        if record["level"] == level and record["event"] == event
    ]


def find_log(records: Iterable[LogRecord], *, level: str, event: str) -> LogRecord:
    matches = find_logs(records, level=level, event=event)
    if not matches:
        raise AssertionError(f"Log event '{event}' at level '{level}' not recorded")
    return matches[0]


def assert_extra_contains(record: LogRecord, **expected: Any) -> None:
    extra = record.get("extra") or {}
    for key, value in expected.items():
        assert extra.get(key) == value, (
            f"Expected extra['{key}'] == {value!r}, found {extra.get(key)!r}"
        )
