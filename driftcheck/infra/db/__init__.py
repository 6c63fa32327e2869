"""Database connection helpers for the local fingerprint store."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

__all__ = ["SQLITE_URL_TEMPLATE", "build_sqlite_engine", "sqlite_url_for"]

SQLITE_URL_TEMPLATE = "sqlite+pysqlite:///{path}"


def sqlite_url_for(db_file: str | Path) -> str:
    return SQLITE_URL_TEMPLATE.format(path=Path(db_file).as_posix())


def build_sqlite_engine(db_file: str | Path) -> Engine:
    """Create an engine bound to a SQLite file; the parent directory must exist."""

    return create_engine(sqlite_url_for(db_file), echo=False, future=True)
