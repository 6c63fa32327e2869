"""Fingerprint store implementations.

The store is a durable key-value mapping from file path to the encoded
fingerprint last accepted for that path. Every I/O failure surfaces as
`StoreError` so callers can tell store trouble apart from bad input.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional, Protocol

from sqlalchemy import (
    Column,
    LargeBinary,
    MetaData,
    Table,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ...config.loader import DEFAULT_STORE_FILENAME
from ...infra.db import build_sqlite_engine
from ...infra.logging import get_logger

__all__ = [
    "FingerprintReader",
    "FingerprintStore",
    "InMemoryFingerprintStore",
    "SqlFingerprintStore",
    "StoreError",
    "StoreOpenError",
    "build_fingerprints_table",
    "open_fingerprint_store",
]

logger = get_logger(__name__)


class StoreError(Exception):
    """An I/O failure while talking to the fingerprint store."""


class StoreOpenError(StoreError):
    """The store could not be opened or initialized."""


class FingerprintReader(Protocol):  # pragma: no cover - structural typing hook
    """Read access the classifier needs."""

    def has(self, key: str) -> bool: ...

    def get(self, key: str) -> bytes: ...


class FingerprintStore(FingerprintReader, Protocol):  # pragma: no cover
    """Read/write access used by the change detector."""

    def put(self, key: str, value: bytes) -> None: ...


class InMemoryFingerprintStore(FingerprintStore):
    """Dict-backed store used for tests and dry runs."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None) -> None:
        self._records: Dict[str, bytes] = dict(initial or {})

    def has(self, key: str) -> bool:
        return key in self._records

    def get(self, key: str) -> bytes:
        return self._records[key]

    def put(self, key: str, value: bytes) -> None:
        self._records[key] = bytes(value)

    def __len__(self) -> int:
        return len(self._records)


def _storage_key(key: str) -> bytes:
    # Undecodable names arrive surrogate-escaped; fsencode restores the raw bytes.
    return os.fsencode(key)


def build_fingerprints_table(metadata: MetaData) -> Table:
    return Table(
        "fingerprints",
        metadata,
        Column("key", LargeBinary(), primary_key=True),
        Column("value", LargeBinary(), nullable=False),
    )


class SqlFingerprintStore(FingerprintStore):
    """SQLAlchemy-backed store persisting records in a single key/value table."""

    def __init__(
        self,
        engine: Engine,
        *,
        table: Optional[Table] = None,
    ) -> None:
        self._engine = engine
        if table is not None:
            self._records = table
            self._metadata = table.metadata
        else:
            self._metadata = MetaData()
            self._records = build_fingerprints_table(self._metadata)

    def create_schema(self) -> None:
        try:
            self._metadata.create_all(self._engine)
        except SQLAlchemyError as exc:
            raise StoreOpenError(f"failed to initialize fingerprint table: {exc}") from exc

    def has(self, key: str) -> bool:
        stmt = (
            select(self._records.c.key)
            .where(self._records.c.key == _storage_key(key))
            .limit(1)
        )
        try:
            with self._engine.begin() as conn:
                row = conn.execute(stmt).first()
        except SQLAlchemyError as exc:
            raise StoreError(f"lookup failed for {key}: {exc}") from exc
        return row is not None

    def get(self, key: str) -> bytes:
        stmt = select(self._records.c.value).where(
            self._records.c.key == _storage_key(key)
        )
        try:
            with self._engine.begin() as conn:
                row = conn.execute(stmt).first()
        except SQLAlchemyError as exc:
            raise StoreError(f"read failed for {key}: {exc}") from exc
        if row is None:
            raise KeyError(key)
        return bytes(row[0])

    def put(self, key: str, value: bytes) -> None:
        raw_key = _storage_key(key)
        update_stmt = (
            update(self._records)
            .where(self._records.c.key == raw_key)
            .values(value=value)
        )
        try:
            with self._engine.begin() as conn:
                updated = conn.execute(update_stmt).rowcount
                if not updated:
                    conn.execute(insert(self._records).values(key=raw_key, value=value))
        except SQLAlchemyError as exc:
            raise StoreError(f"write failed for {key}: {exc}") from exc

    def close(self) -> None:
        self._engine.dispose()


@contextmanager
def open_fingerprint_store(
    store_dir: str | Path,
    *,
    filename: str = DEFAULT_STORE_FILENAME,
) -> Iterator[SqlFingerprintStore]:
    """Open the on-disk store for the duration of a run.

    `store_dir` is created if absent. The engine is disposed on every exit path.
    """

    directory = Path(store_dir).expanduser()
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StoreOpenError(f"cannot create store directory {directory}: {exc}") from exc
    if not directory.is_dir():
        raise StoreOpenError(f"store path {directory} is not a directory")

    db_file = directory / filename
    try:
        engine = build_sqlite_engine(db_file)
    except SQLAlchemyError as exc:
        raise StoreOpenError(f"cannot open store {db_file}: {exc}") from exc

    store = SqlFingerprintStore(engine)
    try:
        store.create_schema()
        logger.info("store_opened", extra={"store_file": str(db_file)})
        yield store
    finally:
        store.close()
        logger.info("store_closed", extra={"store_file": str(db_file)})
