"""Vector store: durable mapping from chunk path to text + embedding.

One long-lived SQLite connection per instance, owned exclusively by the
store. Every public method takes the instance lock, so the store can be
shared between threads; a bulk upsert commits once, so concurrent readers
see either the whole batch or none of it.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path

from semindex.db.connection import Database
from semindex.db.migrations import run_migrations
from semindex.db.models import DocumentRecord
from semindex.errors import ClosedStoreError, CorruptRecordError, PersistenceError

logger = logging.getLogger(__name__)

_UPSERT_SQL = """
INSERT INTO documents (name, path, content, embedding, indexed_at)
VALUES (?, ?, ?, ?, ?)
ON CONFLICT(path) DO UPDATE SET
    name = excluded.name,
    content = excluded.content,
    embedding = excluded.embedding,
    indexed_at = excluded.indexed_at
"""


def _now_iso() -> str:
    """UTC timestamp in ISO-8601 with millisecond precision, ``Z`` suffix."""
    stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


class VectorStore:
    """SQLite-backed store of DocumentRecord rows.

    Initialization is idempotent: opening a store that already holds data
    leaves the data in place. Call ``close()`` exactly once; afterwards every
    method raises ClosedStoreError.
    """

    def __init__(self, db_path: Path | str) -> None:
        """Open (or create) the store at *db_path* and apply migrations.

        Raises:
            PersistenceError: If the database cannot be opened or migrated.
        """
        self.db_path = Path(db_path)
        self._lock = threading.RLock()
        self._conn: sqlite3.Connection | None = None
        try:
            self._conn = Database(self.db_path).connect()
            run_migrations(self._conn)
        except sqlite3.Error as exc:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
            raise PersistenceError(f"Cannot open vector store at '{self.db_path}': {exc}") from exc
        logger.debug("Vector store opened at %s", self.db_path)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upsert(self, record: DocumentRecord) -> None:
        """Insert *record* or replace the stored record with the same path."""
        self.bulk_upsert([record])

    def bulk_upsert(self, records: Iterable[DocumentRecord]) -> int:
        """Upsert all *records* in one transaction. Returns the number written.

        Either every record becomes visible or, on failure, none does.

        Raises:
            PersistenceError: If the database rejects any write; the whole
                batch is rolled back.
        """
        with self._lock:
            conn = self._require_open()
            batch = list(records)
            indexed_at = _now_iso()
            try:
                with conn:
                    for record in batch:
                        conn.execute(
                            _UPSERT_SQL,
                            (
                                record.name,
                                record.path,
                                record.content,
                                json.dumps(record.embedding),
                                indexed_at,
                            ),
                        )
            except sqlite3.Error as exc:
                logger.error("Batch of %d record(s) rolled back: %s", len(batch), exc)
                raise PersistenceError(f"Failed to write batch to '{self.db_path}': {exc}") from exc
            logger.info("Upserted %d record(s)", len(batch))
            return len(batch)

    def clear(self) -> None:
        """Delete every record. Irreversible."""
        with self._lock:
            conn = self._require_open()
            try:
                with conn:
                    conn.execute("DELETE FROM documents")
            except sqlite3.Error as exc:
                raise PersistenceError(f"Failed to clear '{self.db_path}': {exc}") from exc
            logger.info("All records removed from %s", self.db_path)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def fetch_all(self) -> list[DocumentRecord]:
        """Return every stored record with its embedding decoded.

        Callers must not rely on the order of the returned records.

        Raises:
            CorruptRecordError: If any stored embedding is unreadable. The
                whole call fails rather than returning an incomplete set.
        """
        with self._lock:
            conn = self._require_open()
            try:
                rows = conn.execute(
                    "SELECT id, name, path, content, embedding, indexed_at FROM documents ORDER BY id"
                ).fetchall()
            except sqlite3.Error as exc:
                raise PersistenceError(f"Failed to read '{self.db_path}': {exc}") from exc
        return [_row_to_record(r) for r in rows]

    def count(self) -> int:
        """Return the number of stored records."""
        with self._lock:
            conn = self._require_open()
            try:
                return conn.execute("SELECT COUNT(*) FROM documents").fetchone()[0]
            except sqlite3.Error as exc:
                raise PersistenceError(f"Failed to read '{self.db_path}': {exc}") from exc

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._conn is None

    def close(self) -> None:
        """Release the connection. The instance is inert afterwards."""
        with self._lock:
            conn = self._require_open()
            self._conn = None
            conn.close()
            logger.debug("Vector store at %s closed", self.db_path)

    def __enter__(self) -> VectorStore:
        return self

    def __exit__(self, *args: object) -> None:
        if not self.closed:
            self.close()

    def _require_open(self) -> sqlite3.Connection:
        if self._conn is None:
            raise ClosedStoreError(f"Vector store at '{self.db_path}' is closed")
        return self._conn


def _row_to_record(row: sqlite3.Row) -> DocumentRecord:
    return DocumentRecord(
        id=row["id"],
        name=row["name"],
        path=row["path"],
        content=row["content"],
        embedding=_decode_embedding(row["path"], row["embedding"]),
        indexed_at=row["indexed_at"],
    )


def _decode_embedding(path: str, raw: str) -> list[float]:
    """Parse a JSON-encoded embedding, raising CorruptRecordError if unusable."""
    try:
        values = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise CorruptRecordError(path, f"invalid JSON ({exc})") from exc
    if not isinstance(values, list):
        raise CorruptRecordError(path, f"expected a JSON array, got {type(values).__name__}")
    if not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in values):
        raise CorruptRecordError(path, "array contains non-numeric values")
    return [float(v) for v in values]
