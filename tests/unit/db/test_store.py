"""Tests for the VectorStore."""

from __future__ import annotations

import logging
import sqlite3
import threading
from unittest.mock import MagicMock, patch

import pytest

from semindex.db.models import DocumentRecord
from semindex.db.store import VectorStore
from semindex.errors import ClosedStoreError, CorruptRecordError, PersistenceError


def _record(path="doc.md#chunk-1", name="doc.md_chunk_1", content="hello world", embedding=None):
    return DocumentRecord(
        name=name,
        path=path,
        content=content,
        embedding=embedding if embedding is not None else [0.1, 0.2, 0.3],
    )


def _raw_insert(store: VectorStore, path: str, embedding: str) -> None:
    conn = sqlite3.connect(store.db_path)
    conn.execute(
        "INSERT INTO documents (name, path, content, embedding, indexed_at) VALUES (?, ?, ?, ?, ?)",
        ("raw", path, "raw text", embedding, "2024-01-01T00:00:00.000Z"),
    )
    conn.commit()
    conn.close()


# ------------------------------------------------------------------
# Initialization
# ------------------------------------------------------------------


def test_new_store_is_empty(store):
    assert store.count() == 0
    assert store.fetch_all() == []


def test_reopen_keeps_existing_data(tmp_path):
    path = tmp_path / "embeddings.sqlite"
    with VectorStore(path) as s:
        s.upsert(_record())
    with VectorStore(path) as s:
        assert s.count() == 1


# ------------------------------------------------------------------
# upsert
# ------------------------------------------------------------------


def test_upsert_then_fetch(store):
    store.upsert(_record(embedding=[1.0, 2.5, -3.0]))
    [rec] = store.fetch_all()
    assert rec.name == "doc.md_chunk_1"
    assert rec.path == "doc.md#chunk-1"
    assert rec.content == "hello world"
    assert rec.embedding == [1.0, 2.5, -3.0]
    assert isinstance(rec.id, int)


def test_upsert_assigns_indexed_at(store):
    record = _record()
    assert record.indexed_at is None
    store.upsert(record)
    [rec] = store.fetch_all()
    assert rec.indexed_at is not None
    assert rec.indexed_at.endswith("Z")
    assert "T" in rec.indexed_at


def test_upsert_same_record_twice_keeps_count(store):
    record = _record()
    store.upsert(record)
    store.upsert(record)
    assert store.count() == 1


def test_upsert_same_path_replaces_content(store):
    store.upsert(_record(content="old", embedding=[1.0, 0.0]))
    store.upsert(_record(content="new", embedding=[0.0, 1.0]))
    [rec] = store.fetch_all()
    assert rec.content == "new"
    assert rec.embedding == [0.0, 1.0]


def test_distinct_paths_create_distinct_rows(store):
    store.upsert(_record(path="a.md#chunk-1"))
    store.upsert(_record(path="a.md#chunk-2"))
    assert store.count() == 2


# ------------------------------------------------------------------
# bulk_upsert
# ------------------------------------------------------------------


def test_bulk_upsert_returns_written_count(store):
    records = [_record(path=f"doc.md#chunk-{i}") for i in range(1, 4)]
    assert store.bulk_upsert(records) == 3
    assert store.count() == 3


def test_bulk_upsert_empty_batch(store):
    assert store.bulk_upsert([]) == 0
    assert store.count() == 0


def test_bulk_upsert_failure_rolls_back_whole_batch(store):
    store.upsert(_record(path="existing.md#chunk-1"))
    before = store.count()

    batch = [_record(path=f"new.md#chunk-{i}") for i in range(1, 4)]
    # content is NOT NULL — the fourth write fails inside the transaction
    batch.append(DocumentRecord(name="bad", path="new.md#chunk-4", content=None, embedding=[0.1]))

    with pytest.raises(PersistenceError):
        store.bulk_upsert(batch)

    assert store.count() == before
    assert {r.path for r in store.fetch_all()} == {"existing.md#chunk-1"}


def test_bulk_upsert_failure_keeps_prior_versions(store):
    store.upsert(_record(path="a.md#chunk-1", content="original"))
    batch = [
        _record(path="a.md#chunk-1", content="replacement"),
        DocumentRecord(name="bad", path="a.md#chunk-2", content=None, embedding=[0.1]),
    ]
    with pytest.raises(PersistenceError):
        store.bulk_upsert(batch)
    [rec] = store.fetch_all()
    assert rec.content == "original"


def test_bulk_upsert_does_not_validate_dimensions(store):
    store.bulk_upsert([
        _record(path="a#1", embedding=[0.1, 0.2]),
        _record(path="a#2", embedding=[0.1, 0.2, 0.3]),
    ])
    assert store.count() == 2


def test_persistence_error_chains_cause(store):
    with pytest.raises(PersistenceError) as info:
        store.upsert(DocumentRecord(name="bad", path="x", content=None, embedding=[]))
    assert isinstance(info.value.__cause__, sqlite3.Error)


def test_locked_database_raises_persistence_error(tmp_path):
    path = tmp_path / "embeddings.sqlite"
    s = VectorStore(path)
    blocker = sqlite3.connect(path, timeout=0)
    blocker.execute("BEGIN EXCLUSIVE")
    s._conn.execute("PRAGMA busy_timeout = 0")
    try:
        with pytest.raises(PersistenceError):
            s.upsert(_record())
    finally:
        blocker.rollback()
        blocker.close()
    assert s.count() == 0
    s.close()


# ------------------------------------------------------------------
# fetch_all / count / clear
# ------------------------------------------------------------------


def test_fetch_all_decodes_every_record(store):
    store.bulk_upsert([_record(path=f"d#{i}", embedding=[float(i), 1.0]) for i in range(5)])
    records = store.fetch_all()
    assert len(records) == 5
    assert sorted(r.embedding[0] for r in records) == [0.0, 1.0, 2.0, 3.0, 4.0]


def test_fetch_all_integer_json_becomes_float(store):
    _raw_insert(store, "ints", "[1, 2, 3]")
    [rec] = store.fetch_all()
    assert rec.embedding == [1.0, 2.0, 3.0]
    assert all(isinstance(v, float) for v in rec.embedding)


@pytest.mark.parametrize(
    "raw",
    ["not json", '{"a": 1}', '[1, "two", 3]', "[true, false]"],
)
def test_fetch_all_corrupt_embedding_fails_whole_call(store, raw):
    store.upsert(_record(path="good"))
    _raw_insert(store, "broken", raw)
    with pytest.raises(CorruptRecordError) as info:
        store.fetch_all()
    assert info.value.path == "broken"


def test_clear_removes_everything(store):
    store.bulk_upsert([_record(path=f"d#{i}") for i in range(3)])
    store.clear()
    assert store.count() == 0
    assert store.fetch_all() == []


def test_store_usable_after_clear(store):
    store.upsert(_record())
    store.clear()
    store.upsert(_record())
    assert store.count() == 1


# ------------------------------------------------------------------
# close
# ------------------------------------------------------------------


@pytest.mark.parametrize(
    "call",
    [
        lambda s: s.count(),
        lambda s: s.fetch_all(),
        lambda s: s.clear(),
        lambda s: s.upsert(_record()),
        lambda s: s.bulk_upsert([_record()]),
        lambda s: s.close(),
    ],
)
def test_operations_after_close_raise(tmp_path, call):
    s = VectorStore(tmp_path / "embeddings.sqlite")
    s.close()
    assert s.closed
    with pytest.raises(ClosedStoreError):
        call(s)


def test_context_manager_closes_store(tmp_path):
    with VectorStore(tmp_path / "embeddings.sqlite") as s:
        s.upsert(_record())
    assert s.closed


def test_context_manager_tolerates_explicit_close(tmp_path):
    with VectorStore(tmp_path / "embeddings.sqlite") as s:
        s.close()
    assert s.closed


def test_unopenable_path_raises_persistence_error(tmp_path):
    target = tmp_path / "a-directory"
    target.mkdir()
    with pytest.raises(PersistenceError):
        VectorStore(target)


# ------------------------------------------------------------------
# Concurrency
# ------------------------------------------------------------------


def test_concurrent_readers_never_see_partial_batch(store):
    batch_size = 50
    batches = 10
    seen: list[int] = []
    errors: list[BaseException] = []

    def _writer():
        for b in range(batches):
            store.bulk_upsert(
                [_record(path=f"b{b}#{i}") for i in range(batch_size)]
            )

    def _reader():
        try:
            for _ in range(30):
                seen.append(len(store.fetch_all()))
        except BaseException as exc:  # surfaced in the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=_writer)] + [
        threading.Thread(target=_reader) for _ in range(3)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert all(n % batch_size == 0 for n in seen)
    assert store.count() == batch_size * batches


# ------------------------------------------------------------------
# Failure cleanup and logging
# ------------------------------------------------------------------


def test_migration_failure_closes_connection(tmp_path):
    conn = MagicMock()
    with patch("semindex.db.store.Database.connect", return_value=conn), patch(
        "semindex.db.store.run_migrations", side_effect=sqlite3.OperationalError("disk I/O error")
    ):
        with pytest.raises(PersistenceError, match="disk I/O error"):
            VectorStore(tmp_path / "embeddings.sqlite")
    conn.close.assert_called_once()


def test_rollback_log_reports_batch_size(store, caplog):
    batch = [_record(path=f"new.md#chunk-{i}") for i in range(1, 4)]
    batch.insert(1, DocumentRecord(name="bad", path="new.md#bad", content=None, embedding=[0.1]))

    with caplog.at_level(logging.ERROR, logger="semindex.db.store"):
        with pytest.raises(PersistenceError):
            store.bulk_upsert(batch)

    assert "Batch of 4 record(s) rolled back" in caplog.text


def test_bulk_upsert_accepts_generator(store):
    written = store.bulk_upsert(_record(path=f"gen#{i}") for i in range(3))
    assert written == 3
    assert store.count() == 3
