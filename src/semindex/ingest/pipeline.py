"""Watch-folder ingestion: inbox → chunks → embeddings → vector store.

For one run:
  1. List every inbox file matching the configured patterns.
  2. Read, chunk and embed each document. A document that cannot be read
     as UTF-8, or whose chunks cannot all be embedded, is moved to the
     failed folder; nothing of it is stored.
  3. Write the records of all successful documents with one bulk upsert.
  4. Move the successful documents to the processed folder, only after the
     upsert has committed.

A failing bulk upsert raises PersistenceError and leaves the successful
documents in the inbox, so the next run picks them up again.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from semindex.config import ChunkingCfg, IngestCfg
from semindex.db.models import Document, DocumentRecord
from semindex.db.store import VectorStore
from semindex.errors import EmbeddingProviderError
from semindex.ingest.chunker import DEFAULT_MAX_CHUNK_SIZE, LineChunker
from semindex.rag.embedder import Embedder

logger = logging.getLogger(__name__)


@dataclass
class IngestConfig:
    """Folder layout and chunking for an ingest run."""

    inbox_dir: Path
    processed_dir: Path
    failed_dir: Path
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE
    patterns: tuple[str, ...] = ("*.md",)

    @classmethod
    def from_cfg(cls, ingest: IngestCfg, chunking: ChunkingCfg, base_dir: Path) -> IngestConfig:
        """Resolve the configured folders relative to *base_dir*."""
        return cls(
            inbox_dir=base_dir / ingest.inbox,
            processed_dir=base_dir / ingest.processed,
            failed_dir=base_dir / ingest.failed,
            max_chunk_size=chunking.max_chunk_size,
            patterns=tuple(ingest.patterns),
        )


@dataclass
class IngestFailure:
    path: Path
    reason: str


@dataclass
class IngestReport:
    """Outcome of one ingest run.

    Attributes:
        found: Number of documents found in the inbox.
        indexed_documents: Documents whose chunks were all stored.
        indexed_chunks: Records written to the vector store.
        failed: Documents moved aside, with the reason.
        move_errors: Files that were indexed or failed but could not be moved.
    """

    found: int = 0
    indexed_documents: list[Path] = field(default_factory=list)
    indexed_chunks: int = 0
    failed: list[IngestFailure] = field(default_factory=list)
    move_errors: list[IngestFailure] = field(default_factory=list)


def scan_inbox(config: IngestConfig) -> list[Path]:
    """Return every inbox file matching *config.patterns*, sorted by file name."""
    inbox = config.inbox_dir
    if not inbox.is_dir():
        logger.warning("Inbox %s does not exist, nothing to ingest", inbox)
        return []

    paths: set[Path] = set()
    for pattern in config.patterns:
        paths.update(p for p in inbox.glob(pattern) if p.is_file())

    logger.info("Found %d document(s) in %s", len(paths), inbox)
    return sorted(paths)


def read_document(path: Path) -> Document:
    """Read *path* as UTF-8 text.

    Raises:
        UnicodeDecodeError: If the file is not valid UTF-8.
        OSError: If the file cannot be read.
    """
    return Document(name=path.name, path=str(path), content=path.read_text(encoding="utf-8"))


class Ingestor:
    """Index new documents from the inbox folder into a VectorStore.

    Args:
        store:    Open VectorStore (owned by the caller).
        embedder: Embedding provider used for every chunk.
        config:   Folder layout and chunk size.
    """

    def __init__(self, store: VectorStore, embedder: Embedder, config: IngestConfig) -> None:
        self._store = store
        self._embedder = embedder
        self._config = config
        self._chunker = LineChunker(config.max_chunk_size)

    def pending(self) -> list[Path]:
        """Return every matching inbox file, sorted by file name."""
        return scan_inbox(self._config)

    def build_records(self, document: Document) -> list[DocumentRecord]:
        """Chunk and embed *document*.

        Raises:
            EmbeddingProviderError: If any chunk cannot be embedded.
        """
        pieces = self._chunker.chunk_document(document)
        records: list[DocumentRecord] = []
        for i, (name, path, text) in enumerate(pieces, start=1):
            logger.debug("  chunk %d/%d of %s: %d chars", i, len(pieces), document.name, len(text))
            records.append(
                DocumentRecord(name=name, path=path, content=text, embedding=self._embedder.embed(text))
            )
        return records

    def run(
        self,
        paths: list[Path] | None = None,
        on_document: Callable[[Path], None] | None = None,
    ) -> IngestReport:
        """Ingest every document currently in the inbox.

        Args:
            paths: Inbox files to ingest; listed from the inbox when omitted.
            on_document: Optional callback invoked after each file is
                processed, successfully or not (progress reporting).

        Raises:
            PersistenceError: If the bulk upsert fails. No document is moved
                to the processed folder in that case.
        """
        report = IngestReport()
        if paths is None:
            paths = self.pending()
        report.found = len(paths)

        pending: list[tuple[Path, list[DocumentRecord]]] = []
        for path in paths:
            try:
                records = self.build_records(read_document(path))
            except (UnicodeDecodeError, OSError) as exc:
                self._fail(path, f"cannot read file: {exc}", report)
            except EmbeddingProviderError as exc:
                self._fail(path, str(exc), report)
            else:
                pending.append((path, records))
            if on_document is not None:
                on_document(path)

        all_records = [r for _, records in pending for r in records]
        if all_records:
            report.indexed_chunks = self._store.bulk_upsert(all_records)

        for path, _ in pending:
            report.indexed_documents.append(path)
            self._move(path, self._config.processed_dir, report)

        logger.info(
            "Ingest finished: %d found, %d indexed (%d chunks), %d failed",
            report.found,
            len(report.indexed_documents),
            report.indexed_chunks,
            len(report.failed),
        )
        return report

    def _fail(self, path: Path, reason: str, report: IngestReport) -> None:
        logger.error("Failed to ingest %s: %s", path.name, reason)
        report.failed.append(IngestFailure(path, reason))
        self._move(path, self._config.failed_dir, report)

    def _move(self, source: Path, target_dir: Path, report: IngestReport) -> None:
        """Move *source* into *target_dir*; failures are logged and recorded."""
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            shutil.move(str(source), str(target_dir / source.name))
        except OSError as exc:
            logger.error("Could not move %s to %s: %s", source.name, target_dir, exc)
            report.move_errors.append(IngestFailure(source, str(exc)))
        else:
            logger.info("Moved %s to %s", source.name, target_dir)
