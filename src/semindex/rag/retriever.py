"""Exhaustive dense retriever: every stored chunk is scored against the query.

Pipeline:
  1. Embed the query (one embedding call).
  2. Fetch all records from the vector store.
  3. Cosine-score each record against the query embedding.
  4. Keep records with similarity >= threshold.
  5. Stable sort by similarity, highest first (ties keep fetch order).
  6. Truncate to top_k.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from semindex.db.models import DocumentRecord
from semindex.db.store import VectorStore
from semindex.errors import RetrievalError
from semindex.rag.embedder import Embedder
from semindex.rag.similarity import cosine_similarity

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 3
DEFAULT_THRESHOLD = 0.5


@dataclass
class SearchResult:
    """A stored record paired with its cosine similarity to the query.

    Attributes:
        record: The DocumentRecord read from the store.
        similarity: Cosine similarity in [-1, 1] (higher = more similar).
    """

    record: DocumentRecord
    similarity: float


class Retriever:
    """Rank stored chunks by similarity to a query.

    The store and embedder are injected and owned by the caller; one
    Retriever (and one store handle) serves any number of queries.
    """

    def __init__(self, store: VectorStore, embedder: Embedder) -> None:
        self._store = store
        self._embedder = embedder

    def retrieve(
        self,
        query: str,
        top_k: int = DEFAULT_TOP_K,
        threshold: float = DEFAULT_THRESHOLD,
    ) -> list[SearchResult]:
        """Return up to *top_k* records scoring at least *threshold*, best-first.

        Raises:
            RetrievalError: If embedding, reading the store, or scoring fails.
                No partial results are returned.
        """
        logger.info("Retrieving for %r (top_k=%d, threshold=%.2f)", query, top_k, threshold)
        try:
            query_embedding = self._embedder.embed(query)
            records = self._store.fetch_all()
            scored = _score(query_embedding, records)
        except Exception as exc:
            raise RetrievalError(f"Retrieval failed for query {query!r}: {exc}") from exc

        results = rank(scored, top_k=top_k, threshold=threshold)
        logger.info("%d of %d record(s) relevant", len(results), len(records))
        return results


def _score(query_embedding: list[float], records: list[DocumentRecord]) -> list[SearchResult]:
    scored: list[SearchResult] = []
    for record in records:
        similarity = cosine_similarity(query_embedding, record.embedding)
        logger.debug("  %s: %.4f", record.name, similarity)
        scored.append(SearchResult(record=record, similarity=similarity))
    return scored


def rank(scored: list[SearchResult], top_k: int, threshold: float) -> list[SearchResult]:
    """Filter by *threshold* (inclusive), sort descending, truncate to *top_k*."""
    if top_k <= 0:
        return []
    kept = [r for r in scored if r.similarity >= threshold]
    kept.sort(key=lambda r: r.similarity, reverse=True)
    return kept[:top_k]
