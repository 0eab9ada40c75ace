"""Exception taxonomy for the semindex core.

Every failure surfaces to the caller with its cause chained
(``raise ... from exc``). Nothing in the core retries.
"""

from __future__ import annotations


class SemindexError(Exception):
    """Base class for all semindex errors."""


class DimensionMismatchError(SemindexError, ValueError):
    """Two vectors passed to a similarity computation differ in length."""

    def __init__(self, len_a: int, len_b: int) -> None:
        super().__init__(f"Vectors must have the same length (got {len_a} and {len_b})")
        self.len_a = len_a
        self.len_b = len_b


class PersistenceError(SemindexError):
    """The storage medium is unavailable (locked, I/O failure, ...)."""


class CorruptRecordError(SemindexError):
    """A stored embedding could not be decoded."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Corrupt embedding in record '{path}': {reason}")
        self.path = path


class ClosedStoreError(SemindexError):
    """An operation was attempted on a closed VectorStore."""


class EmbeddingProviderError(SemindexError):
    """The embedding service failed or returned an unusable response."""


class RetrievalError(SemindexError):
    """A retrieval call failed; ``__cause__`` holds the underlying error."""
