"""Domain models for the semindex storage layer."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Document:
    """A raw input document; lives only for the duration of an ingest run."""

    name: str
    path: str
    content: str

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class DocumentRecord:
    """One persisted chunk. ``path`` is the store's uniqueness key."""

    name: str
    path: str
    content: str
    embedding: list[float] = field(default_factory=list)
    indexed_at: str | None = None  # assigned by the store on write
    id: int | None = None  # set when read back; None for unsaved records

    @property
    def size(self) -> int:
        return len(self.content)
