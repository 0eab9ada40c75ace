"""Line-boundary chunker.

Splits text into consecutive, non-overlapping segments of at most
``max_chunk_size`` characters. A cut is moved back to the last newline
inside the window when one exists, so lines are not split mid-way unless
a single line is longer than the window.
"""

from __future__ import annotations

from semindex.db.models import Document

DEFAULT_MAX_CHUNK_SIZE = 2000


class LineChunker:
    """Split documents at line boundaries into bounded-size chunks.

    Chunk naming: ``<document-name>_chunk_<i>`` (1-based).
    Chunk identity: ``<document-path>#chunk-<i>``, so every chunk of a
    document gets its own row in the vector store.
    """

    def __init__(self, max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE) -> None:
        if max_chunk_size < 1:
            raise ValueError("max_chunk_size must be >= 1")
        self.max_chunk_size = max_chunk_size

    def split(self, content: str) -> list[str]:
        """Split *content* into stripped segments, in original order.

        Empty input yields no chunks. A window holding only whitespace
        yields an empty string.
        """
        chunks: list[str] = []
        start = 0
        length = len(content)

        while start < length:
            end = start + self.max_chunk_size
            if end < length:
                newline = content.rfind("\n", start, end + 1)
                if newline > start:
                    end = newline
            chunks.append(content[start:end].strip())
            start = end

        return chunks

    def chunk_document(self, document: Document) -> list[tuple[str, str, str]]:
        """Return ``(name, path, text)`` for each chunk of *document*."""
        return [
            (chunk_name(document.name, i), chunk_path(document.path, i), text)
            for i, text in enumerate(self.split(document.content), start=1)
        ]


def chunk_name(document_name: str, index: int) -> str:
    return f"{document_name}_chunk_{index}"


def chunk_path(document_path: str, index: int) -> str:
    return f"{document_path}#chunk-{index}"


def split(content: str, max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE) -> list[str]:
    """Module-level shortcut for ``LineChunker(max_chunk_size).split(content)``."""
    return LineChunker(max_chunk_size).split(content)
