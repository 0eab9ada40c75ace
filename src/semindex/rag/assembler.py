"""Context assembler: ranked search results → one context block for an LLM prompt.

Pure formatting: no I/O, deterministic for a given input.
"""

from __future__ import annotations

from collections.abc import Sequence

from semindex.rag.retriever import SearchResult

NO_RELEVANT_DOCUMENTS = "No relevant documents found."

_HEADER = "Relevant documents:"


def assemble_context(results: Sequence[SearchResult]) -> str:
    """Format *results* (already rank-ordered) as labelled blocks.

    Each block reads::

        --- Document 1: guide.md_chunk_2 (similarity: 0.87) ---
        <chunk content>

    Returns NO_RELEVANT_DOCUMENTS when *results* is empty.
    """
    if not results:
        return NO_RELEVANT_DOCUMENTS

    parts = [_HEADER, ""]
    for i, result in enumerate(results, start=1):
        parts.append(
            f"--- Document {i}: {result.record.name} "
            f"(similarity: {result.similarity:.2f}) ---"
        )
        parts.append(result.record.content)
        parts.append("")
    return "\n".join(parts) + "\n"
