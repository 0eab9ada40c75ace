"""Search surface: request payload in, context + ranked results out.

Payload keys match the wire format consumed by existing HTTP clients:
``prompt``, ``topK``, ``limiarSimilaridade`` in; ``contexto``,
``resultados`` out.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from semindex.rag.assembler import assemble_context
from semindex.rag.retriever import DEFAULT_THRESHOLD, DEFAULT_TOP_K, Retriever, SearchResult


@dataclass
class SearchRequest:
    """A retrieval request with defaults applied.

    Attributes:
        prompt: Query text; must be non-empty.
        top_k: Maximum number of results.
        threshold: Minimum cosine similarity for a result to be kept.
    """

    prompt: str
    top_k: int = DEFAULT_TOP_K
    threshold: float = DEFAULT_THRESHOLD

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> SearchRequest:
        """Build a request from a JSON body.

        Missing or falsy ``topK`` / ``limiarSimilaridade`` fall back to the
        defaults (3 and 0.5).

        Raises:
            ValueError: If ``prompt`` is missing or empty.
        """
        prompt = payload.get("prompt")
        if not prompt:
            raise ValueError("Missing field 'prompt' in request body")
        return cls(
            prompt=str(prompt),
            top_k=int(payload.get("topK") or DEFAULT_TOP_K),
            threshold=float(payload.get("limiarSimilaridade") or DEFAULT_THRESHOLD),
        )


@dataclass
class SearchResponse:
    context: str
    results: list[SearchResult] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Serialise to the ``{"contexto", "resultados"}`` wire shape."""
        return {
            "contexto": self.context,
            "resultados": [_result_payload(r) for r in self.results],
        }


class SearchService:
    """Retrieve and assemble context for one request at a time."""

    def __init__(self, retriever: Retriever) -> None:
        self._retriever = retriever

    def search(self, request: SearchRequest) -> SearchResponse:
        """Run retrieval for *request*. RetrievalError propagates unchanged."""
        results = self._retriever.retrieve(
            request.prompt, top_k=request.top_k, threshold=request.threshold
        )
        return SearchResponse(context=assemble_context(results), results=results)


def _result_payload(result: SearchResult) -> dict[str, Any]:
    record = result.record
    return {
        "documento": {
            "nome": record.name,
            "caminho": record.path,
            "conteudo": record.content,
            "tamanho": record.size,
            "embedding": record.embedding,
        },
        "similaridade": result.similarity,
    }
