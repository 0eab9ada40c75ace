"""Embedding provider backed by LiteLLM.

The default model is a local Ollama embedding model reached at
``EmbeddingCfg.base_url``; any LiteLLM-supported provider/model string
works. This module is the single suspension point of retrieval and
ingestion: one remote call per text, bounded by ``timeout``.
"""

from __future__ import annotations

import logging
from typing import Protocol

import litellm

from semindex.config import EmbeddingCfg
from semindex.errors import EmbeddingProviderError

# Disable LiteLLM verbose logging unless explicitly enabled
litellm.suppress_debug_info = True
litellm.set_verbose = False  # type: ignore[assignment]

logger = logging.getLogger(__name__)


class Embedder(Protocol):
    """Anything that turns text into a fixed-length vector."""

    def embed(self, text: str) -> list[float]: ...


class LiteLLMEmbedder:
    """Embed text through ``litellm.embedding()``.

    Every failure, including an empty or malformed response, is raised as
    EmbeddingProviderError with the original exception chained.
    """

    def __init__(self, config: EmbeddingCfg | None = None) -> None:
        self._config = config or EmbeddingCfg()
        if not self._config.base_url.strip():
            raise ValueError("embedding.base_url must not be empty")

    @property
    def model(self) -> str:
        return self._config.model

    def embed(self, text: str) -> list[float]:
        """Return the embedding vector for *text*."""
        try:
            response = litellm.embedding(
                model=self._config.model,
                input=[text],
                api_base=self._config.base_url,
                timeout=self._config.timeout,
                num_retries=self._config.num_retries,
            )
        except Exception as exc:
            raise EmbeddingProviderError(
                f"Embedding request to '{self._config.base_url}' "
                f"(model '{self._config.model}') failed: {exc}"
            ) from exc

        try:
            vector = response.data[0]["embedding"]
        except (AttributeError, IndexError, KeyError, TypeError) as exc:
            raise EmbeddingProviderError(
                f"Embedding response from model '{self._config.model}' has no vector"
            ) from exc
        if not vector:
            raise EmbeddingProviderError(
                f"Embedding response from model '{self._config.model}' is empty"
            )

        logger.debug("Embedded %d chars → %d dimensions", len(text), len(vector))
        return [float(v) for v in vector]
