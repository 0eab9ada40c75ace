"""Shared pytest fixtures."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from semindex.db.store import VectorStore


class StubEmbedder:
    """Deterministic embedder: returns the vector registered for a text.

    Unregistered texts map to a bag-of-letters vector so that identical
    texts always embed identically.
    """

    def __init__(self, vectors: dict[str, list[float]] | None = None) -> None:
        self.vectors = dict(vectors or {})
        self.calls: list[str] = []

    def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if text in self.vectors:
            return list(self.vectors[text])
        counts = [0.0] * 26
        for ch in text.lower():
            if "a" <= ch <= "z":
                counts[ord(ch) - ord("a")] += 1.0
        return counts


@pytest.fixture
def store(tmp_path):
    """File-based VectorStore in tmp_path, closed after the test."""
    s = VectorStore(tmp_path / "embeddings.sqlite")
    yield s
    if not s.closed:
        s.close()


@pytest.fixture
def stub_embedder():
    return StubEmbedder()


def letter_vector(text: str) -> list[float]:
    return StubEmbedder().embed(text)


@pytest.fixture
def fake_litellm():
    """Patch litellm.embedding to return bag-of-letters vectors."""

    def _embedding(model, input, **kwargs):
        response = MagicMock()
        response.data = [{"embedding": letter_vector(input[0])}]
        return response

    with patch("semindex.rag.embedder.litellm.embedding", side_effect=_embedding) as mock:
        yield mock


@pytest.fixture
def project(tmp_path):
    """Project directory initialized with ``semindex init``."""
    from typer.testing import CliRunner

    from semindex.cli.main import app

    result = CliRunner().invoke(app, ["init", str(tmp_path)])
    assert result.exit_code == 0, result.output
    return tmp_path
