"""Tests for semindex rich error messages."""

from __future__ import annotations

import pytest

from semindex.cli.errors import (
    err_config,
    err_corrupt_store,
    err_dimension_mismatch,
    err_embedding_provider,
    err_no_store,
    err_persistence,
)


def _has_action(msg: str) -> bool:
    lower = msg.lower()
    return any(kw in lower for kw in ["run:", "check", "fix", "close", "ollama pull"])


@pytest.mark.parametrize(
    "msg",
    [
        err_no_store("embeddings.sqlite"),
        err_config("store.path must not be empty."),
        err_embedding_provider("http://localhost:11434", "ollama/nomic-embed-text", "refused"),
        err_persistence("embeddings.sqlite", "database is locked"),
        err_corrupt_store("embeddings.sqlite", "bad json"),
        err_dimension_mismatch("768 vs 384"),
    ],
)
def test_every_error_has_cause_and_action(msg: str) -> None:
    assert msg.startswith("[red]Error:[/]")
    assert _has_action(msg)


def test_err_no_store_names_path() -> None:
    assert "/tmp/x.sqlite" in err_no_store("/tmp/x.sqlite")


def test_err_embedding_provider_suggests_pull_without_prefix() -> None:
    msg = err_embedding_provider("http://localhost:11434", "ollama/nomic-embed-text", "refused")
    assert "ollama pull nomic-embed-text" in msg
    assert "http://localhost:11434" in msg
    assert "refused" in msg


def test_err_corrupt_store_suggests_clear() -> None:
    assert "semindex clear" in err_corrupt_store("db", "detail")


def test_err_dimension_mismatch_mentions_model() -> None:
    assert "model" in err_dimension_mismatch("2 vs 3")
