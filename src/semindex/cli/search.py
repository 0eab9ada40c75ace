"""semindex search — retrieve the most similar chunks for a prompt."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from semindex.cli._shared import console, load_project_config, open_store, store_path
from semindex.cli.errors import (
    err_corrupt_store,
    err_dimension_mismatch,
    err_embedding_provider,
    err_no_store,
)
from semindex.errors import (
    CorruptRecordError,
    DimensionMismatchError,
    EmbeddingProviderError,
    RetrievalError,
)
from semindex.rag.embedder import LiteLLMEmbedder
from semindex.rag.retriever import Retriever
from semindex.rag.search import SearchRequest, SearchResponse, SearchService


def search_cmd(
    prompt: Annotated[str, typer.Argument(help="Question or text to search for.")],
    project_dir: Annotated[
        Path,
        typer.Option("--project-dir", "-p", help="Directory holding semindex.yaml."),
    ] = Path("."),
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Vector store path (overrides store.path)."),
    ] = None,
    top_k: Annotated[
        int | None,
        typer.Option("--top-k", "-k", help="Maximum number of results (default: retrieval.top_k)."),
    ] = None,
    threshold: Annotated[
        float | None,
        typer.Option("--threshold", "-t", help="Minimum similarity (default: retrieval.threshold)."),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the {contexto, resultados} payload as JSON."),
    ] = False,
) -> None:
    """Print the context assembled from the chunks most similar to PROMPT."""
    cfg = load_project_config(project_dir)
    db_path = store_path(project_dir, cfg, db)
    if not db_path.exists():
        console.print(err_no_store(str(db_path)))
        raise typer.Exit(1)

    request = SearchRequest(
        prompt=prompt,
        top_k=top_k if top_k is not None else cfg.retrieval.top_k,
        threshold=threshold if threshold is not None else cfg.retrieval.threshold,
    )
    embedder = LiteLLMEmbedder(cfg.embedding)

    with open_store(db_path) as store:
        service = SearchService(Retriever(store, embedder))
        try:
            response = service.search(request)
        except RetrievalError as exc:
            console.print(_explain(exc, str(db_path), cfg.embedding.base_url, cfg.embedding.model))
            raise typer.Exit(1) from exc

    if as_json:
        typer.echo(json.dumps(response.to_payload(), ensure_ascii=False, indent=2))
        return
    _show_response(response)


def _explain(exc: RetrievalError, db_path: str, base_url: str, model: str) -> str:
    cause = exc.__cause__
    if isinstance(cause, EmbeddingProviderError):
        return err_embedding_provider(base_url, model, str(cause))
    if isinstance(cause, CorruptRecordError):
        return err_corrupt_store(db_path, str(cause))
    if isinstance(cause, DimensionMismatchError):
        return err_dimension_mismatch(str(cause))
    return f"[red]Error:[/] {exc}"


def _show_response(response: SearchResponse) -> None:
    if response.results:
        table = Table(title="Results", show_lines=False)
        table.add_column("#", justify="right", style="dim")
        table.add_column("Chunk", style="bold")
        table.add_column("Similarity", justify="right")
        table.add_column("Chars", justify="right", style="dim")
        for i, result in enumerate(response.results, start=1):
            table.add_row(
                str(i),
                result.record.name,
                f"{result.similarity:.2f}",
                f"{result.record.size:,}",
            )
        console.print(table)
        console.print()
    typer.echo(response.context)
