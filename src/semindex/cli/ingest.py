"""semindex ingest — index new inbox documents into the vector store."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from semindex.cli._shared import console, load_project_config, open_store, store_path
from semindex.cli.errors import err_persistence
from semindex.errors import PersistenceError
from semindex.ingest.chunker import LineChunker
from semindex.ingest.pipeline import IngestConfig, Ingestor, IngestReport, read_document, scan_inbox
from semindex.rag.embedder import LiteLLMEmbedder


def ingest_cmd(
    project_dir: Annotated[
        Path,
        typer.Option("--project-dir", "-p", help="Directory holding semindex.yaml."),
    ] = Path("."),
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Vector store path (overrides store.path)."),
    ] = None,
    max_chunk_size: Annotated[
        int | None,
        typer.Option("--max-chunk-size", min=1, help="Override chunking.max_chunk_size."),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show the chunks that would be indexed without embedding."),
    ] = False,
) -> None:
    """Chunk, embed, and store every document waiting in the inbox."""
    cfg = load_project_config(project_dir)
    if max_chunk_size is not None:
        cfg.chunking.max_chunk_size = max_chunk_size
    ingest_config = IngestConfig.from_cfg(cfg.ingest, cfg.chunking, project_dir)
    db_path = store_path(project_dir, cfg, db)

    if dry_run:
        _show_dry_run(ingest_config)
        return

    embedder = LiteLLMEmbedder(cfg.embedding)
    with open_store(db_path) as store:
        ingestor = Ingestor(store, embedder, ingest_config)
        paths = ingestor.pending()
        if not paths:
            console.print(f"[yellow]No new documents in {ingest_config.inbox_dir}.[/]")
            return

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            transient=True,
            console=console,
        ) as prog:
            task = prog.add_task("Embedding…", total=len(paths))

            def _on_document(path: Path) -> None:
                prog.update(task, advance=1, description=f"Embedding {path.name}…")

            try:
                report = ingestor.run(paths, on_document=_on_document)
            except PersistenceError as exc:
                console.print(err_persistence(str(db_path), str(exc)))
                console.print("  [dim]Documents were left in the inbox for the next run.[/]")
                raise typer.Exit(1) from exc

        total = store.count()

    _show_report(report, total)
    if report.failed:
        raise typer.Exit(1)


def _show_dry_run(config: IngestConfig) -> None:
    paths = scan_inbox(config)
    if not paths:
        console.print(f"[yellow]No new documents in {config.inbox_dir}.[/]")
        return
    chunker = LineChunker(config.max_chunk_size)
    for path in paths:
        try:
            document = read_document(path)
        except (UnicodeDecodeError, OSError) as exc:
            console.print(f"\n[red]✗ {path.name}:[/] cannot read file: {exc}")
            continue
        chunks = chunker.split(document.content)
        console.print(f"\n[bold]→ {document.name}[/] ({document.size:,} chars)")
        for i, chunk in enumerate(chunks, start=1):
            console.print(f"  chunk {i}/{len(chunks)}: {len(chunk):,} chars")
    console.print("\n[dim]Dry run — nothing embedded or written.[/]")


def _show_report(report: IngestReport, total: int) -> None:
    console.print(f"\n[bold]Documents found:[/] {report.found}")
    console.print(
        f"  [green]✓[/] {len(report.indexed_documents)} indexed "
        f"({report.indexed_chunks} chunks)"
    )
    for failure in report.failed:
        console.print(f"  [red]✗ {failure.path.name}:[/] {failure.reason}")
    for failure in report.move_errors:
        console.print(f"  [yellow]⚠ Could not move {failure.path.name}:[/] {failure.reason}")
    console.print(f"Store now holds [bold]{total}[/] records.")
