"""semindex status — vector store and configuration overview."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.panel import Panel

from semindex.cli._shared import console, load_project_config, open_store, store_path
from semindex.db.migrations import CURRENT_VERSION


def status_cmd(
    project_dir: Annotated[
        Path,
        typer.Option("--project-dir", "-p", help="Directory holding semindex.yaml."),
    ] = Path("."),
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Vector store path (overrides store.path)."),
    ] = None,
) -> None:
    """Show the store location, record count, and embedding settings."""
    cfg = load_project_config(project_dir)
    db_path = store_path(project_dir, cfg, db)

    lines = [
        f"Embedding:  [bold]{cfg.embedding.model}[/] @ {cfg.embedding.base_url}",
        f"Retrieval:  top_k={cfg.retrieval.top_k}  threshold={cfg.retrieval.threshold}",
        f"Chunking:   max_chunk_size={cfg.chunking.max_chunk_size}",
    ]

    if db_path.exists():
        size_mb = db_path.stat().st_size / (1024 * 1024)
        with open_store(db_path) as store:
            count = store.count()
        lines.insert(0, f"Store:      {db_path} ({size_mb:.1f} MB, schema v{CURRENT_VERSION})")
        lines.insert(1, f"Records:    [bold]{count:,}[/]")
    else:
        lines.insert(0, f"Store:      {db_path} [yellow](not created yet)[/]")
        lines.insert(1, "  Run:  semindex init")

    inbox = project_dir / cfg.ingest.inbox
    if inbox.is_dir():
        waiting = sum(
            1 for pattern in cfg.ingest.patterns for p in inbox.glob(pattern) if p.is_file()
        )
        lines.append(f"Inbox:      {inbox} ({waiting} waiting)")

    console.print(Panel("\n".join(lines), title="[bold]semindex[/]", expand=False))
