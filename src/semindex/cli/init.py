"""semindex init — create config, vector store, and inbox folders.

Creates (relative to the project directory):
  semindex.yaml          — project config with defaults (kept if present)
  <store.path>           — empty vector store with schema
  <ingest.inbox>/        — drop new documents here
  <ingest.processed>/    — documents indexed successfully
  <ingest.failed>/       — documents that could not be embedded
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from semindex.cli._shared import console, load_project_config, open_store, store_path
from semindex.config import PROJECT_CONFIG_NAME, write_project_config


def init_cmd(
    project_dir: Annotated[
        Path,
        typer.Argument(help="Directory to initialize. Defaults to current directory."),
    ] = Path("."),
) -> None:
    """Initialize a semindex project: config file, vector store, and folders."""
    project_dir = project_dir.resolve()
    project_dir.mkdir(parents=True, exist_ok=True)

    existed = (project_dir / PROJECT_CONFIG_NAME).exists()
    write_project_config(project_dir)
    if existed:
        console.print(f"  [dim]↷ {PROJECT_CONFIG_NAME} already exists — kept[/]")
    else:
        console.print(f"  [green]✓[/] {PROJECT_CONFIG_NAME}")

    cfg = load_project_config(project_dir)

    db_path = store_path(project_dir, cfg)
    with open_store(db_path) as store:
        count = store.count()
    console.print(f"  [green]✓[/] {db_path.name} ({count} records)")

    for folder in (cfg.ingest.inbox, cfg.ingest.processed, cfg.ingest.failed):
        (project_dir / folder).mkdir(parents=True, exist_ok=True)
        console.print(f"  [green]✓[/] {folder}/")

    console.print(
        f"\n[bold]Ready.[/] Drop documents into [bold]{cfg.ingest.inbox}/[/] "
        "and run [bold]semindex ingest[/]."
    )
