"""semindex clear — delete every record from the vector store."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from semindex.cli._shared import console, load_project_config, open_store, store_path
from semindex.cli.errors import err_no_store, err_persistence
from semindex.errors import PersistenceError


def clear_cmd(
    project_dir: Annotated[
        Path,
        typer.Option("--project-dir", "-p", help="Directory holding semindex.yaml."),
    ] = Path("."),
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Vector store path (overrides store.path)."),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Remove all indexed chunks. Documents must be re-ingested afterwards."""
    cfg = load_project_config(project_dir)
    db_path = store_path(project_dir, cfg, db)
    if not db_path.exists():
        console.print(err_no_store(str(db_path)))
        raise typer.Exit(1)

    with open_store(db_path) as store:
        count = store.count()
        if count == 0:
            console.print("[dim]Store is already empty.[/]")
            return
        if not yes and not typer.confirm(f"Delete all {count} records?", default=False):
            console.print("[dim]Cancelled.[/]")
            raise typer.Exit(0)
        try:
            store.clear()
        except PersistenceError as exc:
            console.print(err_persistence(str(db_path), str(exc)))
            raise typer.Exit(1) from exc

    console.print(f"[green]✓[/] Removed {count} records.")
