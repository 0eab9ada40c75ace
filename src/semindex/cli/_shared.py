"""Helpers shared by the semindex CLI commands."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from semindex.cli.errors import err_config, err_persistence
from semindex.config import ConfigError, SemindexConfig, load_config
from semindex.db.store import VectorStore
from semindex.errors import PersistenceError

console = Console()


def load_project_config(project_dir: Path) -> SemindexConfig:
    """Load config for *project_dir*, exiting with a readable error on failure."""
    try:
        return load_config(project_dir)
    except (ConfigError, OSError) as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1) from exc


def store_path(project_dir: Path, cfg: SemindexConfig, override: Path | None = None) -> Path:
    """Resolve the store location; relative paths are taken from *project_dir*."""
    path = override if override is not None else Path(cfg.store.path)
    return path if path.is_absolute() else project_dir / path


def open_store(db_path: Path) -> VectorStore:
    """Open the vector store, exiting with a readable error on failure."""
    try:
        return VectorStore(db_path)
    except PersistenceError as exc:
        console.print(err_persistence(str(db_path), str(exc)))
        raise typer.Exit(1) from exc
