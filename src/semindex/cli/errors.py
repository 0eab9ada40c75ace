"""semindex rich error messages — actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from semindex.cli.errors import err_no_store
    console.print(err_no_store("embeddings.sqlite"))
    raise typer.Exit(1)
"""

from __future__ import annotations


def err_no_store(db_path: str) -> str:
    """No vector store at the configured location."""
    return (
        f"[red]Error:[/] No vector store found at '{db_path}'.\n"
        "  Run:  semindex init   (or semindex ingest to create it)"
    )


def err_config(detail: str) -> str:
    """Config file could not be loaded or validated."""
    return (
        f"[red]Error:[/] Invalid configuration.\n"
        f"  {detail}\n"
        "  Fix semindex.yaml or the SEMINDEX_* environment variables."
    )


def err_embedding_provider(base_url: str, model: str, detail: str) -> str:
    """Embedding service unreachable or returned an error."""
    return (
        f"[red]Error:[/] Embedding provider failed: {detail}\n"
        f"  Check that the service at '{base_url}' is running and serves '{model}'.\n"
        f"  For Ollama:  ollama pull {model.split('/', 1)[-1]}"
    )


def err_persistence(db_path: str, detail: str) -> str:
    """Store could not be written (locked, disk full, ...)."""
    return (
        f"[red]Error:[/] Could not write to the vector store '{db_path}'.\n"
        f"  {detail}\n"
        "  Close other processes using the database and check free disk space."
    )


def err_corrupt_store(db_path: str, detail: str) -> str:
    """A stored embedding is unreadable."""
    return (
        f"[red]Error:[/] The vector store '{db_path}' contains a corrupt record.\n"
        f"  {detail}\n"
        "  Run:  semindex clear --yes  and re-ingest your documents."
    )


def err_dimension_mismatch(detail: str) -> str:
    """Query and stored embeddings have different dimensionality."""
    return (
        f"[red]Error:[/] Embedding dimensions do not match: {detail}\n"
        "  The store was built with a different embedding model.\n"
        "  Run:  semindex clear --yes  and re-ingest with the current model."
    )
