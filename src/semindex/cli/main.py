"""semindex CLI entry point."""

from __future__ import annotations

import importlib.metadata
import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from semindex.cli._shared import console
from semindex.cli.clear import clear_cmd
from semindex.cli.ingest import ingest_cmd
from semindex.cli.init import init_cmd
from semindex.cli.search import search_cmd
from semindex.cli.status import status_cmd


def _version() -> str:
    try:
        return importlib.metadata.version("semindex")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"semindex {_version()}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route library logging through Rich; WARNING by default, DEBUG when verbose."""
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)
    root.addHandler(RichHandler(console=console, show_path=False, rich_tracebacks=True))
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)

    # LiteLLM and httpx are chatty at INFO/DEBUG.
    logging.getLogger("LiteLLM").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


app = typer.Typer(
    name="semindex",
    help=(
        "semindex — index documents as embeddings and retrieve context for LLM prompts.\n\n"
        "  semindex ingest   Chunk, embed, and store new documents from the inbox.\n"
        "  semindex search   Assemble context from the chunks most similar to a prompt."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log every step, including per-chunk scores."),
    ] = False,
) -> None:
    """semindex — semantic document index."""
    configure_logging(verbose)


app.command("init")(init_cmd)
app.command("ingest")(ingest_cmd)
app.command("search")(search_cmd)
app.command("status")(status_cmd)
app.command("clear")(clear_cmd)


@app.command("version")
def version_cmd() -> None:
    """Show the installed semindex version."""
    typer.echo(f"semindex {_version()}")


if __name__ == "__main__":
    app()
