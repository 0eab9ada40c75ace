"""Tests for the semindex CLI entry point."""

from __future__ import annotations

import logging

from rich.logging import RichHandler
from typer.testing import CliRunner

from semindex.cli.main import app, configure_logging

runner = CliRunner()


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.output.startswith("semindex ")


def test_version_command() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert result.output.startswith("semindex ")


def test_help_lists_commands() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for cmd in ("init", "ingest", "search", "status", "clear"):
        assert cmd in result.output


def test_configure_logging_installs_single_rich_handler() -> None:
    root = logging.getLogger()
    configure_logging(verbose=False)
    configure_logging(verbose=True)
    rich_handlers = [h for h in root.handlers if isinstance(h, RichHandler)]
    assert len(rich_handlers) == 1
    assert root.level == logging.DEBUG
    configure_logging(verbose=False)
    assert root.level == logging.WARNING
