"""Shared utilities for InfraSeal CLI modules."""
from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape


def setup_file_logging(log_file: Optional[str] = None, verbose: bool = False) -> None:
    """Set up logging for CLI commands.

    Args:
        log_file: Path to log file (optional; console-only when omitted)
        verbose: Enable verbose logging
    """
    from infraseal.core.logger import set_verbosity
    from infraseal.core.logger import setup_file_logging as _setup_file_logging

    if log_file:
        _setup_file_logging(log_file=log_file, verbose=verbose)
    else:
        set_verbosity(verbose)


def handle_cli_error(
    e: Exception,
    console: Console,
    verbose: bool = False,
    exit_code: int = 1
) -> None:
    """Handle CLI errors with consistent formatting.

    Args:
        e: Exception to handle
        console: Rich console for output
        verbose: Show exception traceback if True
        exit_code: Exit code to use
    """
    console.print(f"[red]Error:[/red] {escape(str(e))}")
    if verbose:
        console.print_exception()
    raise typer.Exit(exit_code)


def print_success(console: Console, message: str, prefix: str = "✓") -> None:
    """Print success message with consistent formatting."""
    console.print(f"[green]{prefix}[/green] {message}")

