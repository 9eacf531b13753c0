#!/usr/bin/env python3
"""InfraSeal CLI - Configuration drift detection for declared infrastructure."""

import typer
from rich.console import Console

from infraseal.cli_drift_commands import register_drift_commands

app = typer.Typer(
    name="infraseal",
    help="""InfraSeal - Configuration drift detection

Compares declared state (IaC) with live state and scores the drift.

Quick start:
  infraseal analyze declared.yml live.json   # Score drift
  infraseal rules                            # Show active rules
""",
    add_completion=False,
)

console = Console()

register_drift_commands(app, console)

if __name__ == "__main__":
    app()
