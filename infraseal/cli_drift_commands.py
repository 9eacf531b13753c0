"""Drift analysis CLI commands for comparing declared and live state files."""
import json
from enum import Enum
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

# Module-level console instance (will be set by register function)
console: Console = Console()

TIER_STYLES = {
    "stable": "green",
    "minor_drift": "yellow",
    "severe_drift": "red",
}


class FailOn(str, Enum):
    never = "never"
    minor = "minor"
    severe = "severe"


def analyze(
    declared: str = typer.Argument(..., help="Declared state file (JSON or YAML)"),
    live: str = typer.Argument(..., help="Live state file (JSON or YAML)"),
    policy: Optional[str] = typer.Option(None, "--policy", "-p", help="Policy file with rules and thresholds"),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON"),
    fail_on: FailOn = typer.Option(FailOn.severe, "--fail-on", help="Exit 2 when drift reaches this tier"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Path to log file"),
):
    """Compare declared state with live state and score the drift.

    Exits 0 when drift stays below --fail-on, 2 when it reaches it and
    1 when an input cannot be loaded.
    """
    from infraseal.cli_drift_helpers import analyze_drift, exit_code_for, resolve_policy
    from infraseal.cli_support import handle_cli_error, setup_file_logging
    from infraseal.core.config import get_config
    from infraseal.core.errors import InfraSealError

    try:
        setup_file_logging(log_file=log_file or get_config().log_file, verbose=verbose)
        report = analyze_drift(declared, live, resolve_policy(policy))
    except InfraSealError as e:
        handle_cli_error(e, console, verbose, exit_code=1)

    if as_json:
        typer.echo(json.dumps(report.to_dict(), indent=2))
    else:
        _display_report(report)

    code = exit_code_for(report, fail_on.value)
    if code:
        raise typer.Exit(code)


def rules(
    policy: Optional[str] = typer.Option(None, "--policy", "-p", help="Policy file with rules and thresholds"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Show the active classification rules and recommendation thresholds."""
    from infraseal.cli_drift_helpers import resolve_policy
    from infraseal.cli_support import handle_cli_error
    from infraseal.core.errors import InfraSealError
    from infraseal.core.severity import FALLBACK_TIER

    try:
        active = resolve_policy(policy)
    except InfraSealError as e:
        handle_cli_error(e, console, verbose, exit_code=1)

    rule_table = Table(title="Classification rules", show_header=True, header_style="bold")
    rule_table.add_column("#", justify="right")
    rule_table.add_column("Match")
    rule_table.add_column("Pattern")
    rule_table.add_column("Kinds")
    rule_table.add_column("Category")
    rule_table.add_column("Severity", justify="right")

    for position, rule in enumerate(active.rules, start=1):
        kinds = ", ".join(sorted(kind.value for kind in rule.kinds)) or "all"
        rule_table.add_row(
            str(position),
            rule.match.value,
            rule.pattern or "-",
            kinds,
            rule.category,
            f"{rule.severity:g}",
        )
    console.print(rule_table)

    threshold_table = Table(title="Recommendation thresholds", show_header=True, header_style="bold")
    threshold_table.add_column("Score")
    threshold_table.add_column("Tier")
    for threshold in active.thresholds:
        threshold_table.add_row(f"> {threshold.lower_bound:g}", threshold.tier.value)
    threshold_table.add_row("otherwise", FALLBACK_TIER.value)
    console.print(threshold_table)

    if active.unordered_fields:
        console.print(f"Unordered fields: {', '.join(active.unordered_fields)}")


def _display_report(report):
    """Display findings, score and recommendation."""
    from infraseal.cli_support import print_success
    from infraseal.core.state import to_plain

    console.print("\n[bold magenta]Drift Analysis Results[/bold magenta]")

    if report.is_clean():
        print_success(console, "No drift detected - live state matches declared state")
    else:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Path")
        table.add_column("Kind")
        table.add_column("Category")
        table.add_column("Severity", justify="right")
        table.add_column("Declared")
        table.add_column("Live")

        for finding in report.findings:
            table.add_row(
                escape(finding.location),
                finding.kind.value,
                finding.category,
                f"{finding.severity:g}",
                _render_value(to_plain(finding.declared)),
                _render_value(to_plain(finding.live)),
            )
        console.print(table)

    style = TIER_STYLES.get(report.recommendation.value, "white")
    console.print(f"Total Severity Score: {report.total_severity:.2f}")
    console.print(f"Recommendation: [{style}]{report.recommendation.description}[/{style}]")


def _render_value(value) -> str:
    if value is None:
        return "-"
    if isinstance(value, (dict, list)):
        return escape(json.dumps(value, sort_keys=True))
    return escape(str(value))


def register_drift_commands(app: typer.Typer, shared_console: Console):
    """Register drift analysis commands with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
    """
    global console
    console = shared_console

    app.command(name="analyze")(analyze)
    app.command(name="rules")(rules)
