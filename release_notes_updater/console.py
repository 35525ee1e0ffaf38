"""Rich console utilities for release-notes-updater.

This module provides a shared Rich Console instance and helper functions
for CLI output, with GitHub Actions annotations when running in CI.
"""

import os
from typing import TYPE_CHECKING, Any, List, Optional, Tuple

from rich.console import Console
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

if TYPE_CHECKING:
    from ._updaters import AggregateResult
    from .sync import SyncReport

# Detect CI environments
IS_GITHUB_ACTIONS = os.getenv("GITHUB_ACTIONS") == "true"
IS_AZURE_PIPELINES = os.getenv("TF_BUILD") == "True"
IS_CI = os.getenv("CI") == "true" or IS_GITHUB_ACTIONS or IS_AZURE_PIPELINES

# Standard ANSI names adapt to light and dark CI log themes
BANNER_COLORS_HEX = ("#512BD4", "#6C3FD8", "#8754DC", "#A269E0")
BANNER_COLORS_ADAPTIVE = ("blue", "bright_blue", "magenta", "bright_magenta")
BANNER_COLORS = BANNER_COLORS_ADAPTIVE if IS_CI else BANNER_COLORS_HEX

custom_theme = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "step": "bold blue",
        "highlight": "magenta",
    }
)

# Force colors ON in GitHub Actions (it supports ANSI colors but Rich may incorrectly disable them)
console = Console(
    theme=custom_theme,
    force_terminal=IS_GITHUB_ACTIONS or None,
    color_system="auto",
)


def print_banner(version: str = "unknown") -> None:
    """Print the tool banner."""
    banner = Text()
    lines = (
        " ___     _                    _  _     _           \n",
        "| _ \\___| |___ __ _ ___ ___  | \\| |___| |_ ___ ___ \n",
        "|   / -_) / -_) _` (_-</ -_) | .` / _ \\  _/ -_|_-< \n",
        "|_|_\\___|_\\___\\__,_/__/\\___| |_|\\_\\___/\\__\\___/__/ \n",
    )
    for line, color in zip(lines, BANNER_COLORS):
        banner.append(line, style=color)
    # Only prefix with 'v' if version looks like semver (starts with digit)
    version_display = f"v{version}" if version and version[0:1].isdigit() else version
    banner.append(f" {version_display}", style=BANNER_COLORS[-1])
    banner.append(" - release documentation updater\n", style=BANNER_COLORS[1])

    console.print(banner)


def print_step_header(step_num: int, title: str) -> None:
    """
    Print a styled step header.

    In GitHub Actions, uses ::group:: for collapsible sections.
    In other environments, uses Rich styling.
    """
    step_title = f"STEP {step_num}: {title}"

    if IS_GITHUB_ACTIONS:
        print(f"::group::{step_title}")
        console.print(f"[bold blue]{step_title}[/bold blue]")
    else:
        console.print()
        console.rule(f"[bold blue]{step_title}[/bold blue]", style="blue")


def print_step_end(step_num: int, success: bool = True) -> None:
    """Print step completion status and close the GitHub Actions group."""
    if success:
        console.print(f"[success]✓ Step {step_num} completed successfully[/success]")
    else:
        console.print(f"[error]✗ Step {step_num} failed[/error]")

    if IS_GITHUB_ACTIONS:
        print("::endgroup::")
    else:
        console.print()


def gha_warning(message: str, title: Optional[str] = None) -> None:
    """Emit a warning that appears in the GitHub Actions job summary."""
    if IS_GITHUB_ACTIONS:
        if title:
            print(f"::warning title={title}::{message}")
        else:
            print(f"::warning::{message}")
    else:
        if title:
            console.print(f"[warning]Warning ({title}):[/warning] {message}")
        else:
            console.print(f"[warning]Warning:[/warning] {message}")


def gha_error(message: str, title: Optional[str] = None) -> None:
    """Emit an error that appears in the GitHub Actions job summary."""
    if IS_GITHUB_ACTIONS:
        if title:
            print(f"::error title={title}::{message}")
        else:
            print(f"::error::{message}")
    else:
        if title:
            console.print(f"[error]Error ({title}):[/error] {message}")
        else:
            console.print(f"[error]Error:[/error] {message}")


def print_summary_table(
    title: str,
    data: List[Tuple[str, Any]],
    show_if_empty: bool = False,
) -> None:
    """
    Print a two-column summary table.

    Args:
        title: Table title
        data: List of (label, value) tuples
        show_if_empty: Whether to show the table if all values are 0/empty
    """
    if not show_if_empty:
        data = [(label, value) for label, value in data if value]

    if not data:
        return

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    for label, value in data:
        table.add_row(label, str(value))

    console.print(table)


def print_update_summary(aggregate: "AggregateResult") -> None:
    """Print one row per updater execution, then the totals."""
    if not aggregate.results:
        console.print("[warning]No updaters ran[/warning]")
        return

    table = Table(title="Document Updates", show_header=True, header_style="bold")
    table.add_column("Updater", style="cyan")
    table.add_column("Scope")
    table.add_column("Status")
    table.add_column("Files", justify="right")

    for result in aggregate.results:
        if not result.success:
            status = f"[error]failed: {result.error_message}[/error]"
        elif result.skipped:
            status = f"[warning]skipped: {result.metadata.get('skip_reason', '')}[/warning]"
        else:
            status = "[success]written[/success]"
        table.add_row(result.updater_name, result.scope_key or "run", status, str(len(result.files_written)))

    console.print(table)
    print_summary_table(
        "Totals",
        [
            ("Files written", len(aggregate.files_written)),
            ("Updaters skipped", len(aggregate.skipped_updaters)),
            ("Updaters failed", len(aggregate.failed_updaters)),
        ],
    )


def print_sync_summary(report: "SyncReport") -> None:
    print_summary_table(
        "Reference Sync",
        [
            ("Files copied", len(report.copied)),
            ("Files skipped", len(report.skipped)),
            ("Files backed up", len(report.backed_up)),
            ("Files failed", len(report.failed)),
        ],
        show_if_empty=True,
    )


def print_final_success() -> None:
    """Print final success message."""
    console.print()
    if IS_GITHUB_ACTIONS:
        console.print("[bold green]✓ SUCCESS![/bold green] All steps completed successfully.")
    else:
        console.rule("[bold green]SUCCESS[/bold green]", style="green")
        console.print("[bold green]All steps completed successfully![/bold green]", justify="center")
    console.print()


def print_final_failure(message: str) -> None:
    """Print final failure message."""
    console.print()
    gha_error(message, title="Release Notes Update Failed")
    if not IS_GITHUB_ACTIONS:
        console.rule("[bold red]FAILED[/bold red]", style="red")
        console.print(f"[bold red]{message}[/bold red]", justify="center")
    console.print()
