"""Rich output formatting helpers for the voom CLI.

Tables for resolutions, dependency updates, scan reports and the box, plus
the panel used to report any ``VoomError``.
"""

from __future__ import annotations

import json
from typing import Any

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from voom.core.build_deps import InstalledProject
from voom.core.resolver.models import ResolvedVersion
from voom.core.scanner.scanner import ScanReport
from voom.exceptions import VoomError

console = Console()


def print_error(error: VoomError) -> None:
    """Print a failure with everything needed to diagnose it.

    Args:
        error: The failure to report.
    """
    body = Text(error.message, style="bold")
    console.print(Panel(body, title=f"[red]{error.kind}[/red]", expand=False))
    report = error.to_dict()["context"]
    if not report:
        return
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("Key", style="dim")
    table.add_column("Value", overflow="fold")
    for key, value in report.items():
        if value in (None, "", [], {}):
            continue
        if isinstance(value, list):
            value = "\n".join(str(v) for v in value)
        table.add_row(key, str(value))
    console.print(table)


def print_json(data: Any) -> None:
    """Print ``data`` as indented JSON without rich markup."""
    click.echo(json.dumps(data, indent=2, default=str))


def print_resolutions(results: list[ResolvedVersion], long_sha: bool = False) -> None:
    """Print one row per resolved (repository, branch, path).

    Args:
        results: Resolver output.
        long_sha: Show full shas in the qualified version.
    """
    table = Table(title="Resolved Versions", show_header=True, header_style="bold")
    table.add_column("Repository", style="bold", overflow="fold")
    table.add_column("Branch")
    table.add_column("Path", style="dim")
    table.add_column("Version", overflow="fold")
    for result in results:
        table.add_row(
            result.location, result.branch, result.path or ".",
            result.qualified(long_sha),
        )
    console.print(table)
    if len(results) > 1:
        console.print(
            f"[yellow]{len(results)} candidates match; narrow with "
            "--repo, --branch, --path or --version-prefix.[/yellow]"
        )


def print_dependency_updates(rows: list[tuple[str, str, str | None]]) -> None:
    """Print each dependency with its current and fresh version.

    Args:
        rows: ``(coordinate, old_version, new_version)``; ``new_version`` is
            None when the dependency was left unchanged.
    """
    table = Table(title="Dependencies", show_header=True, header_style="bold")
    table.add_column("Dependency", style="bold")
    table.add_column("Version", overflow="fold")
    for coordinate, old, new in rows:
        if new is None or new == old:
            table.add_row(coordinate, Text(old, style="dim"))
        else:
            table.add_row(coordinate, Text.assemble(old, (" -> ", "dim"), (new, "green")))
    console.print(table)


def print_scan_reports(reports: list[ScanReport]) -> None:
    """Print tags written per repository."""
    table = Table(title="Retag", show_header=True, header_style="bold")
    table.add_column("Repository", style="bold", overflow="fold")
    table.add_column("Branches", justify="right")
    table.add_column("Tags", justify="right")
    table.add_column("Skipped", justify="right")
    for report in reports:
        skipped = Text(str(len(report.skipped)), style="yellow" if report.skipped else "dim")
        table.add_row(
            report.location, str(len(report.branches)), str(len(report.tags)), skipped,
        )
    console.print(table)


def print_installed(installed: list[InstalledProject]) -> None:
    if not installed:
        console.print("[green]All dependencies already available.[/green]")
        return
    table = Table(title="Installed", show_header=True, header_style="bold")
    table.add_column("Dependency", style="bold")
    table.add_column("Version", overflow="fold")
    table.add_column("From", style="dim", overflow="fold")
    for project in installed:
        source = f"{project.location}/{project.path}" if project.path else project.location
        table.add_row(str(project.coordinate), project.version, source)
    console.print(table)


def print_box(entries: dict[str, str]) -> None:
    if not entries:
        console.print("[dim]Box is empty.[/dim]")
        return
    table = Table(title="Box", show_header=True, header_style="bold")
    table.add_column("Name", style="bold")
    table.add_column("Target", overflow="fold")
    for name, target in entries.items():
        table.add_row(name, target)
    console.print(table)
