"""``voom retag`` --- fetch and tag-scan every known repository.

Repositories are processed in parallel; the command returns once all have
finished.
"""

from __future__ import annotations

import click

from voom.cli.common import get_config, handle_errors, known_repositories, refresh
from voom.cli.output import console, print_scan_reports


@click.command("retag")
@click.option("--fetch/--no-fetch", default=True, help="Fetch from origin before scanning.")
@handle_errors
def retag_command(fetch: bool) -> None:
    """Write version tags for new manifest changes in all repositories."""
    config = get_config()
    repos = known_repositories(config)
    if not repos:
        console.print(f"[dim]No repositories under {config.repos_home}.[/dim]")
        return
    print_scan_reports(refresh(config, repos, fetch=fetch))
