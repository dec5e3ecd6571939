"""``voom freshen`` --- bump voom-versioned dependencies to their newest commit.

Every dependency whose version carries a voom qualifier is resolved on its
repository's default branch (or ``--branch``). Fresh versions are written
back into the manifest atomically. A dependency that resolves nowhere is
left unchanged with a warning; one that resolves ambiguously aborts the
whole run before anything is written.

Exit Codes:
    0 --- Manifest up to date or rewritten.
    1 --- Ambiguous resolution, rewrite failure, or git error.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from voom.cli.common import (
    build_resolver,
    get_config,
    handle_errors,
    known_repositories,
    read_manifest,
    refresh,
)
from voom.cli.output import console, print_dependency_updates
from voom.core.manifest.models import DependencyEdit, Manifest
from voom.core.manifest.reader import CljManifestReader
from voom.core.manifest.rewriter import rewrite_manifest_file
from voom.core.resolver.models import ResolutionRequest
from voom.core.resolver.resolver import VersionResolver
from voom.core.versions import is_voom_version
from voom.exceptions import AmbiguousResolutionError, NoMatchingVersionError

logger = logging.getLogger(__name__)


def plan_edits(
    manifest: Manifest,
    resolver: VersionResolver,
    branch: str | None = None,
    long_sha: bool = False,
) -> tuple[list[DependencyEdit], list[tuple[str, str, str | None]]]:
    """Work out the fresh version of each voom-versioned dependency.

    Returns:
        The edits to apply and one display row per dependency.

    Raises:
        AmbiguousResolutionError: If any dependency has several candidates.
    """
    edits: list[DependencyEdit] = []
    rows: list[tuple[str, str, str | None]] = []
    ambiguous: list[str] = []
    for dep in manifest.dependencies:
        if not is_voom_version(dep.version):
            rows.append((str(dep.coordinate), dep.version, None))
            continue
        request = ResolutionRequest(coordinate=dep.coordinate, branch=branch)
        try:
            results = resolver.resolve(request)
        except NoMatchingVersionError:
            logger.warning("Did not find or freshen voom-version dep %s %s", dep.coordinate, dep.version)
            rows.append((str(dep.coordinate), dep.version, None))
            continue
        if len(results) > 1:
            ambiguous.extend(
                f"{dep.coordinate}: {r.location} {r.branch} {r.path or '.'} {r.version}"
                for r in results
            )
            continue
        fresh = results[0].qualified(long_sha)
        rows.append((str(dep.coordinate), dep.version, fresh))
        if fresh != dep.version:
            edits.append(DependencyEdit(dep.coordinate, dep.version, fresh))

    if ambiguous:
        raise AmbiguousResolutionError(
            "Some dependencies resolve to several candidates; nothing was rewritten",
            candidates=ambiguous,
        )
    return edits, rows


@click.command("freshen")
@click.option(
    "--project", "project", type=click.Path(exists=True, dir_okay=False),
    default="project.clj", help="Manifest to freshen.",
)
@click.option("--branch", default=None, help="Branch pattern to resolve against.")
@click.option("--long-sha", is_flag=True, help="Write full commit shas.")
@click.option("--fetch/--no-fetch", default=True, help="Fetch and retag repositories first.")
@click.option("--dry-run", is_flag=True, help="Show updates without rewriting.")
@handle_errors
def freshen_command(
    project: str, branch: str | None, long_sha: bool, fetch: bool, dry_run: bool
) -> None:
    """Resolve and write back the newest versions of voom dependencies."""
    config = get_config()
    path = Path(project)
    manifest = read_manifest(path)
    repos = known_repositories(config)
    if fetch:
        refresh(config, repos)
    edits, rows = plan_edits(manifest, build_resolver(config, repos), branch, long_sha)

    print_dependency_updates(rows)
    if not edits:
        console.print("[green]All deps already up-to-date.[/green]")
        return
    if dry_run:
        console.print(f"[yellow]Dry run: {len(edits)} updates not written.[/yellow]")
        return
    rewrite_manifest_file(path, edits, CljManifestReader())
    console.print(f"[green]Updated {len(edits)} dependencies in {path}[/green]")
