"""``voom build-deps`` --- build and install missing voom dependencies.

Exit Codes:
    0 --- Every voom dependency is installed.
    1 --- A dependency could not be located or installed.
"""

from __future__ import annotations

from pathlib import Path

import click

from voom.cli.common import get_config, handle_errors, known_repositories, read_manifest
from voom.cli.output import print_installed
from voom.core.build_deps import BuildDeps, MavenLocalRepository
from voom.core.manifest.reader import CljManifestReader


@click.command("build-deps")
@click.option(
    "--project", "project", type=click.Path(exists=True, dir_okay=False),
    default="project.clj", help="Manifest whose dependencies to build.",
)
@handle_errors
def build_deps_command(project: str) -> None:
    """Resolve dependencies like 'lein deps', building missing voom
    versions from the known repositories."""
    config = get_config()
    builder = BuildDeps(
        known_repositories(config),
        CljManifestReader(),
        MavenLocalRepository(config.local_repository, timeout=config.git_timeout),
        manifest_name=config.manifest_name,
    )
    print_installed(builder.run(read_manifest(Path(project))))
