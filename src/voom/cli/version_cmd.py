"""``voom print`` and ``voom parse`` --- the project's own voom version.

``print`` reads the manifest's base version and qualifies it with the last
commit touching the project directory. ``parse`` extracts the commit time
and sha from a voom version or jar path.

Exit Codes:
    0 --- Success.
    1 --- Not a voom version, or the project is not in a git checkout.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from voom.cli.common import get_config, handle_errors, read_manifest
from voom.cli.output import print_error, print_json
from voom.core.versions import parse_version, qualify_version
from voom.exceptions import VersionFormatError, VoomError
from voom.git.discovery import find_repository


def self_version(project: Path, long_sha: bool = False, timeout: float = 300.0) -> str:
    """The voom version of the project whose manifest is ``project``.

    Raises:
        VoomError: If the project is not inside a git checkout.
        GitCommandError: If no commit touches the project directory.
    """
    manifest = read_manifest(project)
    project_dir = project.resolve().parent
    repo = find_repository(project_dir, timeout=timeout)
    if repo is None:
        raise VoomError(f"{project_dir} is not inside a git checkout", project=str(project))
    relative = project_dir.relative_to(repo.worktree.resolve()).as_posix()
    record = repo.last_change("" if relative == "." else relative)
    return qualify_version(manifest.version, record.ctime, record.sha, long_sha)


@click.command("print")
@click.argument("project", type=click.Path(exists=True, dir_okay=False), default="project.clj")
@click.option("--long-sha", is_flag=True, help="Use the full commit sha.")
@handle_errors
def print_command(project: str, long_sha: bool) -> None:
    """Print the voom version of PROJECT (default: ./project.clj)."""
    config = get_config()
    click.echo(self_version(Path(project), long_sha, timeout=config.git_timeout))


@click.command("parse")
@click.argument("version")
def parse_command(version: str) -> None:
    """Print the commit time and sha carried by VERSION."""
    stamp = parse_version(version)
    if stamp is None:
        print_error(VersionFormatError(f"Not parseable as voom-version: {version}", version=version))
        sys.exit(1)
    print_json({"ctime": stamp.ctime.isoformat(), "sha": stamp.sha})
