"""``voom box`` --- manage symlinked dependency checkouts."""

from __future__ import annotations

from pathlib import Path

import click

from voom.cli.common import build_resolver, get_config, handle_errors, known_repositories
from voom.cli.output import console, print_box
from voom.cli.resolve_cmd import parse_coordinate
from voom.core.box import box_add, box_list, box_remove
from voom.core.resolver.models import ResolutionRequest
from voom.core.tags.models import ProjectCoordinate


def _box_dir(box_dir: str | None) -> Path:
    return Path(box_dir or get_config().box_dir)


@click.group("box")
def box_group() -> None:
    """Link dependency checkouts into the project's box directory."""


@box_group.command("add")
@click.argument("coordinate", callback=parse_coordinate)
@click.option("--branch", default=None, help="Branch pattern to resolve against.")
@click.option("--repo", default=None, help="Origin URL or checkout directory name.")
@click.option("--box-dir", default=None, help="Box directory (default from config).")
@handle_errors
def box_add_command(
    coordinate: ProjectCoordinate, branch: str | None, repo: str | None, box_dir: str | None
) -> None:
    """Add a link to the checkout of COORDINATE."""
    config = get_config()
    resolver = build_resolver(config, known_repositories(config))
    request = ResolutionRequest(coordinate=coordinate, branch=branch, repo=repo)
    link, resolved = box_add(request, resolver, _box_dir(box_dir))
    console.print(f"{link} -> {resolved.location}/{resolved.path}".rstrip("/"))


@box_group.command("remove")
@click.argument("name")
@click.option("--box-dir", default=None, help="Box directory (default from config).")
@handle_errors
def box_remove_command(name: str, box_dir: str | None) -> None:
    """Remove the link NAME."""
    link = box_remove(name, _box_dir(box_dir))
    console.print(f"Removed {link}")


@box_group.command("list")
@click.option("--box-dir", default=None, help="Box directory (default from config).")
def box_list_command(box_dir: str | None) -> None:
    """List box links."""
    print_box(box_list(_box_dir(box_dir)))
