"""``voom resolve COORD`` --- newest version of a dependency on each branch.

Resolves against the tags already written by ``voom retag``; nothing is
fetched.

Exit Codes:
    0 --- Exactly one candidate.
    1 --- No candidate, or a failure (ambiguous tag set, git error).
    3 --- Several candidates; all are listed.
"""

from __future__ import annotations

import sys

import click

from voom.cli.common import build_resolver, get_config, handle_errors, known_repositories
from voom.cli.output import print_json, print_resolutions
from voom.core.resolver.models import ResolutionRequest
from voom.core.tags.models import ProjectCoordinate

EXIT_AMBIGUOUS = 3


def parse_coordinate(ctx: click.Context, param: click.Parameter, value: str) -> ProjectCoordinate:
    try:
        return ProjectCoordinate.parse(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc), ctx=ctx, param=param) from exc


@click.command("resolve")
@click.argument("coordinate", callback=parse_coordinate)
@click.option("--version-prefix", default=None, help="Only versions starting with this.")
@click.option("--repo", default=None, help="Origin URL or checkout directory name.")
@click.option("--branch", default=None, help="Branch pattern (default: each default branch).")
@click.option("--path", "path_", default=None, help="Manifest directory within the repository.")
@click.option("--long-sha", is_flag=True, help="Show full commit shas.")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table.")
@handle_errors
def resolve_command(
    coordinate: ProjectCoordinate,
    version_prefix: str | None,
    repo: str | None,
    branch: str | None,
    path_: str | None,
    long_sha: bool,
    as_json: bool,
) -> None:
    """Resolve COORDINATE (group/name or name) across known repositories."""
    config = get_config()
    resolver = build_resolver(config, known_repositories(config))
    request = ResolutionRequest(
        coordinate=coordinate, version_prefix=version_prefix, repo=repo,
        branch=branch, path=path_,
    )
    results = resolver.resolve(request)

    if as_json:
        print_json([r.to_dict() for r in results])
    else:
        print_resolutions(results, long_sha)
    if len(results) > 1:
        sys.exit(EXIT_AMBIGUOUS)
