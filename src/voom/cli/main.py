"""voom CLI --- git-derived versions for multi-repository Leiningen projects.

Entry point for the ``voom`` command-line tool. Registers all subcommands
under a single Click group.

Commands:
    print       --- Print the project's own voom version.
    parse       --- Extract commit time and sha from a voom version.
    resolve     --- Resolve a dependency across known repositories.
    freshen     --- Bump voom dependencies in project.clj.
    build-deps  --- Build and install missing voom dependencies.
    retag       --- Fetch and tag every known repository.
    box         --- Manage symlinked dependency checkouts.

Usage::

    voom print
    voom parse 1.2.0-20240105_101500-gabc1234
    voom resolve org.example/widgets --version-prefix 1.2
    voom -v retag
    voom freshen --dry-run
    voom box add widgets
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from voom import __version__
from voom.cli.box_cmd import box_group
from voom.cli.build_deps_cmd import build_deps_command
from voom.cli.freshen_cmd import freshen_command
from voom.cli.output import print_error
from voom.cli.resolve_cmd import resolve_command
from voom.cli.retag_cmd import retag_command
from voom.cli.version_cmd import parse_command, print_command
from voom.config import load_config
from voom.exceptions import ConfigurationError
from voom.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", count=True, help="More logging (-vv for debug).")
@click.option("-q", "--quiet", count=True, help="Only log errors.")
@click.option(
    "--config", "config_path", type=click.Path(dir_okay=False), default=None,
    help="YAML configuration file (default: $VOOM_CONFIG or ~/.voom.yaml).",
)
@click.pass_context
def cli(ctx: click.Context, verbose: int, quiet: int, config_path: str | None) -> None:
    """voom: versions derived from git history.

    Tags every manifest change in the known repositories, resolves the
    newest commit of a dependency reachable from a branch, and writes
    those versions back into project.clj.
    """
    setup_logging(verbose - quiet)
    try:
        ctx.obj = load_config(Path(config_path) if config_path else None)
    except ConfigurationError as exc:
        print_error(exc)
        sys.exit(1)


cli.add_command(print_command)
cli.add_command(parse_command)
cli.add_command(resolve_command)
cli.add_command(freshen_command)
cli.add_command(build_deps_command)
cli.add_command(retag_command)
cli.add_command(box_group)
