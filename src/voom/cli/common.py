"""Shared plumbing for voom commands: configuration, repositories, errors."""

from __future__ import annotations

import functools
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import click

from voom.cli.output import print_error
from voom.config import VoomConfig
from voom.core.fanout import fan_out
from voom.core.manifest.models import Manifest
from voom.core.manifest.reader import CljManifestReader
from voom.core.resolver.models import snapshot_repository
from voom.core.resolver.resolver import VersionResolver
from voom.core.scanner.scanner import ScanReport, TagScanner
from voom.exceptions import VoomError
from voom.git.base import Repository
from voom.git.discovery import discover_repositories

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def handle_errors(func: F) -> F:
    """Report any ``VoomError`` as a panel and exit 1."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except VoomError as exc:
            print_error(exc)
            sys.exit(1)

    return wrapper  # type: ignore[return-value]


def get_config() -> VoomConfig:
    return click.get_current_context().find_root().obj


def known_repositories(config: VoomConfig) -> list[Repository]:
    return list(discover_repositories(config.repos_home, timeout=config.git_timeout))


def read_manifest(path: Path) -> Manifest:
    """Read the project manifest at ``path``."""
    return CljManifestReader().read(path.read_text(encoding="utf-8"), str(path))


def build_resolver(config: VoomConfig, repos: list[Repository]) -> VersionResolver:
    """Snapshot every repository in parallel and return a resolver over them."""
    return VersionResolver(fan_out(repos, snapshot_repository, config.max_workers))


def refresh(config: VoomConfig, repos: list[Repository], fetch: bool = True) -> list[ScanReport]:
    """Optionally fetch, then tag-scan, every repository in parallel."""

    def work(repo: Repository) -> ScanReport:
        if fetch:
            repo.fetch()
        scanner = TagScanner(
            CljManifestReader(),
            manifest_name=config.manifest_name,
            progress=lambda done, total: logger.info(
                "%s: %d/%d manifest commits", repo.location, done, total
            ),
        )
        return scanner.scan(repo)

    return fan_out(repos, work, config.max_workers)
