"""Shared fixtures for CLI tests.

Commands run through Click's ``CliRunner`` against an explicit config file.
Repository discovery is replaced by ``use_repos`` so commands operate on
in-memory ``FakeRepository`` instances.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner, Result

from voom.cli.main import cli
from voom.cli.output import console


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the caller's environment out of config loading and widen the
    shared console so table cells are not folded."""
    for name in ("VOOM_CONFIG", "REPOS_HOME", "VOOM_GIT_TIMEOUT", "VOOM_MAX_WORKERS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(console, "width", 240)


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "voom.yaml"
    path.write_text(yaml.safe_dump({
        "repos_home": str(tmp_path / "repos"),
        "local_repository": str(tmp_path / "m2"),
        "max_workers": 2,
        "git_timeout": 30,
    }))
    return path


@pytest.fixture
def invoke(runner: CliRunner, config_file: Path) -> Callable[..., Result]:
    """Run ``voom --config <config_file> ARGS...``."""

    def run(*args: str) -> Result:
        return runner.invoke(cli, ["--config", str(config_file), *args])

    return run


@pytest.fixture
def use_repos(monkeypatch: pytest.MonkeyPatch) -> Callable[..., None]:
    """Make repository discovery return the given repositories."""

    def install(*repos: object) -> None:
        monkeypatch.setattr(
            "voom.cli.common.discover_repositories",
            lambda home, timeout=None: list(repos),
        )

    return install
