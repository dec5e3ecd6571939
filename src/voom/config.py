"""Configuration for voom.

Settings come from three layers, later layers winning:

1. Built-in defaults.
2. An optional YAML file (``$VOOM_CONFIG`` or ``~/.voom.yaml``).
3. Environment variables (``REPOS_HOME``, ``VOOM_GIT_TIMEOUT``,
   ``VOOM_MAX_WORKERS``).

Example ``~/.voom.yaml``::

    repos_home: ~/src/voom-repos
    git_timeout: 120
    max_workers: 8
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from voom.exceptions import ConfigurationError

DEFAULT_CONFIG_FILE = "~/.voom.yaml"

_PATH_FIELDS = {"repos_home", "local_repository"}
_INT_FIELDS = {"max_workers"}
_FLOAT_FIELDS = {"git_timeout"}


@dataclass(frozen=True)
class VoomConfig:
    """Resolved voom settings.

    Attributes:
        repos_home: Directory holding one clone per known repository.
        manifest_name: File name of the build descriptor.
        git_timeout: Seconds before a git subcommand is abandoned.
        max_workers: Parallel workers for per-repository fetch and scan.
        local_repository: Local artifact repository consulted by build-deps.
        box_dir: Directory (relative to the project) holding box symlinks.
    """

    repos_home: Path = Path("~/.voom-repos").expanduser()
    manifest_name: str = "project.clj"
    git_timeout: float = 300.0
    max_workers: int = 4
    local_repository: Path = Path("~/.m2/repository").expanduser()
    box_dir: str = ".voom-box"


def load_config(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> VoomConfig:
    """Build a ``VoomConfig`` from file and environment.

    Args:
        path: Explicit config file. When None, ``$VOOM_CONFIG`` or
            ``~/.voom.yaml`` is used if it exists.
        environ: Environment mapping (defaults to ``os.environ``).

    Raises:
        ConfigurationError: On unreadable YAML, unknown keys or bad values.
    """
    env = os.environ if environ is None else environ
    config = VoomConfig()

    if path is None:
        candidate = Path(env.get("VOOM_CONFIG", DEFAULT_CONFIG_FILE)).expanduser()
        path = candidate if candidate.is_file() else None
    if path is not None:
        config = _apply(config, _read_yaml(path), source=str(path))

    overrides: dict[str, Any] = {}
    if "REPOS_HOME" in env:
        overrides["repos_home"] = env["REPOS_HOME"]
    if "VOOM_GIT_TIMEOUT" in env:
        overrides["git_timeout"] = env["VOOM_GIT_TIMEOUT"]
    if "VOOM_MAX_WORKERS" in env:
        overrides["max_workers"] = env["VOOM_MAX_WORKERS"]
    return _apply(config, overrides, source="environment")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(
            f"Cannot read config file {path}: {exc}", path=str(path)
        ) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file {path} must contain a mapping", path=str(path)
        )
    return data


def _apply(config: VoomConfig, values: Mapping[str, Any], source: str) -> VoomConfig:
    known = {f.name for f in fields(VoomConfig)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigurationError(
            f"Unknown config keys in {source}: {', '.join(unknown)}",
            source=source, keys=unknown,
        )

    changes: dict[str, Any] = {}
    for key, raw in values.items():
        try:
            if key in _PATH_FIELDS:
                changes[key] = Path(str(raw)).expanduser()
            elif key in _INT_FIELDS:
                changes[key] = int(raw)
            elif key in _FLOAT_FIELDS:
                changes[key] = float(raw)
            else:
                changes[key] = str(raw)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(
                f"Invalid value for {key!r} in {source}: {raw!r}",
                source=source, key=key, value=raw,
            ) from exc

    if changes.get("max_workers", 1) < 1:
        raise ConfigurationError("max_workers must be at least 1", source=source)
    if changes.get("git_timeout", 1.0) <= 0:
        raise ConfigurationError("git_timeout must be positive", source=source)
    return replace(config, **changes)
