"""Transitive build of missing voom-versioned dependencies.

A dependency whose version carries a voom qualifier names the exact commit
it was built from. When such an artifact is missing from the local artifact
store, ``BuildDeps`` finds a known repository containing that commit,
checks it out, locates the manifest declaring the dependency's coordinate,
builds that project's own missing dependencies first, then installs it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from voom.core.manifest.models import Dependency, Manifest, ManifestReader
from voom.core.tags.models import ProjectCoordinate
from voom.core.versions import parse_version
from voom.exceptions import InstallError, ManifestParseError, NoMatchingVersionError
from voom.git.base import Repository
from voom.git.command import DEFAULT_TIMEOUT, run_command

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Artifact store port
# ---------------------------------------------------------------------------


class ArtifactStore(ABC):
    """Where built artifacts are installed and looked up."""

    @abstractmethod
    def is_installed(self, coordinate: ProjectCoordinate, version: str) -> bool:
        """True if ``coordinate`` at ``version`` is already available."""

    @abstractmethod
    def install(self, project_dir: Path) -> None:
        """Build and install the project rooted at ``project_dir``."""


class MavenLocalRepository(ArtifactStore):
    """A Maven-layout local repository filled by ``lein voom install``.

    Args:
        root: Repository root, usually ``~/.m2/repository``.
        timeout: Seconds allowed for one install.
    """

    def __init__(self, root: Path, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.root = Path(root)
        self.timeout = timeout

    def artifact_dir(self, coordinate: ProjectCoordinate, version: str) -> Path:
        return self.root.joinpath(*coordinate.group.split("."), coordinate.name, version)

    def is_installed(self, coordinate: ProjectCoordinate, version: str) -> bool:
        return self.artifact_dir(coordinate, version).is_dir()

    def install(self, project_dir: Path) -> None:
        logger.info("Installing %s", project_dir)
        run_command(
            ["lein", "voom", "install"],
            cwd=project_dir,
            timeout=self.timeout,
            error_cls=InstallError,
        )


# ---------------------------------------------------------------------------
# BuildDeps
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InstalledProject:
    """A project built and installed by ``BuildDeps``."""

    coordinate: ProjectCoordinate
    version: str
    location: str
    path: str


class BuildDeps:
    """Builds missing voom-versioned dependencies from known repositories.

    Args:
        repos: Known repositories.
        reader: Reads manifests found in checkouts.
        store: Artifact store consulted and filled.
        manifest_name: File name of manifests.
    """

    def __init__(
        self,
        repos: Sequence[Repository],
        reader: ManifestReader,
        store: ArtifactStore,
        manifest_name: str = "project.clj",
    ) -> None:
        self.repos = list(repos)
        self.reader = reader
        self.store = store
        self.manifest_name = manifest_name
        self._fetched = False

    def run(self, manifest: Manifest) -> list[InstalledProject]:
        """Install every missing voom-versioned dependency of ``manifest``,
        dependencies of dependencies first.

        Raises:
            NoMatchingVersionError: If no known repository holds the commit
                or no manifest there declares the dependency.
            InstallError: If an install fails.
        """
        installed: list[InstalledProject] = []
        self._build(manifest, set(), installed)
        return installed

    def _build(
        self,
        manifest: Manifest,
        seen: set[tuple[ProjectCoordinate, str]],
        installed: list[InstalledProject],
    ) -> None:
        for dep in manifest.dependencies:
            key = (dep.coordinate, dep.version)
            if key in seen:
                continue
            seen.add(key)
            stamp = parse_version(dep.version)
            if stamp is None:
                logger.debug("Skipping %s %s: not a voom version", dep.coordinate, dep.version)
                continue
            if self.store.is_installed(dep.coordinate, dep.version):
                logger.debug("%s %s already installed", dep.coordinate, dep.version)
                continue

            projects = self._find_projects(dep, stamp.sha)
            if len(projects) > 1:
                logger.warning(
                    "Multiple projects match %s %s: %s", dep.coordinate, dep.version,
                    ", ".join(f"{r.location}/{p.path}" for r, p in projects),
                )
            for repo, project in projects:
                self._build(project, seen, installed)
                with repo.mutation():
                    repo.checkout(stamp.sha)
                    self.store.install(Path(repo.location) / project.path)
                installed.append(
                    InstalledProject(dep.coordinate, dep.version, repo.location, project.path)
                )

    def _containing(self, sha: str) -> list[Repository]:
        found = [r for r in self.repos if r.contains_commit(sha)]
        if not found and not self._fetched:
            self._fetched = True
            for repo in self.repos:
                repo.fetch()
            found = [r for r in self.repos if r.contains_commit(sha)]
        return found

    def _find_projects(self, dep: Dependency, sha: str) -> list[tuple[Repository, Manifest]]:
        repos = self._containing(sha)
        if not repos:
            raise NoMatchingVersionError(
                f"No known repository contains {sha} for {dep.coordinate} {dep.version} "
                "(a new repository may need cloning into the repositories home)",
                coordinate=str(dep.coordinate), version=dep.version, sha=sha,
                repositories=[r.location for r in self.repos],
            )

        matches = []
        for repo in repos:
            with repo.mutation():
                repo.checkout(sha)
                for rel in repo.list_files(self.manifest_name):
                    text = (Path(repo.location) / rel).read_text(encoding="utf-8")
                    try:
                        project = self.reader.read(text, rel)
                    except ManifestParseError as exc:
                        logger.warning("Cannot read %s in %s: %s", rel, repo.location, exc.message)
                        continue
                    if project.coordinate == dep.coordinate:
                        matches.append((repo, project))
        if not matches:
            raise NoMatchingVersionError(
                f"No project {dep.coordinate} at {sha} in {', '.join(r.location for r in repos)}",
                coordinate=str(dep.coordinate), version=dep.version, sha=sha,
                repositories=[r.location for r in repos],
            )
        return matches
