"""``Repository`` implementation backed by the git command line.

Bare repositories and displaced worktrees are not supported: the working
tree is always the parent directory of the ``.git`` directory.
"""

from __future__ import annotations

import logging
from functools import cached_property
from pathlib import Path

from voom.exceptions import GitCommandError
from voom.git.base import CommitRecord, Repository
from voom.git.command import DEFAULT_TIMEOUT, CommandResult, run_command
from voom.git.log import LOG_FORMAT, parse_log

logger = logging.getLogger(__name__)

REMOTE = "origin"


class GitRepository(Repository):
    """A git checkout driven through ``git --git-dir=... --work-tree=...``.

    Args:
        gitdir: The repository's ``.git`` directory.
        timeout: Seconds allowed for each git subcommand.
    """

    def __init__(self, gitdir: Path, timeout: float = DEFAULT_TIMEOUT) -> None:
        super().__init__()
        self.gitdir = Path(gitdir)
        self.worktree = self.gitdir.parent
        self.timeout = timeout

    def git(self, *args: str, check: bool = True) -> CommandResult:
        """Run a git subcommand against this repository."""
        return run_command(
            [
                "git",
                f"--git-dir={self.gitdir}",
                f"--work-tree={self.worktree}",
                *args,
            ],
            cwd=self.worktree,
            timeout=self.timeout,
            check=check,
        )

    # -- Identity -----------------------------------------------------------

    @property
    def location(self) -> str:
        return str(self.worktree)

    @cached_property
    def origin_url(self) -> str | None:
        result = self.git("config", "--get", f"remote.{REMOTE}.url", check=False)
        return result.stdout.strip() or None

    @cached_property
    def default_branch(self) -> str | None:
        result = self.git("symbolic-ref", "--quiet", f"refs/remotes/{REMOTE}/HEAD", check=False)
        ref = result.stdout.strip()
        prefix = f"refs/remotes/{REMOTE}/"
        if result.exit_code == 0 and ref.startswith(prefix):
            return ref[len(prefix):]
        branches = self.branches()
        for candidate in ("main", "master"):
            if candidate in branches:
                return candidate
        return None

    # -- Reading ------------------------------------------------------------

    def branches(self) -> dict[str, str]:
        result = self.git(
            "for-each-ref", "--format=%(refname:strip=3) %(objectname)",
            f"refs/remotes/{REMOTE}",
        )
        found: dict[str, str] = {}
        for line in result.lines:
            name, _, sha = line.partition(" ")
            if name and name != "HEAD":
                found[name] = sha
        return found

    def tags(self) -> dict[str, str]:
        result = self.git(
            "for-each-ref", "--format=%(refname:strip=2) %(objectname) %(*objectname)",
            "refs/tags",
        )
        found: dict[str, str] = {}
        for line in result.lines:
            fields = line.split(" ")
            if len(fields) < 2:
                continue
            peeled = fields[2] if len(fields) > 2 and fields[2] else fields[1]
            found[fields[0]] = peeled
        return found

    def commit_log(self) -> list[CommitRecord]:
        result = self.git("log", "--all", "--topo-order", "--reverse", LOG_FORMAT)
        return parse_log(result.stdout)

    def manifest_changes(
        self, tip: str, exclude: list[str], manifest_name: str
    ) -> list[CommitRecord]:
        # Merges are listed with their diff against the first parent, so a
        # merge that brings a manifest change into the branch is reported.
        args = [
            "log", "--topo-order", "--reverse", "--name-status", "--no-renames",
            "--full-history", "--diff-merges=first-parent", LOG_FORMAT, tip,
        ]
        args.extend(f"^{sha}" for sha in exclude)
        args.extend(["--", manifest_name, f"*/{manifest_name}"])
        records = parse_log(self.git(*args).stdout)
        return [_only_manifests(r, manifest_name) for r in records]

    def show_file(self, sha: str, path: str) -> str:
        return self.git("show", f"{sha}:{path}").stdout

    def contains_commit(self, sha: str) -> bool:
        result = self.git("rev-parse", "--verify", "--quiet", f"{sha}^{{commit}}", check=False)
        return result.exit_code == 0

    def list_files(self, name: str) -> list[str]:
        return self.git("ls-files", "--", name, f"*/{name}").lines

    def last_change(self, path: str) -> CommitRecord:
        args = ["log", "-1", LOG_FORMAT]
        if path:
            args.extend(["--", path])
        records = parse_log(self.git(*args).stdout)
        if not records:
            raise GitCommandError(
                f"No commit touches {path or 'the repository'} in {self.location}",
                args=args, exit_code=0, stdout="", stderr="",
            )
        return records[0]

    # -- Mutating -----------------------------------------------------------

    def write_tag(self, name: str, sha: str) -> None:
        with self.mutation():
            self.git("tag", "-f", name, sha)

    def fetch(self) -> None:
        logger.info("Fetching %s", self.location)
        self.git("fetch", "--tags", REMOTE)

    def checkout(self, ref: str) -> None:
        with self.mutation():
            logger.info("Checking out %s in %s", ref, self.location)
            self.git("checkout", "--quiet", ref)


def _only_manifests(record: CommitRecord, manifest_name: str) -> CommitRecord:
    changes = tuple(
        c for c in record.changes if c.path.rsplit("/", 1)[-1] == manifest_name
    )
    if changes == record.changes:
        return record
    return CommitRecord(
        sha=record.sha, parents=record.parents, ctime=record.ctime,
        refs=record.refs, changes=changes,
    )
