"""Shared fixtures for voom tests.

``FakeRepository`` is an in-memory implementation of the ``Repository``
port. Commits are named by short labels; each label maps to a real-looking
40-character sha so tag encoding and version qualifiers behave as they do
against git.
"""

from __future__ import annotations

import hashlib
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from voom.exceptions import GitCommandError
from voom.git.base import CommitRecord, PathChange, Repository

EPOCH = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def label_sha(label: str) -> str:
    return hashlib.sha1(label.encode("utf-8")).hexdigest()


def clj(
    coordinate: str,
    version: str,
    deps: list[tuple[str, str]] | None = None,
) -> str:
    """Render a literal ``project.clj``."""
    lines = [f'(defproject {coordinate} "{version}"', '  :description "test project"']
    if deps is not None:
        rendered = "\n                 ".join(f'[{name} "{ver}"]' for name, ver in deps)
        lines.append(f"  :dependencies [{rendered}]")
    return "\n".join(lines) + ")\n"


class FakeRepository(Repository):
    """In-memory repository with a scripted commit graph."""

    def __init__(
        self,
        location: str,
        origin_url: str | None = None,
        default_branch: str | None = "main",
    ) -> None:
        super().__init__()
        self._location = location
        self._origin_url = origin_url
        self._default_branch = default_branch
        self.records: list[CommitRecord] = []
        self.trees: dict[str, dict[str, str]] = {}
        self.shas: dict[str, str] = {}
        self.branch_tips: dict[str, str] = {}
        self.tag_refs: dict[str, str] = {}
        self.written: list[tuple[str, str]] = []
        self.checkouts: list[str] = []
        self.fetches = 0
        self.on_fetch: Callable[[FakeRepository], None] | None = None
        self.unreadable: set[tuple[str, str]] = set()

    # -- Building history ---------------------------------------------------

    def commit(
        self,
        label: str,
        *parents: str,
        files: dict[str, str | None] | None = None,
    ) -> str:
        """Add commit ``label`` with parent labels; ``files`` maps paths to
        new content, None deleting the path. Returns the sha.

        Changes are recorded only for paths whose content differs from the
        first parent.

        A merge takes the first parent's tree plus whatever each other parent
        changed since its merge base, then applies ``files``. Its changes are
        the diff against the first parent, as ``git log
        --diff-merges=first-parent`` reports them.
        """
        sha = label_sha(f"{self._location}:{label}")
        parent_shas = tuple(self.shas[p] for p in parents)
        first = self.trees[parent_shas[0]] if parent_shas else {}
        tree = dict(first)
        for other in parent_shas[1:]:
            self._merge_into(tree, parent_shas[0], other)
        for path, content in (files or {}).items():
            if content is None:
                tree.pop(path, None)
            else:
                tree[path] = content
        changes = []
        for path in sorted(set(first) | set(tree)):
            if first.get(path) == tree.get(path):
                continue
            if path not in tree:
                changes.append(PathChange("D", path))
            else:
                changes.append(PathChange("M" if path in first else "A", path))
        self.shas[label] = sha
        self.trees[sha] = tree
        self.records.append(
            CommitRecord(
                sha=sha,
                parents=parent_shas,
                ctime=EPOCH + timedelta(minutes=len(self.records)),
                changes=tuple(changes),
            )
        )
        return sha

    def _merge_into(self, tree: dict[str, str], first: str, other: str) -> None:
        common = self.closure(first) & self.closure(other)
        order = {r.sha: i for i, r in enumerate(self.records)}
        base = self.trees[max(common, key=order.__getitem__)] if common else {}
        theirs = self.trees[other]
        for path in set(base) | set(theirs):
            if base.get(path) == theirs.get(path):
                continue
            if path in theirs:
                tree[path] = theirs[path]
            else:
                tree.pop(path, None)

    def branch(self, name: str, label: str) -> None:
        self.branch_tips[name] = self.shas[label]

    def sha(self, label: str) -> str:
        return self.shas[label]

    def record(self, sha: str) -> CommitRecord:
        return next(r for r in self.records if r.sha == sha)

    def closure(self, sha: str) -> set[str]:
        seen: set[str] = set()
        stack = [sha]
        while stack:
            current = stack.pop()
            if current not in seen:
                seen.add(current)
                stack.extend(self.record(current).parents)
        return seen

    # -- Repository port ----------------------------------------------------

    @property
    def location(self) -> str:
        return self._location

    @property
    def origin_url(self) -> str | None:
        return self._origin_url

    @property
    def default_branch(self) -> str | None:
        return self._default_branch

    def branches(self) -> dict[str, str]:
        return dict(self.branch_tips)

    def tags(self) -> dict[str, str]:
        return dict(self.tag_refs)

    def commit_log(self) -> list[CommitRecord]:
        return list(self.records)

    def manifest_changes(
        self, tip: str, exclude: list[str], manifest_name: str
    ) -> list[CommitRecord]:
        wanted = self.closure(tip)
        for sha in exclude:
            wanted -= self.closure(sha)
        found = []
        for record in self.records:
            if record.sha not in wanted:
                continue
            changes = tuple(
                c for c in record.changes if c.path.rsplit("/", 1)[-1] == manifest_name
            )
            if changes:
                found.append(
                    CommitRecord(record.sha, record.parents, record.ctime, record.refs, changes)
                )
        return found

    def show_file(self, sha: str, path: str) -> str:
        if (sha, path) in self.unreadable or path not in self.trees.get(sha, {}):
            raise GitCommandError(
                f"fatal: path {path} does not exist in {sha[:7]}",
                args=["show", f"{sha}:{path}"], exit_code=128, stdout="", stderr="",
            )
        return self.trees[sha][path]

    def write_tag(self, name: str, sha: str) -> None:
        with self.mutation():
            self.tag_refs[name] = sha
            self.written.append((name, sha))

    def fetch(self) -> None:
        self.fetches += 1
        if self.on_fetch is not None:
            self.on_fetch(self)

    def checkout(self, ref: str) -> None:
        with self.mutation():
            sha = self.branch_tips.get(ref) or self._expand(ref)
            self.checkouts.append(sha)
            root = Path(self._location)
            for path, content in self.trees[sha].items():
                target = root / path
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(content, encoding="utf-8")

    def contains_commit(self, sha: str) -> bool:
        return any(full.startswith(sha) for full in self.trees)

    def _expand(self, sha: str) -> str:
        return next(full for full in self.trees if full.startswith(sha))

    def list_files(self, name: str) -> list[str]:
        if not self.checkouts:
            return []
        tree = self.trees[self.checkouts[-1]]
        return sorted(p for p in tree if p.rsplit("/", 1)[-1] == name)

    def last_change(self, path: str) -> CommitRecord:
        for record in reversed(self.records):
            if not path or any(
                c.path == path or c.path.startswith(path.rstrip("/") + "/")
                for c in record.changes
            ):
                return record
        raise GitCommandError(
            f"No commit touches {path}", args=["log"], exit_code=0, stdout="", stderr=""
        )


@pytest.fixture
def make_repo(tmp_path: Path) -> Callable[..., FakeRepository]:
    """Factory for ``FakeRepository`` instances rooted under ``tmp_path``."""

    def factory(name: str = "repo", **kwargs: object) -> FakeRepository:
        root = tmp_path / "repos" / name
        root.mkdir(parents=True, exist_ok=True)
        return FakeRepository(str(root), **kwargs)  # type: ignore[arg-type]

    return factory


@pytest.fixture
def project_clj() -> Callable[..., str]:
    """Renders literal ``project.clj`` text: ``project_clj(coord, version, deps)``."""
    return clj
