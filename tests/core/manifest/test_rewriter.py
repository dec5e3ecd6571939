"""Tests for the manifest rewriter.

Verifies exactly-one-match edits on text, byte-for-byte preservation
outside the edited spans, all-or-nothing failure, and the staged file swap
with its misfire handling.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from voom.core.manifest import (
    CljManifestReader,
    Dependency,
    DependencyEdit,
    Manifest,
    rewrite_manifest_file,
    rewrite_manifest_text,
)
from voom.core.tags import ProjectCoordinate
from voom.exceptions import (
    AmbiguousMatchError,
    NoMatchFoundError,
    RewriteMisfireError,
)

FOO = ProjectCoordinate("foo", "foo")
BAR = ProjectCoordinate("org.example", "bar")

PROJECT = """\
(defproject app "0.1.0"
  ;; keep this comment
  :dependencies [[foo "1.0.0"]
                 [org.example/bar   "2.0.0"]
                 [org.example/foo "1.0.0"]])
"""


class TestRewriteText:
    """In-memory edits."""

    def test_single_edit(self) -> None:
        out = rewrite_manifest_text(PROJECT, [DependencyEdit(FOO, "1.0.0", "1.1.0")])
        assert out == PROJECT.replace('[foo "1.0.0"]', '[foo "1.1.0"]')

    def test_whitespace_is_preserved(self) -> None:
        out = rewrite_manifest_text(PROJECT, [DependencyEdit(BAR, "2.0.0", "2.1.0")])
        assert 'org.example/bar   "2.1.0"' in out
        assert len(out) == len(PROJECT)

    def test_qualified_name_does_not_match_bare_name(self) -> None:
        # org.example/foo must not be taken for foo.
        out = rewrite_manifest_text(PROJECT, [DependencyEdit(FOO, "1.0.0", "9")])
        assert '[org.example/foo "1.0.0"]' in out

    def test_several_edits(self) -> None:
        out = rewrite_manifest_text(
            PROJECT,
            [DependencyEdit(FOO, "1.0.0", "1.1.0"), DependencyEdit(BAR, "2.0.0", "2.1.0")],
        )
        assert '[foo "1.1.0"]' in out
        assert 'org.example/bar   "2.1.0"' in out
        assert ";; keep this comment" in out

    def test_no_match(self) -> None:
        with pytest.raises(NoMatchFoundError) as info:
            rewrite_manifest_text(PROJECT, [DependencyEdit(FOO, "3.0.0", "3.1.0")])
        assert info.value.context["coordinate"] == "foo/foo"

    def test_ambiguous_match(self) -> None:
        text = PROJECT + '\n;; foo "1.0.0"\n'
        with pytest.raises(AmbiguousMatchError) as info:
            rewrite_manifest_text(text, [DependencyEdit(FOO, "1.0.0", "1.1.0")])
        assert len(info.value.context["offsets"]) == 2

    def test_batch_fails_as_a_whole(self) -> None:
        with pytest.raises(NoMatchFoundError):
            rewrite_manifest_text(
                PROJECT,
                [DependencyEdit(FOO, "1.0.0", "1.1.0"), DependencyEdit(BAR, "0.0.0", "1")],
            )

    def test_duplicate_edits_rejected(self) -> None:
        edit = DependencyEdit(FOO, "1.0.0", "1.1.0")
        with pytest.raises(AmbiguousMatchError):
            rewrite_manifest_text(PROJECT, [edit, edit])

    def test_version_is_matched_literally(self) -> None:
        text = '(defproject a "1" :dependencies [[foo "1x0x0"]])'
        with pytest.raises(NoMatchFoundError):
            rewrite_manifest_text(text, [DependencyEdit(FOO, "1.0.0", "2")])


class TestRewriteFile:
    """Staged, verified, atomic rewrite of a manifest on disk."""

    def test_rewrites_in_place(self, tmp_path: Path) -> None:
        path = tmp_path / "project.clj"
        path.write_text(PROJECT)
        rewrite_manifest_file(path, [DependencyEdit(FOO, "1.0.0", "1.1.0")], CljManifestReader())
        assert '[foo "1.1.0"]' in path.read_text()
        assert list(tmp_path.iterdir()) == [path]

    def test_failed_match_leaves_file_untouched(self, tmp_path: Path) -> None:
        text = PROJECT + '\n;; foo "1.0.0"\n'
        path = tmp_path / "project.clj"
        path.write_text(text)
        with pytest.raises(AmbiguousMatchError):
            rewrite_manifest_file(path, [DependencyEdit(FOO, "1.0.0", "2")], CljManifestReader())
        assert path.read_text() == text
        assert list(tmp_path.iterdir()) == [path]

    def test_misfire_keeps_scratch_and_original(self, tmp_path: Path) -> None:
        class StaleReader:
            """Reports the pre-edit dependencies whatever the text says."""

            def read(self, text: str, path: str = "") -> Manifest:
                return Manifest(FOO, "0.1.0", (Dependency(FOO, "1.0.0"),))

        path = tmp_path / "project.clj"
        path.write_text(PROJECT)
        with pytest.raises(RewriteMisfireError) as info:
            rewrite_manifest_file(path, [DependencyEdit(FOO, "1.0.0", "1.1.0")], StaleReader())

        scratch = Path(info.value.context["scratch_path"])
        assert scratch.exists()
        assert scratch.parent == tmp_path
        assert scratch.name.startswith(".project-")
        assert '[foo "1.1.0"]' in scratch.read_text()
        assert path.read_text() == PROJECT
