"""Tests for voom tag names and branch sentinels."""

from __future__ import annotations

import pytest

from voom.core.tags import (
    ProjectCoordinate,
    Tag,
    decode_branch_marker,
    decode_tag,
    encode_branch_marker,
    encode_tag,
    is_voom_tag,
)
from voom.exceptions import TagFormatError

SHA = "0123456789abcdef0123456789abcdef01234567"
WIDGETS = ProjectCoordinate("org.example", "widgets")


class TestProjectCoordinate:
    """Parsing and display of (group, name) coordinates."""

    def test_parse_group_and_name(self) -> None:
        assert ProjectCoordinate.parse("org.example/widgets") == WIDGETS

    def test_bare_name_is_own_group(self) -> None:
        assert ProjectCoordinate.parse("widgets") == ProjectCoordinate("widgets", "widgets")

    def test_short_name(self) -> None:
        assert ProjectCoordinate("widgets", "widgets").short_name == "widgets"
        assert WIDGETS.short_name == "org.example/widgets"

    @pytest.mark.parametrize("text", ["", "/x", "x/", "a/b/c"])
    def test_invalid(self, text: str) -> None:
        with pytest.raises(ValueError):
            ProjectCoordinate.parse(text)


class TestEncodeTag:
    """Encoding tags as git tag names."""

    def test_root_project(self) -> None:
        tag = Tag(WIDGETS, "1.2.0", "", SHA)
        assert encode_tag(tag) == "voom--org.example%widgets--1.2.0----0123456"

    def test_nested_path_is_escaped(self) -> None:
        tag = Tag(WIDGETS, "1.2.0", "modules/core", SHA)
        assert encode_tag(tag) == "voom--org.example%widgets--1.2.0--modules%core--0123456"

    def test_no_parent_flag(self) -> None:
        tag = Tag(WIDGETS, "1.0", "", SHA, no_parent=True)
        assert encode_tag(tag).endswith("--0123456--no-parent")

    def test_deletion(self) -> None:
        tag = Tag(None, "", "lib", SHA)
        assert encode_tag(tag) == "voom------lib--0123456"

    def test_same_sha_same_name(self) -> None:
        assert encode_tag(Tag(WIDGETS, "1.0", "", SHA)) == encode_tag(Tag(WIDGETS, "1.0", "", SHA[:7]))

    @pytest.mark.parametrize("version", ["1.0--rc", "-1.0", "1.0-", "1%0", "1.0 beta", "1..0"])
    def test_unrepresentable_version(self, version: str) -> None:
        with pytest.raises(TagFormatError):
            encode_tag(Tag(WIDGETS, version, "", SHA))

    def test_empty_version_rejected(self) -> None:
        with pytest.raises(TagFormatError):
            encode_tag(Tag(WIDGETS, "", "", SHA))

    def test_deletion_with_version_rejected(self) -> None:
        with pytest.raises(TagFormatError):
            encode_tag(Tag(None, "1.0", "", SHA))

    def test_bad_sha_rejected(self) -> None:
        with pytest.raises(TagFormatError):
            encode_tag(Tag(WIDGETS, "1.0", "", "not-a-sha"))


class TestDecodeTag:
    """Decoding git tag names."""

    def test_decode_fields(self) -> None:
        tag = decode_tag("voom--org.example%widgets--1.2.0--modules%core--0123456")
        assert tag == Tag(WIDGETS, "1.2.0", "modules/core", "0123456")

    def test_full_sha_from_target(self) -> None:
        tag = decode_tag("voom--org.example%widgets--1.2.0----0123456", target=SHA)
        assert tag.sha == SHA

    def test_unrelated_target_ignored(self) -> None:
        tag = decode_tag("voom--org.example%widgets--1.2.0----0123456", target="f" * 40)
        assert tag.sha == "0123456"

    def test_no_parent(self) -> None:
        assert decode_tag("voom--a%a--1.0----0123456--no-parent").no_parent

    def test_deletion(self) -> None:
        tag = decode_tag("voom------lib--0123456")
        assert tag.is_deletion
        assert tag.path == "lib"

    @pytest.mark.parametrize(
        "name",
        [
            "release-1.0",
            "voom-branch--main",
            "voom--a%a--1.0--0123456",
            "voom--a%a--1.0----zzz",
            "voom--aa--1.0----0123456",
            "voom----1.0----0123456",
            "voom--a%a--1.0----0123456--extra",
        ],
    )
    def test_malformed(self, name: str) -> None:
        with pytest.raises(TagFormatError):
            decode_tag(name)

    def test_is_voom_tag(self) -> None:
        assert is_voom_tag("voom--a%a--1.0----0123456")
        assert not is_voom_tag("voom-branch--main")
        assert not is_voom_tag("v1.0")


class TestBranchMarker:
    """Per-branch scan sentinels."""

    def test_encode(self) -> None:
        assert encode_branch_marker("main") == "voom-branch--main"

    def test_decode(self) -> None:
        assert decode_branch_marker("voom-branch--feature/x") == "feature/x"

    def test_decode_other_tags(self) -> None:
        assert decode_branch_marker("voom--a%a--1.0----0123456") is None
        assert decode_branch_marker("voom-branch--") is None

    def test_empty_branch_rejected(self) -> None:
        with pytest.raises(TagFormatError):
            encode_branch_marker("")
