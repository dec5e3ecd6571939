"""Tests for the voom exception hierarchy."""

from __future__ import annotations

import pytest

from voom.exceptions import (
    AmbiguousMatchError,
    AmbiguousResolutionError,
    AmbiguousTagSetError,
    CollaboratorCommandFailure,
    CommandTimeoutError,
    ConfigurationError,
    GitCommandError,
    InstallError,
    ManifestError,
    ManifestParseError,
    NoMatchFoundError,
    NoMatchingVersionError,
    ResolutionError,
    RewriteMisfireError,
    TagFormatError,
    UnknownCommitError,
    UnknownParentError,
    VersionFormatError,
    VoomError,
)


@pytest.mark.parametrize(
    "cls, parent",
    [
        (UnknownParentError, VoomError),
        (UnknownCommitError, KeyError),
        (TagFormatError, VoomError),
        (VersionFormatError, VoomError),
        (NoMatchingVersionError, ResolutionError),
        (AmbiguousTagSetError, ResolutionError),
        (AmbiguousResolutionError, ResolutionError),
        (ManifestParseError, ManifestError),
        (NoMatchFoundError, ManifestError),
        (AmbiguousMatchError, ManifestError),
        (RewriteMisfireError, ManifestError),
        (GitCommandError, CollaboratorCommandFailure),
        (CommandTimeoutError, CollaboratorCommandFailure),
        (InstallError, CollaboratorCommandFailure),
        (ConfigurationError, VoomError),
    ],
)
def test_hierarchy(cls, parent) -> None:
    assert issubclass(cls, parent)
    assert issubclass(cls, VoomError)


def test_kinds_are_distinct() -> None:
    classes = VoomError.__subclasses__()
    kinds = set()
    stack = list(classes)
    while stack:
        cls = stack.pop()
        stack.extend(cls.__subclasses__())
        assert cls.kind not in kinds, cls
        kinds.add(cls.kind)


def test_context_report() -> None:
    error = AmbiguousTagSetError(
        "two tags", tags=["voom--a", "voom--b"], considered={"y", "x"}, count=2, extra=None,
    )
    report = error.to_dict()
    assert report["kind"] == "AmbiguousTagSet"
    assert report["message"] == "two tags"
    assert report["context"] == {
        "tags": ["voom--a", "voom--b"],
        "considered": ["x", "y"],
        "count": 2,
        "extra": None,
    }


def test_git_exit_code() -> None:
    assert GitCommandError("x", exit_code=128).exit_code == 128
    assert GitCommandError("x").exit_code is None


def test_unknown_commit_str() -> None:
    assert str(UnknownCommitError("no such commit abc")) == "no such commit abc"
