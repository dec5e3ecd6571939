"""Tests for running one task per repository on a thread pool."""

from __future__ import annotations

import logging
import threading
from types import SimpleNamespace

import pytest

from voom.core.fanout import fan_out


def _repos(*names: str) -> list[SimpleNamespace]:
    return [SimpleNamespace(location=f"/repos/{n}") for n in names]


class TestFanOut:

    def test_results_keep_input_order(self) -> None:
        repos = _repos("a", "b", "c", "d", "e")
        assert fan_out(repos, lambda r: r.location[-1]) == ["a", "b", "c", "d", "e"]

    def test_empty(self) -> None:
        assert fan_out([], lambda r: 1) == []

    def test_tasks_run_concurrently(self) -> None:
        barrier = threading.Barrier(2, timeout=5)
        assert fan_out(_repos("a", "b"), lambda r: barrier.wait() >= 0) == [True, True]

    def test_first_failure_raised_after_all_finish(self, caplog) -> None:
        finished = []

        def task(repo):
            if repo.location.endswith("b"):
                raise ValueError("b failed")
            if repo.location.endswith("c"):
                raise KeyError("c failed")
            finished.append(repo.location)
            return repo.location

        with caplog.at_level(logging.ERROR), pytest.raises(ValueError, match="b failed"):
            fan_out(_repos("a", "b", "c", "d"), task)

        assert sorted(finished) == ["/repos/a", "/repos/d"]
        assert "/repos/b: b failed" in caplog.text
        assert "/repos/c" in caplog.text
