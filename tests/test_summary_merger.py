"""Tests for merging lcov traces into the summary (analyzers/summary.py)."""

from __future__ import annotations

import pytest

from gitops_coverage.adapters.coverage.lcov import FileTrace, parse_lcov_lines
from gitops_coverage.analyzers.summary import merge_trace, relativize_path, relativize_summary
from gitops_coverage.models.coverage import CoverageStat, FileSummary

# ── relativize_path ──────────────────────────────────────────────


@pytest.mark.parametrize(
    ("path", "root", "expected"),
    [
        ("/home/ci/project/src/a.js", "/home/ci/project", "src/a.js"),
        ("/home/ci/project/src/a.js", "/home/ci/project/", "src/a.js"),
        ("/home/ci/project/a.js", "/home/ci/project//", "a.js"),
        ("/home/ci/project-b/a.js", "/home/ci/project", "/home/ci/project-b/a.js"),
        ("/elsewhere/a.js", "/home/ci/project", "/elsewhere/a.js"),
        ("src/a.js", "/home/ci/project", "src/a.js"),
        ("src/a.js", "", "src/a.js"),
        ("C:\\work\\project\\src\\a.js", "C:\\work\\project", "src/a.js"),
    ],
)
def test_relativize_path(path: str, root: str, expected: str) -> None:
    assert relativize_path(path, root) == expected


def test_relativize_summary_keeps_total_and_order() -> None:
    summary = {
        "total": FileSummary(),
        "/p/src/b.js": FileSummary(),
        "/p/a.js": FileSummary(),
    }
    assert list(relativize_summary(summary, "/p")) == ["total", "src/b.js", "a.js"]


# ── merge_trace ──────────────────────────────────────────────────


def test_new_file_is_seeded_from_trace() -> None:
    traces = parse_lcov_lines(["SF:a.js", "DA:1,1", "DA:2,0", "DA:3,0", "DA:4,1"])

    summary = merge_trace({}, traces)

    assert summary["a.js"].lines == CoverageStat(4, 2, 0, 50.0)
    assert summary["a.js"].uncovered == ["2-3"]


def test_existing_statistics_are_kept() -> None:
    existing = FileSummary(lines=CoverageStat(100, 90, 2, 90.0))
    summary = {"a.js": existing}
    traces = parse_lcov_lines(["SF:a.js", "DA:1,0", "DA:2,1"])

    merge_trace(summary, traces)

    assert summary["a.js"] is existing
    assert existing.lines == CoverageStat(100, 90, 2, 90.0)
    assert existing.uncovered == ["1"]


def test_uncovered_is_appended() -> None:
    summary = {"a.js": FileSummary(uncovered=["1"])}
    traces = {"a.js": FileTrace(uncovered=("5-7", "9"))}

    merge_trace(summary, traces)

    assert summary["a.js"].uncovered == ["1", "5-7", "9"]


def test_trace_paths_are_relativized() -> None:
    summary = relativize_summary({"/p/src/a.js": FileSummary()}, "/p")
    traces = {"/p/src/a.js": FileTrace(uncovered=("3",))}

    merge_trace(summary, traces, "/p")

    assert list(summary) == ["src/a.js"]
    assert summary["src/a.js"].uncovered == ["3"]


def test_merge_preserves_summary_order() -> None:
    summary = {"total": FileSummary(), "b.js": FileSummary()}
    traces = {"c.js": FileTrace(), "b.js": FileTrace(uncovered=("1",))}

    merge_trace(summary, traces)

    assert list(summary) == ["total", "b.js", "c.js"]


def test_trace_named_total_is_skipped() -> None:
    total = FileSummary(lines=CoverageStat(1, 1, 0, 100.0))
    summary = {"total": total}

    merge_trace(summary, {"total": FileTrace(uncovered=("1",))})

    assert summary["total"].uncovered == []
