"""Tests for the Istanbul json-summary loader (adapters/coverage/istanbul.py)."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from gitops_coverage.adapters.coverage.istanbul import parse_summary_file
from gitops_coverage.models.coverage import CoverageStat

if TYPE_CHECKING:
    from pathlib import Path


def _write_file(root: Path, rel: str, content: str) -> Path:
    """Write *content* to a file under *root*."""
    f = root / rel
    f.parent.mkdir(parents=True, exist_ok=True)
    f.write_text(content, encoding="utf-8")
    return f


def _stat(total: int, covered: int, pct: float | str) -> dict[str, object]:
    return {"total": total, "covered": covered, "skipped": 0, "pct": pct}


_SAMPLE_SUMMARY = {
    "total": {
        "lines": _stat(20, 15, 75),
        "statements": _stat(22, 16, 72.72),
        "functions": _stat(4, 3, 75),
        "branches": _stat(6, 3, 50),
    },
    "/project/src/math.js": {
        "lines": _stat(10, 10, 100),
        "statements": _stat(11, 11, 100),
        "functions": _stat(2, 2, 100),
        "branches": _stat(0, 0, "Unknown"),
    },
    "/project/index.js": {
        "lines": _stat(10, 5, 50),
        "statements": _stat(11, 5, 45.45),
        "functions": _stat(2, 1, 50),
        "branches": _stat(6, 3, 50),
    },
}


def test_parse_summary_file(tmp_path: Path) -> None:
    summary_file = _write_file(tmp_path, "coverage-summary.json", json.dumps(_SAMPLE_SUMMARY))

    summary = parse_summary_file(summary_file)

    assert list(summary) == ["total", "/project/src/math.js", "/project/index.js"]
    assert summary["/project/index.js"].statements == CoverageStat(11, 5, 0, 45.45)
    assert summary["total"].lines.pct == 75


def test_unknown_pct_is_recomputed(tmp_path: Path) -> None:
    summary_file = _write_file(tmp_path, "coverage-summary.json", json.dumps(_SAMPLE_SUMMARY))

    summary = parse_summary_file(summary_file)

    assert summary["/project/src/math.js"].branches.pct == 0


def test_missing_file_is_empty(tmp_path: Path) -> None:
    assert parse_summary_file(tmp_path / "nope.json") == {}


def test_no_file_configured_is_empty() -> None:
    assert parse_summary_file(None) == {}


def test_invalid_json_is_empty(tmp_path: Path) -> None:
    summary_file = _write_file(tmp_path, "coverage-summary.json", "{not json")
    assert parse_summary_file(summary_file) == {}


def test_non_object_json_is_empty(tmp_path: Path) -> None:
    summary_file = _write_file(tmp_path, "coverage-summary.json", "[1, 2, 3]")
    assert parse_summary_file(summary_file) == {}


def test_malformed_records_do_not_fail(tmp_path: Path) -> None:
    data = {"a.js": "garbage", "b.js": {"lines": {"total": "x", "covered": 2}}}
    summary_file = _write_file(tmp_path, "coverage-summary.json", json.dumps(data))

    summary = parse_summary_file(summary_file)

    assert summary["a.js"].lines == CoverageStat()
    assert summary["b.js"].lines.total == 0
    assert summary["b.js"].lines.covered == 2
