"""Shared fixtures for integration tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

# ── Marker registration ──────────────────────────────────────────


def pytest_configure(config: pytest.Config) -> None:
    """Register the ``integration`` marker."""
    config.addinivalue_line("markers", "integration: integration tests")


# ── File creation helpers ────────────────────────────────────────


def write_file(root: Path, rel: str, content: str) -> None:
    """Write *content* to a file under *root*."""
    f = root / rel
    f.parent.mkdir(parents=True, exist_ok=True)
    f.write_text(content, encoding="utf-8")


def write_json(root: Path, rel: str, data: dict[str, Any]) -> None:
    """Write a JSON file under *root*."""
    write_file(root, rel, json.dumps(data, indent=2))


def _stat(total: int, covered: int) -> dict[str, Any]:
    pct = round(covered / total * 100, 2) if total else 0
    return {"total": total, "covered": covered, "skipped": 0, "pct": pct}


def _record(total: int, covered: int) -> dict[str, Any]:
    return {dim: _stat(total, covered) for dim in ("lines", "statements", "functions", "branches")}


# ── Project scaffolding fixtures ─────────────────────────────────


@pytest.fixture()
def jest_project(tmp_path: Path) -> Path:
    """Create a project as left behind by ``jest --coverage``.

    The summary holds absolute paths and a total; the trace covers one
    extra file the summary does not list.
    """
    write_json(
        tmp_path,
        "package.json",
        {"name": "test-jest", "devDependencies": {"jest": "^29.0.0"}},
    )
    write_json(
        tmp_path,
        "coverage/coverage-summary.json",
        {
            "total": _record(20, 15),
            f"{tmp_path}/index.js": _record(4, 4),
            f"{tmp_path}/src/math.js": _record(10, 7),
            f"{tmp_path}/src/utils/strings.js": _record(6, 4),
        },
    )
    write_file(
        tmp_path,
        "coverage/lcov.info",
        (
            "TN:\n"
            f"SF:{tmp_path}/index.js\n"
            "FN:1,main\nFNDA:1,main\n"
            "DA:1,1\nDA:2,1\nDA:3,1\nDA:4,1\n"
            "LF:4\nLH:4\nend_of_record\n"
            f"SF:{tmp_path}/src/math.js\n"
            "DA:1,1\nDA:2,1\nDA:3,0\nDA:4,0\nDA:5,1\nDA:6,1\nDA:7,1\nDA:8,0\nDA:9,1\nDA:10,1\n"
            "LF:10\nLH:7\nend_of_record\n"
            f"SF:{tmp_path}/src/utils/strings.js\n"
            "DA:1,1\nDA:2,1\nDA:3,1\nDA:4,1\nDA:5,0\nDA:6,0\n"
            "LF:6\nLH:4\nend_of_record\n"
            f"SF:{tmp_path}/src/utils/dates.js\n"
            "FNDA:0,format\n"
            "DA:1,0\nDA:2,0\n"
            "LF:2\nLH:0\nend_of_record\n"
        ),
    )
    return tmp_path
