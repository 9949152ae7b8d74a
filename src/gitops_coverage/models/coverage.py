"""Coverage summary models.

These mirror the Istanbul ``json-summary`` layout: every file carries four
coverage dimensions (statements, branches, functions, lines), each with
``total``/``covered``/``skipped`` counts and a ``pct`` percentage.
"""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass, field
from typing import Any

DIMENSIONS = ("statements", "branches", "functions", "lines")
"""Coverage dimensions, in report column order."""

TOTAL_KEY = "total"
"""Reserved summary key holding the project-wide aggregate."""

_PCT_SCALE = 10000


def round_pct(covered: int, total: int) -> float:
    """Return ``covered / total`` as a percentage rounded half up to two decimals.

    A machine epsilon is added before scaling so that values sitting exactly
    on a half (e.g. ``1/8``) do not round down because of binary
    representation.
    """
    if total == 0:
        return 0
    return math.floor((covered / total + sys.float_info.epsilon) * _PCT_SCALE + 0.5) / 100


def as_count(value: Any) -> int:
    """Coerce *value* to a count, treating anything non-numeric as ``0``."""
    # bool is an int subclass but never a meaningful count
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return int(value)


@dataclass
class CoverageStat:
    """Counts and percentage for one coverage dimension."""

    total: int = 0
    covered: int = 0
    skipped: int = 0
    pct: float = 0

    @classmethod
    def from_counts(cls, total: int, covered: int, skipped: int = 0) -> CoverageStat:
        """Build a stat whose ``pct`` is derived from the counts."""
        return cls(total=total, covered=covered, skipped=skipped, pct=round_pct(covered, total))

    @classmethod
    def from_dict(cls, raw: Any) -> CoverageStat:
        """Parse a raw ``{total, covered, skipped, pct}`` mapping.

        Missing or non-numeric counts become ``0``. A non-numeric ``pct``
        (Istanbul writes ``"Unknown"`` for empty files) is recomputed.
        """
        if not isinstance(raw, dict):
            return cls()
        total = as_count(raw.get("total"))
        covered = as_count(raw.get("covered"))
        skipped = as_count(raw.get("skipped"))
        pct = raw.get("pct")
        if isinstance(pct, bool) or not isinstance(pct, (int, float)):
            pct = round_pct(covered, total)
        return cls(total=total, covered=covered, skipped=skipped, pct=pct)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "covered": self.covered,
            "skipped": self.skipped,
            "pct": self.pct,
        }


@dataclass
class FileSummary:
    """Coverage statistics for one file (or an aggregate of several)."""

    statements: CoverageStat = field(default_factory=CoverageStat)
    branches: CoverageStat = field(default_factory=CoverageStat)
    functions: CoverageStat = field(default_factory=CoverageStat)
    lines: CoverageStat = field(default_factory=CoverageStat)
    uncovered: list[str] = field(default_factory=list)
    """Uncovered line ranges (``"12"``, ``"20-25"``) in file order."""

    def stat(self, dimension: str) -> CoverageStat:
        """Return the stat for *dimension* (one of :data:`DIMENSIONS`)."""
        if dimension not in DIMENSIONS:
            msg = f"Unknown coverage dimension: {dimension}"
            raise KeyError(msg)
        stat: CoverageStat = getattr(self, dimension)
        return stat

    @classmethod
    def from_dict(cls, raw: Any) -> FileSummary:
        """Parse one Istanbul json-summary record."""
        if not isinstance(raw, dict):
            return cls()
        uncovered_raw = raw.get("uncovered", [])
        uncovered = (
            [str(item) for item in uncovered_raw] if isinstance(uncovered_raw, list) else []
        )
        return cls(
            statements=CoverageStat.from_dict(raw.get("statements")),
            branches=CoverageStat.from_dict(raw.get("branches")),
            functions=CoverageStat.from_dict(raw.get("functions")),
            lines=CoverageStat.from_dict(raw.get("lines")),
            uncovered=uncovered,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {dim: self.stat(dim).to_dict() for dim in DIMENSIONS}
        if self.uncovered:
            result["uncovered"] = list(self.uncovered)
        return result


ProjectSummary = dict[str, FileSummary]
"""Project-relative path -> file summary, plus the reserved ``"total"`` key."""

CoverageTree = dict[str, dict[str, FileSummary]]
"""Directory path (``""`` for the project root) -> base name -> file summary."""


def summary_to_dict(summary: ProjectSummary) -> dict[str, Any]:
    """Serialize *summary* to the json-summary layout, in insertion order."""
    return {path: file_summary.to_dict() for path, file_summary in summary.items()}
