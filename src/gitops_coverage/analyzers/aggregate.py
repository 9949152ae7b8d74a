"""Sum coverage statistics across the files of a directory."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from gitops_coverage.models.coverage import (
    DIMENSIONS,
    CoverageStat,
    FileSummary,
    as_count,
)

DEFAULT_SOURCE_EXTENSIONS = (
    ".js",
    ".jsx",
    ".mjs",
    ".cjs",
    ".ts",
    ".tsx",
    ".mts",
    ".cts",
    ".vue",
    ".svelte",
    ".py",
    ".go",
    ".rb",
    ".java",
    ".kt",
    ".c",
    ".cc",
    ".cpp",
    ".h",
    ".hpp",
    ".cs",
    ".rs",
    ".php",
    ".swift",
)
"""File extensions recognized as source files when classifying tree entries."""


def source_file_pattern(extensions: tuple[str, ...] | list[str]) -> re.Pattern[str]:
    """Compile a pattern matching names that end in one of *extensions*."""
    normalized = sorted({ext if ext.startswith(".") else f".{ext}" for ext in extensions})
    alternatives = "|".join(re.escape(ext) for ext in normalized)
    return re.compile(rf"^.+(?:{alternatives})$")


DEFAULT_SOURCE_PATTERN = source_file_pattern(DEFAULT_SOURCE_EXTENSIONS)


def is_source_file(
    name: str, entry: Any, pattern: re.Pattern[str] = DEFAULT_SOURCE_PATTERN
) -> bool:
    """Return True if the tree entry *name* -> *entry* is a file rather than a directory."""
    return isinstance(entry, FileSummary) and pattern.match(name) is not None


def sum_coverage(
    entries: Mapping[str, Any],
    *,
    recurse: bool = False,
    pattern: re.Pattern[str] = DEFAULT_SOURCE_PATTERN,
) -> FileSummary:
    """Aggregate the file entries of *entries* into one summary.

    Args:
        entries: Name -> :class:`FileSummary` for files, name -> mapping for
            subdirectories.
        recurse: Also fold in every nested subdirectory. Off by default, in
            which case only the immediate files count.
        pattern: Names matching this pattern are treated as files.

    Returns:
        A summary whose counts are the component-wise sums and whose
        percentages are recomputed from those sums.
    """
    sums = {dim: [0, 0, 0] for dim in DIMENSIONS}
    pending: list[Mapping[str, Any]] = [entries]

    while pending:
        current = pending.pop()
        for name, entry in current.items():
            if is_source_file(name, entry, pattern):
                for dim in DIMENSIONS:
                    stat = entry.stat(dim)
                    counts = sums[dim]
                    counts[0] += as_count(stat.total)
                    counts[1] += as_count(stat.covered)
                    counts[2] += as_count(stat.skipped)
            elif recurse and isinstance(entry, Mapping):
                pending.append(entry)

    stats = {dim: CoverageStat.from_counts(*counts) for dim, counts in sums.items()}
    return FileSummary(
        statements=stats["statements"],
        branches=stats["branches"],
        functions=stats["functions"],
        lines=stats["lines"],
    )
