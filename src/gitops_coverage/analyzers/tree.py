"""Reshape a flat, path-keyed summary into a two-level directory tree."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from gitops_coverage.analyzers.aggregate import DEFAULT_SOURCE_PATTERN, is_source_file, sum_coverage
from gitops_coverage.models.coverage import TOTAL_KEY, CoverageTree, FileSummary, ProjectSummary

if TYPE_CHECKING:
    import re
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

ROOT_KEY = ""
"""Tree key under which files at the project root are stored."""


def split_path(path: str) -> tuple[str, str]:
    """Split *path* on its last ``/`` into ``(directory, base name)``.

    Files without a directory land under :data:`ROOT_KEY`.
    """
    directory, sep, name = path.rpartition("/")
    if not sep:
        return ROOT_KEY, path
    return directory, name


def build_tree(summary: ProjectSummary) -> tuple[CoverageTree, FileSummary | None]:
    """Group *summary* entries by directory.

    Returns:
        The tree, in the summary's insertion order, and the ``"total"``
        entry (``None`` when the summary has none).
    """
    tree: CoverageTree = {}
    for path, file_summary in summary.items():
        if path == TOTAL_KEY:
            continue
        directory, name = split_path(path)
        tree.setdefault(directory, {})[name] = file_summary
    return tree, summary.get(TOTAL_KEY)


@dataclass
class TreeRow:
    """One file or directory visited by :func:`walk_tree`."""

    name: str
    summary: FileSummary
    """The file's own summary, or the sum of a directory's immediate files."""

    depth: int
    is_file: bool


def _top_level_entries(tree: Mapping[str, Any]) -> list[tuple[str, Any]]:
    # Root files sit directly at the top instead of under an unnamed directory
    entries: list[tuple[str, Any]] = []
    for key, children in tree.items():
        if key == ROOT_KEY and isinstance(children, Mapping):
            entries.extend(children.items())
        else:
            entries.append((key, children))
    return entries


def walk_tree(
    tree: Mapping[str, Any],
    *,
    pattern: re.Pattern[str] = DEFAULT_SOURCE_PATTERN,
) -> Iterator[TreeRow]:
    """Visit *tree* depth first, in insertion order.

    Top-level entries have depth 1 and each directory's children are one
    level deeper. A directory row carries the non-recursive sum of its
    files; nested directories follow as rows of their own.
    """
    # Pushed reversed so that popping preserves tree order
    pending = [(name, entry, 1) for name, entry in reversed(_top_level_entries(tree))]
    while pending:
        name, entry, depth = pending.pop()
        if is_source_file(name, entry, pattern):
            yield TreeRow(name=name, summary=entry, depth=depth, is_file=True)
        elif isinstance(entry, Mapping):
            yield TreeRow(
                name=name,
                summary=sum_coverage(entry, pattern=pattern),
                depth=depth,
                is_file=False,
            )
            children = list(entry.items())
            pending.extend(
                (child_name, child, depth + 1) for child_name, child in reversed(children)
            )
        else:
            logger.debug("Skipping %s, it does not look like a source file", name)
