"""Markdown coverage report for code-review comments.

Renders a :data:`CoverageTree` as a pipe-delimited table of shields.io
badges, wrapped in a collapsible ``<details>`` block.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gitops_coverage.analyzers.aggregate import DEFAULT_SOURCE_PATTERN
from gitops_coverage.analyzers.tree import walk_tree
from gitops_coverage.errors import ReportWriteError
from gitops_coverage.models.coverage import DIMENSIONS
from gitops_coverage.reporters.badges import badge, color_for, pct_badge, uncovered_badge

if TYPE_CHECKING:
    import re
    from pathlib import Path

    from gitops_coverage.models.coverage import CoverageTree, FileSummary

logger = logging.getLogger(__name__)

TABLE_HEADER = "File|% Stmts|% Branch|% Funcs|% Lines|Uncovered Line #s"
TABLE_SEPARATOR = "----|-------|--------|-------|-------|-----------------"
ALL_FILES_LABEL = "All files"

DEFAULT_INTRO = "Testing has completed, a summary of the code coverage results is provided below."
DEFAULT_TITLE = "Code coverage summary"

_NBSP = "&nbsp;"


def _indent(depth: int) -> str:
    return _NBSP * (depth * 2)


def build_row(
    name: str,
    summary: FileSummary,
    depth: int = 0,
    *,
    uncovered: list[str] | None = None,
) -> str:
    """Build one table row for a file, a directory or the project total.

    The name badge takes the statements color; each dimension is colored
    on its own.
    """
    cells = [f"{_indent(depth)}{badge(name, color_for(summary.statements.pct))}"]
    cells.extend(pct_badge(summary.stat(dim).pct) for dim in DIMENSIONS)
    cells.append("".join(f"{uncovered_badge(line)}{_NBSP}" for line in uncovered or []))
    return "|".join(cells)


def build_table(
    total: FileSummary | None,
    tree: CoverageTree,
    *,
    pattern: re.Pattern[str] = DEFAULT_SOURCE_PATTERN,
) -> str:
    """Render the coverage table.

    Args:
        total: Project-wide totals. When given, the header row and an
            ``All files`` row come first.
        tree: Directory tree from :func:`~gitops_coverage.analyzers.tree.build_tree`.
        pattern: Names matching this pattern are files, the rest directories.

    Returns:
        The table rows, each terminated by a newline.
    """
    rows: list[str] = []
    if total is not None:
        rows.append(TABLE_HEADER)
        rows.append(TABLE_SEPARATOR)
        rows.append(build_row(ALL_FILES_LABEL, total))

    for row in walk_tree(tree, pattern=pattern):
        uncovered = row.summary.uncovered if row.is_file else None
        rows.append(build_row(row.name, row.summary, row.depth, uncovered=uncovered))

    return "".join(f"{row}\n" for row in rows)


def build_document(table: str, *, intro: str = DEFAULT_INTRO, title: str = DEFAULT_TITLE) -> str:
    """Wrap *table* into the comment body."""
    return f"{intro}\n\n<details>\n\n<summary>{title}</summary>\n\n{table}\n</details>\n"


class MarkdownReporter:
    """Reporter that renders a coverage tree as a markdown comment."""

    def __init__(
        self,
        *,
        intro: str = DEFAULT_INTRO,
        title: str = DEFAULT_TITLE,
        pattern: re.Pattern[str] = DEFAULT_SOURCE_PATTERN,
    ) -> None:
        self._intro = intro
        self._title = title
        self._pattern = pattern

    def generate_string(self, total: FileSummary | None, tree: CoverageTree) -> str:
        """Return the full markdown document."""
        table = build_table(total, tree, pattern=self._pattern)
        return build_document(table, intro=self._intro, title=self._title)

    def generate(self, output_path: Path, total: FileSummary | None, tree: CoverageTree) -> Path:
        """Write the markdown document to *output_path*.

        Args:
            output_path: Destination file; parent directories are created.
            total: Project-wide totals, if known.
            tree: Directory tree to render.

        Returns:
            The path written to.

        Raises:
            ReportWriteError: If the file cannot be written.
        """
        return write_report(self.generate_string(total, tree), output_path)


def write_report(document: str, output_path: Path) -> Path:
    """Write *document* to *output_path*, creating parent directories.

    Raises:
        ReportWriteError: If the file cannot be written.
    """
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with output_path.open("w", encoding="utf-8") as f:
            f.write(document)
    except OSError as e:
        msg = f"Could not write coverage report to {output_path}: {e}"
        raise ReportWriteError(msg) from e

    logger.info("Successfully wrote gitops coverage markdown to %s", output_path)
    return output_path
