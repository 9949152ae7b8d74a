"""Terminal reporter with rich output formatting.

Status messages go to stderr so that a report printed to stdout can be
piped or redirected untouched.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from gitops_coverage.analyzers.aggregate import DEFAULT_SOURCE_PATTERN
from gitops_coverage.analyzers.tree import walk_tree
from gitops_coverage.models.coverage import DIMENSIONS
from gitops_coverage.reporters.badges import CoverageLevel, coverage_level, format_pct
from gitops_coverage.reporters.markdown import ALL_FILES_LABEL

if TYPE_CHECKING:
    import re

    from gitops_coverage.models.coverage import CoverageTree, FileSummary

console = Console(stderr=True)

_LEVEL_STYLES = {
    CoverageLevel.GOOD: "green",
    CoverageLevel.WARNING: "yellow",
    CoverageLevel.BAD: "red",
}

_COLUMN_TITLES = {
    "statements": "% Stmts",
    "branches": "% Branch",
    "functions": "% Funcs",
    "lines": "% Lines",
}

# Display limit for the uncovered ranges column
_MAX_UNCOVERED_DISPLAY = 8


def _pct_cell(pct: float, *, bold: bool = False) -> str:
    color = _LEVEL_STYLES[coverage_level(pct)]
    style = f"bold {color}" if bold else color
    return f"[{style}]{format_pct(pct)}[/{style}]"


def _uncovered_cell(uncovered: list[str]) -> str:
    if len(uncovered) <= _MAX_UNCOVERED_DISPLAY:
        return ", ".join(uncovered)
    shown = ", ".join(uncovered[:_MAX_UNCOVERED_DISPLAY])
    return f"{shown} [dim](+{len(uncovered) - _MAX_UNCOVERED_DISPLAY} more)[/dim]"


class CLIReporter:
    """Rich terminal output for the command line."""

    def __init__(self, target: Console | None = None) -> None:
        self.console = target or console

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self.console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self.console.print(f"[red]✗[/red] {message}")

    def print_warning(self, message: str) -> None:
        """Print a warning message."""
        self.console.print(f"[yellow]⚠[/yellow] {message}")

    def print_info(self, message: str) -> None:
        """Print an info message."""
        self.console.print(f"[dim]{message}[/dim]")

    def print_coverage_tree(
        self,
        total: FileSummary | None,
        tree: CoverageTree,
        *,
        pattern: re.Pattern[str] = DEFAULT_SOURCE_PATTERN,
    ) -> None:
        """Print the coverage tree as a table, using the markdown thresholds."""
        table = Table(title="Coverage Summary", title_style="bold cyan")
        table.add_column("File", style="bold")
        for dim in DIMENSIONS:
            table.add_column(_COLUMN_TITLES[dim], justify="right")
        table.add_column("Uncovered Line #s")

        if total is not None:
            table.add_row(
                f"[bold]{ALL_FILES_LABEL}[/bold]",
                *(_pct_cell(total.stat(dim).pct, bold=True) for dim in DIMENSIONS),
                "",
            )
            table.add_section()

        for row in walk_tree(tree, pattern=pattern):
            indent = "  " * (row.depth - 1)
            name = escape(row.name) if row.is_file else f"[cyan]{escape(row.name)}/[/cyan]"
            table.add_row(
                f"{indent}{name}",
                *(_pct_cell(row.summary.stat(dim).pct) for dim in DIMENSIONS),
                _uncovered_cell(row.summary.uncovered) if row.is_file else "",
            )

        self.console.print(table)


# Singleton instance for easy import
reporter = CLIReporter()
