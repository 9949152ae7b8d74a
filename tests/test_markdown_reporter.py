"""Tests for the markdown coverage report (reporters/markdown.py)."""

from __future__ import annotations

from pathlib import Path

import pytest

from gitops_coverage.analyzers.aggregate import source_file_pattern
from gitops_coverage.analyzers.tree import build_tree
from gitops_coverage.errors import ReportWriteError
from gitops_coverage.models.coverage import CoverageStat, FileSummary
from gitops_coverage.reporters.markdown import (
    DEFAULT_INTRO,
    DEFAULT_TITLE,
    TABLE_HEADER,
    TABLE_SEPARATOR,
    MarkdownReporter,
    build_document,
    build_row,
    build_table,
    write_report,
)

_URL = "https://img.shields.io/badge/{}-{}?style=for-the-badge"


def _badge(label: str, text: str, color: str) -> str:
    return f"![{label}]({_URL.format(text, color)})"


def _file(total: int, covered: int, uncovered: list[str] | None = None) -> FileSummary:
    stat = CoverageStat.from_counts(total, covered)
    return FileSummary(
        statements=stat,
        branches=stat,
        functions=stat,
        lines=stat,
        uncovered=list(uncovered or []),
    )


_FULL = _badge("100", "100", "147317")
_HALF = _badge("50", "50", "c27d15")


# ── Rows ─────────────────────────────────────────────────────────


class TestBuildRow:
    def test_file_row_with_uncovered_ranges(self) -> None:
        row = build_row("a.js", _file(2, 1), 1, uncovered=["3-4", "9"])

        assert row == "|".join(
            [
                "&nbsp;&nbsp;" + _badge("a.js", "a.js", "c27d15"),
                _HALF,
                _HALF,
                _HALF,
                _HALF,
                _badge("3-4", "3--4", "c23815") + "&nbsp;" + _badge("9", "9", "c23815") + "&nbsp;",
            ]
        )

    def test_row_without_uncovered_ends_with_separator(self) -> None:
        row = build_row("All files", _file(4, 4))

        assert row == "|".join(
            [_badge("All files", "All_files", "147317"), _FULL, _FULL, _FULL, _FULL, ""]
        )
        assert row.endswith("|")

    def test_indent_grows_with_depth(self) -> None:
        assert build_row("b.js", _file(1, 1), 3).startswith("&nbsp;" * 6 + "![b.js]")

    def test_pipe_in_name_does_not_split_row(self) -> None:
        row = build_row("a|b.js", _file(1, 1))

        assert row.startswith(r"![a\|b.js](")
        assert row.count("|") - row.count(r"\|") == 5

    def test_name_color_follows_statements(self) -> None:
        summary = FileSummary(
            statements=CoverageStat.from_counts(10, 9),
            lines=CoverageStat.from_counts(10, 1),
        )

        row = build_row("c.js", summary)

        assert row.startswith(_badge("c.js", "c.js", "147317"))
        assert _badge("10", "10", "c23815") in row


# ── Table ────────────────────────────────────────────────────────


class TestBuildTable:
    def test_header_only_with_total(self) -> None:
        tree, _ = build_tree({"a.js": _file(1, 1)})

        assert not build_table(None, tree).startswith(TABLE_HEADER)
        lines = build_table(_file(1, 1), tree).splitlines()
        assert lines[:2] == [TABLE_HEADER, TABLE_SEPARATOR]
        assert lines[2].startswith(_badge("All files", "All_files", "147317"))

    def test_rows_in_tree_order(self) -> None:
        tree, total = build_tree(
            {
                "total": _file(6, 3),
                "src/a.js": _file(2, 2),
                "src/b.js": _file(2, 0, ["1-2"]),
                "index.js": _file(2, 1, ["7"]),
            }
        )

        table = build_table(total, tree)
        lines = table.splitlines()

        assert table.endswith("\n")
        assert len(lines) == 7
        assert lines[3].startswith("&nbsp;&nbsp;![src](")
        assert lines[4].startswith("&nbsp;&nbsp;&nbsp;&nbsp;![a.js](")
        assert lines[5].startswith("&nbsp;&nbsp;&nbsp;&nbsp;![b.js](")
        assert lines[5].endswith(_badge("1-2", "1--2", "c23815") + "&nbsp;")
        assert lines[6].startswith("&nbsp;&nbsp;![index.js](")

    def test_directory_row_has_no_uncovered_cell(self) -> None:
        tree, _ = build_tree({"src/a.js": _file(2, 0, ["1-2"])})

        directory_row = build_table(None, tree).splitlines()[0]

        assert directory_row.endswith("|")
        assert "1--2" not in directory_row

    def test_pattern_filters_files(self) -> None:
        tree, _ = build_tree({"a.py": _file(1, 1), "a.js": _file(1, 1)})

        table = build_table(None, tree, pattern=source_file_pattern([".py"]))

        assert "![a.py]" in table
        assert "![a.js]" not in table

    def test_empty_tree(self) -> None:
        assert build_table(None, {}) == ""


# ── Document ─────────────────────────────────────────────────────


def test_build_document_layout() -> None:
    document = build_document("row\n")

    assert document == (
        f"{DEFAULT_INTRO}\n\n<details>\n\n<summary>{DEFAULT_TITLE}</summary>\n\nrow\n\n</details>\n"
    )


def test_build_document_custom_wording() -> None:
    document = build_document("", intro="Done.", title="Coverage")

    assert document.startswith("Done.\n\n<details>")
    assert "<summary>Coverage</summary>" in document


class TestMarkdownReporter:
    def test_generate_string(self) -> None:
        tree, total = build_tree({"total": _file(1, 1), "a.js": _file(1, 1)})

        document = MarkdownReporter(title="Coverage").generate_string(total, tree)

        assert "<summary>Coverage</summary>" in document
        assert TABLE_HEADER in document
        assert "![a.js]" in document

    def test_generate_creates_parent_directories(self, tmp_path: Path) -> None:
        tree, total = build_tree({"a.js": _file(1, 1)})
        output = tmp_path / "reports" / "nested" / "coverage.md"

        written = MarkdownReporter().generate(output, total, tree)

        assert written == output
        assert output.read_text(encoding="utf-8") == MarkdownReporter().generate_string(
            total, tree
        )


def test_write_report_to_directory_fails(tmp_path: Path) -> None:
    with pytest.raises(ReportWriteError, match="Could not write coverage report"):
        write_report("content", tmp_path)


def test_write_report_overwrites(tmp_path: Path) -> None:
    output = tmp_path / "coverage.md"
    output.write_text("old", encoding="utf-8")

    write_report("new", output)

    assert output.read_text(encoding="utf-8") == "new"
