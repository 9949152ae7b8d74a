"""Reporters for outputting coverage results."""

from __future__ import annotations

from gitops_coverage.reporters.markdown import MarkdownReporter, build_document, build_table
from gitops_coverage.reporters.terminal import CLIReporter, reporter

__all__ = [
    "CLIReporter",
    "MarkdownReporter",
    "build_document",
    "build_table",
    "reporter",
]
