"""Readers for the coverage artifacts the report is built from."""

from gitops_coverage.adapters.coverage.istanbul import parse_summary_file
from gitops_coverage.adapters.coverage.lcov import (
    FileTrace,
    LcovRangeState,
    finish,
    format_range,
    parse_lcov_file,
    parse_lcov_lines,
    step,
)

__all__ = [
    "FileTrace",
    "LcovRangeState",
    "finish",
    "format_range",
    "parse_lcov_file",
    "parse_lcov_lines",
    "parse_summary_file",
    "step",
]
