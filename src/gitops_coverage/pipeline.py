"""Report pipeline: lcov trace + Istanbul summary -> markdown comment."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from gitops_coverage.adapters.coverage.istanbul import parse_summary_file
from gitops_coverage.adapters.coverage.lcov import parse_lcov_file
from gitops_coverage.analyzers.aggregate import sum_coverage
from gitops_coverage.analyzers.summary import merge_trace, relativize_summary
from gitops_coverage.analyzers.tree import build_tree
from gitops_coverage.errors import TraceNotFoundError
from gitops_coverage.reporters.markdown import MarkdownReporter, write_report

if TYPE_CHECKING:
    from pathlib import Path

    from gitops_coverage.config import GitopsCoverageConfig
    from gitops_coverage.models.coverage import CoverageTree, FileSummary, ProjectSummary

logger = logging.getLogger(__name__)


@dataclass
class ReportResult:
    """Everything produced by one pipeline run."""

    summary: ProjectSummary
    """Merged, project-relative summary."""

    tree: CoverageTree
    """Directory tree built from the summary."""

    total: FileSummary | None
    """Project-wide totals (from the summary, or derived from the tree)."""

    document: str
    """Rendered markdown comment."""

    trace_found: bool = True
    """False when the report was built without an lcov trace."""


def build_summary(config: GitopsCoverageConfig) -> tuple[ProjectSummary, bool]:
    """Load the summary and fold the lcov trace into it.

    Returns:
        The merged summary and whether the trace was read.

    Raises:
        TraceNotFoundError: If the trace is missing and
            ``coverage.allow_missing_trace`` is off.
    """
    project_root = config.project_root
    summary = relativize_summary(parse_summary_file(config.json_summary_path), project_root)

    try:
        traces = parse_lcov_file(config.lcov_info_path)
    except TraceNotFoundError as e:
        if not config.coverage.allow_missing_trace:
            logger.error("Error: %s", e)
            raise
        logger.warning("%s, building the report from the summary alone", e)
        return summary, False

    return merge_trace(summary, traces, project_root), True


def generate_report(config: GitopsCoverageConfig) -> ReportResult:
    """Run the pipeline up to the rendered document, without writing it."""
    summary, trace_found = build_summary(config)
    pattern = config.source_pattern
    tree, total = build_tree(summary)

    if total is None and tree:
        logger.debug("Summary has no total entry, deriving it from %d directories", len(tree))
        total = sum_coverage(tree, recurse=True, pattern=pattern)

    reporter = MarkdownReporter(
        intro=config.report.intro,
        title=config.report.title,
        pattern=pattern,
    )
    return ReportResult(
        summary=summary,
        tree=tree,
        total=total,
        document=reporter.generate_string(total, tree),
        trace_found=trace_found,
    )


def run_report(config: GitopsCoverageConfig) -> tuple[ReportResult, Path | None]:
    """Generate the report and write it to the configured output file.

    Returns:
        The pipeline result and the file written, or ``None`` when no output
        file is configured and the caller should print the document.

    Raises:
        TraceNotFoundError: If the trace is missing (see :func:`build_summary`).
        ReportWriteError: If the output file cannot be written.
    """
    result = generate_report(config)
    output_path = config.output_path
    if output_path is None:
        return result, None
    return result, write_report(result.document, output_path)
