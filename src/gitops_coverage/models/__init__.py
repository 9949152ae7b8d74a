"""Data models for gitops-coverage."""

from gitops_coverage.models.coverage import (
    DIMENSIONS,
    TOTAL_KEY,
    CoverageStat,
    CoverageTree,
    FileSummary,
    ProjectSummary,
    round_pct,
    summary_to_dict,
)

__all__ = [
    "DIMENSIONS",
    "TOTAL_KEY",
    "CoverageStat",
    "CoverageTree",
    "FileSummary",
    "ProjectSummary",
    "round_pct",
    "summary_to_dict",
]
