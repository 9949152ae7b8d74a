"""Summary merging, tree building and aggregation."""

from gitops_coverage.analyzers.aggregate import (
    DEFAULT_SOURCE_EXTENSIONS,
    is_source_file,
    source_file_pattern,
    sum_coverage,
)
from gitops_coverage.analyzers.summary import merge_trace, relativize_path, relativize_summary
from gitops_coverage.analyzers.tree import ROOT_KEY, TreeRow, build_tree, split_path, walk_tree

__all__ = [
    "DEFAULT_SOURCE_EXTENSIONS",
    "ROOT_KEY",
    "TreeRow",
    "build_tree",
    "is_source_file",
    "merge_trace",
    "relativize_path",
    "relativize_summary",
    "source_file_pattern",
    "split_path",
    "sum_coverage",
    "walk_tree",
]
