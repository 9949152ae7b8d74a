"""Merge lcov uncovered ranges into an Istanbul summary."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gitops_coverage.models.coverage import TOTAL_KEY, ProjectSummary

if TYPE_CHECKING:
    from gitops_coverage.adapters.coverage.lcov import FileTrace

logger = logging.getLogger(__name__)


def relativize_path(path: str, project_root: str) -> str:
    """Return *path* relative to *project_root*, using ``/`` separators.

    Paths outside the root are returned unchanged (apart from separators).
    """
    path = path.replace("\\", "/")
    root = project_root.replace("\\", "/").rstrip("/")
    if not root or not path.startswith(root):
        return path
    rest = path[len(root) :]
    if not rest.startswith("/"):
        return path
    return rest.lstrip("/") or path


def relativize_summary(summary: ProjectSummary, project_root: str) -> ProjectSummary:
    """Re-key *summary* by project-relative path, keeping insertion order."""
    result: ProjectSummary = {}
    for path, file_summary in summary.items():
        key = path if path == TOTAL_KEY else relativize_path(path, project_root)
        if key in result:
            logger.debug("Duplicate summary entry for %s after relativizing %s", key, path)
        result[key] = file_summary
    return result


def merge_trace(
    summary: ProjectSummary,
    traces: dict[str, FileTrace],
    project_root: str = "",
) -> ProjectSummary:
    """Fold lcov traces into *summary* in place and return it.

    Files the summary does not know yet are added with statistics derived
    from the trace. Existing statistics are left untouched; only the
    ``uncovered`` list grows.
    """
    for trace_path, trace in traces.items():
        path = relativize_path(trace_path, project_root)
        if path == TOTAL_KEY:
            logger.warning("Skipping traced file named %r, it clashes with the total entry", path)
            continue
        file_summary = summary.get(path)
        if file_summary is None:
            logger.debug("%s is not in the summary, using lcov counts", path)
            file_summary = trace.to_summary()
            summary[path] = file_summary
        file_summary.uncovered.extend(trace.uncovered)
    return summary
