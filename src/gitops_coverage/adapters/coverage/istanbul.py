"""Istanbul ``json-summary`` loader.

Istanbul's ``json-summary`` reporter writes ``coverage-summary.json``::

    {
      "total": {"lines": {...}, "statements": {...}, "functions": {...}, "branches": {...}},
      "/abs/path/src/a.js": {"lines": {"total": 10, "covered": 8, "skipped": 0, "pct": 80}, ...}
    }
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from gitops_coverage.models.coverage import FileSummary, ProjectSummary

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


def parse_summary_file(summary_file: Path | None) -> ProjectSummary:
    """Load a ``coverage-summary.json`` file.

    A missing, unreadable or malformed file is not an error: the report is
    then built from the lcov trace alone, so an empty summary is returned.
    """
    if summary_file is None or not summary_file.is_file():
        logger.warning(
            "Could not load a JSON summary file (%s), skipping and creating from scratch",
            summary_file,
        )
        return {}

    try:
        with summary_file.open(encoding="utf-8") as f:
            raw = json.load(f)
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to parse summary file %s: %s", summary_file, e)
        return {}

    if not isinstance(raw, dict):
        logger.warning("Summary file %s does not contain a JSON object", summary_file)
        return {}

    return {str(path): FileSummary.from_dict(record) for path, record in raw.items()}
