"""Exceptions raised by gitops-coverage."""

from __future__ import annotations


class GitopsCoverageError(Exception):
    """Base class for all gitops-coverage errors."""


class TraceNotFoundError(GitopsCoverageError):
    """Raised when the lcov trace file does not exist or cannot be opened."""


class ReportWriteError(GitopsCoverageError):
    """Raised when the generated report cannot be written to its destination."""
