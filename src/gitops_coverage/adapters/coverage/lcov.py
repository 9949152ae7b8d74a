"""lcov ``.info`` trace parser.

Walks an lcov trace one line at a time and reconstructs, for every source
file, the contiguous runs of uncovered lines (``"12"``, ``"20-25"``). The
parser also counts the line, function and branch records it sees so that
files absent from the Istanbul summary can still be reported.

The parser state is an immutable :class:`LcovRangeState` value threaded
through :func:`step`; call :func:`finish` once the stream is exhausted to
flush a range that is still open. A state returned by :func:`step` never
changes afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from gitops_coverage.errors import TraceNotFoundError
from gitops_coverage.models.coverage import CoverageStat, FileSummary

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from pathlib import Path

logger = logging.getLogger(__name__)

# ── Constants ────────────────────────────────────────────────────

# LCOV record keys
_LCOV_SF = "SF"
_LCOV_DA = "DA"
_LCOV_FNDA = "FNDA"
_LCOV_BRDA = "BRDA"
_LCOV_DA_PARTS = 2
_LCOV_FNDA_PARTS = 2
_LCOV_BRDA_PARTS = 4
_LCOV_NOT_TAKEN = "-"


# ── State ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class FileTrace:
    """Everything the trace says about one source file."""

    uncovered: tuple[str, ...] = ()
    """Uncovered line ranges in discovery order."""

    lines_found: int = 0
    lines_hit: int = 0
    functions_found: int = 0
    functions_hit: int = 0
    branches_found: int = 0
    branches_hit: int = 0

    def merged(self, other: FileTrace) -> FileTrace:
        """Combine two sections of the same file (a file may be listed more than once)."""
        return FileTrace(
            uncovered=(*self.uncovered, *other.uncovered),
            lines_found=self.lines_found + other.lines_found,
            lines_hit=self.lines_hit + other.lines_hit,
            functions_found=self.functions_found + other.functions_found,
            functions_hit=self.functions_hit + other.functions_hit,
            branches_found=self.branches_found + other.branches_found,
            branches_hit=self.branches_hit + other.branches_hit,
        )

    def to_summary(self) -> FileSummary:
        """Build a file summary from the trace counts alone.

        lcov has no statement records, so statements mirror lines.
        """
        return FileSummary(
            statements=CoverageStat.from_counts(self.lines_found, self.lines_hit),
            branches=CoverageStat.from_counts(self.branches_found, self.branches_hit),
            functions=CoverageStat.from_counts(self.functions_found, self.functions_hit),
            lines=CoverageStat.from_counts(self.lines_found, self.lines_hit),
        )


@dataclass(frozen=True)
class LcovRangeState:
    """Parser state between two trace lines."""

    path: str | None = None
    """File named by the most recent ``SF:`` marker."""

    current: FileTrace = field(default_factory=FileTrace)
    """Records read so far for :attr:`path`."""

    recording: bool = False
    """True while an uncovered range is open."""

    begin: int = 0
    end: int = 0

    files: Mapping[str, FileTrace] = field(default_factory=dict)
    """Completed file sections keyed by trace path, in first-seen order.

    Replaced, never modified, when a section is folded in.
    """


# ── Parsing ──────────────────────────────────────────────────────


def format_range(begin: int, end: int) -> str:
    """Return ``"begin"`` for a single line, ``"begin-end"`` otherwise."""
    if begin == end:
        return str(begin)
    return f"{begin}-{end}"


def _commit(state: LcovRangeState) -> LcovRangeState:
    # Fold the section being read into a copy of ``files``
    if state.path is None:
        return state
    previous = state.files.get(state.path)
    trace = state.current if previous is None else previous.merged(state.current)
    return replace(state, files={**state.files, state.path: trace}, current=FileTrace())


def _close_range(state: LcovRangeState) -> LcovRangeState:
    if not state.recording:
        return state
    current = replace(
        state.current,
        uncovered=(*state.current.uncovered, format_range(state.begin, state.end)),
    )
    return replace(state, current=current, recording=False)


def _parse_da(value: str) -> tuple[int, int] | None:
    # DA:<line>,<hits>[,<checksum>]
    parts = value.split(",")
    if len(parts) < _LCOV_DA_PARTS:
        return None
    try:
        return int(parts[0].strip()), int(parts[1].strip())
    except ValueError:
        return None


def _count_function(state: LcovRangeState, value: str) -> LcovRangeState:
    # FNDA:<hits>,<name>
    parts = value.split(",", 1)
    if state.path is None or len(parts) < _LCOV_FNDA_PARTS:
        return state
    try:
        hits = int(parts[0].strip())
    except ValueError:
        return state
    current = replace(
        state.current,
        functions_found=state.current.functions_found + 1,
        functions_hit=state.current.functions_hit + int(hits > 0),
    )
    return replace(state, current=current)


def _count_branch(state: LcovRangeState, value: str) -> LcovRangeState:
    # BRDA:<line>,<block>,<branch>,<taken>
    parts = value.split(",")
    if state.path is None or len(parts) < _LCOV_BRDA_PARTS:
        return state
    taken = parts[3].strip()
    hit = taken != _LCOV_NOT_TAKEN and taken.isdigit() and int(taken) > 0
    current = replace(
        state.current,
        branches_found=state.current.branches_found + 1,
        branches_hit=state.current.branches_hit + int(hit),
    )
    return replace(state, current=current)


def _record_line(state: LcovRangeState, line_number: int, hits: int) -> LcovRangeState:
    if state.path is None:
        logger.debug("Ignoring DA record for line %d outside of any SF section", line_number)
        return state
    current = replace(
        state.current,
        lines_found=state.current.lines_found + 1,
        lines_hit=state.current.lines_hit + int(hits != 0),
    )
    state = replace(state, current=current)

    if hits != 0:
        return _close_range(state)

    if not state.recording:
        return replace(state, recording=True, begin=line_number, end=line_number)
    if line_number == state.end + 1:
        return replace(state, end=line_number)

    # Gap between two uncovered lines: the open range ends here
    state = _close_range(state)
    return replace(state, recording=True, begin=line_number, end=line_number)


def step(state: LcovRangeState, raw_line: str) -> LcovRangeState:
    """Apply one trace line to *state* and return the next state."""
    line = raw_line.strip()
    key, sep, value = line.partition(":")

    if sep and key == _LCOV_SF and value.strip():
        state = _commit(_close_range(state))
        return replace(state, path=value.strip(), current=FileTrace())

    if sep and key == _LCOV_DA:
        record = _parse_da(value)
        if record is not None:
            return _record_line(state, *record)

    # Anything that is not a line record ends the open range
    state = _close_range(state)
    if sep and key == _LCOV_FNDA:
        return _count_function(state, value)
    if sep and key == _LCOV_BRDA:
        return _count_branch(state, value)
    return state


def finish(state: LcovRangeState) -> LcovRangeState:
    """Flush the range still open at the end of the stream."""
    return replace(_commit(_close_range(state)), path=None)


def parse_lcov_lines(lines: Iterable[str]) -> dict[str, FileTrace]:
    """Parse an in-memory sequence of lcov lines."""
    state = LcovRangeState()
    for line in lines:
        state = step(state, line)
    return dict(finish(state).files)


def parse_lcov_file(path: Path) -> dict[str, FileTrace]:
    """Stream an lcov ``.info`` file from disk and parse it.

    Args:
        path: Location of the lcov trace.

    Returns:
        Per-file traces keyed by the path written in each ``SF:`` record.

    Raises:
        TraceNotFoundError: If *path* does not exist or cannot be opened.
    """
    if not path.is_file():
        msg = f"{path} file not found"
        raise TraceNotFoundError(msg)

    try:
        stream = path.open(encoding="utf-8")
    except OSError as e:
        msg = f"{path} could not be opened: {e}"
        raise TraceNotFoundError(msg) from e

    state = LcovRangeState()
    with stream:
        try:
            for line in stream:
                state = step(state, line)
        except (OSError, UnicodeDecodeError) as e:
            # The trace is truncated; a range still open has no reliable end
            logger.error("Error reading the file %s: %s", path, e)
            return dict(_commit(state).files)

    files = finish(state).files
    logger.debug("Parsed lcov trace %s (%d files)", path, len(files))
    return dict(files)
