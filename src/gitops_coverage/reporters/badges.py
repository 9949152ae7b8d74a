"""Coverage thresholds and shields.io badge construction.

Everything here is a pure function of a percentage or a string so that the
markdown table and the terminal view agree on colors.
"""

from __future__ import annotations

from enum import Enum
from urllib.parse import quote

# The colors used to highlight green, orange, and red badges
GREEN = "147317"
ORANGE = "c27d15"
RED = "c23815"

GOOD_THRESHOLD = 80.0
WARNING_THRESHOLD = 50.0

BADGE_URL = "https://img.shields.io/badge/{text}-{color}?style=for-the-badge"


class CoverageLevel(Enum):
    """Coverage quality bucket for one percentage."""

    GOOD = "good"
    WARNING = "warning"
    BAD = "bad"


LEVEL_COLORS = {
    CoverageLevel.GOOD: GREEN,
    CoverageLevel.WARNING: ORANGE,
    CoverageLevel.BAD: RED,
}


def coverage_level(pct: float) -> CoverageLevel:
    """Bucket *pct*: ``>= 80`` good, ``>= 50`` warning, anything lower bad."""
    if pct >= GOOD_THRESHOLD:
        return CoverageLevel.GOOD
    if pct >= WARNING_THRESHOLD:
        return CoverageLevel.WARNING
    return CoverageLevel.BAD


def color_for(pct: float) -> str:
    """Return the badge hex color for *pct*."""
    return LEVEL_COLORS[coverage_level(pct)]


def format_pct(pct: float) -> str:
    """Format a percentage without a trailing ``.0`` (``100``, ``85.5``, ``0``)."""
    return f"{pct:g}"


def escape_badge_text(text: str) -> str:
    """Escape *text* for the path segment of a shields.io badge URL.

    shields.io uses ``-`` as its field separator and ``_`` for spaces, so
    literal dashes and underscores are doubled and spaces become ``_``.
    Remaining reserved characters are percent-encoded.
    """
    escaped = text.replace("_", "__").replace("-", "--").replace(" ", "_")
    return quote(escaped, safe="")


def escape_alt_text(text: str) -> str:
    """Escape *text* for the alt text of a markdown image inside a table cell.

    Brackets would end the image syntax early and ``|`` would split the
    table row, so both are backslash-escaped along with the backslash itself.
    """
    for char in ("\\", "[", "]", "|"):
        text = text.replace(char, f"\\{char}")
    return text


def badge(label: str, color: str, text: str | None = None) -> str:
    """Return a markdown image of a shields.io badge.

    Args:
        label: Alt text of the image.
        color: Hex color, without ``#``.
        text: Text shown on the badge; defaults to *label*.
    """
    url = BADGE_URL.format(text=escape_badge_text(label if text is None else text), color=color)
    return f"![{escape_alt_text(label)}]({url})"


def pct_badge(pct: float) -> str:
    """Return a badge showing *pct*, colored by threshold."""
    return badge(format_pct(pct), color_for(pct))


def uncovered_badge(line_range: str) -> str:
    """Return a red badge for one uncovered line range."""
    return badge(line_range, RED)
