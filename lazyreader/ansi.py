"""Display-width measurement and ANSI control sequences.

Provides the clipping helpers that keep document text inside the viewport and
the escape sequences used to draw a frame.
"""

from __future__ import annotations

import unicodedata

TAB_STOP = 8

RESET = "\033[0m"
CLEAR_SCREEN = "\033[H\033[2J"


def move_to(x: int, y: int) -> str:
    """Cursor move to zero-based column ``x`` and row ``y``."""
    return f"\033[{max(0, y) + 1};{max(0, x) + 1}H"


def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for one character at visual column ``col``.

    Tabs expand to the next 8-column stop, combining marks consume no columns,
    and East Asian wide/fullwidth characters consume two.
    """
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def display_width(text: str, start_col: int = 0) -> int:
    col = start_col
    for ch in text:
        col += char_display_width(ch, col)
    return col - start_col


def clip_text(text: str, max_cols: int, start_col: int = 0) -> str:
    """Trim plain text to at most ``max_cols`` display columns.

    ``start_col`` is the visual column the text begins at, so tab stops line
    up when a row is drawn in several spans. Tabs become spaces and other
    control characters are dropped so document text cannot move the cursor.
    """
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = start_col
    limit = start_col + max_cols
    for ch in text:
        if ch != "\t" and unicodedata.category(ch) == "Cc":
            continue
        w = char_display_width(ch, col)
        if col + w > limit:
            break
        out.append(" " * w if ch == "\t" else ch)
        col += w
    return "".join(out)
