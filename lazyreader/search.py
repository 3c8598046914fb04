"""Case-insensitive substring search over the line buffer.

Queries are literal text. A match never spans two lines, and the scan wraps
around the document once in the requested direction.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class Match:
    line_index: int
    start: int  # character index into the line
    end: int


def find_in_line(line: str, query: str) -> tuple[int, int] | None:
    """Return the first ``(start, end)`` span of ``query`` in ``line``, ignoring case."""
    if not query:
        return None
    found = re.search(re.escape(query), line, re.IGNORECASE)
    if found is None:
        return None
    return found.start(), found.end()


def _scan_order(total: int, start_index: int, forward: bool) -> list[int]:
    if forward:
        return [*range(start_index + 1, total), *range(0, start_index + 1)]
    return [*range(start_index - 1, -1, -1), *range(total - 1, start_index - 1, -1)]


def find(lines: Sequence[str], query: str, start_index: int, forward: bool) -> Match | None:
    """Find the next line containing ``query`` relative to ``start_index``.

    Forward scans ``start_index + 1`` to the end and then wraps to ``0`` up to
    and including ``start_index``. Backward scans ``start_index - 1`` down to
    ``0`` and then wraps from the last line back to ``start_index``. An empty
    query or empty buffer finds nothing.
    """
    if not query or not lines:
        return None
    start_index = max(0, min(start_index, len(lines) - 1))
    for index in _scan_order(len(lines), start_index, forward):
        span = find_in_line(lines[index], query)
        if span is not None:
            return Match(line_index=index, start=span[0], end=span[1])
    return None
