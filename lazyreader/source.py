"""Producers of the display line buffer.

Reads documents from files or a streamed stdin and justifies raw text into
fixed-width rows for the pager.
"""

from __future__ import annotations

import re
import threading
from pathlib import Path
from typing import TextIO

PARAGRAPH_BREAK_RE = re.compile(r"\n[ \t]*\n")


def read_text(path: Path) -> str:
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return path.read_text(encoding=encoding)
        except UnicodeDecodeError:
            continue
    return path.read_text(encoding="utf-8", errors="replace")


class StdinCollector:
    """Collect lines from a stream on a background thread.

    The producer appends under a lock; ``snapshot`` hands the collected lines
    to the caller once, after which the pager owns its copy exclusively.
    """

    def __init__(self, stream: TextIO) -> None:
        self.stream = stream
        self._lines: list[str] = []
        self._lock = threading.Lock()
        self._thread = threading.Thread(target=self._produce, name="lazyreader-stdin", daemon=True)

    def start(self) -> StdinCollector:
        self._thread.start()
        return self

    def _produce(self) -> None:
        for raw in self.stream:
            line = raw.rstrip("\r\n")
            with self._lock:
                self._lines.append(line)

    def snapshot(self, settle_seconds: float = 0.05) -> list[str]:
        """Wait briefly for input, then return a copy of what was read.

        Once any line has arrived the stream is read to the end, so piped
        documents are never cut short.
        """
        self._thread.join(timeout=settle_seconds)
        with self._lock:
            started = bool(self._lines)
        if started:
            self._thread.join()
        with self._lock:
            return list(self._lines)


def _split_long_word(word: str, width: int) -> list[str]:
    parts: list[str] = []
    while len(word) > width:
        parts.append(word[:width])
        word = word[width:]
    parts.append(word)
    return parts


def justify_line(words: list[str], width: int) -> str:
    """Spread ``words`` across ``width`` columns; leftmost gaps take the extra spaces."""
    if len(words) == 1:
        return words[0]
    spaces = max(0, width - sum(len(word) for word in words))
    gaps = len(words) - 1
    each_space, extra_space = divmod(spaces, gaps)

    out: list[str] = []
    for index, word in enumerate(words):
        out.append(word)
        if index < gaps:
            out.append(" " * (each_space + (1 if index < extra_space else 0)))
    return "".join(out)


def justify(text: str, width: int) -> list[str]:
    """Wrap ``text`` into fully justified rows of ``width`` columns.

    The last row of each paragraph stays ragged and every paragraph is
    followed by one blank row. Blank text yields no rows.
    """
    text = text.replace("\r\n", "\n")
    if not text.strip():
        return []
    if width <= 0:
        return text.split("\n")

    lines: list[str] = []
    for paragraph in PARAGRAPH_BREAK_RE.split(text):
        words: list[str] = []
        for raw_word in paragraph.split():
            words.extend(_split_long_word(raw_word, width))

        line: list[str] = []
        length = 0
        for word in words:
            if line and length + len(word) > width:
                lines.append(justify_line(line, width))
                line = []
                length = 0
            line.append(word)
            length += len(word) + 1

        if line:
            lines.append(" ".join(line))
        lines.append("")
    return lines


def wait_for_stdin(stream: TextIO, settle_seconds: float = 0.05) -> list[str]:
    """Start a collector on ``stream`` and take its one-shot snapshot."""
    return StdinCollector(stream).start().snapshot(settle_seconds)
