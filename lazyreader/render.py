"""Frame projection for the reader viewport.

``build_frame`` turns view state plus the line buffer into positioned, styled
spans without touching the terminal. ``encode_frame`` is the only place that
knows about escape sequences; ``plain_lines`` is the non-interactive rendition.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from .ansi import CLEAR_SCREEN, RESET, clip_text, display_width, move_to
from .state import MODE_PROMPTS, TEXT_ENTRY_MODES, ViewState


class Style(Enum):
    PLAIN = "plain"
    HIGHLIGHT_ROW = "highlight_row"
    MATCH = "match"
    STATUS = "status"


STYLE_SGR: dict[Style, str] = {
    Style.PLAIN: "",
    Style.HIGHLIGHT_ROW: "\033[48;2;40;40;40m",
    Style.MATCH: "\033[30;43m",
    Style.STATUS: "\033[1m",
}


@dataclass(frozen=True)
class Span:
    text: str
    style: Style = Style.PLAIN


@dataclass(frozen=True)
class FrameRow:
    """Spans drawn left to right from ``(x, y)``.

    When ``fill`` is set the whole row is first painted with that style, which
    both blanks leftover text and draws the highlighter band.
    """

    y: int
    x: int
    spans: tuple[Span, ...]
    fill: Style | None = None

    @property
    def text(self) -> str:
        return "".join(span.text for span in self.spans)


@dataclass
class Frame:
    width: int
    height: int
    rows: list[FrameRow] = field(default_factory=list)


def highlight_row_index(state: ViewState) -> int:
    """The fixed viewport row the line highlighter sits on."""
    return state.height // 2


def visible_lines(state: ViewState, lines: Sequence[str]) -> list[str]:
    return list(lines[state.offset : state.offset + max(0, state.height)])


def _line_spans(state: ViewState, line: str, line_index: int, base: Style) -> tuple[Span, ...]:
    match = state.current_match
    if match is None or match.line_index != line_index:
        return (Span(line, base),)
    return (
        Span(line[: match.start], base),
        Span(line[match.start : match.end], Style.MATCH),
        Span(line[match.end :], base),
    )


def progress_label(state: ViewState) -> str:
    return f"{math.floor(state.percentage() + 0.5)}%"


def build_frame(state: ViewState, lines: Sequence[str]) -> Frame:
    """Project ``state`` and ``lines`` onto one frame of the viewport."""
    frame = Frame(width=state.width, height=state.height)
    highlight_row = highlight_row_index(state)
    x = state.center_offset

    for row, line in enumerate(visible_lines(state, lines)):
        highlighted = state.show_highlighter and row == highlight_row
        base = Style.HIGHLIGHT_ROW if highlighted else Style.PLAIN
        frame.rows.append(
            FrameRow(
                y=row,
                x=x,
                spans=_line_spans(state, line, state.offset + row, base),
                fill=Style.HIGHLIGHT_ROW if highlighted else None,
            )
        )

    if state.mode in TEXT_ENTRY_MODES and state.height > 0:
        prompt = MODE_PROMPTS[state.mode] + state.command_buffer
        frame.rows.append(
            FrameRow(y=state.height - 1, x=0, spans=(Span(prompt, Style.STATUS),), fill=Style.PLAIN)
        )

    if state.show_progress and state.height > 0:
        label = progress_label(state)
        frame.rows.append(
            FrameRow(
                y=max(0, state.height - 2),
                x=max(0, state.width - len(label) - 2),
                spans=(Span(label, Style.STATUS),),
            )
        )
    return frame


def encode_frame(frame: Frame) -> str:
    """Serialize a frame into one ANSI payload that repaints the screen."""
    out: list[str] = [CLEAR_SCREEN]
    for row in frame.rows:
        if row.y >= frame.height:
            continue
        if row.fill is not None:
            out.append(move_to(0, row.y))
            out.append(STYLE_SGR[row.fill])
            out.append(" " * frame.width)
            out.append(RESET)
        out.append(move_to(row.x, row.y))
        col = row.x
        for span in row.spans:
            text = clip_text(span.text, frame.width - col, start_col=col)
            if not text:
                continue
            sgr = STYLE_SGR[span.style]
            out.append(sgr)
            out.append(text)
            if sgr:
                out.append(RESET)
            col += display_width(text, col)
    return "".join(out)


def plain_lines(state: ViewState, lines: Sequence[str]) -> list[str]:
    """Visible window as centered plain text, with no cursor control."""
    padding = " " * state.center_offset
    return [f"{padding}{line}" for line in visible_lines(state, lines)]
