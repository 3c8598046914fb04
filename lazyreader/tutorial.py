"""First-run help overlay.

Drawn with the same frame pipeline and key reader as the main loop.
"""

from __future__ import annotations

from .dispatch import page_down, page_up, scroll_down, scroll_up
from .input import Resize
from .render import build_frame, encode_frame
from .state import ViewState

TUTORIAL_LINES: tuple[str, ...] = (
    "Welcome to lazyreader!",
    "",
    "Navigation:",
    "  j or Down     scroll down",
    "  k or Up       scroll up",
    "  PageDown      scroll down one page",
    "  PageUp        scroll up one page",
    "",
    "Search:",
    "  /             search forward",
    "  ?             search backward",
    "  n             next match",
    "  N             previous match",
    "",
    "Commands (type : then the command, then Enter):",
    "  q             quit",
    "  z             toggle line highlighter",
    "  p             toggle progress",
    "  help          show this tutorial",
    "",
    "Your position is saved as you read and restored next time.",
    "",
    "Press any key to continue...",
)
TUTORIAL_WIDTH = max(len(line) for line in TUTORIAL_LINES)

_SCROLL_KEYS = {
    "j": scroll_down,
    "DOWN": scroll_down,
    "k": scroll_up,
    "UP": scroll_up,
    "PAGE_DOWN": page_down,
    "PAGE_UP": page_up,
}


def tutorial_state(width: int, height: int) -> ViewState:
    return ViewState(
        total_lines=len(TUTORIAL_LINES),
        width=width,
        height=height,
        content_width=TUTORIAL_WIDTH,
        show_highlighter=False,
    )


def run_tutorial(terminal, width: int, height: int) -> tuple[int, int]:
    """Show the overlay until a non-scrolling key is pressed.

    Returns the viewport size last seen, which may have changed while the
    overlay was open.
    """
    if not terminal.interactive:
        return width, height
    state = tutorial_state(width, height)
    while True:
        terminal.write(encode_frame(build_frame(state, TUTORIAL_LINES)))
        event = terminal.read_event()
        if event is None:
            break
        if isinstance(event, Resize):
            state.width, state.height = event.columns, event.lines
            continue
        scroll = _SCROLL_KEYS.get(event)
        if scroll is None:
            break
        scroll(state)
    return state.width, state.height
