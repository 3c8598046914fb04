"""Key dispatch for the view state machine.

Each mode has one handler in ``MODE_HANDLERS`` and normal-mode keys map to
actions in ``NORMAL_KEY_ACTIONS``, so every allowed transition can be listed
and tested without a terminal. Handlers mutate ``ViewState`` in place and
return an ``Action`` telling the pager what to do next.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from enum import Enum

from .input import Resize
from .search import find
from .state import Mode, ViewState


class Action(Enum):
    NONE = "none"
    QUIT = "quit"
    SHOW_TUTORIAL = "show_tutorial"


Event = str | Resize


def scroll_down(state: ViewState) -> None:
    if state.offset + state.height < state.total_lines:
        state.offset += 1


def scroll_up(state: ViewState) -> None:
    if state.offset > 0:
        state.offset -= 1


def page_down(state: ViewState) -> None:
    if state.offset + state.height < state.total_lines:
        last_page_start = max(0, state.total_lines - state.height)
        state.offset = min(state.offset + state.page_step, last_page_start)


def page_up(state: ViewState) -> None:
    state.offset = max(0, state.offset - state.page_step)


def center_on_match(state: ViewState) -> None:
    """Scroll so the current match sits mid-viewport, staying inside the document."""
    if state.current_match is None:
        return
    last_page_start = max(0, state.total_lines - state.height)
    target = state.current_match.line_index - state.height // 2
    state.offset = max(0, min(target, last_page_start))


def find_next_match(state: ViewState, lines: Sequence[str], forward: bool) -> None:
    """Advance ``current_match`` from the previous match, or from the top row."""
    if not state.search_query:
        return
    start_index = state.current_match.line_index if state.current_match is not None else state.offset
    match = find(lines, state.search_query, start_index, forward)
    if match is not None:
        state.current_match = match
        center_on_match(state)


def _enter_text_mode(state: ViewState, mode: Mode) -> None:
    state.mode = mode
    state.command_buffer = ""
    if mode == Mode.SEARCH:
        state.search_direction = True
    elif mode == Mode.REVERSE_SEARCH:
        state.search_direction = False


def _leave_text_mode(state: ViewState) -> None:
    state.mode = Mode.NORMAL
    state.command_buffer = ""


NORMAL_KEY_ACTIONS: dict[str, Callable[[ViewState], None]] = {
    "j": scroll_down,
    "DOWN": scroll_down,
    "k": scroll_up,
    "UP": scroll_up,
    "PAGE_DOWN": page_down,
    "PAGE_UP": page_up,
    ":": lambda state: _enter_text_mode(state, Mode.COMMAND),
    "/": lambda state: _enter_text_mode(state, Mode.SEARCH),
    "?": lambda state: _enter_text_mode(state, Mode.REVERSE_SEARCH),
}


def execute_command(state: ViewState, command: str) -> Action:
    """Run one command-mode entry; unknown commands do nothing."""
    name = command.strip()
    if name.startswith(":"):
        name = name[1:].strip()
    if name == "q":
        return Action.QUIT
    if name == "z":
        state.show_highlighter = not state.show_highlighter
    elif name == "p":
        state.show_progress = not state.show_progress
    elif name in {"help", "tutorial"}:
        return Action.SHOW_TUTORIAL
    return Action.NONE


def handle_normal_key(state: ViewState, key: str, lines: Sequence[str]) -> Action:
    if key == "n":
        find_next_match(state, lines, state.search_direction)
        return Action.NONE
    if key == "N":
        find_next_match(state, lines, not state.search_direction)
        return Action.NONE
    action = NORMAL_KEY_ACTIONS.get(key)
    if action is not None:
        action(state)
    return Action.NONE


def _edit_buffer(state: ViewState, key: str) -> bool:
    """Apply Esc/Backspace/printable keys shared by all text-entry modes."""
    if key == "ESC":
        _leave_text_mode(state)
        return True
    if key == "BACKSPACE":
        state.command_buffer = state.command_buffer[:-1]
        return True
    if len(key) == 1 and key.isprintable():
        state.command_buffer += key
        return True
    return False


def handle_command_key(state: ViewState, key: str, lines: Sequence[str]) -> Action:
    if key == "ENTER":
        action = execute_command(state, state.command_buffer)
        if action != Action.QUIT:
            _leave_text_mode(state)
        return action
    _edit_buffer(state, key)
    return Action.NONE


def handle_search_key(state: ViewState, key: str, lines: Sequence[str]) -> Action:
    if key == "ENTER":
        forward = state.mode == Mode.SEARCH
        state.search_query = state.command_buffer
        find_next_match(state, lines, forward)
        _leave_text_mode(state)
        return Action.NONE
    _edit_buffer(state, key)
    return Action.NONE


MODE_HANDLERS: dict[Mode, Callable[[ViewState, str, Sequence[str]], Action]] = {
    Mode.NORMAL: handle_normal_key,
    Mode.COMMAND: handle_command_key,
    Mode.SEARCH: handle_search_key,
    Mode.REVERSE_SEARCH: handle_search_key,
}


def dispatch(state: ViewState, event: Event, lines: Sequence[str]) -> Action:
    """Apply one input event to ``state``.

    Resizes update geometry in every mode without renormalizing the offset.
    ``CTRL_C`` quits from any mode because raw mode swallows SIGINT.
    """
    if isinstance(event, Resize):
        state.width = event.columns
        state.height = event.lines
        return Action.NONE
    if event == "CTRL_C":
        return Action.QUIT
    return MODE_HANDLERS[state.mode](state, event, lines)
