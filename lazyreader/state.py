from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .search import Match


class Mode(Enum):
    NORMAL = "normal"
    COMMAND = "command"
    SEARCH = "search"
    REVERSE_SEARCH = "reverse_search"


TEXT_ENTRY_MODES = frozenset({Mode.COMMAND, Mode.SEARCH, Mode.REVERSE_SEARCH})
MODE_PROMPTS = {
    Mode.COMMAND: ":",
    Mode.SEARCH: "/",
    Mode.REVERSE_SEARCH: "?",
}


@dataclass
class ViewState:
    total_lines: int
    width: int
    height: int
    content_width: int
    offset: int = 0
    mode: Mode = Mode.NORMAL
    command_buffer: str = ""
    search_query: str = ""
    search_direction: bool = True  # True searches forward
    current_match: Match | None = None
    show_highlighter: bool = True
    show_progress: bool = False

    @property
    def page_step(self) -> int:
        """Rows moved by PageUp/PageDown; three rows of context are kept."""
        return max(1, self.height - 3)

    @property
    def center_offset(self) -> int:
        """Leading spaces that center ``content_width`` columns in the viewport."""
        return max(0, (self.width - self.content_width) // 2)

    def percentage(self) -> float:
        if self.total_lines <= 0:
            return 0.0
        return 100.0 * self.offset / self.total_lines
