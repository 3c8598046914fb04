"""Reader session: startup, main loop, and progress persistence.

The pager hashes the line buffer once, resumes from the newest progress event
for that hash, and then alternates render, input wait, and dispatch until a
quit. The offset is appended to the progress log on every iteration;
persistence failures are logged and never end the session.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Sequence

from .config import ReaderConfig, default_progress_path, load_reader_config
from .console import ConsoleRedirect
from .dispatch import Action, dispatch
from .errors import ProgressLogError
from .progress import ProgressEvent, ProgressLog, document_hash, resume_offset
from .render import build_frame, encode_frame, plain_lines
from .state import ViewState
from .terminal import open_terminal
from .tutorial import run_tutorial

logger = logging.getLogger(__name__)


class Pager:
    def __init__(
        self,
        lines: Sequence[str],
        content_width: int,
        terminal,
        progress_log: ProgressLog,
        config: ReaderConfig | None = None,
    ) -> None:
        self.lines: tuple[str, ...] = tuple(lines)
        self.content_width = content_width
        self.terminal = terminal
        self.progress_log = progress_log
        self.config = config if config is not None else ReaderConfig()
        self.document_hash = document_hash(self.lines)
        self.total_lines = len(self.lines)
        self.state: ViewState | None = None

    def _load_previous(self) -> ProgressEvent | None:
        try:
            return self.progress_log.latest(self.document_hash)
        except ProgressLogError as exc:
            logger.warning("progress lookup failed, starting at top: %s", exc)
            return None

    def _persist(self) -> None:
        state = self.state
        try:
            self.progress_log.record(self.document_hash, state.offset, self.total_lines)
        except ProgressLogError as exc:
            logger.warning("progress not saved: %s", exc)

    def _show_tutorial(self) -> None:
        state = self.state
        state.width, state.height = run_tutorial(self.terminal, state.width, state.height)

    def run(self) -> ViewState:
        """Run the session and return the final view state.

        ``TerminalError`` from the size query or mode switch propagates; the
        terminal is restored before it reaches the caller.
        """
        width, height = self.terminal.size()
        self.state = state = ViewState(
            total_lines=self.total_lines,
            width=width,
            height=height,
            content_width=self.content_width,
            show_highlighter=self.config.enable_line_highlighter,
            show_progress=self.config.show_progress,
        )
        previous = self._load_previous()
        if previous is not None:
            state.offset = resume_offset(previous, self.total_lines)
        logger.debug(
            "document %016x: %d lines, starting at offset %d",
            self.document_hash,
            self.total_lines,
            state.offset,
        )

        if not self.terminal.interactive:
            if self.lines:
                self.terminal.write("".join(f"{line}\n" for line in plain_lines(state, self.lines)))
            return state

        show_tutorial = self.config.enable_tutorial is not False and (not self.lines or previous is None)
        with self.terminal.raw_mode():
            if show_tutorial:
                self._show_tutorial()
            if self.lines:
                self._main_loop()
        return state

    def _main_loop(self) -> None:
        state = self.state
        while True:
            self.terminal.write(encode_frame(build_frame(state, self.lines)))
            event = self.terminal.read_event()
            if event is None:
                break
            action = dispatch(state, event, self.lines)
            if action == Action.SHOW_TUTORIAL:
                self._show_tutorial()
            self._persist()
            if action == Action.QUIT:
                break


def run_reader(lines: Sequence[str], col: int, redirect_stderr: bool = True) -> ViewState:
    """Wire the real terminal, config, and progress log around ``lines``."""
    config = load_reader_config()
    terminal = open_terminal()
    try:
        pager = Pager(lines, col, terminal, ProgressLog(default_progress_path()), config)
        redirect = ConsoleRedirect() if redirect_stderr and terminal.interactive else contextlib.nullcontext()
        with redirect:
            return pager.run()
    finally:
        terminal.close()
