"""Terminal control helpers for the reader session.

Owns raw-mode lifecycle, alternate-screen switching, and cursor visibility.
Also provides the plain-output stand-in used when stdout is not a tty.
"""

from __future__ import annotations

import atexit
import contextlib
import os
import shutil
import sys
import termios
import tty
from typing import TextIO

from .errors import TerminalError
from .input import KeyReader, Resize

RESIZE_POLL_MS = 120


class TerminalController:
    """Manage terminal mode transitions, frame output, and input events."""

    interactive = True

    def __init__(self, stdin_fd: int, stdout_fd: int, owns_input: bool = False) -> None:
        """Capture tty state and bind input/output file descriptors.

        With ``owns_input`` set, ``close`` also closes ``stdin_fd``.
        """
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._owns_input = owns_input
        try:
            self._saved_tty_state = termios.tcgetattr(stdin_fd)
        except termios.error as exc:
            raise TerminalError(f"cannot read terminal attributes: {exc}") from exc
        self._keys = KeyReader(stdin_fd)
        self._active = False
        self._last_size: tuple[int, int] | None = None

    def enable_tui_mode(self) -> None:
        """Enter raw alternate-screen mode with the cursor hidden."""
        try:
            tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        except termios.error as exc:
            raise TerminalError(f"cannot enable raw mode: {exc}") from exc
        self._active = True
        atexit.register(self.disable_tui_mode)
        # Enter alternate screen and hide cursor.
        os.write(self.stdout_fd, b"\x1b[?1049h\x1b[?25l")

    def disable_tui_mode(self) -> None:
        """Restore normal terminal state; safe to call more than once."""
        if not self._active:
            return
        self._active = False
        atexit.unregister(self.disable_tui_mode)
        # Show cursor and restore the main screen buffer.
        os.write(self.stdout_fd, b"\x1b[?25h\x1b[?1049l")
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    @contextlib.contextmanager
    def raw_mode(self):
        """Context manager that brackets code with TUI enter/exit calls."""
        try:
            self.enable_tui_mode()
            yield
        finally:
            self.disable_tui_mode()

    def close(self) -> None:
        """Restore the terminal and release an input descriptor we opened."""
        self.disable_tui_mode()
        if self._owns_input:
            self._owns_input = False
            os.close(self.stdin_fd)

    def size(self) -> tuple[int, int]:
        """Return ``(columns, lines)`` of the output terminal."""
        try:
            size = os.get_terminal_size(self.stdout_fd)
        except OSError as exc:
            raise TerminalError(f"cannot query terminal size: {exc}") from exc
        self._last_size = (size.columns, size.lines)
        return self._last_size

    def write(self, text: str) -> None:
        os.write(self.stdout_fd, text.encode("utf-8", errors="replace"))

    def read_event(self) -> str | Resize | None:
        """Block until a key arrives or the terminal changes size.

        Returns ``None`` when the input side reaches end of file.
        """
        if self._last_size is None:
            self.size()
        while True:
            try:
                key = self._keys.read_key(timeout_ms=RESIZE_POLL_MS)
            except KeyboardInterrupt:
                return "CTRL_C"
            if key:
                return key
            if self._keys.eof:
                return None
            previous = self._last_size
            current = self.size()
            if current != previous:
                return Resize(*current)


class PlainConsole:
    """Output sink for non-interactive runs: no cursor control, no input."""

    interactive = False

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream if stream is not None else sys.stdout

    @contextlib.contextmanager
    def raw_mode(self):
        yield

    def size(self) -> tuple[int, int]:
        size = shutil.get_terminal_size((80, 24))
        return size.columns, size.lines

    def write(self, text: str) -> None:
        self.stream.write(text)
        self.stream.flush()

    def read_event(self) -> str | Resize | None:
        return None

    def close(self) -> None:
        self.stream.flush()


def open_terminal(stdin: TextIO | None = None, stdout: TextIO | None = None) -> TerminalController | PlainConsole:
    """Pick the interactive controller when stdout and some input are ttys.

    When stdin carries the document, keys are read from ``/dev/tty`` instead.
    """
    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout
    try:
        stdout_fd = stdout.fileno()
    except (AttributeError, OSError, ValueError):
        return PlainConsole(stdout)
    if not os.isatty(stdout_fd):
        return PlainConsole(stdout)

    try:
        stdin_fd = stdin.fileno()
    except (AttributeError, OSError, ValueError):
        stdin_fd = -1
    if stdin_fd >= 0 and os.isatty(stdin_fd):
        return TerminalController(stdin_fd=stdin_fd, stdout_fd=stdout_fd)

    try:
        tty_fd = os.open("/dev/tty", os.O_RDONLY)
    except OSError:
        return PlainConsole(stdout)
    try:
        return TerminalController(stdin_fd=tty_fd, stdout_fd=stdout_fd, owns_input=True)
    except TerminalError:
        os.close(tty_fd)
        raise
