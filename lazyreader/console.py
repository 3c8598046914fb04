"""Scoped redirection of a standard stream's file descriptor.

Third-party code that writes straight to fd 2 would paint over the reader's
frame. ``ConsoleRedirect`` points such a descriptor at a sink for the length
of a session and restores the saved descriptor afterwards; the saved handle
lives on the instance, so separate redirects never share state.
"""

from __future__ import annotations

import os


class ConsoleRedirect:
    def __init__(self, target_fd: int = 2, sink: str = os.devnull) -> None:
        self.target_fd = target_fd
        self.sink = sink
        self._saved_fd: int | None = None

    @property
    def active(self) -> bool:
        return self._saved_fd is not None

    def acquire(self) -> None:
        if self._saved_fd is not None:
            return
        saved_fd = os.dup(self.target_fd)
        try:
            sink_fd = os.open(self.sink, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o600)
        except OSError:
            os.close(saved_fd)
            raise
        try:
            os.dup2(sink_fd, self.target_fd)
        except OSError:
            os.close(saved_fd)
            raise
        finally:
            os.close(sink_fd)
        self._saved_fd = saved_fd

    def release(self) -> None:
        saved_fd = self._saved_fd
        if saved_fd is None:
            return
        self._saved_fd = None
        try:
            os.dup2(saved_fd, self.target_fd)
        finally:
            os.close(saved_fd)

    def __enter__(self) -> ConsoleRedirect:
        self.acquire()
        return self

    def __exit__(self, *_exc: object) -> None:
        self.release()
