"""Exception types raised by the reader.

Environment failures end a session; persistence failures are reported and
swallowed by the main loop.
"""

from __future__ import annotations


class LazyReaderError(Exception):
    """Base class for reader errors."""


class TerminalError(LazyReaderError):
    """Terminal size query or mode switch failed; rendering is not safe."""


class ProgressLogError(LazyReaderError):
    """Appending to or reading the progress log failed."""
