"""Public package surface for lazyreader.

Exports ``main`` for programmatic CLI invocation and ``run_reader`` for
callers that already hold a sequence of display lines.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


def run_reader(*args, **kwargs):
    """Lazily import the pager wiring helper."""
    from .pager import run_reader as _run_reader

    return _run_reader(*args, **kwargs)


__all__ = ["main", "run_reader"]
