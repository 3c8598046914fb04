"""Command-line front door for lazyreader.

Parses CLI options, loads the document from a file or stdin, and justifies it
into display rows. Then dispatches into the interactive reader.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import load_reader_config
from .errors import TerminalError
from .pager import run_reader
from .source import justify, read_text, wait_for_stdin


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazyreader",
        description="Read a text document in the terminal and resume where you left off.",
    )
    parser.add_argument("path", nargs="?", default=None, help="Path to a text file. Reads stdin when omitted or '-'.")
    parser.add_argument(
        "-c",
        "--col",
        type=_positive_int,
        default=None,
        help="Column width to justify text to (default: config value, 110).",
    )
    parser.add_argument("--nopager", action="store_true", help="Print justified text directly without paging.")
    parser.add_argument("--log-file", metavar="PATH", help="Write debug log to PATH.")
    return parser


def load_document(path_arg: str | None) -> str:
    """Read the document text, streaming stdin when no path is given."""
    if path_arg is None or path_arg == "-":
        return "\n".join(wait_for_stdin(sys.stdin))
    path = Path(path_arg)
    if not path.exists():
        raise SystemExit(f"Path not found: {path}")
    if path.is_dir():
        raise SystemExit(f"Not a file: {path}")
    return read_text(path)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and open the reader on the given document."""
    args = build_parser().parse_args(argv)

    if args.log_file:
        logging.basicConfig(
            filename=args.log_file,
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )

    col = args.col if args.col is not None else load_reader_config().column
    lines = justify(load_document(args.path), col)

    if args.nopager:
        sys.stdout.write("".join(f"{line}\n" for line in lines))
        return

    try:
        run_reader(lines, col)
    except TerminalError as exc:
        raise SystemExit(f"lazyreader: {exc}") from exc


if __name__ == "__main__":
    main()
