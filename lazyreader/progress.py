"""Append-only, content-addressed reading progress.

Each navigation step appends one JSON line; the current position for a
document is the newest event carrying its hash. Nothing is ever rewritten,
so an interrupted write can only leave a malformed trailing line, which
readers skip.
"""

from __future__ import annotations

import hashlib
import json
import logging
import math
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from .errors import ProgressLogError

logger = logging.getLogger(__name__)

HASH_BYTES = 8


def document_hash(lines: Sequence[str]) -> int:
    """Return the 64-bit identity of a line sequence.

    Every line is length-prefixed, so the line boundaries are part of the
    identity as well as the text.
    """
    digest = hashlib.blake2b(digest_size=HASH_BYTES)
    for line in lines:
        data = line.encode("utf-8", errors="surrogatepass")
        digest.update(len(data).to_bytes(8, "little"))
        digest.update(data)
    return int.from_bytes(digest.digest(), "big")


def progress_percentage(offset: int, total_lines: int) -> float:
    if total_lines <= 0:
        return 0.0
    return 100.0 * offset / total_lines


@dataclass(frozen=True)
class ProgressEvent:
    timestamp: datetime
    document_hash: int
    offset: int
    total_lines: int
    percentage: float

    def to_json(self) -> str:
        return json.dumps(
            {
                "timestamp": self.timestamp.isoformat(),
                "document_hash": self.document_hash,
                "offset": self.offset,
                "total_lines": self.total_lines,
                "percentage": self.percentage,
            },
            separators=(",", ":"),
        )

    @classmethod
    def from_json(cls, line: str) -> ProgressEvent | None:
        """Parse one stored record, returning ``None`` for anything malformed."""
        try:
            payload = json.loads(line)
        except ValueError:
            return None
        if not isinstance(payload, dict):
            return None

        raw_hash = payload.get("document_hash")
        offset = payload.get("offset")
        total_lines = payload.get("total_lines")
        percentage = payload.get("percentage")
        raw_timestamp = payload.get("timestamp")
        for value in (raw_hash, offset, total_lines):
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                return None
        if raw_hash >= 1 << (8 * HASH_BYTES):
            return None
        if isinstance(percentage, bool) or not isinstance(percentage, (int, float)):
            return None
        try:
            percentage = float(percentage)
        except OverflowError:
            return None
        if not math.isfinite(percentage):
            return None
        timestamp = _parse_timestamp(raw_timestamp)
        if timestamp is None:
            return None
        return cls(
            timestamp=timestamp,
            document_hash=raw_hash,
            offset=offset,
            total_lines=total_lines,
            percentage=percentage,
        )


def _parse_timestamp(value: object) -> datetime | None:
    """Accept ISO-8601 strings or epoch seconds; naive values are read as UTC."""
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value, tz=timezone.utc)
        if isinstance(value, str):
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        else:
            return None
    except (ValueError, OverflowError, OSError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def resume_offset(event: ProgressEvent, total_lines: int) -> int:
    """Map a stored percentage back onto a document of ``total_lines`` rows."""
    if total_lines <= 0:
        return 0
    offset = math.floor(event.percentage / 100.0 * total_lines + 0.5)
    return max(0, min(offset, total_lines - 1))


class ProgressLog:
    """Line-delimited JSON store of ``ProgressEvent`` records."""

    def __init__(self, path: Path, clock: Callable[[], datetime] | None = None) -> None:
        self.path = Path(path)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def record(self, document_hash: int, offset: int, total_lines: int) -> ProgressEvent:
        """Append one event for the current position.

        Creates the parent directory on first use. Filesystem failures are
        raised as ``ProgressLogError`` so the caller can retry on the next
        iteration.
        """
        event = ProgressEvent(
            timestamp=self._clock(),
            document_hash=document_hash,
            offset=offset,
            total_lines=total_lines,
            percentage=progress_percentage(offset, total_lines),
        )
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(event.to_json() + "\n")
        except OSError as exc:
            raise ProgressLogError(f"failed to append progress to {self.path}: {exc}") from exc
        return event

    def events(self) -> Iterator[ProgressEvent]:
        """Yield every well-formed event in file order."""
        try:
            handle = self.path.open("r", encoding="utf-8", errors="replace")
        except FileNotFoundError:
            return
        except OSError as exc:
            raise ProgressLogError(f"failed to read progress from {self.path}: {exc}") from exc

        with handle:
            try:
                for line_number, raw in enumerate(handle, start=1):
                    line = raw.strip()
                    if not line:
                        continue
                    event = ProgressEvent.from_json(line)
                    if event is None:
                        logger.debug("skipping malformed progress record %s:%d", self.path, line_number)
                        continue
                    yield event
            except OSError as exc:
                raise ProgressLogError(f"failed to read progress from {self.path}: {exc}") from exc

    def latest(self, document_hash: int) -> ProgressEvent | None:
        """Return the newest event for ``document_hash``; later lines win ties."""
        newest: ProgressEvent | None = None
        for event in self.events():
            if event.document_hash != document_hash:
                continue
            if newest is None or event.timestamp >= newest.timestamp:
                newest = event
        return newest
