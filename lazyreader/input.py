"""Low-level terminal input decoding.

Reads raw bytes from a tty and translates them into normalized key tokens.
Handles ESC-sequence timing, paging keys, and multi-byte UTF-8 characters.
"""

from __future__ import annotations

import os
import select
from typing import NamedTuple

ESC_SEQUENCE_TIMEOUT_MS = 25

_CONTROL_KEYS = {
    b"\x03": "CTRL_C",
    b"\t": "TAB",
    b"\x08": "BACKSPACE",
    b"\x7f": "BACKSPACE",
    b"\r": "ENTER",
    b"\n": "ENTER",
}
_CSI_FINAL_KEYS = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
    b"H": "HOME",
    b"F": "END",
}
_CSI_TILDE_KEYS = {
    b"1": "HOME",
    b"4": "END",
    b"5": "PAGE_UP",
    b"6": "PAGE_DOWN",
    b"7": "HOME",
    b"8": "END",
}


class Resize(NamedTuple):
    columns: int
    lines: int


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


class KeyReader:
    """Decode key tokens from one file descriptor.

    Bytes read ahead while recognizing an escape sequence are kept on the
    instance and replayed by the next ``read_key`` call.
    """

    def __init__(self, fd: int) -> None:
        self.fd = fd
        self._pending: list[bytes] = []
        self.eof = False

    def _read_ready_byte(self, timeout_ms: int) -> bytes | None:
        if self._pending:
            return self._pending.pop(0)
        ready, _, _ = select.select([self.fd], [], [], max(0.0, timeout_ms / 1000.0))
        if not ready:
            return None
        ch = os.read(self.fd, 1)
        if not ch:
            return None
        return ch

    def read_key(self, timeout_ms: int | None = None) -> str:
        """Return the next key token, or ``""`` on timeout or end of input."""
        if self._pending:
            ch = self._pending.pop(0)
        else:
            if timeout_ms is not None:
                ready, _, _ = select.select([self.fd], [], [], max(0.0, timeout_ms / 1000.0))
                if not ready:
                    return ""
            ch = os.read(self.fd, 1)
            if not ch:
                self.eof = True
                return ""

        if ch == b"\r":
            # Terminals not in raw mode may send CR LF for one Enter press.
            follow = self._read_ready_byte(0)
            if follow is not None and follow != b"\n":
                self._pending.append(follow)
            return "ENTER"
        if ch in _CONTROL_KEYS:
            return _CONTROL_KEYS[ch]
        if ch == b"\x1b":
            return self._read_escape_sequence()

        expected = _utf8_length(ch[0])
        data = ch
        while len(data) < expected:
            more = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
            if more is None:
                break
            data += more
        return data.decode("utf-8", errors="replace")

    def _read_escape_sequence(self) -> str:
        seq = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
        if seq is None:
            return "ESC"
        if seq not in {b"[", b"O"}:
            self._pending.append(seq)
            return "ESC"
        final = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
        if final is None:
            return "ESC"
        if final in _CSI_FINAL_KEYS:
            return _CSI_FINAL_KEYS[final]
        if final in _CSI_TILDE_KEYS:
            tail = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
            if tail == b"~":
                return _CSI_TILDE_KEYS[final]
        return "ESC"
