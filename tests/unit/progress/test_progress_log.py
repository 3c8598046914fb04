"""Tests for the append-only progress log and document identity.

Covers percentage math, newest-timestamp lookup, and tolerance of malformed
records left behind by interrupted sessions.
"""

from __future__ import annotations

import json
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest import mock

from lazyreader.errors import ProgressLogError
from lazyreader.progress import (
    ProgressEvent,
    ProgressLog,
    document_hash,
    progress_percentage,
    resume_offset,
)

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _clock(*times: datetime):
    pending = list(times)
    return lambda: pending.pop(0)


class DocumentHashTests(unittest.TestCase):
    def test_identical_content_has_identical_hash(self) -> None:
        self.assertEqual(document_hash(["one", "two"]), document_hash(("one", "two")))

    def test_hash_depends_on_line_boundaries(self) -> None:
        self.assertNotEqual(document_hash(["a\nb"]), document_hash(["a", "b"]))
        self.assertNotEqual(document_hash(["ab", ""]), document_hash(["a", "b"]))

    def test_hash_fits_in_64_bits(self) -> None:
        value = document_hash(["some", "document", "text"])
        self.assertGreaterEqual(value, 0)
        self.assertLess(value, 1 << 64)


class ProgressLogTests(unittest.TestCase):
    def test_record_then_latest_returns_percentage(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            log = ProgressLog(Path(tmp) / "nested" / "progress.jsonl")
            log.record(42, 3, 7)
            latest = log.latest(42)

        self.assertIsNotNone(latest)
        self.assertAlmostEqual(latest.percentage, 100 * 3 / 7)
        self.assertEqual((latest.offset, latest.total_lines), (3, 7))

    def test_record_creates_store_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "a" / "b" / "progress.jsonl"
            ProgressLog(path).record(1, 0, 10)
            self.assertTrue(path.exists())
            record = json.loads(path.read_text(encoding="utf-8").strip())

        self.assertEqual(
            set(record),
            {"timestamp", "document_hash", "offset", "total_lines", "percentage"},
        )

    def test_zero_total_lines_records_zero_percentage(self) -> None:
        self.assertEqual(progress_percentage(0, 0), 0.0)
        with tempfile.TemporaryDirectory() as tmp:
            event = ProgressLog(Path(tmp) / "p.jsonl").record(5, 0, 0)
        self.assertEqual(event.percentage, 0.0)

    def test_latest_returns_none_when_store_missing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self.assertIsNone(ProgressLog(Path(tmp) / "missing.jsonl").latest(1))

    def test_latest_prefers_greatest_timestamp_over_file_order(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            log = ProgressLog(
                Path(tmp) / "p.jsonl",
                clock=_clock(
                    BASE_TIME + timedelta(minutes=5),
                    BASE_TIME + timedelta(minutes=9),
                    BASE_TIME + timedelta(minutes=1),
                ),
            )
            log.record(9, 10, 100)
            log.record(9, 90, 100)
            log.record(9, 30, 100)
            latest = log.latest(9)

        self.assertEqual(latest.offset, 90)

    def test_latest_ignores_other_documents(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            log = ProgressLog(
                Path(tmp) / "p.jsonl",
                clock=_clock(BASE_TIME, BASE_TIME + timedelta(seconds=1)),
            )
            log.record(1, 4, 10)
            log.record(2, 8, 10)
            self.assertEqual(log.latest(1).offset, 4)
            self.assertIsNone(log.latest(3))

    def test_equal_timestamps_prefer_later_line(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            log = ProgressLog(Path(tmp) / "p.jsonl", clock=_clock(BASE_TIME, BASE_TIME))
            log.record(1, 2, 10)
            log.record(1, 6, 10)
            self.assertEqual(log.latest(1).offset, 6)

    def test_malformed_records_are_skipped(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "p.jsonl"
            good = ProgressEvent(
                timestamp=BASE_TIME,
                document_hash=7,
                offset=3,
                total_lines=12,
                percentage=25.0,
            )
            path.write_text(
                "\n".join(
                    [
                        "not json",
                        '{"document_hash": 7, "offset": 1}',
                        '{"timestamp": "nope", "document_hash": 7, "offset": 1, "total_lines": 2, "percentage": 50}',
                        '{"timestamp": "2030-01-01T00:00:00+00:00", "document_hash": 7, "offset": -1, '
                        '"total_lines": 2, "percentage": 50}',
                        "[1, 2, 3]",
                        good.to_json(),
                        '{"timestamp": "2030-01-01T00:00:00+00:00", "document_hash": 7, "offset": 1, '
                        '"total_lines": 2, "percentage": NaN}',
                        '{"timestamp": "2030-01-01T00:00:00+00:00", "document_hash": 7, "offset": 1, '
                        '"total_lines": 2, "percentage": 1e400}',
                        '{"timestamp": "2030-01-01T00:00:00+00:00", "document_hash": 7, "offset": 1, '
                        '"total_lines": 2, "percentage": -Infinity}',
                        '{"timestamp": "2030-01-01T00:00:00+00:00", "document_hash": 7, "offset": 1, '
                        '"total_lines": 2, "percentage": 1' + "0" * 400 + "}",
                        '{"timestamp": "2030-01-01T00:00:00+00:00", "document_hash": 7, "off',
                    ]
                )
                + "\n",
                encoding="utf-8",
            )
            latest = ProgressLog(path).latest(7)

        self.assertEqual(latest, good)

    def test_epoch_and_naive_timestamps_are_accepted(self) -> None:
        epoch_record = json.dumps(
            {"timestamp": 1_000, "document_hash": 1, "offset": 1, "total_lines": 4, "percentage": 25.0}
        )
        naive_record = json.dumps(
            {
                "timestamp": "2001-01-01T00:00:00",
                "document_hash": 1,
                "offset": 2,
                "total_lines": 4,
                "percentage": 50.0,
            }
        )
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "p.jsonl"
            path.write_text(f"{naive_record}\n{epoch_record}\n", encoding="utf-8")
            latest = ProgressLog(path).latest(1)

        self.assertEqual(latest.offset, 2)
        self.assertEqual(latest.timestamp.tzinfo, timezone.utc)

    def test_write_failure_raises_progress_log_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            log = ProgressLog(Path(tmp) / "p.jsonl")
            with mock.patch.object(Path, "open", side_effect=PermissionError("denied")):
                with self.assertRaises(ProgressLogError):
                    log.record(1, 0, 1)

    def test_read_failure_raises_progress_log_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            log = ProgressLog(Path(tmp) / "p.jsonl")
            with mock.patch.object(Path, "open", side_effect=PermissionError("denied")):
                with self.assertRaises(ProgressLogError):
                    log.latest(1)


class ResumeOffsetTests(unittest.TestCase):
    def _event(self, percentage: float) -> ProgressEvent:
        return ProgressEvent(BASE_TIME, 1, 0, 10, percentage)

    def test_percentage_maps_back_to_offset(self) -> None:
        self.assertEqual(resume_offset(self._event(40.0), 5), 2)
        self.assertEqual(resume_offset(self._event(33.3), 100), 33)

    def test_offset_is_clamped_into_document(self) -> None:
        self.assertEqual(resume_offset(self._event(100.0), 10), 9)
        self.assertEqual(resume_offset(self._event(-5.0), 10), 0)
        self.assertEqual(resume_offset(self._event(50.0), 0), 0)

    def test_halves_round_up(self) -> None:
        self.assertEqual(resume_offset(self._event(12.5), 20), 3)
        self.assertEqual(resume_offset(self._event(25.0), 10), 3)


if __name__ == "__main__":
    unittest.main()
