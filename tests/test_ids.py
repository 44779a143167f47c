from __future__ import annotations

import threading
import time
import unittest
from unittest.mock import patch

from flakeid.constants import DEFAULT_EPOCH, MAX_TIMESTAMP, SEQUENCE_MASK
from flakeid.utils import ids
from flakeid.utils.codec import from_bytes
from flakeid.utils.errors import (
    EpochInFutureError,
    InvalidWorkerIDError,
    TimestampOverflowError,
)
from flakeid.utils.ids import Generator, default_generator, generate_default_id

NOW_MS = 1_700_000_000_000


def frozen_clock(ms: int = NOW_MS):
    return patch("flakeid.utils.ids._clock", return_value=(ms, 500_000))


class TestConstruction(unittest.TestCase):
    def test_valid_worker_ids(self) -> None:
        for worker_id in (0, 1, 512, 1023):
            g = Generator(worker_id, 0)
            self.assertEqual(g.worker_id, worker_id)
            self.assertEqual(g.last_timestamp, -1)
            self.assertEqual(g.sequence, -1)

    def test_invalid_worker_ids(self) -> None:
        for worker_id in (-1, 1024, 100_000, "7", 1.0, True):
            with self.subTest(worker_id=worker_id):
                with self.assertRaises(InvalidWorkerIDError):
                    Generator(worker_id, 0)

    def test_default_epoch(self) -> None:
        self.assertEqual(Generator(1, 0).epoch, DEFAULT_EPOCH)
        self.assertEqual(Generator(1, -5).epoch, DEFAULT_EPOCH)
        self.assertEqual(Generator(1, 1234567891011).epoch, 1234567891011)

    def test_epoch_in_future(self) -> None:
        future = int(time.time() * 1000) + 60_000
        with self.assertRaises(EpochInFutureError):
            Generator(1, future)

    def test_epoch_equal_to_now_is_accepted(self) -> None:
        with frozen_clock():
            self.assertEqual(Generator(1, NOW_MS).epoch, NOW_MS)


class TestGenerateId(unittest.TestCase):
    def test_same_millisecond_scenario(self) -> None:
        g = Generator(123, 1234567891011)
        with frozen_clock():
            first = g.generate_id()
            second = g.generate_id()
        self.assertEqual(first.worker_id, 123)
        self.assertEqual(first.sequence, 0)
        self.assertEqual(second.worker_id, 123)
        self.assertEqual(second.sequence, 1)
        self.assertEqual(first.timestamp, second.timestamp)
        self.assertEqual(first.timestamp, NOW_MS - 1234567891011)
        self.assertEqual(second.value - first.value, 1)
        self.assertGreater(second, first)

    def test_bit_layout(self) -> None:
        g = Generator(5, 1_000)
        with frozen_clock(1_000 + 3):
            fid = g.generate_id()
        self.assertEqual(fid.value, (3 << 23) | (5 << 13))

    def test_new_millisecond_resets_sequence(self) -> None:
        g = Generator(1, 0)
        with frozen_clock(NOW_MS):
            g.generate_id()
            g.generate_id()
        with frozen_clock(NOW_MS + 1):
            fid = g.generate_id()
        self.assertEqual(fid.sequence, 0)
        self.assertEqual(g.last_timestamp, NOW_MS + 1)

    def test_strictly_increasing(self) -> None:
        g = Generator(7, 0)
        previous = g.generate_id()
        for _ in range(5_000):
            current = g.generate_id()
            self.assertGreater(current, previous)
            previous = current

    def test_tight_loop_sequences(self) -> None:
        g = Generator(42, 0)
        minted = [g.generate_id() for _ in range(10_000)]
        last_ts, last_seq = -1, -1
        for fid in minted:
            self.assertEqual(fid.worker_id, 42)
            self.assertGreaterEqual(fid.timestamp, last_ts)
            if fid.timestamp == last_ts:
                self.assertEqual(fid.sequence, last_seq + 1)
            else:
                self.assertEqual(fid.sequence, 0)
            last_ts, last_seq = fid.timestamp, fid.sequence

    def test_sequence_exhaustion_waits_for_next_millisecond(self) -> None:
        g = Generator(9, 0)
        g.last_timestamp = NOW_MS
        g.sequence = SEQUENCE_MASK
        ticks = [(NOW_MS, 300_000), (NOW_MS, 100_000), (NOW_MS + 1, 999_000)]
        with patch("flakeid.utils.ids._clock", side_effect=ticks), patch(
            "flakeid.utils.ids.sleep"
        ) as sleep_mock:
            fid = g.generate_id()
        self.assertEqual(sleep_mock.call_count, 2)
        sleep_mock.assert_any_call(300_000 / 1e9)
        self.assertEqual(fid.timestamp, NOW_MS + 1 - DEFAULT_EPOCH)
        self.assertEqual(fid.sequence, 0)
        self.assertEqual(g.last_timestamp, NOW_MS + 1)
        self.assertEqual(g.sequence, 0)

    def test_clock_regression_holds_last_timestamp(self) -> None:
        g = Generator(3, 0)
        with frozen_clock(NOW_MS):
            before = g.generate_id()
        with frozen_clock(NOW_MS - 10):
            with self.assertLogs("flakeid.utils.ids", level="WARNING") as logs:
                after = g.generate_id()
                again = g.generate_id()
        self.assertEqual(len(logs.records), 1)
        self.assertEqual(after.timestamp, before.timestamp)
        self.assertEqual(after.sequence, 1)
        self.assertEqual(again.sequence, 2)
        self.assertGreater(again, after)
        self.assertEqual(g.last_timestamp, NOW_MS)

    def test_timestamp_overflow(self) -> None:
        g = Generator(3, 1_000)
        with frozen_clock(1_000 + MAX_TIMESTAMP + 1):
            with self.assertRaises(TimestampOverflowError):
                g.generate_id()
        self.assertEqual(g.last_timestamp, -1)
        self.assertEqual(g.sequence, -1)

    def test_concurrent_callers_get_unique_ids(self) -> None:
        g = Generator(11, 0)
        results: list[list] = []
        lock = threading.Lock()

        def worker() -> None:
            local = [g.generate_id() for _ in range(2_000)]
            with lock:
                results.append(local)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        everything = [fid for chunk in results for fid in chunk]
        self.assertEqual(len(everything), 16_000)
        self.assertEqual(len(set(everything)), 16_000)
        for chunk in results:
            self.assertEqual(chunk, sorted(chunk))


class TestGenerateBatch(unittest.TestCase):
    def test_batch_layout(self) -> None:
        g = Generator(77, 0)
        with frozen_clock():
            data = g.generate_batch(3)
        self.assertEqual(len(data), 24)
        decoded = [from_bytes(data[i : i + 8]) for i in range(0, 24, 8)]
        self.assertEqual([fid.sequence for fid in decoded], [0, 1, 2])
        self.assertTrue(all(fid.worker_id == 77 for fid in decoded))

    def test_empty_and_negative(self) -> None:
        g = Generator(77, 0)
        self.assertEqual(g.generate_batch(0), b"")
        with self.assertRaises(ValueError):
            g.generate_batch(-1)

    def test_unix_millis(self) -> None:
        g = Generator(1, 0)
        with frozen_clock():
            fid = g.generate_id()
        self.assertEqual(g.unix_millis(fid), NOW_MS)


class TestDefaultGenerator(unittest.TestCase):
    def test_lazy_singleton(self) -> None:
        with patch.object(ids, "_default", None), patch(
            "flakeid.utils.ids.worker_id_from_address", return_value=333
        ) as derive:
            first = default_generator()
            second = default_generator()
            fid = generate_default_id()
        self.assertIs(first, second)
        self.assertEqual(first.worker_id, 333)
        self.assertEqual(first.epoch, DEFAULT_EPOCH)
        self.assertEqual(fid.worker_id, 333)
        derive.assert_called_once_with()
