"""A module for handling unique ID generation.

This module provides:
- Generator: a class that mints time-ordered 64-bit flake IDs for one worker
- default_generator: a function that lazily builds a process-wide Generator
- generate_default_id: a shortcut for minting from the default Generator
"""

import logging
from threading import Lock
from time import sleep, time_ns

from ..constants import (
    DEFAULT_EPOCH,
    MAX_TIMESTAMP,
    MAX_WORKER_ID,
    SEQUENCE_MASK,
    TIMESTAMP_SHIFT,
    WORKER_ID_SHIFT,
)
from .codec import FlakeID, to_bytes
from .errors import EpochInFutureError, InvalidWorkerIDError, TimestampOverflowError
from .network import worker_id_from_address


def _clock() -> tuple[int, int]:
    """Returns the current Unix time in milliseconds and the nanoseconds left in it."""
    nano = time_ns()
    return nano // 1_000_000, 1_000_000 - nano % 1_000_000


class Generator:
    """A class that spits out unique, time-ordered IDs for a single worker."""

    def __init__(self, worker_id: int, epoch: int = 0):
        """Validates the worker and epoch and resets the clock state.

        Args:
            worker_id (int): This generator's worker, 0 to 1023
            epoch (int): Unix milliseconds the timestamp field counts from,
                ``DEFAULT_EPOCH`` if zero or negative

        Raises:
            InvalidWorkerIDError: If the worker ID does not fit into 10 bits
            EpochInFutureError: If the epoch is later than now
        """
        if isinstance(worker_id, bool) or not isinstance(worker_id, int):
            raise InvalidWorkerIDError(
                f"worker id must be an integer, got {type(worker_id).__name__}"
            )
        if not 0 <= worker_id <= MAX_WORKER_ID:
            raise InvalidWorkerIDError(
                f"worker id must be between 0 and {MAX_WORKER_ID}, actual got {worker_id}"
            )
        now, _ = _clock()
        if epoch > now:
            raise EpochInFutureError(f"epoch {epoch} is ahead of the clock ({now})")
        if epoch <= 0:
            epoch = DEFAULT_EPOCH

        self.worker_id = worker_id
        self.epoch = epoch
        self.sequence = -1
        self.last_timestamp = -1
        self.lock = Lock()
        self.logger = logging.getLogger(__name__)
        self._regressed = False
        self.logger.debug("Generator for worker %d created, epoch %d", worker_id, epoch)

    def generate_id(self) -> FlakeID:
        """Generates a 64-bit flake ID.

        Within one millisecond up to 8192 IDs are handed out; the next caller
        blocks until the clock ticks. A clock that went backwards is held at the
        last used millisecond, so IDs never decrease.

        Returns:
            FlakeID: The ID

        Raises:
            TimestampOverflowError: If the clock is outside the 41-bit range of the epoch
        """
        with self.lock:
            timestamp, remain = _clock()
            sequence = self.sequence

            if timestamp < self.last_timestamp:
                if not self._regressed:
                    self.logger.warning(
                        "Clock moved backwards by %d ms, holding at %d",
                        self.last_timestamp - timestamp,
                        self.last_timestamp,
                    )
                    self._regressed = True
                timestamp = self.last_timestamp
            else:
                self._regressed = False

            if timestamp == self.last_timestamp:
                sequence = (sequence + 1) & SEQUENCE_MASK
                if sequence == 0:
                    self.logger.debug("Sequence exhausted at %d, waiting for the clock", timestamp)
                    while timestamp <= self.last_timestamp:
                        sleep(remain / 1e9)
                        timestamp, remain = _clock()
            else:
                sequence = 0

            elapsed = timestamp - self.epoch
            if not 0 <= elapsed <= MAX_TIMESTAMP:
                raise TimestampOverflowError(
                    f"{elapsed} ms since epoch {self.epoch} does not fit the timestamp field"
                )

            self.last_timestamp = timestamp
            self.sequence = sequence
            return FlakeID(
                (elapsed << TIMESTAMP_SHIFT)
                | (self.worker_id << WORKER_ID_SHIFT)
                | sequence
            )

    def generate_batch(self, count: int) -> bytes:
        """Generates ``count`` IDs as concatenated 8-byte big-endian chunks.

        Raises:
            ValueError: If count is negative
        """
        if count < 0:
            raise ValueError(f"count must not be negative, got {count}")
        return b"".join(to_bytes(self.generate_id()) for _ in range(count))

    def unix_millis(self, fid: FlakeID) -> int:
        """Converts an ID's timestamp field back to Unix milliseconds."""
        return fid.timestamp + self.epoch


_default = None
_default_lock = Lock()


def default_generator() -> Generator:
    """Returns the process-wide Generator, creating it on first use.

    Its worker ID is derived from the host's IPv4 address, which is
    not a guarantee of uniqueness. Prefer constructing a Generator with an
    allocated worker ID and passing it around.
    """
    global _default
    with _default_lock:
        if _default is None:
            _default = Generator(worker_id_from_address(), 0)
        return _default


def generate_default_id() -> FlakeID:
    return default_generator().generate_id()
