"""Errors tailored for this project.

This module provides:
- InvalidWorkerIDError: An error if a worker ID does not fit into 10 bits
- EpochInFutureError: An error if a generator epoch lies ahead of the clock
- MalformedInputError: An error if bytes or text do not decode into an ID
- TimestampOverflowError: An error if the clock ran past the 41-bit timestamp field
"""


class InvalidWorkerIDError(ValueError):
    """A worker ID is not an integer between 0 and 1023."""

class EpochInFutureError(ValueError):
    """An epoch is later than the current time."""

EpochMovingBackwardsError = EpochInFutureError

class MalformedInputError(ValueError):
    """Bytes or text are not a valid encoded ID."""

class TimestampOverflowError(OverflowError):
    """Milliseconds since the epoch no longer fit the timestamp field."""
