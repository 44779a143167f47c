"""A module for moving flake IDs around as bytes, text and JSON.

This module provides:
- FlakeID: a 64-bit ID value that knows its own bit layout
- to_bytes / from_bytes: 8-byte big-endian encoding
- to_text / from_text: URL-safe, padded base64 of those bytes
- dumps / loads / json_default: JSON marshaling through the text form
"""

from base64 import b64decode, urlsafe_b64encode
from binascii import Error as BinasciiError
from functools import total_ordering
from json import JSONDecodeError, dumps as json_dumps, loads as json_loads

from ..constants import (
    ID_BYTES,
    MAX_ID,
    MAX_WORKER_ID,
    SEQUENCE_MASK,
    TIMESTAMP_SHIFT,
    WORKER_ID_SHIFT,
)
from .errors import MalformedInputError


@total_ordering
class FlakeID:
    """An unsigned 64-bit ID: timestamp(41) | worker(10) | sequence(13)."""

    __slots__ = ("value",)

    def __init__(self, value: int):
        """Wraps an integer.

        Args:
            value (int): The raw ID, between 0 and 2**64 - 1

        Raises:
            ValueError: If the value is not a 64-bit unsigned integer
        """
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"Flake ID must be an integer, got {type(value).__name__}")
        if not 0 <= value <= MAX_ID:
            raise ValueError(f"Flake ID must be between 0 and {MAX_ID}, got {value}")
        self.value = value

    @property
    def timestamp(self) -> int:
        """Milliseconds since the generator epoch."""
        return self.value >> TIMESTAMP_SHIFT

    @property
    def worker_id(self) -> int:
        return (self.value >> WORKER_ID_SHIFT) & MAX_WORKER_ID

    @property
    def sequence(self) -> int:
        return self.value & SEQUENCE_MASK

    def to_text(self) -> str:
        return to_text(self)

    @classmethod
    def from_text(cls, text: str) -> "FlakeID":
        return from_text(text)

    def __int__(self):
        return self.value

    def __index__(self):
        return self.value

    def __eq__(self, other):
        if isinstance(other, FlakeID):
            return self.value == other.value
        return NotImplemented

    def __lt__(self, other):
        if isinstance(other, FlakeID):
            return self.value < other.value
        return NotImplemented

    def __hash__(self):
        return hash(self.value)

    def __repr__(self):
        return f"FlakeID({self.value})"

    def __str__(self):
        return to_text(self)


def to_bytes(fid) -> bytes:
    """Encodes an ID as 8 big-endian bytes.

    Args:
        fid (FlakeID | int): The ID to encode

    Returns:
        bytes: Most significant byte first
    """
    return int(fid).to_bytes(ID_BYTES, "big")


def from_bytes(data: bytes) -> FlakeID:
    """Decodes 8 big-endian bytes into an ID.

    Raises:
        MalformedInputError: If the input is not exactly 8 bytes
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise MalformedInputError(f"Expected bytes, got {type(data).__name__}")
    if len(data) != ID_BYTES:
        raise MalformedInputError(f"Expected {ID_BYTES} bytes, got {len(data)}")
    return FlakeID(int.from_bytes(data, "big"))


def to_text(fid) -> str:
    """Encodes an ID as URL-safe base64 with padding."""
    return urlsafe_b64encode(to_bytes(fid)).decode("ascii")


def from_text(text: str) -> FlakeID:
    """Decodes URL-safe base64 text into an ID.

    Raises:
        MalformedInputError: If the text is not padded URL-safe base64 of 8 bytes
    """
    if not isinstance(text, str):
        raise MalformedInputError(f"Expected a string, got {type(text).__name__}")
    # b64decode with altchars would still let the standard alphabet through
    if "+" in text or "/" in text:
        raise MalformedInputError("ID text is not URL-safe base64")
    try:
        raw = b64decode(text.encode("ascii"), altchars=b"-_", validate=True)
    except (UnicodeEncodeError, BinasciiError) as e:
        raise MalformedInputError(f"ID text is not valid base64: {e}") from e
    return from_bytes(raw)


def json_default(o):
    """A ``default`` hook for ``json.dumps`` that renders IDs as text."""
    if isinstance(o, FlakeID):
        return to_text(o)
    raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")


def dumps(fid) -> str:
    """Renders an ID as a quoted JSON string."""
    return json_dumps(to_text(fid))


def loads(data) -> FlakeID:
    """Parses a quoted JSON string back into an ID.

    Raises:
        MalformedInputError: If the JSON is invalid, not a string, or not an ID
    """
    try:
        text = json_loads(data)
    except (JSONDecodeError, UnicodeDecodeError, TypeError) as e:
        raise MalformedInputError(f"ID is not valid JSON: {e}") from e
    return from_text(text)
