"""Bit layout of a flake ID.

id format: timestamp(41) | worker(10) | sequence(13)
"""

WORKER_ID_BITS = 10
SEQUENCE_BITS = 13  # not the usual 12
TIMESTAMP_BITS = 64 - WORKER_ID_BITS - SEQUENCE_BITS  # 41

MAX_WORKER_ID = (1 << WORKER_ID_BITS) - 1  # 1023
SEQUENCE_MASK = (1 << SEQUENCE_BITS) - 1  # 8191
MAX_TIMESTAMP = (1 << TIMESTAMP_BITS) - 1
MAX_ID = (1 << 64) - 1

WORKER_ID_SHIFT = SEQUENCE_BITS
TIMESTAMP_SHIFT = SEQUENCE_BITS + WORKER_ID_BITS  # 23

# 2009-02-13T23:31:31.011Z
DEFAULT_EPOCH = 1234567891011

ID_BYTES = 8
