"""Derives a worker ID from the host's network address.

This module provides:
- local_ipv4: a function that finds the host's primary IPv4 address
- ipv4_to_int: a function that packs a dotted quad into an integer
- worker_id_from_address: a function that folds an IPv4 address into a worker ID

A derived worker ID is not strictly unique: two hosts whose addresses agree
modulo 1024 will share it.
"""

import logging
import socket
from ipaddress import AddressValueError, IPv4Address

from ..constants import MAX_WORKER_ID

logger = logging.getLogger(__name__)

# Never actually contacted, connecting a UDP socket sends nothing
_PROBE_ADDRESS = ("10.255.255.255", 1)


def local_ipv4() -> str:
    """Finds the first non-loopback IPv4 address of this host.

    Returns:
        str: The address as a dotted quad

    Raises:
        OSError: If the host has no usable IPv4 address
    """
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        try:
            sock.connect(_PROBE_ADDRESS)
            address = sock.getsockname()[0]
        except OSError:
            address = None
    if address and not IPv4Address(address).is_loopback and address != "0.0.0.0":
        return address

    for info in socket.getaddrinfo(socket.gethostname(), None, socket.AF_INET):
        candidate = info[4][0]
        if not IPv4Address(candidate).is_loopback:
            return candidate
    raise OSError("No non-loopback IPv4 address found")


def ipv4_to_int(address: str) -> int:
    """Packs a dotted quad into a 32-bit integer.

    Raises:
        ValueError: If the address is not an IPv4 address
    """
    try:
        return int(IPv4Address(address))
    except AddressValueError as e:
        raise ValueError(f"Not an IPv4 address: {address!r}") from e


def worker_id_from_address(address: str | None = None) -> int:
    """Maps an IPv4 address onto the worker ID range.

    Args:
        address (str | None): The address to use, the host's own if ``None``

    Returns:
        int: The address modulo 1024
    """
    if address is None:
        address = local_ipv4()
    worker_id = ipv4_to_int(address) % (MAX_WORKER_ID + 1)
    logger.debug("Derived worker ID %d from %s", worker_id, address)
    return worker_id
