"""
Binary encoding of Sia currency values and hashes.

A currency value is an unsigned 128-bit integer written as two little-endian
64-bit halves, low half first. Hashes (output IDs, address hashes) are raw
32-byte strings carried as hex in the explorer API.
"""

from __future__ import annotations

import re
import struct
from decimal import Decimal

from siatx.constants import (
    CURRENCY_MAX,
    CURRENCY_SIZE,
    HASH_SIZE,
    HASTINGS_PER_SC,
    UINT64_MAX,
    UINT64_SIZE,
)
from siatx.errors import RangeError

HEX_RE = re.compile(r"[0-9a-fA-F]*")


def encode_uint64(value: int) -> bytes:
    """Encode an unsigned integer as 8 bytes little-endian."""
    if value < 0 or value > UINT64_MAX:
        raise RangeError(f"Value {value} does not fit in 64 bits")
    return struct.pack("<Q", value)


def decode_uint64(data: bytes) -> int:
    if len(data) != UINT64_SIZE:
        raise RangeError(f"Expected {UINT64_SIZE} bytes, got {len(data)}")
    return struct.unpack("<Q", data)[0]


def split_currency(value: int) -> tuple[int, int]:
    """Split a currency value into its (lo, hi) 64-bit halves."""
    if value < 0:
        raise RangeError(f"Currency value cannot be negative: {value}")
    if value > CURRENCY_MAX:
        raise RangeError(f"Currency value {value} exceeds 128 bits")
    return value & UINT64_MAX, value >> 64


def encode_currency(value: int) -> bytes:
    """
    Encode a currency value as 16 bytes.

    Args:
        value: Amount in hastings, 0 <= value < 2^128

    Returns:
        lo (8 bytes LE) followed by hi (8 bytes LE)

    Raises:
        RangeError: If the value is negative or wider than 128 bits
    """
    lo, hi = split_currency(value)
    return struct.pack("<QQ", lo, hi)


def decode_currency(data: bytes) -> int:
    """Decode 16 bytes (lo, hi little-endian) back into a currency value."""
    if len(data) != CURRENCY_SIZE:
        raise RangeError(f"Expected {CURRENCY_SIZE} bytes, got {len(data)}")
    lo, hi = struct.unpack("<QQ", data)
    return (hi << 64) | lo


def strip_hex_prefix(value: str) -> str:
    return value[2:] if value.startswith(("0x", "0X")) else value


def decode_hash(value: str, exact: bool = False) -> bytes:
    """
    Decode the 32-byte hash at the start of a hex string.

    Addresses carry a 6-byte checksum after the hash; only the leading
    32 bytes are returned. Output IDs are bare hashes and use exact=True,
    which rejects anything but exactly 32 bytes of hex.

    Raises:
        ValueError: If the string is not hex or has the wrong length
    """
    clean = strip_hex_prefix(value)
    hex_len = HASH_SIZE * 2
    if not HEX_RE.fullmatch(clean):
        raise ValueError(f"Invalid hex hash: {value!r}")
    if len(clean) < hex_len:
        raise ValueError(f"Hash too short: expected {hex_len} hex chars, got {len(clean)}")
    if exact and len(clean) != hex_len:
        raise ValueError(f"Hash too long: expected {hex_len} hex chars, got {len(clean)}")
    return bytes.fromhex(clean[:hex_len])


def format_sc(hastings: int, places: int = 6) -> str:
    """Render a hastings amount as SC for display."""
    sc = Decimal(hastings) / Decimal(HASTINGS_PER_SC)
    return f"{sc:.{places}f} SC"
