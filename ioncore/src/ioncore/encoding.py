"""
Hex/byte conversion, hashing and compact-size integers.
"""

from __future__ import annotations

import hashlib
import string

from ioncore.errors import InvalidDigitError, OddLengthError, SerializationLimitError

_HEX_DIGITS = frozenset(string.hexdigits)


def hex_to_bytes(hex_str: str) -> bytes:
    """Convert big-endian hex text to bytes.

    Raises:
        OddLengthError: the string has an odd number of characters
        InvalidDigitError: the string contains a non-hex character
    """
    if len(hex_str) % 2 == 1:
        raise OddLengthError(
            f"Hex strings must have an even number of characters, got {len(hex_str)}",
            length=len(hex_str),
        )
    for position, char in enumerate(hex_str):
        if char not in _HEX_DIGITS:
            raise InvalidDigitError(
                f"Invalid hexadecimal digit {char!r} at position {position}",
                char=char,
                position=position,
            )
    return bytes.fromhex(hex_str)


def bytes_to_hex(data: bytes) -> str:
    return data.hex()


def reverse_bytes(data: bytes) -> bytes:
    """Reverse byte order (txids are displayed reversed relative to the wire)."""
    return data[::-1]


def reverse_hex(hex_str: str) -> str:
    return reverse_bytes(hex_to_bytes(hex_str)).hex()


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def sha256d(data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def hash160(data: bytes) -> bytes:
    """RIPEMD160(SHA256(data))"""
    h = hashlib.new("ripemd160")
    h.update(hashlib.sha256(data).digest())
    return h.digest()


def varint(n: int) -> bytes:
    """Encode an unsigned integer as a Bitcoin compact-size integer."""
    if n < 0:
        raise SerializationLimitError(f"varint cannot encode negative value {n}", value=n)
    if n < 0xFD:
        return bytes([n])
    if n <= 0xFFFF:
        return b"\xfd" + n.to_bytes(2, "little")
    if n <= 0xFFFFFFFF:
        return b"\xfe" + n.to_bytes(4, "little")
    if n <= 0xFFFFFFFFFFFFFFFF:
        return b"\xff" + n.to_bytes(8, "little")
    raise SerializationLimitError(f"varint cannot encode {n}", value=n)


def read_varint(data: bytes, offset: int) -> tuple[int, int]:
    """Read a compact-size integer, returning (value, new_offset)."""
    first = data[offset]
    offset += 1

    if first < 0xFD:
        return first, offset
    if first == 0xFD:
        return int.from_bytes(data[offset : offset + 2], "little"), offset + 2
    if first == 0xFE:
        return int.from_bytes(data[offset : offset + 4], "little"), offset + 4
    return int.from_bytes(data[offset : offset + 8], "little"), offset + 8


def push_data(data: bytes) -> bytes:
    """Prefix data with its varint length."""
    return varint(len(data)) + data


def push_hex(hex_str: str) -> str:
    """Hex flavour of push_data, used when assembling scripts from tokens."""
    return push_data(hex_to_bytes(hex_str)).hex()


def int_to_le(value: int, width: int) -> bytes:
    """Pack an unsigned integer into a fixed-width little-endian field."""
    if value < 0 or value >= 1 << (8 * width):
        raise SerializationLimitError(
            f"Value {value} does not fit in a {width}-byte field",
            value=value,
            width=width,
        )
    return value.to_bytes(width, "little")


def le_to_int(data: bytes) -> int:
    return int.from_bytes(data, "little")
