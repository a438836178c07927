"""
Base58 and Base58Check codec.

Encoding treats the payload as one big-endian integer. Leading zero bytes
map to leading '1' characters and short results are padded with '1' up to
eight characters.
"""

from __future__ import annotations

from ioncore.encoding import sha256d
from ioncore.errors import AddressDecodeError, ChecksumError, InvalidBase58CharError

BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_BASE58_INDEX = {char: index for index, char in enumerate(BASE58_ALPHABET)}

MIN_ENCODED_LENGTH = 8
CHECKSUM_LENGTH = 4
# Hex digits of a 20-byte hash and its 4-byte checksum
BODY_HEX_LENGTH = 40
CHECKSUM_HEX_LENGTH = 8


def base58_encode(data: bytes) -> str:
    num = int.from_bytes(data, "big")

    result = ""
    while num > 0:
        num, remainder = divmod(num, 58)
        result = BASE58_ALPHABET[remainder] + result

    for byte in data:
        if byte == 0:
            result = BASE58_ALPHABET[0] + result
        else:
            break

    return result.rjust(MIN_ENCODED_LENGTH, BASE58_ALPHABET[0])


def base58_decode(encoded: str) -> bytes:
    num = 0
    for position, char in enumerate(encoded):
        digit = _BASE58_INDEX.get(char)
        if digit is None:
            raise InvalidBase58CharError(
                f"Invalid character {char!r} found in base58 string",
                char=char,
                position=position,
            )
        num = num * 58 + digit

    leading_zeros = len(encoded) - len(encoded.lstrip(BASE58_ALPHABET[0]))
    body = num.to_bytes((num.bit_length() + 7) // 8, "big") if num else b""
    return b"\x00" * leading_zeros + body


def checksum(data: bytes) -> bytes:
    return sha256d(data)[:CHECKSUM_LENGTH]


def base58check_encode(version: int, payload: bytes) -> str:
    """Encode version byte + payload + 4-byte sha256d checksum."""
    data = bytes([version]) + payload
    return base58_encode(data + checksum(data))


def remove_checksum(version_hex: str, remainder_hex: str) -> str:
    """Strip and verify the checksum of a decoded address remainder.

    Args:
        version_hex: the version byte as two hex digits (e.g. "6f")
        remainder_hex: everything after the version byte: 40 hex digits of
            body followed by 8 hex digits of checksum

    Returns:
        The 40-hex-digit body.
    """
    if len(remainder_hex) != BODY_HEX_LENGTH + CHECKSUM_HEX_LENGTH:
        raise AddressDecodeError(
            f"Decoded address has {len(remainder_hex) // 2} bytes after the version byte, "
            f"expected {(BODY_HEX_LENGTH + CHECKSUM_HEX_LENGTH) // 2}",
            length=len(remainder_hex) // 2,
        )
    body_hex = remainder_hex[:BODY_HEX_LENGTH]
    checksum_hex = remainder_hex[BODY_HEX_LENGTH:]

    expected = checksum(bytes.fromhex(version_hex + body_hex)).hex()
    if expected != checksum_hex.lower():
        raise ChecksumError(
            "Address checksum failed. Please check that the input address is correct",
            expected=expected,
            actual=checksum_hex.lower(),
        )
    return body_hex


def base58check_decode(encoded: str) -> tuple[int, bytes]:
    """Decode a Base58Check string into (version, payload)."""
    raw = base58_decode(encoded)
    if len(raw) < 1 + CHECKSUM_LENGTH:
        raise AddressDecodeError(f"Base58Check string too short: {encoded!r}", length=len(raw))
    data, check = raw[:-CHECKSUM_LENGTH], raw[-CHECKSUM_LENGTH:]
    if checksum(data) != check:
        raise ChecksumError(
            "Address checksum failed. Please check that the input address is correct",
            expected=checksum(data).hex(),
            actual=check.hex(),
        )
    return data[0], data[1:]
