"""
Bitcoin address decoding and generation.

Base58 addresses resolve by version byte:
- 00 / 6F: P2PKH (mainnet / testnet)
- 02 / 03 / 04: bare compressed or uncompressed public key (P2PK)
- 05: P2SH

Native segwit (bech32) addresses are accepted as destinations only.
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple

import bech32

from ioncore.base58 import base58_decode, base58check_encode, remove_checksum
from ioncore.constants import (
    BECH32_HRP,
    P2PKH_MAINNET_VERSION,
    P2PKH_TESTNET_VERSION,
    P2SH_MAINNET_VERSION,
)
from ioncore.encoding import hash160, push_data, push_hex, sha256
from ioncore.errors import AddressDecodeError, UnsupportedAddressTypeError
from ioncore.script import assemble

_PUBKEY_LENGTHS = {"02": 33, "03": 33, "04": 65}


class AddressType(str, Enum):
    P2PKH = "p2pkh"
    P2SH = "p2sh"
    P2PK = "p2pk"
    P2WPKH = "p2wpkh"
    P2WSH = "p2wsh"


class DecodedAddress(NamedTuple):
    script: bytes
    is_segwit: bool
    address_type: AddressType

    @property
    def script_hex(self) -> str:
        return self.script.hex()


def _bech32_hrp(address: str) -> str | None:
    lowered = address.lower()
    if lowered.startswith("bcrt1"):
        return "bcrt"
    if lowered.startswith(("bc1", "tb1")):
        return lowered[:2]
    return None


def _decode_bech32(address: str, hrp: str) -> DecodedAddress:
    witver, witprog = bech32.decode(hrp, address)
    if witver is None or witprog is None:
        raise AddressDecodeError(f"Invalid bech32 address: {address}", address=address)

    program = bytes(witprog)
    if witver == 0 and len(program) == 20:
        return DecodedAddress(b"\x00" + push_data(program), True, AddressType.P2WPKH)
    if witver == 0 and len(program) == 32:
        return DecodedAddress(b"\x00" + push_data(program), True, AddressType.P2WSH)

    raise UnsupportedAddressTypeError(
        f"Unsupported witness program: version {witver}, {len(program)} bytes",
        witness_version=witver,
        program_length=len(program),
    )


def decode_address(address: str) -> DecodedAddress:
    """
    Resolve an address to the locking script that pays it.

    Returns:
        DecodedAddress(script, is_segwit, address_type). ``is_segwit`` is
        False for every base58 template.

    Raises:
        InvalidBase58CharError: malformed base58 character
        ChecksumError: checksum mismatch
        UnsupportedAddressTypeError: unknown version byte
    """
    hrp = _bech32_hrp(address)
    if hrp is not None:
        return _decode_bech32(address, hrp)

    decoded_hex = base58_decode(address).hex()
    version_hex, remainder = decoded_hex[:2], decoded_hex[2:]

    if version_hex in (f"{P2PKH_MAINNET_VERSION:02x}", f"{P2PKH_TESTNET_VERSION:02x}"):
        pubkey_hash = remove_checksum(version_hex, remainder)
        script = assemble(
            ["OP_DUP", "OP_HASH160", push_hex(pubkey_hash), "OP_EQUALVERIFY", "OP_CHECKSIG"]
        )
        return DecodedAddress(bytes.fromhex(script), False, AddressType.P2PKH)

    if version_hex in _PUBKEY_LENGTHS:
        pubkey_hex = version_hex + remainder
        if len(pubkey_hex) // 2 != _PUBKEY_LENGTHS[version_hex]:
            raise AddressDecodeError(
                f"Public key of {len(pubkey_hex) // 2} bytes does not match prefix {version_hex}",
                length=len(pubkey_hex) // 2,
            )
        script = push_hex(pubkey_hex) + assemble(["OP_CHECKSIG"])
        return DecodedAddress(bytes.fromhex(script), False, AddressType.P2PK)

    if version_hex == f"{P2SH_MAINNET_VERSION:02x}":
        script_hash = remove_checksum(version_hex, remainder)
        script = assemble(["OP_HASH160", push_hex(script_hash), "OP_EQUAL"])
        return DecodedAddress(bytes.fromhex(script), False, AddressType.P2SH)

    raise UnsupportedAddressTypeError(
        f"Unsupported address version byte {version_hex or '(empty)'}",
        version=version_hex,
    )


def pubkey_to_p2pkh_address(pubkey: bytes, network: str = "testnet") -> str:
    """Base58Check P2PKH address for a public key."""
    version = P2PKH_MAINNET_VERSION if network == "mainnet" else P2PKH_TESTNET_VERSION
    return base58check_encode(version, hash160(pubkey))


def script_to_p2wsh_script(witness_script: bytes) -> bytes:
    """P2WSH scriptPubKey: OP_0 <32-byte sha256(witness_script)>"""
    return b"\x00" + push_data(sha256(witness_script))


def script_to_p2wsh_address(witness_script: bytes, network: str = "testnet") -> str:
    hrp = BECH32_HRP[network]
    address = bech32.encode(hrp, 0, sha256(witness_script))
    if address is None:
        raise AddressDecodeError(f"Failed to encode P2WSH address for {network}", network=network)
    return address


def is_p2wsh_script(script: bytes) -> bool:
    return len(script) == 34 and script[0] == 0x00 and script[1] == 0x20
