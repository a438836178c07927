"""
CSV vault script generation.

The vault is a P2WSH output locked by:

    OP_IF
        <parent_pubkey> OP_CHECKSIG
    OP_ELSE
        <locktime> OP_CHECKSEQUENCEVERIFY OP_DROP
        <single_use_pubkey> OP_CHECKSIG
    OP_ENDIF

The parent (owner) can spend at any time through the IF branch. The
single-use key, handed to the heirs, can spend through the ELSE branch
once the output is ``locktime`` blocks deep.
"""

from __future__ import annotations

import secrets
from collections.abc import Callable
from dataclasses import dataclass

from coincurve import PrivateKey, PublicKey
from loguru import logger

from ioncore.address import script_to_p2wsh_address, script_to_p2wsh_script
from ioncore.constants import MAX_RELATIVE_LOCKTIME_BLOCKS
from ioncore.encoding import hex_to_bytes, push_data, push_hex
from ioncore.errors import SerializationLimitError, SigningError
from ioncore.script import assemble

RandomSource = Callable[[int], bytes]

# Attempts before giving up on a random source that keeps producing invalid keys
MAX_KEY_ATTEMPTS = 16


def encode_relative_locktime(blocks: int) -> bytes:
    """Encode a block count as the script push consumed by CHECKSEQUENCEVERIFY.

    1-16 use the small-integer opcodes (0x51-0x60), 0 is OP_0, anything
    else is a length-prefixed minimal little-endian script number.
    """
    if not 0 <= blocks <= MAX_RELATIVE_LOCKTIME_BLOCKS:
        raise SerializationLimitError(
            f"Relative locktime must be between 0 and {MAX_RELATIVE_LOCKTIME_BLOCKS} blocks",
            blocks=blocks,
        )
    if blocks == 0:
        return b"\x00"
    if blocks <= 16:
        return bytes([0x50 + blocks])

    number = blocks.to_bytes((blocks.bit_length() + 7) // 8, "little")
    # Script numbers are signed, keep the top bit clear
    if number[-1] & 0x80:
        number += b"\x00"
    return push_data(number)


def generate_single_use_key(random_source: RandomSource = secrets.token_bytes) -> PrivateKey:
    for _ in range(MAX_KEY_ATTEMPTS):
        secret = random_source(32)
        if len(secret) != 32:
            raise SigningError(f"Random source returned {len(secret)} bytes, expected 32")
        try:
            return PrivateKey(secret)
        except ValueError:
            logger.debug("Discarding out-of-range key material")
    raise SigningError(f"No valid key after {MAX_KEY_ATTEMPTS} attempts")


def build_witness_script(
    parent_pubkey: bytes, single_use_pubkey: bytes, locktime_blocks: int
) -> bytes:
    script = assemble(
        [
            "OP_IF",
            push_hex(parent_pubkey.hex()),
            "OP_CHECKSIG",
            "OP_ELSE",
            encode_relative_locktime(locktime_blocks).hex(),
            "OP_CHECKSEQUENCEVERIFY",
            "OP_DROP",
            push_hex(single_use_pubkey.hex()),
            "OP_CHECKSIG",
            "OP_ENDIF",
        ]
    )
    return bytes.fromhex(script)


@dataclass
class TimelockComponents:
    single_use_key: PrivateKey
    parent_pubkey: bytes
    locktime_blocks: int
    witness_script: bytes
    locking_script: bytes

    @property
    def single_use_pubkey(self) -> bytes:
        return self.single_use_key.public_key.format(compressed=True)

    @property
    def sequence(self) -> int:
        """nSequence for the heir spend: block count in the low 16 bits."""
        return self.locktime_blocks

    def address(self, network: str = "testnet") -> str:
        return script_to_p2wsh_address(self.witness_script, network)


def generate_timelock_components(
    parent_pubkey: bytes | str,
    locktime_blocks: int,
    random_source: RandomSource = secrets.token_bytes,
) -> TimelockComponents:
    """
    Create a fresh single-use key and the vault scripts around it.

    Args:
        parent_pubkey: Owner's public key (bytes or hex)
        locktime_blocks: Relative locktime for the heir branch
        random_source: Callable returning n secure random bytes

    Returns:
        TimelockComponents with witness and P2WSH locking scripts
    """
    if isinstance(parent_pubkey, str):
        parent_pubkey = hex_to_bytes(parent_pubkey)
    try:
        PublicKey(parent_pubkey)
    except ValueError as e:
        raise SigningError(f"Invalid parent public key: {e}") from e

    # Validate the locktime before drawing any randomness
    encode_relative_locktime(locktime_blocks)

    single_use_key = generate_single_use_key(random_source)
    witness_script = build_witness_script(
        parent_pubkey, single_use_key.public_key.format(compressed=True), locktime_blocks
    )
    logger.debug(f"Built vault script with {locktime_blocks}-block relative locktime")

    return TimelockComponents(
        single_use_key=single_use_key,
        parent_pubkey=parent_pubkey,
        locktime_blocks=locktime_blocks,
        witness_script=witness_script,
        locking_script=script_to_p2wsh_script(witness_script),
    )
