"""
Script assembly from opcode mnemonics and stack items.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from ioncore.encoding import hex_to_bytes, push_data

OPCODES: MappingProxyType[str, int] = MappingProxyType(
    {
        "OP_FALSE": 0x00,
        "OP_0": 0x00,
        "OP_PUSHDATA1": 0x4C,
        "OP_PUSHDATA2": 0x4D,
        "OP_PUSHDATA4": 0x4E,
        "OP_1NEGATE": 0x4F,
        "OP_TRUE": 0x51,
        "OP_1": 0x51,
        "OP_2": 0x52,
        "OP_3": 0x53,
        "OP_4": 0x54,
        "OP_5": 0x55,
        "OP_6": 0x56,
        "OP_7": 0x57,
        "OP_8": 0x58,
        "OP_9": 0x59,
        "OP_10": 0x5A,
        "OP_11": 0x5B,
        "OP_12": 0x5C,
        "OP_13": 0x5D,
        "OP_14": 0x5E,
        "OP_15": 0x5F,
        "OP_16": 0x60,
        "OP_NOP": 0x61,
        "OP_IF": 0x63,
        "OP_NOTIF": 0x64,
        "OP_ELSE": 0x67,
        "OP_ENDIF": 0x68,
        "OP_VERIFY": 0x69,
        "OP_RETURN": 0x6A,
        "OP_TOALTSTACK": 0x6B,
        "OP_FROMALTSTACK": 0x6C,
        "OP_2DROP": 0x6D,
        "OP_2DUP": 0x6E,
        "OP_3DUP": 0x6F,
        "OP_2OVER": 0x70,
        "OP_2ROT": 0x71,
        "OP_2SWAP": 0x72,
        "OP_IFDUP": 0x73,
        "OP_DEPTH": 0x74,
        "OP_DROP": 0x75,
        "OP_DUP": 0x76,
        "OP_NIP": 0x77,
        "OP_OVER": 0x78,
        "OP_PICK": 0x79,
        "OP_ROLL": 0x7A,
        "OP_ROT": 0x7B,
        "OP_SWAP": 0x7C,
        "OP_TUCK": 0x7D,
        "OP_SIZE": 0x82,
        "OP_EQUAL": 0x87,
        "OP_EQUALVERIFY": 0x88,
        "OP_1ADD": 0x8B,
        "OP_1SUB": 0x8C,
        "OP_NEGATE": 0x8F,
        "OP_ABS": 0x90,
        "OP_NOT": 0x91,
        "OP_0NOTEQUAL": 0x92,
        "OP_ADD": 0x93,
        "OP_SUB": 0x94,
        "OP_BOOLAND": 0x9A,
        "OP_BOOLOR": 0x9B,
        "OP_NUMEQUAL": 0x9C,
        "OP_NUMEQUALVERIFY": 0x9D,
        "OP_NUMNOTEQUAL": 0x9E,
        "OP_LESSTHAN": 0x9F,
        "OP_GREATERTHAN": 0xA0,
        "OP_LESSTHANOREQUAL": 0xA1,
        "OP_GREATERTHANOREQUAL": 0xA2,
        "OP_MIN": 0xA3,
        "OP_MAX": 0xA4,
        "OP_WITHIN": 0xA5,
        "OP_RIPEMD160": 0xA6,
        "OP_SHA1": 0xA7,
        "OP_SHA256": 0xA8,
        "OP_HASH160": 0xA9,
        "OP_HASH256": 0xAA,
        "OP_CODESEPARATOR": 0xAB,
        "OP_CHECKSIG": 0xAC,
        "OP_CHECKSIGVERIFY": 0xAD,
        "OP_CHECKMULTISIG": 0xAE,
        "OP_CHECKMULTISIGVERIFY": 0xAF,
        "OP_CHECKLOCKTIMEVERIFY": 0xB1,
        "OP_CHECKSEQUENCEVERIFY": 0xB2,
    }
)


def lookup_opcode(token: str) -> int | None:
    """Resolve a mnemonic case-insensitively, or None if it is not an opcode."""
    return OPCODES.get(token.upper())


def assemble(tokens: list[str]) -> str:
    """
    Assemble a script from mnemonics and literal hex tokens.

    Mnemonics resolve through OPCODES; any other token is passed through
    unchanged. Data tokens are NOT length-prefixed here, callers push them
    with ``push_hex`` first.

    Returns:
        The script as lowercase hex (literal tokens keep their own case).
    """
    parts = []
    for token in tokens:
        opcode = lookup_opcode(token)
        parts.append(f"{opcode:02x}" if opcode is not None else token)
    return "".join(parts)


@dataclass(frozen=True)
class OpcodeItem:
    """A single opcode byte on a redeem/witness stack."""

    opcode: int

    def push_encode(self) -> bytes:
        # Opcode zero is the empty stack element; anything else is a 1-byte element
        if self.opcode == 0:
            return b"\x00"
        return bytes([0x01, self.opcode])

    def bare_encode(self) -> bytes:
        return bytes([self.opcode])


@dataclass(frozen=True)
class DataItem:
    """An arbitrary data payload on a redeem/witness stack."""

    data: bytes

    def push_encode(self) -> bytes:
        return push_data(self.data)

    def bare_encode(self) -> bytes:
        return self.data


StackItem = OpcodeItem | DataItem


def parse_stack_items(tokens: list[str]) -> list[StackItem]:
    """Turn mnemonic or hex tokens into stack items."""
    items: list[StackItem] = []
    for token in tokens:
        opcode = lookup_opcode(token)
        if opcode is not None:
            items.append(OpcodeItem(opcode))
        else:
            items.append(DataItem(hex_to_bytes(token)))
    return items


def concat_push(items: list[StackItem]) -> bytes:
    return b"".join(item.push_encode() for item in items)


def concat_bare(items: list[StackItem]) -> bytes:
    return b"".join(item.bare_encode() for item in items)
