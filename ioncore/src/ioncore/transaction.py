"""
Transaction data model and wire serialization.

One in-memory model (RawTransaction / SignedTransaction) with a named
serializer per wire variant:
- serialize_legacy: pre-segwit layout, also the txid preimage
- serialize_segwit: BIP144 marker/flag layout with witness stacks
- serialize: picks the right one for a SignedTransaction

The sighash views live in ioncore.sighash.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ioncore.constants import (
    DEFAULT_LOCKTIME,
    MAX_SEQUENCE,
    SEGWIT_FLAG,
    SEGWIT_MARKER,
    TX_VERSION,
)
from ioncore.encoding import (
    hex_to_bytes,
    int_to_le,
    push_data,
    read_varint,
    reverse_bytes,
    sha256d,
    varint,
)
from ioncore.errors import IonError, ScriptError
from ioncore.script import StackItem, concat_bare, concat_push, parse_stack_items


def serialize_outpoint(txid: str, vout: int) -> bytes:
    """Serialize outpoint (txid:vout)."""
    # txid is in display format (big-endian), reversed for the wire
    txid_bytes = hex_to_bytes(txid)
    if len(txid_bytes) != 32:
        raise ScriptError(f"txid must be 32 bytes, got {len(txid_bytes)}", txid=txid)
    return reverse_bytes(txid_bytes) + int_to_le(vout, 4)


@dataclass(frozen=True)
class Signature:
    """DER signature plus its sighash-type byte."""

    der: bytes
    sighash_type: int

    @property
    def is_absent(self) -> bool:
        return not self.der

    def serialize(self) -> bytes:
        if self.is_absent:
            return b"\x00"
        return push_data(self.der + bytes([self.sighash_type]))


ABSENT_SIGNATURE = Signature(b"", 0)


@dataclass(frozen=True)
class ScriptSig:
    """Legacy unlock proof: <signature> [<redeem>]"""

    signature: Signature
    redeem: bytes = b""

    def script(self) -> bytes:
        body = self.signature.serialize()
        if self.redeem:
            body += push_data(self.redeem)
        return body

    def serialize(self) -> bytes:
        return push_data(self.script())


@dataclass(frozen=True)
class Witness:
    """Witness stack for one input: signatures first, then push-encoded items."""

    signatures: list[Signature]
    items: list[StackItem] = field(default_factory=list)

    @property
    def item_count(self) -> int:
        return len(self.signatures) + len(self.items)

    def serialize(self) -> bytes:
        result = varint(self.item_count)
        result += b"".join(sig.serialize() for sig in self.signatures)
        result += concat_push(self.items)
        return result


@dataclass
class TxInput:
    """
    Transaction input.

    ``prev_script`` is the locking script of the output being spent; it is
    the scriptCode of the legacy sighash. ``redeem_items`` are the stack
    items the spender supplies after the signature. ``script_sig`` stays
    None until the input is signed.
    """

    txid: str
    vout: int
    prev_script: bytes
    redeem_items: list[StackItem] = field(default_factory=list)
    sequence: int = MAX_SEQUENCE
    value: int = 0
    script_sig: ScriptSig | None = None

    def __post_init__(self) -> None:
        # Validate fixed-width fields up front so serialization cannot fail later
        serialize_outpoint(self.txid, self.vout)
        int_to_le(self.sequence, 4)
        int_to_le(self.value, 8)

    @classmethod
    def from_tokens(
        cls,
        txid: str,
        vout: int,
        prev_script_hex: str,
        redeem_tokens: list[str],
        sequence: int = MAX_SEQUENCE,
        value: int = 0,
    ) -> TxInput:
        return cls(
            txid=txid,
            vout=vout,
            prev_script=hex_to_bytes(prev_script_hex),
            redeem_items=parse_stack_items(redeem_tokens),
            sequence=sequence,
            value=value,
        )

    @property
    def outpoint(self) -> bytes:
        return serialize_outpoint(self.txid, self.vout)

    @property
    def redeem_script(self) -> bytes:
        """Redeem items in bare encoding (the scriptCode of a P2WSH spend)."""
        return concat_bare(self.redeem_items)

    def serialize(self) -> bytes:
        unlock = self.script_sig.serialize() if self.script_sig is not None else b"\x00"
        return self.outpoint + unlock + int_to_le(self.sequence, 4)


@dataclass(frozen=True)
class TxOutput:
    value: int
    script: bytes

    def __post_init__(self) -> None:
        int_to_le(self.value, 8)

    def serialize(self) -> bytes:
        return int_to_le(self.value, 8) + push_data(self.script)


@dataclass
class RawTransaction:
    """The unsigned skeleton: version, inputs, outputs, locktime."""

    inputs: list[TxInput]
    outputs: list[TxOutput]
    version: int = TX_VERSION
    locktime: int = DEFAULT_LOCKTIME

    def __post_init__(self) -> None:
        int_to_le(self.version, 4)
        int_to_le(self.locktime, 4)

    @property
    def input_total(self) -> int:
        return sum(inp.value for inp in self.inputs)

    @property
    def output_total(self) -> int:
        return sum(out.value for out in self.outputs)


@dataclass
class SignedTransaction:
    """
    A RawTransaction plus an optional witness per input.

    Segwit framing applies only when ``segwit`` is set and at least one
    input actually carries a witness.
    """

    raw: RawTransaction
    witnesses: list[Witness | None] = field(default_factory=list)
    segwit: bool = False

    @property
    def inputs(self) -> list[TxInput]:
        return self.raw.inputs

    @property
    def outputs(self) -> list[TxOutput]:
        return self.raw.outputs

    @property
    def uses_segwit_framing(self) -> bool:
        return self.segwit and any(w is not None for w in self.witnesses)

    def witness_for(self, index: int) -> Witness | None:
        return self.witnesses[index] if index < len(self.witnesses) else None

    @property
    def txid(self) -> str:
        return compute_txid(self.raw)

    def serialize(self) -> bytes:
        return serialize(self)

    def to_hex(self) -> str:
        return serialize(self).hex()


def _serialize_body(raw: RawTransaction) -> tuple[bytes, bytes]:
    inputs = varint(len(raw.inputs)) + b"".join(inp.serialize() for inp in raw.inputs)
    outputs = varint(len(raw.outputs)) + b"".join(out.serialize() for out in raw.outputs)
    return inputs, outputs


def serialize_legacy(tx: RawTransaction | SignedTransaction) -> bytes:
    """version | inputs | outputs | locktime"""
    raw = tx.raw if isinstance(tx, SignedTransaction) else tx
    inputs, outputs = _serialize_body(raw)
    return int_to_le(raw.version, 4) + inputs + outputs + int_to_le(raw.locktime, 4)


def serialize_segwit(tx: SignedTransaction) -> bytes:
    """version | marker | flag | inputs | outputs | witnesses | locktime"""
    raw = tx.raw
    inputs, outputs = _serialize_body(raw)
    witnesses = b""
    for index in range(len(raw.inputs)):
        witness = tx.witness_for(index)
        witnesses += witness.serialize() if witness is not None else b"\x00"

    return (
        int_to_le(raw.version, 4)
        + bytes([SEGWIT_MARKER, SEGWIT_FLAG])
        + inputs
        + outputs
        + witnesses
        + int_to_le(raw.locktime, 4)
    )


def serialize(tx: SignedTransaction) -> bytes:
    if tx.uses_segwit_framing:
        return serialize_segwit(tx)
    return serialize_legacy(tx)


def compute_txid(tx: RawTransaction | SignedTransaction) -> str:
    """Double SHA256 of the non-witness serialization, in display order."""
    return reverse_bytes(sha256d(serialize_legacy(tx))).hex()


@dataclass
class ParsedInput:
    txid: str
    vout: int
    script_sig: bytes
    sequence: int


@dataclass
class ParsedTransaction:
    version: int
    segwit: bool
    inputs: list[ParsedInput]
    outputs: list[TxOutput]
    witnesses: list[list[bytes]]
    locktime: int


def deserialize_transaction(tx_bytes: bytes) -> ParsedTransaction:
    """Parse legacy or segwit wire bytes back into their fields."""
    try:
        offset = 0
        version = int.from_bytes(tx_bytes[offset : offset + 4], "little")
        offset += 4

        segwit = False
        if tx_bytes[offset] == SEGWIT_MARKER and tx_bytes[offset + 1] == SEGWIT_FLAG:
            segwit = True
            offset += 2

        input_count, offset = read_varint(tx_bytes, offset)
        inputs: list[ParsedInput] = []
        for _ in range(input_count):
            txid = tx_bytes[offset : offset + 32][::-1].hex()
            offset += 32
            vout = int.from_bytes(tx_bytes[offset : offset + 4], "little")
            offset += 4
            script_len, offset = read_varint(tx_bytes, offset)
            script_sig = tx_bytes[offset : offset + script_len]
            offset += script_len
            sequence = int.from_bytes(tx_bytes[offset : offset + 4], "little")
            offset += 4
            inputs.append(ParsedInput(txid, vout, script_sig, sequence))

        output_count, offset = read_varint(tx_bytes, offset)
        outputs: list[TxOutput] = []
        for _ in range(output_count):
            value = int.from_bytes(tx_bytes[offset : offset + 8], "little")
            offset += 8
            script_len, offset = read_varint(tx_bytes, offset)
            script = tx_bytes[offset : offset + script_len]
            offset += script_len
            outputs.append(TxOutput(value, script))

        witnesses: list[list[bytes]] = []
        if segwit:
            for _ in range(input_count):
                item_count, offset = read_varint(tx_bytes, offset)
                items = []
                for _ in range(item_count):
                    item_len, offset = read_varint(tx_bytes, offset)
                    items.append(tx_bytes[offset : offset + item_len])
                    offset += item_len
                witnesses.append(items)

        if len(tx_bytes) != offset + 4:
            raise ValueError(f"expected 4 locktime bytes at offset {offset}")
        locktime = int.from_bytes(tx_bytes[offset : offset + 4], "little")

    except IonError:
        raise
    except (IndexError, ValueError) as e:
        raise ScriptError(f"Failed to parse transaction: {e}") from e

    return ParsedTransaction(version, segwit, inputs, outputs, witnesses, locktime)
