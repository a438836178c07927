"""
Signature hash computation.

Two transaction views are signed:
- the legacy view (pre-segwit), used for P2PKH / P2SH / bare pubkey inputs
- the BIP143 view, used for P2WSH vault inputs

SIGHASH_ALL commits to every input and output. SIGHASH_SINGLE commits to
every input outpoint but only to the output at the signing index.
"""

from __future__ import annotations

from ioncore.constants import MAX_UINT64, SIGHASH_ALL, SIGHASH_SINGLE, SUPPORTED_SIGHASH_TYPES
from ioncore.encoding import int_to_le, push_data, sha256d, varint
from ioncore.errors import SigningError
from ioncore.transaction import RawTransaction, TxOutput

_ZERO_HASH = b"\x00" * 32


def _check_request(tx: RawTransaction, input_index: int, sighash_type: int) -> None:
    if not 0 <= input_index < len(tx.inputs):
        raise SigningError(
            f"Input index {input_index} out of range for {len(tx.inputs)} inputs",
            input_index=input_index,
        )
    if sighash_type not in SUPPORTED_SIGHASH_TYPES:
        raise SigningError(f"Unsupported sighash type {sighash_type}", sighash_type=sighash_type)


def legacy_sighash_preimage(
    tx: RawTransaction, input_index: int, sighash_type: int = SIGHASH_ALL
) -> bytes:
    """Build the legacy signing view of ``tx`` for one input.

    The signing input carries its previous locking script in the scriptSig
    position; every other input carries an empty script.
    """
    _check_request(tx, input_index, sighash_type)

    inputs = b""
    for i, inp in enumerate(tx.inputs):
        script = inp.prev_script if i == input_index else b""
        sequence = inp.sequence
        if sighash_type == SIGHASH_SINGLE and i != input_index:
            sequence = 0
        inputs += inp.outpoint + push_data(script) + int_to_le(sequence, 4)

    if sighash_type == SIGHASH_SINGLE:
        if input_index >= len(tx.outputs):
            raise SigningError(
                f"SIGHASH_SINGLE needs an output at index {input_index}",
                input_index=input_index,
                output_count=len(tx.outputs),
            )
        # Earlier outputs become null outputs, later ones are dropped
        null_output = TxOutput(MAX_UINT64, b"")
        outputs = [null_output] * input_index + [tx.outputs[input_index]]
    else:
        outputs = tx.outputs

    return (
        int_to_le(tx.version, 4)
        + varint(len(tx.inputs))
        + inputs
        + varint(len(outputs))
        + b"".join(out.serialize() for out in outputs)
        + int_to_le(tx.locktime, 4)
        + int_to_le(sighash_type, 4)
    )


def legacy_sighash(tx: RawTransaction, input_index: int, sighash_type: int = SIGHASH_ALL) -> bytes:
    return sha256d(legacy_sighash_preimage(tx, input_index, sighash_type))


def segwit_sighash_preimage(
    tx: RawTransaction,
    input_index: int,
    script_code: bytes,
    value: int | None = None,
    sighash_type: int = SIGHASH_ALL,
) -> bytes:
    """Build the BIP143 preimage for one input.

    Args:
        tx: The transaction being signed
        input_index: Index of the input to sign
        script_code: The witness script for P2WSH (without length prefix)
        value: Value of the output being spent, defaults to the input's value
        sighash_type: SIGHASH_ALL or SIGHASH_SINGLE
    """
    _check_request(tx, input_index, sighash_type)

    target = tx.inputs[input_index]
    if value is None:
        value = target.value

    hash_prevouts = sha256d(b"".join(inp.outpoint for inp in tx.inputs))

    if sighash_type == SIGHASH_SINGLE:
        hash_sequence = _ZERO_HASH
        if input_index < len(tx.outputs):
            hash_outputs = sha256d(tx.outputs[input_index].serialize())
        else:
            hash_outputs = _ZERO_HASH
    else:
        hash_sequence = sha256d(b"".join(int_to_le(inp.sequence, 4) for inp in tx.inputs))
        hash_outputs = sha256d(b"".join(out.serialize() for out in tx.outputs))

    return (
        int_to_le(tx.version, 4)
        + hash_prevouts
        + hash_sequence
        + target.outpoint
        + push_data(script_code)
        + int_to_le(value, 8)
        + int_to_le(target.sequence, 4)
        + hash_outputs
        + int_to_le(tx.locktime, 4)
        + int_to_le(sighash_type, 4)
    )


def segwit_sighash(
    tx: RawTransaction,
    input_index: int,
    script_code: bytes,
    value: int | None = None,
    sighash_type: int = SIGHASH_ALL,
) -> bytes:
    return sha256d(segwit_sighash_preimage(tx, input_index, script_code, value, sighash_type))
