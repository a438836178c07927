"""
ECDSA signing of transaction inputs with coincurve.

Signing mutates only the unlock proof of the input being signed: a
ScriptSig for legacy inputs, a Witness for P2WSH vault inputs.
"""

from __future__ import annotations

from coincurve import PrivateKey
from loguru import logger

from ioncore.address import is_p2wsh_script
from ioncore.constants import SIGHASH_ALL
from ioncore.errors import SigningError
from ioncore.script import StackItem, concat_bare
from ioncore.sighash import legacy_sighash, segwit_sighash
from ioncore.transaction import RawTransaction, ScriptSig, Signature, SignedTransaction, Witness


def load_private_key(key: PrivateKey | bytes | str) -> PrivateKey:
    """Accept a coincurve key, 32 raw bytes, or 64 hex digits."""
    if isinstance(key, PrivateKey):
        return key
    try:
        secret = bytes.fromhex(key) if isinstance(key, str) else bytes(key)
        if len(secret) != 32:
            raise ValueError(f"secret must be 32 bytes, got {len(secret)}")
        return PrivateKey(secret)
    except (TypeError, ValueError) as e:
        raise SigningError(f"Invalid private key: {e}") from e


def sign_digest(
    private_key: PrivateKey, digest: bytes, sighash_type: int = SIGHASH_ALL
) -> Signature:
    # The digest is already sha256d, hasher=None stops coincurve hashing it again
    try:
        der = private_key.sign(digest, hasher=None)
    except ValueError as e:
        raise SigningError(f"Signing failed: {e}") from e
    return Signature(der, sighash_type)


def _legacy_script_sig(
    tx: RawTransaction, input_index: int, private_key: PrivateKey, sighash_type: int
) -> ScriptSig:
    digest = legacy_sighash(tx, input_index, sighash_type)
    signature = sign_digest(private_key, digest, sighash_type)
    return ScriptSig(signature, concat_bare(tx.inputs[input_index].redeem_items))


def _p2wsh_witness(
    tx: RawTransaction,
    input_index: int,
    private_key: PrivateKey,
    branch: StackItem,
    sighash_type: int,
) -> Witness:
    inp = tx.inputs[input_index]
    digest = segwit_sighash(tx, input_index, inp.redeem_script, inp.value, sighash_type)
    signature = sign_digest(private_key, digest, sighash_type)
    return Witness([signature], [branch, *inp.redeem_items])


def sign_legacy_input(
    tx: RawTransaction,
    input_index: int,
    private_key: PrivateKey,
    sighash_type: int = SIGHASH_ALL,
) -> ScriptSig:
    """Sign one legacy input and install its ScriptSig.

    The redeem part of the ScriptSig is the input's redeem items in bare
    encoding (for P2PKH: the public key).
    """
    script_sig = _legacy_script_sig(tx, input_index, private_key, sighash_type)
    tx.inputs[input_index].script_sig = script_sig
    return script_sig


def sign_p2wsh_input(
    tx: RawTransaction,
    input_index: int,
    private_key: PrivateKey,
    branch: StackItem,
    sighash_type: int = SIGHASH_ALL,
) -> Witness:
    """Sign one P2WSH input against its witness script.

    The input's redeem items form the witness script (the BIP143
    scriptCode). The witness stack is [signature, branch, redeem items].
    """
    witness = _p2wsh_witness(tx, input_index, private_key, branch, sighash_type)
    tx.inputs[input_index].script_sig = None
    return witness


def sign_transaction(
    tx: RawTransaction,
    private_key: PrivateKey | bytes | str,
    branch: StackItem | None = None,
    sighash_type: int = SIGHASH_ALL,
) -> SignedTransaction:
    """Sign every input of ``tx`` with one key.

    Inputs spending a P2WSH output are signed with the BIP143 view and need
    ``branch`` to select the witness script path; all others are signed with
    the legacy view. Unlock proofs are installed only once every input has
    been signed, so a failure leaves ``tx`` untouched.
    """
    key = load_private_key(private_key)
    script_sigs: list[ScriptSig | None] = []
    witnesses: list[Witness | None] = []

    for index, inp in enumerate(tx.inputs):
        if is_p2wsh_script(inp.prev_script):
            if branch is None:
                raise SigningError(
                    f"Input {index} spends a P2WSH output but no branch selector was given",
                    input_index=index,
                )
            script_sigs.append(None)
            witnesses.append(_p2wsh_witness(tx, index, key, branch, sighash_type))
        else:
            script_sigs.append(_legacy_script_sig(tx, index, key, sighash_type))
            witnesses.append(None)

    for inp, script_sig in zip(tx.inputs, script_sigs, strict=True):
        inp.script_sig = script_sig

    signed = SignedTransaction(tx, witnesses, segwit=any(w is not None for w in witnesses))
    logger.debug(f"Signed {len(tx.inputs)} input(s), txid {signed.txid}")
    return signed
