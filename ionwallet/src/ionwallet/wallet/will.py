"""
Will transactions built around the CSV vault.

- initiation: moves the wallet's coins into the vault (legacy signed)
- redemption: heirs spend the vault after the relative locktime (ELSE branch)
- revocation: the owner spends the vault back at any time (IF branch)

Redemption and revocation both spend output 0 of the initiation, so all
three are built together and handed out as text packages: heirs get the
initiation and redemption, the guardian gets the revocation.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass

from coincurve import PrivateKey
from loguru import logger

from ioncore.address import decode_address
from ioncore.constants import MAX_SEQUENCE, TX_VERSION, WILL_INITIATION_FEE, WILL_REVOCATION_FEE
from ioncore.errors import InsufficientFundsError, ScriptError
from ioncore.script import DataItem, OpcodeItem, parse_stack_items
from ioncore.signing import load_private_key, sign_transaction
from ioncore.transaction import RawTransaction, SignedTransaction, TxInput, TxOutput
from ionwallet.backends.base import BlockchainSource
from ionwallet.wallet.timelock import (
    RandomSource,
    TimelockComponents,
    generate_timelock_components,
)
from ionwallet.wallet.transfer import build_input, source_script

# Witness branch selectors for the vault's OP_IF (minimal encodings)
HEIR_BRANCH = OpcodeItem(0x00)
OWNER_BRANCH = OpcodeItem(0x01)


def _lock_into_vault(
    inputs: list[TxInput],
    vault_locking_script: bytes,
    fee: int,
    private_key: PrivateKey,
    tx_version: int,
) -> SignedTransaction:
    input_total = sum(inp.value for inp in inputs)
    if input_total <= fee:
        raise InsufficientFundsError(
            "Not enough coins to fund the will",
            available=input_total,
            required=fee + 1,
        )

    vault_output = TxOutput(input_total - fee, vault_locking_script)
    raw = RawTransaction(inputs, [vault_output], version=tx_version)
    signed = sign_transaction(raw, private_key)
    logger.info(
        f"Will initiation {signed.txid} locks {vault_output.value} sats "
        f"from {len(inputs)} input(s)"
    )
    return signed


def create_will_initiation(
    source: BlockchainSource,
    my_address: str,
    private_key: PrivateKey | bytes | str,
    vault_locking_script: bytes,
    my_redeem_script: str,
    fee: int = WILL_INITIATION_FEE,
    tx_version: int = TX_VERSION,
) -> SignedTransaction:
    """Spend every UTXO of ``my_address`` into the vault, minus ``fee``."""
    key = load_private_key(private_key)
    source_script(my_address)
    redeem_items = parse_stack_items([my_redeem_script])

    inputs = [
        build_input(source, utxo, redeem_items)
        for utxo in source.fetch_unspent_outputs(my_address)
    ]
    return _lock_into_vault(inputs, vault_locking_script, fee, key, tx_version)


def predict_will_initiation(
    previous: SignedTransaction,
    source: BlockchainSource,
    my_address: str,
    private_key: PrivateKey | bytes | str,
    vault_locking_script: bytes,
    my_redeem_script: str,
    fee: int = WILL_INITIATION_FEE,
    tx_version: int = TX_VERSION,
) -> SignedTransaction:
    """
    Build the initiation that will be valid once ``previous`` confirms.

    Inputs are the outputs of ``previous`` paying back to ``my_address``
    (its change) plus every UTXO of ``my_address`` that ``previous`` does
    not spend.
    """
    key = load_private_key(private_key)
    my_script = source_script(my_address)
    redeem_items = parse_stack_items([my_redeem_script])
    previous_txid = previous.txid

    inputs = [
        TxInput(
            txid=previous_txid,
            vout=vout,
            prev_script=my_script,
            redeem_items=list(redeem_items),
            sequence=MAX_SEQUENCE,
            value=output.value,
        )
        for vout, output in enumerate(previous.outputs)
        if output.script == my_script
    ]

    consumed = {(inp.txid, inp.vout) for inp in previous.inputs}
    for utxo in source.fetch_unspent_outputs(my_address):
        # Outputs of ``previous`` may already be reported once it is broadcast
        if utxo.outpoint in consumed or utxo.txid == previous_txid:
            continue
        inputs.append(build_input(source, utxo, redeem_items))

    logger.debug(f"Predicting will initiation on top of {previous_txid}")
    return _lock_into_vault(inputs, vault_locking_script, fee, key, tx_version)


def _vault_input(
    initiation: SignedTransaction, timelock: TimelockComponents, sequence: int
) -> TxInput:
    if not initiation.outputs:
        raise ScriptError("Will initiation has no vault output")
    return TxInput(
        txid=initiation.txid,
        vout=0,
        prev_script=timelock.locking_script,
        redeem_items=[DataItem(timelock.witness_script)],
        sequence=sequence,
        value=initiation.outputs[0].value,
    )


def create_will_redemption(
    initiation: SignedTransaction,
    timelock: TimelockComponents,
    child_amounts: list[int],
    child_addresses: list[str],
    tx_version: int = TX_VERSION,
) -> SignedTransaction:
    """Heirs' spend of the vault, valid once the relative locktime has passed."""
    if len(child_amounts) != len(child_addresses):
        raise ScriptError(
            "Every heir needs exactly one amount",
            amounts=len(child_amounts),
            addresses=len(child_addresses),
        )

    vault_input = _vault_input(initiation, timelock, timelock.sequence)
    if sum(child_amounts) > vault_input.value:
        raise InsufficientFundsError(
            "Heir amounts exceed the vault value",
            available=vault_input.value,
            required=sum(child_amounts),
        )

    outputs = [
        TxOutput(amount, decode_address(address).script)
        for amount, address in zip(child_amounts, child_addresses, strict=True)
    ]
    raw = RawTransaction([vault_input], outputs, version=tx_version)
    signed = sign_transaction(raw, timelock.single_use_key, branch=HEIR_BRANCH)
    logger.info(f"Will redemption {signed.txid} pays {len(outputs)} heir(s)")
    return signed


def create_will_revocation(
    parent_key: PrivateKey | bytes | str,
    initiation: SignedTransaction,
    timelock: TimelockComponents,
    return_address: str,
    fee: int = WILL_REVOCATION_FEE,
    tx_version: int = TX_VERSION,
) -> SignedTransaction:
    """Owner's spend of the vault back to ``return_address``, usable at any time."""
    vault_input = _vault_input(initiation, timelock, MAX_SEQUENCE)
    if vault_input.value <= fee:
        raise InsufficientFundsError(
            "Vault value does not cover the revocation fee",
            available=vault_input.value,
            required=fee + 1,
        )

    output = TxOutput(vault_input.value - fee, decode_address(return_address).script)
    raw = RawTransaction([vault_input], [output], version=tx_version)
    signed = sign_transaction(raw, parent_key, branch=OWNER_BRANCH)
    logger.info(f"Will revocation {signed.txid} returns {output.value} sats")
    return signed


@dataclass
class WillParts:
    timelock: TimelockComponents
    initiation: SignedTransaction
    redemption: SignedTransaction
    revocation: SignedTransaction

    def heir_package(self) -> str:
        return (
            f"Will Initiation: {self.initiation.to_hex()}\n\n"
            f"Will Redemption: {self.redemption.to_hex()}\n\n"
        )

    def guardian_package(self) -> str:
        return f"Will Revocation: {self.revocation.to_hex()}"


def _assemble_will(
    initiation: SignedTransaction,
    timelock: TimelockComponents,
    child_addresses: list[str],
    child_amounts: list[int],
    parent_address: str,
    parent_key: PrivateKey,
    revocation_fee: int,
    tx_version: int,
) -> WillParts:
    redemption = create_will_redemption(
        initiation, timelock, child_amounts, child_addresses, tx_version=tx_version
    )
    revocation = create_will_revocation(
        parent_key, initiation, timelock, parent_address, fee=revocation_fee, tx_version=tx_version
    )
    return WillParts(timelock, initiation, redemption, revocation)


def create_will_parts(
    source: BlockchainSource,
    child_addresses: list[str],
    child_amounts: list[int],
    locktime_blocks: int,
    parent_address: str,
    parent_pubkey: str,
    parent_key: PrivateKey | bytes | str,
    initiation_fee: int = WILL_INITIATION_FEE,
    revocation_fee: int = WILL_REVOCATION_FEE,
    tx_version: int = TX_VERSION,
    random_source: RandomSource = secrets.token_bytes,
) -> WillParts:
    """Build a will over the current UTXO set of ``parent_address``."""
    key = load_private_key(parent_key)
    timelock = generate_timelock_components(parent_pubkey, locktime_blocks, random_source)
    initiation = create_will_initiation(
        source,
        parent_address,
        key,
        timelock.locking_script,
        parent_pubkey,
        fee=initiation_fee,
        tx_version=tx_version,
    )
    return _assemble_will(
        initiation,
        timelock,
        child_addresses,
        child_amounts,
        parent_address,
        key,
        revocation_fee,
        tx_version,
    )


def predict_will_parts(
    previous: SignedTransaction,
    source: BlockchainSource,
    child_addresses: list[str],
    child_amounts: list[int],
    locktime_blocks: int,
    parent_address: str,
    parent_pubkey: str,
    parent_key: PrivateKey | bytes | str,
    initiation_fee: int = WILL_INITIATION_FEE,
    revocation_fee: int = WILL_REVOCATION_FEE,
    tx_version: int = TX_VERSION,
    random_source: RandomSource = secrets.token_bytes,
) -> WillParts:
    """Build a will that spends what ``previous`` leaves in the wallet."""
    key = load_private_key(parent_key)
    timelock = generate_timelock_components(parent_pubkey, locktime_blocks, random_source)
    initiation = predict_will_initiation(
        previous,
        source,
        parent_address,
        key,
        timelock.locking_script,
        parent_pubkey,
        fee=initiation_fee,
        tx_version=tx_version,
    )
    return _assemble_will(
        initiation,
        timelock,
        child_addresses,
        child_amounts,
        parent_address,
        key,
        revocation_fee,
        tx_version,
    )
