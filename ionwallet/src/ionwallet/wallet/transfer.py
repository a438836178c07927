"""
Spend building: UTXO selection, change and legacy signing.
"""

from __future__ import annotations

from dataclasses import dataclass

from coincurve import PrivateKey
from loguru import logger

from ioncore.address import decode_address
from ioncore.constants import DEFAULT_LOCKTIME, MAX_SEQUENCE, TX_VERSION
from ioncore.errors import (
    InsufficientFundsError,
    IonError,
    SerializationLimitError,
    UnsupportedAddressTypeError,
)
from ioncore.models import UnspentOutput
from ioncore.script import StackItem, parse_stack_items
from ioncore.signing import load_private_key, sign_transaction
from ioncore.transaction import RawTransaction, SignedTransaction, TxInput, TxOutput
from ionwallet.backends.base import BlockchainSource


def source_script(address: str) -> bytes:
    """Locking script of a wallet address we can sign for."""
    decoded = decode_address(address)
    if decoded.is_segwit:
        raise UnsupportedAddressTypeError(
            f"Spending from segwit address {address} is not supported",
            address=address,
        )
    return decoded.script


def build_input(
    source: BlockchainSource,
    utxo: UnspentOutput,
    redeem_items: list[StackItem],
    sequence: int = MAX_SEQUENCE,
) -> TxInput:
    """Turn a UTXO into an unsigned input, looking up the script it is locked by."""
    previous = source.fetch_previous_transaction(utxo.txid).output(utxo.vout)
    return TxInput(
        txid=utxo.txid,
        vout=utxo.vout,
        prev_script=previous.script,
        redeem_items=list(redeem_items),
        sequence=sequence,
        value=utxo.value,
    )


def create_transaction(
    source: BlockchainSource,
    to_address: str,
    to_value: int,
    fee: int,
    my_address: str,
    my_redeem_script: str,
    private_key: PrivateKey | bytes | str,
    tx_version: int = TX_VERSION,
) -> SignedTransaction:
    """
    Build and sign a payment from ``my_address``.

    UTXOs are taken in the order the source returns them until their total
    exceeds ``to_value + fee``. Any surplus goes back to ``my_address`` as a
    change output.

    Args:
        source: Blockchain data source
        to_address: Destination address
        to_value: Satoshis to send
        fee: Absolute fee in satoshis
        my_address: Address holding the funds
        my_redeem_script: Hex pushed after the signature (the pubkey for P2PKH)
        private_key: Key for ``my_address``
        tx_version: Transaction version field

    Raises:
        InsufficientFundsError: UTXOs cannot cover ``to_value + fee``
    """
    if to_value < 0 or fee < 0:
        raise SerializationLimitError(
            "Amount and fee must not be negative", to_value=to_value, fee=fee
        )

    key = load_private_key(private_key)
    destination = decode_address(to_address)
    my_script = source_script(my_address)
    redeem_items = parse_stack_items([my_redeem_script])
    required = to_value + fee

    inputs: list[TxInput] = []
    input_total = 0
    for utxo in source.fetch_unspent_outputs(my_address):
        inputs.append(build_input(source, utxo, redeem_items))
        input_total += utxo.value
        if input_total > required:
            break

    if input_total < required:
        raise InsufficientFundsError(
            "Not enough coins",
            available=input_total,
            required=required,
        )

    outputs = [TxOutput(to_value, destination.script)]
    change = input_total - required
    if change > 0:
        outputs.append(TxOutput(change, my_script))

    logger.info(
        f"Spending {len(inputs)} input(s) ({input_total} sats): "
        f"{to_value} to {to_address}, fee {fee}, change {change}"
    )

    raw = RawTransaction(inputs, outputs, version=tx_version, locktime=DEFAULT_LOCKTIME)
    signed = sign_transaction(raw, key)
    signed.segwit = destination.is_segwit
    logger.info(f"Created transaction {signed.txid}")
    return signed


@dataclass
class TransferResult:
    """Outcome of a spend: the signed hex or the reason it failed."""

    tx_hex: str | None = None
    txid: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def create_signed_transaction_hex(
    source: BlockchainSource,
    to_address: str,
    to_value: int,
    fee: int,
    my_address: str,
    my_redeem_script: str,
    private_key: PrivateKey | bytes | str,
) -> TransferResult:
    try:
        signed = create_transaction(
            source, to_address, to_value, fee, my_address, my_redeem_script, private_key
        )
    except IonError as e:
        logger.warning(f"Transaction not created: {e.message}")
        return TransferResult(error=e.message)
    return TransferResult(tx_hex=signed.to_hex(), txid=signed.txid)
