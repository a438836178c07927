"""
Test configuration for ioncore tests.
"""

from __future__ import annotations

import pytest
from coincurve import PrivateKey

from ioncore.base58 import base58check_encode
from ioncore.constants import P2PKH_TESTNET_VERSION
from ioncore.encoding import hash160
from ioncore.script import DataItem
from ioncore.transaction import RawTransaction, TxInput, TxOutput


@pytest.fixture
def private_key() -> PrivateKey:
    """Deterministic test key (not for production use!)."""
    return PrivateKey(bytes.fromhex("11" * 32))


@pytest.fixture
def pubkey(private_key: PrivateKey) -> bytes:
    return private_key.public_key.format(compressed=True)


@pytest.fixture
def testnet_address(pubkey: bytes) -> str:
    return base58check_encode(P2PKH_TESTNET_VERSION, hash160(pubkey))


@pytest.fixture
def p2pkh_script(pubkey: bytes) -> bytes:
    return bytes.fromhex("76a914") + hash160(pubkey) + bytes.fromhex("88ac")


@pytest.fixture
def legacy_tx(pubkey: bytes, p2pkh_script: bytes) -> RawTransaction:
    """One P2PKH input, two outputs."""
    return RawTransaction(
        inputs=[
            TxInput(
                txid="ab" * 32,
                vout=1,
                prev_script=p2pkh_script,
                redeem_items=[DataItem(pubkey)],
                value=100_000,
            )
        ],
        outputs=[
            TxOutput(60_000, bytes.fromhex("76a914" + "22" * 20 + "88ac")),
            TxOutput(39_000, p2pkh_script),
        ],
    )
