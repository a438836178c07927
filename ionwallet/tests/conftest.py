"""
Test configuration for ionwallet tests.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

import pytest
from coincurve import PrivateKey

from ioncore.address import pubkey_to_p2pkh_address
from ioncore.encoding import hash160
from ionwallet.backends.snapshot import SnapshotSource


@pytest.fixture
def private_key() -> PrivateKey:
    """Wallet key (not for production use!)."""
    return PrivateKey(bytes.fromhex("11" * 32))


@pytest.fixture
def pubkey_hex(private_key: PrivateKey) -> str:
    return private_key.public_key.format(compressed=True).hex()


@pytest.fixture
def wallet_address(pubkey_hex: str) -> str:
    return pubkey_to_p2pkh_address(bytes.fromhex(pubkey_hex), "testnet")


@pytest.fixture
def wallet_script(pubkey_hex: str) -> bytes:
    return bytes.fromhex("76a914") + hash160(bytes.fromhex(pubkey_hex)) + bytes.fromhex("88ac")


@pytest.fixture
def heir_addresses() -> list[str]:
    keys = [PrivateKey(bytes([0x40 + i]) * 32) for i in range(2)]
    return [pubkey_to_p2pkh_address(k.public_key.format(), "testnet") for k in keys]


@pytest.fixture
def destination_address() -> str:
    key = PrivateKey(b"\x55" * 32)
    return pubkey_to_p2pkh_address(key.public_key.format(), "testnet")


@pytest.fixture
def make_snapshot(wallet_address: str, wallet_script: bytes) -> Callable[..., dict[str, Any]]:
    """Build snapshot data with one wallet UTXO per value.

    UTXO i spends output 0 of txid ``f"{i + 1:02x}" * 32``.
    """

    def _make(values: list[int | str]) -> dict[str, Any]:
        utxos = []
        transactions = {}
        for i, value in enumerate(values):
            txid = f"{i + 1:02x}" * 32
            utxos.append({"txid": txid, "vout": 0, "value": value, "confirmations": 6})
            transactions[txid] = {
                "outputs": [{"n": 0, "value": value, "hex": wallet_script.hex()}]
            }
        return {"utxos": {wallet_address: utxos}, "transactions": transactions}

    return _make


@pytest.fixture
def source(make_snapshot) -> SnapshotSource:
    """Wallet holding 40000 + 35000 + 25000 sats."""
    return SnapshotSource(make_snapshot([40_000, 35_000, 25_000]))


@pytest.fixture
def single_utxo_source(make_snapshot) -> SnapshotSource:
    return SnapshotSource(make_snapshot([100_000]))


@pytest.fixture
def fixed_random() -> Callable[[int], bytes]:
    """Deterministic stand-in for secrets.token_bytes."""

    def _random(n: int) -> bytes:
        return b"\x33" * n

    return _random


@pytest.fixture
def sequence_random() -> Callable[[list[bytes]], Callable[[int], bytes]]:
    """Random source replaying a fixed list of outputs."""

    def _make(outputs: list[bytes]) -> Callable[[int], bytes]:
        values: Iterator[bytes] = iter(outputs)

        def _random(n: int) -> bytes:
            return next(values)

        return _random

    return _make
