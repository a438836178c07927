"""
Tests for payment building: UTXO selection, change and signing.
"""

from __future__ import annotations

import pytest
from coincurve import PublicKey

from ioncore.address import decode_address, script_to_p2wsh_address
from ioncore.constants import MAX_SEQUENCE, SIGHASH_ALL
from ioncore.errors import (
    CollaboratorUnavailableError,
    ErrorKind,
    InsufficientFundsError,
    SerializationLimitError,
    UnsupportedAddressTypeError,
)
from ioncore.sighash import legacy_sighash
from ioncore.transaction import deserialize_transaction
from ionwallet.backends.snapshot import SnapshotSource
from ionwallet.wallet.transfer import (
    create_signed_transaction_hex,
    create_transaction,
    source_script,
)

SEGWIT_DESTINATION = script_to_p2wsh_address(b"\x51", "testnet")


def _send(source, to_address, to_value, fee, wallet_address, pubkey_hex, private_key):
    return create_transaction(
        source, to_address, to_value, fee, wallet_address, pubkey_hex, private_key
    )


class TestSourceScript:
    def test_p2pkh(self, wallet_address, wallet_script):
        assert source_script(wallet_address) == wallet_script

    def test_segwit_rejected(self):
        with pytest.raises(UnsupportedAddressTypeError):
            source_script(SEGWIT_DESTINATION)


class TestCreateTransaction:
    def test_payment_with_change(
        self,
        single_utxo_source,
        destination_address,
        wallet_address,
        wallet_script,
        pubkey_hex,
        private_key,
    ):
        """Surplus over amount plus fee returns to the sender."""
        signed = _send(
            single_utxo_source,
            destination_address,
            60_000,
            1_000,
            wallet_address,
            pubkey_hex,
            private_key,
        )

        assert len(signed.inputs) == 1
        assert signed.inputs[0].txid == "01" * 32
        assert signed.inputs[0].sequence == MAX_SEQUENCE
        assert [out.value for out in signed.outputs] == [60_000, 39_000]
        assert signed.outputs[0].script == decode_address(destination_address).script
        assert signed.outputs[1].script == wallet_script
        assert signed.raw.input_total - signed.raw.output_total == 1_000

    def test_exact_amount_has_no_change(
        self, single_utxo_source, destination_address, wallet_address, pubkey_hex, private_key
    ):
        signed = _send(
            single_utxo_source,
            destination_address,
            99_000,
            1_000,
            wallet_address,
            pubkey_hex,
            private_key,
        )
        assert [out.value for out in signed.outputs] == [99_000]

    def test_stops_selecting_once_covered(
        self, source, destination_address, wallet_address, pubkey_hex, private_key
    ):
        """UTXOs are taken in order only until the total exceeds the target."""
        signed = _send(
            source, destination_address, 60_000, 1_000, wallet_address, pubkey_hex, private_key
        )

        assert [inp.txid for inp in signed.inputs] == ["01" * 32, "02" * 32]
        assert [out.value for out in signed.outputs] == [60_000, 14_000]

    def test_insufficient_funds(
        self, single_utxo_source, destination_address, wallet_address, pubkey_hex, private_key
    ):
        with pytest.raises(InsufficientFundsError) as exc_info:
            _send(
                single_utxo_source,
                destination_address,
                99_500,
                1_000,
                wallet_address,
                pubkey_hex,
                private_key,
            )
        assert exc_info.value.kind == ErrorKind.INSUFFICIENT_FUNDS
        assert exc_info.value.message == "Not enough coins"
        assert exc_info.value.context == {"available": 100_000, "required": 100_500}

    def test_negative_amount(
        self, single_utxo_source, destination_address, wallet_address, pubkey_hex, private_key
    ):
        with pytest.raises(SerializationLimitError):
            _send(
                single_utxo_source,
                destination_address,
                -1,
                1_000,
                wallet_address,
                pubkey_hex,
                private_key,
            )

    def test_signatures_verify(
        self, source, destination_address, wallet_address, pubkey_hex, private_key
    ):
        """Every input signature verifies against its legacy sighash."""
        signed = _send(
            source, destination_address, 90_000, 1_000, wallet_address, pubkey_hex, private_key
        )
        pubkey = PublicKey(bytes.fromhex(pubkey_hex))

        assert len(signed.inputs) == 3
        for i, inp in enumerate(signed.inputs):
            script_sig = inp.script_sig
            assert script_sig.signature.sighash_type == SIGHASH_ALL
            assert script_sig.redeem == bytes.fromhex(pubkey_hex)
            digest = legacy_sighash(signed.raw, i)
            assert pubkey.verify(script_sig.signature.der, digest, hasher=None)

    def test_wire_format(
        self, single_utxo_source, destination_address, wallet_address, pubkey_hex, private_key
    ):
        signed = _send(
            single_utxo_source,
            destination_address,
            60_000,
            1_000,
            wallet_address,
            pubkey_hex,
            private_key,
        )

        parsed = deserialize_transaction(signed.serialize())

        assert parsed.version == 2
        assert parsed.locktime == 0
        assert not parsed.segwit
        assert parsed.inputs[0].script_sig == signed.inputs[0].script_sig.script()
        assert parsed.inputs[0].script_sig.endswith(bytes.fromhex("21" + pubkey_hex))

    def test_segwit_destination(
        self, single_utxo_source, wallet_address, pubkey_hex, private_key
    ):
        """Paying to a bech32 address needs no segwit framing."""
        signed = _send(
            single_utxo_source,
            SEGWIT_DESTINATION,
            60_000,
            1_000,
            wallet_address,
            pubkey_hex,
            private_key,
        )

        assert signed.segwit
        assert signed.outputs[0].script == decode_address(SEGWIT_DESTINATION).script
        # No input carries a witness, so the bytes stay in legacy framing
        assert not signed.uses_segwit_framing
        assert not deserialize_transaction(signed.serialize()).segwit

    def test_segwit_source_rejected(
        self, single_utxo_source, destination_address, pubkey_hex, private_key
    ):
        with pytest.raises(UnsupportedAddressTypeError):
            _send(
                single_utxo_source,
                destination_address,
                1_000,
                100,
                SEGWIT_DESTINATION,
                pubkey_hex,
                private_key,
            )

    def test_missing_previous_transaction(
        self, make_snapshot, destination_address, wallet_address, pubkey_hex, private_key
    ):
        """A UTXO whose funding tx is unknown cannot be spent."""
        data = make_snapshot([100_000])
        data["transactions"] = {}
        with pytest.raises(CollaboratorUnavailableError):
            _send(
                SnapshotSource(data),
                destination_address,
                1_000,
                100,
                wallet_address,
                pubkey_hex,
                private_key,
            )


class TestCreateSignedTransactionHex:
    def test_success(
        self, single_utxo_source, destination_address, wallet_address, pubkey_hex, private_key
    ):
        result = create_signed_transaction_hex(
            single_utxo_source,
            destination_address,
            60_000,
            1_000,
            wallet_address,
            pubkey_hex,
            private_key.secret.hex(),
        )
        expected = _send(
            single_utxo_source,
            destination_address,
            60_000,
            1_000,
            wallet_address,
            pubkey_hex,
            private_key,
        )

        assert result.ok
        assert result.tx_hex == expected.to_hex()
        assert result.txid == expected.txid

    def test_not_enough_coins(
        self, single_utxo_source, destination_address, wallet_address, pubkey_hex, private_key
    ):
        result = create_signed_transaction_hex(
            single_utxo_source,
            destination_address,
            99_500,
            1_000,
            wallet_address,
            pubkey_hex,
            private_key,
        )

        assert not result.ok
        assert result.error == "Not enough coins"
        assert result.tx_hex is None
