"""
Wallet service keeping a will in step with the wallet's spends.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass

from coincurve import PrivateKey
from loguru import logger

from ioncore.encoding import hex_to_bytes
from ioncore.errors import InsufficientFundsError, SigningError
from ioncore.signing import load_private_key
from ioncore.transaction import SignedTransaction
from ionwallet.backends.base import BlockchainSource
from ionwallet.config import WalletSettings
from ionwallet.wallet.models import (
    Inheritor,
    inheritor_addresses,
    inheritor_amounts,
    scale_inheritor_amounts,
    shrink_factor,
)
from ionwallet.wallet.timelock import RandomSource
from ionwallet.wallet.transfer import create_transaction
from ionwallet.wallet.will import WillParts, create_will_parts, predict_will_parts


@dataclass
class SendOutcome:
    transaction: SignedTransaction
    will: WillParts | None = None


class WillWallet:
    """
    Single-key wallet with an optional will.

    After every spend the heirs' shares shrink in proportion to the coins
    spent and the will is rebuilt on top of the new transaction, so the
    will stays spendable once the payment confirms.
    """

    def __init__(
        self,
        source: BlockchainSource,
        address: str,
        pubkey_hex: str,
        private_key: PrivateKey | bytes | str,
        settings: WalletSettings | None = None,
        random_source: RandomSource = secrets.token_bytes,
    ):
        self.source = source
        self.address = address
        self.pubkey_hex = pubkey_hex
        self.settings = settings or WalletSettings()
        self.random_source = random_source

        self.private_key = load_private_key(private_key)
        pubkey = hex_to_bytes(pubkey_hex)
        public_key = self.private_key.public_key
        if pubkey not in (public_key.format(compressed=True), public_key.format(compressed=False)):
            raise SigningError("Public key does not match the private key", pubkey=pubkey_hex)

        self.inheritors: list[Inheritor] = []
        self.locktime_blocks = self.settings.default_locktime_blocks
        self.will: WillParts | None = None

        logger.info(f"Initialized wallet for {address} on {self.settings.network}")

    def balance(self) -> int:
        return self.source.get_balance(self.address)

    def set_will(
        self, inheritors: list[Inheritor], locktime_blocks: int | None = None
    ) -> WillParts:
        """Build a will over the wallet's current coins."""
        if locktime_blocks is not None:
            self.locktime_blocks = locktime_blocks

        will = create_will_parts(
            self.source,
            inheritor_addresses(inheritors),
            inheritor_amounts(inheritors),
            self.locktime_blocks,
            self.address,
            self.pubkey_hex,
            self.private_key,
            initiation_fee=self.settings.will_initiation_fee,
            revocation_fee=self.settings.will_revocation_fee,
            tx_version=self.settings.tx_version,
            random_source=self.random_source,
        )
        self.inheritors = list(inheritors)
        self.will = will
        logger.info(
            f"Will set for {len(inheritors)} heir(s), {self.locktime_blocks}-block locktime"
        )
        return will

    def send(self, to_address: str, value: int, fee: int | None = None) -> SendOutcome:
        """Pay ``value`` to ``to_address`` and rebuild the will, if any.

        When what is left cannot fund a new will, the will is dropped and
        only the payment is returned.
        """
        if fee is None:
            fee = self.settings.default_fee

        balance = self.balance()
        transaction = create_transaction(
            self.source,
            to_address,
            value,
            fee,
            self.address,
            self.pubkey_hex,
            self.private_key,
            tx_version=self.settings.tx_version,
        )

        if not self.inheritors:
            return SendOutcome(transaction)

        remaining = balance - value - fee
        if remaining <= self.settings.will_initiation_fee:
            logger.info(f"Only {remaining} sats left after spend, will dropped")
            self._drop_will()
            return SendOutcome(transaction)

        factor = shrink_factor(balance, value + fee)
        inheritors = scale_inheritor_amounts(self.inheritors, factor)
        try:
            will = predict_will_parts(
                transaction,
                self.source,
                inheritor_addresses(inheritors),
                inheritor_amounts(inheritors),
                self.locktime_blocks,
                self.address,
                self.pubkey_hex,
                self.private_key,
                initiation_fee=self.settings.will_initiation_fee,
                revocation_fee=self.settings.will_revocation_fee,
                tx_version=self.settings.tx_version,
                random_source=self.random_source,
            )
        except InsufficientFundsError as e:
            # The payment is valid on its own, only the will cannot follow it
            logger.warning(f"Will not rebuilt after spend: {e.message}")
            self._drop_will()
            return SendOutcome(transaction)

        self.inheritors = inheritors
        self.will = will
        logger.info(f"Will rebuilt after spend, heir shares scaled by {factor:.4f}")
        return SendOutcome(transaction, will)

    def _drop_will(self) -> None:
        self.inheritors = []
        self.will = None
