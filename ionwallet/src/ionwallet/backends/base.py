"""
Base blockchain source interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ioncore.models import PreviousTransaction, UnspentOutput


class BlockchainSource(ABC):
    """
    Abstract source of chain data for the transaction builders.

    Implementations raise CollaboratorUnavailableError when they cannot
    answer; the builders propagate it unchanged.
    """

    @abstractmethod
    def fetch_unspent_outputs(self, address: str) -> list[UnspentOutput]:
        """Get the UTXOs currently paying ``address``"""

    @abstractmethod
    def fetch_previous_transaction(self, txid: str) -> PreviousTransaction:
        """Get the outputs of transaction ``txid``"""

    def get_balance(self, address: str) -> int:
        return sum(utxo.value for utxo in self.fetch_unspent_outputs(address))
