"""
Blockchain source backed by a JSON snapshot.

Snapshot layout:

    {
      "utxos": {"<address>": [{"txid": ..., "vout": 0, "value": 1000}]},
      "transactions": {"<txid>": {"outputs": [{"n": 0, "value": 1000, "hex": "76a9..."}]}}
    }

Values may be integers or decimal strings, as block explorers send them.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import ValidationError

from ioncore.errors import CollaboratorUnavailableError
from ioncore.models import PreviousTransaction, UnspentOutput
from ionwallet.backends.base import BlockchainSource


class SnapshotSource(BlockchainSource):
    def __init__(self, data: dict[str, Any]):
        self.utxos: dict[str, list[dict[str, Any]]] = data.get("utxos", {})
        # UnspentOutput lowercases txids, so keys must match
        self.transactions: dict[str, dict[str, Any]] = {
            txid.lower(): entry for txid, entry in data.get("transactions", {}).items()
        }

    @classmethod
    def from_file(cls, path: Path | str) -> SnapshotSource:
        path = Path(path)
        try:
            data = json.loads(path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise CollaboratorUnavailableError(
                f"Cannot read snapshot {path}: {e}", path=str(path)
            ) from e
        if not isinstance(data, dict):
            raise CollaboratorUnavailableError(
                f"Snapshot {path} must contain a JSON object", path=str(path)
            )
        logger.debug(f"Loaded snapshot {path}")
        return cls(data)

    def fetch_unspent_outputs(self, address: str) -> list[UnspentOutput]:
        try:
            utxos = [UnspentOutput.model_validate(entry) for entry in self.utxos.get(address, [])]
        except ValidationError as e:
            raise CollaboratorUnavailableError(
                f"Malformed UTXO data for {address}: {e}", address=address
            ) from e
        logger.debug(f"Snapshot has {len(utxos)} UTXO(s) for {address}")
        return utxos

    def fetch_previous_transaction(self, txid: str) -> PreviousTransaction:
        entry = self.transactions.get(txid.lower())
        if entry is None:
            raise CollaboratorUnavailableError(f"Transaction {txid} not in snapshot", txid=txid)
        try:
            return PreviousTransaction.model_validate({"txid": txid, **entry})
        except ValidationError as e:
            raise CollaboratorUnavailableError(
                f"Malformed transaction data for {txid}: {e}", txid=txid
            ) from e
