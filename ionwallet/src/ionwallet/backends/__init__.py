"""
Blockchain data sources.

Available sources:
- SnapshotSource: UTXOs and previous transactions from a JSON snapshot
"""

from ionwallet.backends.base import BlockchainSource
from ionwallet.backends.snapshot import SnapshotSource

__all__ = [
    "BlockchainSource",
    "SnapshotSource",
]
