"""
Bitcoin protocol constants used by the transaction core.
"""

from __future__ import annotations

# Transaction framing
TX_VERSION = 2
DEFAULT_LOCKTIME = 0
# Final sequence: no RBF signalling, no relative timelock
MAX_SEQUENCE = 0xFFFFFFFF

SEGWIT_MARKER = 0x00
SEGWIT_FLAG = 0x01

# Signature hash types
SIGHASH_ALL = 0x01
SIGHASH_SINGLE = 0x03
SUPPORTED_SIGHASH_TYPES = frozenset({SIGHASH_ALL, SIGHASH_SINGLE})

# Base58 version bytes
P2PKH_MAINNET_VERSION = 0x00
P2PKH_TESTNET_VERSION = 0x6F
P2SH_MAINNET_VERSION = 0x05

# Fixed-width field limits
MAX_UINT32 = 0xFFFFFFFF
MAX_UINT64 = 0xFFFFFFFFFFFFFFFF

# BIP68 block-based relative locktime occupies the low 16 bits of nSequence
MAX_RELATIVE_LOCKTIME_BLOCKS = 0xFFFF

# Will defaults (satoshis)
WILL_INITIATION_FEE = 500
WILL_REVOCATION_FEE = 250

BECH32_HRP = {"mainnet": "bc", "testnet": "tb", "signet": "tb", "regtest": "bcrt"}
