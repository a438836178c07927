"""
ioncore - Bitcoin transaction core for the ION wallet

Provides encoding, address decoding, script assembly, transaction
serialization, sighash computation and signing.
"""

__version__ = "0.3.0"

from ioncore.address import (
    AddressType,
    DecodedAddress,
    decode_address,
    pubkey_to_p2pkh_address,
    script_to_p2wsh_address,
    script_to_p2wsh_script,
)
from ioncore.errors import (
    AddressDecodeError,
    ChecksumError,
    CollaboratorUnavailableError,
    ErrorKind,
    InsufficientFundsError,
    InvalidBase58CharError,
    InvalidDigitError,
    IonError,
    OddLengthError,
    ScriptError,
    SerializationLimitError,
    SigningError,
    UnsupportedAddressTypeError,
)
from ioncore.models import PreviousOutput, PreviousTransaction, UnspentOutput
from ioncore.script import DataItem, OpcodeItem, StackItem, assemble, parse_stack_items
from ioncore.signing import sign_transaction
from ioncore.transaction import (
    RawTransaction,
    ScriptSig,
    Signature,
    SignedTransaction,
    TxInput,
    TxOutput,
    Witness,
    deserialize_transaction,
    serialize_legacy,
    serialize_segwit,
)

__all__ = [
    "AddressDecodeError",
    "AddressType",
    "ChecksumError",
    "CollaboratorUnavailableError",
    "DataItem",
    "DecodedAddress",
    "ErrorKind",
    "InsufficientFundsError",
    "InvalidBase58CharError",
    "InvalidDigitError",
    "IonError",
    "OddLengthError",
    "OpcodeItem",
    "PreviousOutput",
    "PreviousTransaction",
    "RawTransaction",
    "ScriptError",
    "ScriptSig",
    "SerializationLimitError",
    "Signature",
    "SignedTransaction",
    "SigningError",
    "StackItem",
    "TxInput",
    "TxOutput",
    "UnspentOutput",
    "UnsupportedAddressTypeError",
    "Witness",
    "assemble",
    "decode_address",
    "deserialize_transaction",
    "parse_stack_items",
    "pubkey_to_p2pkh_address",
    "script_to_p2wsh_address",
    "script_to_p2wsh_script",
    "serialize_legacy",
    "serialize_segwit",
    "sign_transaction",
]
