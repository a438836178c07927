"""
Error kinds raised by the transaction core.

Every exception carries an ``ErrorKind`` and a ``context`` dict with the
values that caused it, so callers can branch on the kind and tests can
assert on the exact failure.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    ADDRESS_DECODE = "address_decode"
    SCRIPT = "script"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    SERIALIZATION_LIMIT = "serialization_limit"
    SIGNING = "signing"
    COLLABORATOR_UNAVAILABLE = "collaborator_unavailable"


class IonError(Exception):
    """Base class for all core errors."""

    kind: ErrorKind

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context


class AddressDecodeError(IonError):
    kind = ErrorKind.ADDRESS_DECODE


class ChecksumError(AddressDecodeError):
    pass


class UnsupportedAddressTypeError(AddressDecodeError):
    pass


class InvalidBase58CharError(AddressDecodeError):
    pass


class ScriptError(IonError):
    kind = ErrorKind.SCRIPT


class OddLengthError(ScriptError):
    pass


class InvalidDigitError(ScriptError):
    pass


class InsufficientFundsError(IonError):
    kind = ErrorKind.INSUFFICIENT_FUNDS


class SerializationLimitError(IonError):
    kind = ErrorKind.SERIALIZATION_LIMIT


class SigningError(IonError):
    kind = ErrorKind.SIGNING


class CollaboratorUnavailableError(IonError):
    """Raised (or propagated) when the blockchain data source cannot answer."""

    kind = ErrorKind.COLLABORATOR_UNAVAILABLE
