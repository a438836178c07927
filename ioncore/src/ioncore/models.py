"""
Chain data models supplied by the blockchain collaborator.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from ioncore.constants import MAX_UINT32, MAX_UINT64
from ioncore.errors import CollaboratorUnavailableError


class UnspentOutput(BaseModel):
    """A spendable output as reported by a block explorer.

    Explorers send amounts as either integers or decimal strings; both are
    coerced to satoshis.
    """

    txid: str = Field(..., pattern=r"^[0-9a-fA-F]{64}$")
    vout: int = Field(..., ge=0, le=MAX_UINT32)
    value: int = Field(..., ge=0, le=MAX_UINT64)
    confirmations: int = Field(default=0, ge=0)
    height: int | None = None

    @field_validator("txid")
    @classmethod
    def normalize_txid(cls, v: str) -> str:
        return v.lower()

    @property
    def outpoint(self) -> tuple[str, int]:
        return self.txid, self.vout

    model_config = {"frozen": True}


class PreviousOutput(BaseModel):
    n: int = Field(..., ge=0, le=MAX_UINT32)
    value: int = Field(..., ge=0, le=MAX_UINT64)
    hex: str = Field(..., pattern=r"^([0-9a-fA-F]{2})*$")

    @property
    def script(self) -> bytes:
        return bytes.fromhex(self.hex)


class PreviousTransaction(BaseModel):
    """The part of a previous transaction needed to spend one of its outputs."""

    txid: str | None = None
    outputs: list[PreviousOutput] = Field(default_factory=list)

    def output(self, vout: int) -> PreviousOutput:
        for out in self.outputs:
            if out.n == vout:
                return out
        if vout < len(self.outputs):
            return self.outputs[vout]
        raise CollaboratorUnavailableError(
            f"Previous transaction has no output {vout}", txid=self.txid, vout=vout
        )
