"""
Wallet data models.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from ioncore.constants import MAX_UINT64


class Inheritor(BaseModel):
    """An heir and the satoshis they receive from the will."""

    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    id: str = ""
    value: int = Field(..., ge=0, le=MAX_UINT64)


def inheritor_addresses(inheritors: list[Inheritor]) -> list[str]:
    return [inheritor.address for inheritor in inheritors]


def inheritor_amounts(inheritors: list[Inheritor]) -> list[int]:
    return [inheritor.value for inheritor in inheritors]


def shrink_factor(balance: int, spent: int) -> float:
    """Fraction of the balance left after spending ``spent`` satoshis."""
    if balance <= 0:
        return 0.0
    return max(0.0, 1.0 - spent / balance)


def scale_inheritor_amounts(inheritors: list[Inheritor], factor: float) -> list[Inheritor]:
    """Shrink every heir's share by ``factor``, rounding down."""
    return [
        inheritor.model_copy(update={"value": int(inheritor.value * factor)})
        for inheritor in inheritors
    ]
