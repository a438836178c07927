"""
Tests for wallet data models.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from ionwallet.wallet.models import (
    Inheritor,
    inheritor_addresses,
    inheritor_amounts,
    scale_inheritor_amounts,
    shrink_factor,
)


@pytest.fixture
def inheritors() -> list[Inheritor]:
    return [
        Inheritor(name="alice", address="addr-a", value=40_000),
        Inheritor(name="bob", address="addr-b", id="b-1", value=20_001),
    ]


class TestInheritor:
    def test_value_coerced_from_string(self):
        assert Inheritor(name="carol", address="addr-c", value="1500").value == 1500

    @pytest.mark.parametrize(
        "fields",
        [
            {"name": "", "address": "addr", "value": 1},
            {"name": "x", "address": "", "value": 1},
            {"name": "x", "address": "addr", "value": -1},
            {"name": "x", "address": "addr", "value": 2**64},
        ],
    )
    def test_invalid(self, fields):
        with pytest.raises(ValidationError):
            Inheritor(**fields)

    def test_projections(self, inheritors):
        assert inheritor_addresses(inheritors) == ["addr-a", "addr-b"]
        assert inheritor_amounts(inheritors) == [40_000, 20_001]


class TestShrinkFactor:
    def test_partial_spend(self):
        assert shrink_factor(100_000, 25_000) == 0.75

    def test_spend_everything(self):
        assert shrink_factor(100_000, 100_000) == 0.0

    def test_overspend_clamped(self):
        """Spending more than the balance gives a zero factor."""
        assert shrink_factor(100_000, 150_000) == 0.0

    def test_empty_balance(self):
        assert shrink_factor(0, 10) == 0.0


class TestScaleInheritorAmounts:
    def test_rounds_down(self, inheritors):
        scaled = scale_inheritor_amounts(inheritors, 0.5)
        assert inheritor_amounts(scaled) == [20_000, 10_000]

    def test_keeps_identity(self, inheritors):
        scaled = scale_inheritor_amounts(inheritors, 0.5)
        assert scaled[1].name == "bob"
        assert scaled[1].id == "b-1"
        assert scaled[1].address == "addr-b"

    def test_does_not_mutate(self, inheritors):
        """Scaling returns new heirs and leaves the originals alone."""
        scale_inheritor_amounts(inheritors, 0.0)
        assert inheritor_amounts(inheritors) == [40_000, 20_001]
