"""Tests for the Fee Policy — floor split arithmetic and guarded updates."""

from __future__ import annotations

import pytest

from vaultmarket.core.access import SingleAdministrator
from vaultmarket.core.errors import InvalidFeePercentage, InvalidPrice, NotAdministrator
from vaultmarket.core.fee_policy import FeePolicy, split


class TestSplit:
    def test_two_percent_of_hundred(self):
        result = split(100, 2)
        assert result.fee == 2
        assert result.proceeds == 98

    def test_fee_is_floored(self):
        # 3% of 99 is 2.97; the fee rounds down, the seller keeps the rest
        result = split(99, 3)
        assert result.fee == 2
        assert result.proceeds == 97

    def test_zero_percent(self):
        result = split(1, 0)
        assert result.fee == 0
        assert result.proceeds == 1

    def test_ninety_nine_percent_of_one_unit(self):
        result = split(1, 99)
        assert result.fee == 0
        assert result.proceeds == 1

    @pytest.mark.parametrize("price", [1, 7, 99, 100, 101, 12_345, 10**18 + 3])
    @pytest.mark.parametrize("pct", [0, 1, 2, 33, 50, 99])
    def test_parts_sum_to_price(self, price: int, pct: int):
        result = split(price, pct)
        assert result.fee + result.proceeds == price
        assert 0 <= result.fee <= price
        assert result.total == price

    @pytest.mark.parametrize("price", [0, -1])
    def test_non_positive_price_rejected(self, price: int):
        with pytest.raises(InvalidPrice):
            split(price, 2)

    @pytest.mark.parametrize("pct", [100, 101, -1])
    def test_out_of_range_percentage_rejected(self, pct: int):
        with pytest.raises(InvalidFeePercentage):
            split(100, pct)


class TestFeePolicy:
    @pytest.fixture
    def policy(self) -> FeePolicy:
        return FeePolicy(2, SingleAdministrator("admin"))

    def test_split_uses_current_percentage(self, policy: FeePolicy):
        assert policy.split(100).fee == 2
        policy.set_fee_percentage("admin", 10)
        assert policy.split(100).fee == 10

    def test_set_returns_previous_value(self, policy: FeePolicy):
        assert policy.set_fee_percentage("admin", 7) == 2
        assert policy.fee_percentage == 7

    def test_zero_is_allowed(self, policy: FeePolicy):
        policy.set_fee_percentage("admin", 0)
        assert policy.fee_percentage == 0

    def test_hundred_rejected_and_unchanged(self, policy: FeePolicy):
        with pytest.raises(InvalidFeePercentage):
            policy.set_fee_percentage("admin", 100)
        assert policy.fee_percentage == 2

    def test_non_admin_rejected(self, policy: FeePolicy):
        with pytest.raises(NotAdministrator):
            policy.set_fee_percentage("mallory", 5)
        assert policy.fee_percentage == 2

    def test_invalid_initial_percentage(self):
        with pytest.raises(InvalidFeePercentage):
            FeePolicy(100, SingleAdministrator("admin"))

    def test_snapshot_restore(self, policy: FeePolicy):
        state = policy.snapshot()
        policy.set_fee_percentage("admin", 50)
        policy.restore(state)
        assert policy.fee_percentage == 2
