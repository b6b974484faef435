"""Fee policy — one bounded percentage and the price split it implies.

Integer floor arithmetic only: the fee is rounded down and the seller
receives the remainder, so ``fee + proceeds == price`` always holds.
"""

from __future__ import annotations

import logging

from vaultmarket.core.access import AdministratorCapability, require_administrator
from vaultmarket.core.errors import InvalidFeePercentage, InvalidPrice
from vaultmarket.models.settlement import FeeSplit

logger = logging.getLogger(__name__)

# Exclusive upper bound; a 100% fee would leave the seller nothing.
FEE_PERCENTAGE_LIMIT = 100


def validate_fee_percentage(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidFeePercentage(f"Fee percentage must be an integer, got {value!r}.")
    if not 0 <= value < FEE_PERCENTAGE_LIMIT:
        raise InvalidFeePercentage(
            f"Fee percentage must be in [0, {FEE_PERCENTAGE_LIMIT}), got {value}."
        )
    return value


def split(price: int, fee_percentage: int) -> FeeSplit:
    """Split *price* into ``(fee, proceeds)``.

    Examples
    --------
    >>> split(100, 2)
    FeeSplit(fee=2, proceeds=98)
    >>> split(99, 3)
    FeeSplit(fee=2, proceeds=97)
    """
    if isinstance(price, bool) or not isinstance(price, int) or price <= 0:
        raise InvalidPrice(f"Price must be a positive integer, got {price!r}.")
    validate_fee_percentage(fee_percentage)
    fee = price * fee_percentage // 100
    return FeeSplit(fee=fee, proceeds=price - fee)


class FeePolicy:
    """Owns the current fee percentage.

    The percentage is read at settlement time, so a change applies to every
    listing that has not sold yet.

    Parameters
    ----------
    fee_percentage:
        Initial percentage, in ``[0, 100)``.
    access:
        Capability deciding who may change the percentage.
    """

    def __init__(self, fee_percentage: int, access: AdministratorCapability) -> None:
        self._fee_percentage = validate_fee_percentage(fee_percentage)
        self._access = access

    @property
    def fee_percentage(self) -> int:
        return self._fee_percentage

    def split(self, price: int) -> FeeSplit:
        """Split *price* with the current percentage."""
        return split(price, self._fee_percentage)

    def set_fee_percentage(self, caller: str, new_value: int) -> int:
        """Replace the percentage; returns the previous value."""
        require_administrator(self._access, caller)
        validate_fee_percentage(new_value)
        old, self._fee_percentage = self._fee_percentage, new_value
        logger.debug("Fee percentage %d -> %d.", old, new_value)
        return old

    # -- Unit of work ------------------------------------------------------

    def snapshot(self) -> int:
        return self._fee_percentage

    def restore(self, state: int) -> None:
        self._fee_percentage = state
