"""Reference in-memory payment ledger with recipient hooks.

A hook registered for an account runs after value is credited to it, the
way contract code runs on receipt of a push payment.  The hook may call
back into the marketplace, or raise to reject the payment, in which case
the transfer is reverted and ``PaymentTransferError`` is raised.
"""

from __future__ import annotations

import logging

from vaultmarket.primitives.base import PaymentHook, PaymentTransferError

logger = logging.getLogger(__name__)


class InMemoryPaymentLedger:
    """Integer balances in the smallest currency unit."""

    def __init__(self) -> None:
        self._balances: dict[str, int] = {}
        self._hooks: dict[str, PaymentHook] = {}

    def deposit(self, account: str, amount: int) -> None:
        if amount < 0:
            raise PaymentTransferError(f"Cannot deposit a negative amount ({amount}).")
        self._balances[account] = self._balances.get(account, 0) + amount

    def register_recipient(self, account: str, hook: PaymentHook) -> None:
        self._hooks[account] = hook

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise PaymentTransferError(f"Cannot transfer a negative amount ({amount}).")
        if self.balance_of(sender) < amount:
            raise PaymentTransferError(
                f"{sender!r} holds {self.balance_of(sender)}, needs {amount}."
            )

        before = dict(self._balances)
        self._balances[sender] = self.balance_of(sender) - amount
        self._balances[recipient] = self.balance_of(recipient) + amount

        hook = self._hooks.get(recipient)
        if hook is not None:
            try:
                hook(sender, amount)
            except Exception as exc:
                self._balances = before
                raise PaymentTransferError(
                    f"{recipient!r} rejected payment of {amount}: {exc}"
                ) from exc
        logger.debug("Paid %d %s -> %s.", amount, sender, recipient)

    # -- Unit of work ------------------------------------------------------

    def snapshot(self) -> dict[str, int]:
        return dict(self._balances)

    def restore(self, state: dict[str, int]) -> None:
        self._balances = dict(state)
