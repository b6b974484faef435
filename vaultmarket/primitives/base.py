"""Interfaces of the external asset and payment primitives.

The marketplace never moves assets or value itself.  It drives an asset
ledger (token contract) and a payment ledger (host value transfer) through
these Protocols; any rejection is reported by raising the matching error.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable


class AssetTransferError(RuntimeError):
    """Raised by an asset ledger that refuses a transfer."""


class PaymentTransferError(RuntimeError):
    """Raised by a payment ledger that refuses a value transfer."""


@runtime_checkable
class AssetReceiver(Protocol):
    """Capability of accepting an asset pushed by the asset ledger.

    Returning ``False`` refuses the push, which aborts the transfer.
    """

    def on_asset_received(
        self, operator: str, sender: str, collection: str, asset_id: int
    ) -> bool:
        ...


@runtime_checkable
class AssetLedger(Protocol):
    """Asset ownership and transfer primitive."""

    def owner_of(self, collection: str, asset_id: int) -> str | None:
        """Return the current holder, or ``None`` if the asset does not exist."""
        ...

    def balance_of(self, collection: str, account: str) -> int:
        """Return how many assets of *collection* *account* holds."""
        ...

    def safe_transfer_from(
        self,
        operator: str,
        sender: str,
        recipient: str,
        collection: str,
        asset_id: int,
    ) -> None:
        """Move an asset from *sender* to *recipient* on behalf of *operator*.

        Only succeeds if *operator* is the owner or is approved by it.
        Notifies *recipient* when it registered an ``AssetReceiver``.
        """
        ...

    def register_receiver(self, account: str, receiver: AssetReceiver) -> None:
        ...


# Called after value lands: (sender, amount).  Raising rejects the payment.
PaymentHook = Callable[[str, int], None]


@runtime_checkable
class PaymentLedger(Protocol):
    """Push-style value transfer primitive."""

    def balance_of(self, account: str) -> int:
        ...

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        """Move *amount* to *recipient*; raises if the recipient rejects."""
        ...
