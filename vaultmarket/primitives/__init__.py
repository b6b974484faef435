"""External primitives — asset and payment ledgers.

The Protocols describe what the marketplace consumes; the in-memory
ledgers are reference implementations for tests and the demo.
"""

from vaultmarket.primitives.assets import InMemoryAssetLedger
from vaultmarket.primitives.base import (
    AssetLedger,
    AssetReceiver,
    AssetTransferError,
    PaymentHook,
    PaymentLedger,
    PaymentTransferError,
)
from vaultmarket.primitives.payments import InMemoryPaymentLedger

__all__ = [
    "AssetLedger",
    "AssetReceiver",
    "AssetTransferError",
    "InMemoryAssetLedger",
    "InMemoryPaymentLedger",
    "PaymentHook",
    "PaymentLedger",
    "PaymentTransferError",
]
