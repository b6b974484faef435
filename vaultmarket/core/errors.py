"""Marketplace failure kinds.

Every failure is synchronous and aborts the action that raised it.  The
Settlement Engine rolls back all effects before the exception reaches the
caller, so catching one of these means nothing moved.
"""

from __future__ import annotations


class MarketError(RuntimeError):
    """Base class for every action-aborting marketplace failure.

    ``code`` is a stable, machine-readable identifier for the failure kind.
    """

    code: str = "MARKET_ERROR"


class InvalidPrice(MarketError, ValueError):
    """Raised when a price is zero or negative."""

    code = "INVALID_PRICE"


class NotListed(MarketError):
    """Raised when an action needs an active listing and there is none."""

    code = "NOT_LISTED"


class AlreadyListed(MarketError):
    """Raised when listing a key that already has an active record."""

    code = "ALREADY_LISTED"


class InsufficientPayment(MarketError, ValueError):
    """Raised when the attached payment is below the listing price."""

    code = "INSUFFICIENT_PAYMENT"


class NotSeller(MarketError, PermissionError):
    """Raised when someone other than the stored seller mutates a listing."""

    code = "NOT_SELLER"


class InvalidFeePercentage(MarketError, ValueError):
    """Raised when a fee percentage falls outside ``[0, 100)``."""

    code = "INVALID_FEE_PERCENTAGE"


class TransferRejected(MarketError):
    """Raised when the asset or payment primitive refuses a transfer."""

    code = "TRANSFER_REJECTED"


class NotAdministrator(MarketError, PermissionError):
    """Raised when a non-administrator tries an administrator-only action."""

    code = "NOT_ADMINISTRATOR"


__all__ = [
    "AlreadyListed",
    "InsufficientPayment",
    "InvalidFeePercentage",
    "InvalidPrice",
    "MarketError",
    "NotAdministrator",
    "NotListed",
    "NotSeller",
    "TransferRejected",
]
