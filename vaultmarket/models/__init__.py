"""vaultmarket data models — all Pydantic v2, all frozen (immutable)."""

from vaultmarket.models.events import (
    EVENT_TYPE_MAP,
    EventKind,
    FeeChangedEvent,
    ListedEvent,
    MarketEventBase,
    PriceChangedEvent,
    SoldEvent,
    StatsUpdatedEvent,
    UnlistedEvent,
)
from vaultmarket.models.journal import JournalEntry
from vaultmarket.models.listings import Listing, ListingKey, ListingState
from vaultmarket.models.settlement import CollectionStats, FeeSplit, SaleReceipt

__all__ = [
    # listings
    "Listing",
    "ListingKey",
    "ListingState",
    # settlement
    "CollectionStats",
    "FeeSplit",
    "SaleReceipt",
    # events
    "EventKind",
    "MarketEventBase",
    "ListedEvent",
    "SoldEvent",
    "PriceChangedEvent",
    "UnlistedEvent",
    "StatsUpdatedEvent",
    "FeeChangedEvent",
    "EVENT_TYPE_MAP",
    # journal
    "JournalEntry",
]
