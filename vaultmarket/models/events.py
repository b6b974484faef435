"""Marketplace notifications — the observable, ordered event log.

Each event is a frozen Pydantic model validated on construction.  The
``payload_hash`` covers every content field so that a serialized event can
be checked after it crosses a process boundary.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class EventKind(str, Enum):
    """The contracted notification types."""

    LISTED = "listed"
    SOLD = "sold"
    PRICE_CHANGED = "price_changed"
    UNLISTED = "unlisted"
    STATS_UPDATED = "stats_updated"
    FEE_CHANGED = "fee_changed"


class MarketEventBase(BaseModel):
    """Fields shared by every notification.

    ``sequence`` is assigned by the bus when the event is published and is
    strictly increasing across the whole log.
    """

    model_config = ConfigDict(frozen=True)

    schema_version: str = "2026-10"
    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    sequence: int = 0
    payload_hash: str = ""
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    event_kind: EventKind


class ListedEvent(MarketEventBase):
    event_kind: EventKind = EventKind.LISTED
    collection: str
    seller: str
    asset_id: int
    price: int


class SoldEvent(MarketEventBase):
    event_kind: EventKind = EventKind.SOLD
    collection: str
    seller: str
    buyer: str
    asset_id: int
    price: int


class PriceChangedEvent(MarketEventBase):
    event_kind: EventKind = EventKind.PRICE_CHANGED
    collection: str
    seller: str
    asset_id: int
    new_price: int


class UnlistedEvent(MarketEventBase):
    event_kind: EventKind = EventKind.UNLISTED
    collection: str
    seller: str
    asset_id: int


class StatsUpdatedEvent(MarketEventBase):
    """Aggregate counters after a listing, sale, or unlisting."""

    event_kind: EventKind = EventKind.STATS_UPDATED
    collection: str
    total_listings: int
    total_sales: int


class FeeChangedEvent(MarketEventBase):
    event_kind: EventKind = EventKind.FEE_CHANGED
    old_percentage: int
    new_percentage: int


# Registry for deserialization by event_kind
EVENT_TYPE_MAP: dict[EventKind, type[MarketEventBase]] = {
    EventKind.LISTED: ListedEvent,
    EventKind.SOLD: SoldEvent,
    EventKind.PRICE_CHANGED: PriceChangedEvent,
    EventKind.UNLISTED: UnlistedEvent,
    EventKind.STATS_UPDATED: StatsUpdatedEvent,
    EventKind.FEE_CHANGED: FeeChangedEvent,
}
