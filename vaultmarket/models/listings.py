"""Listing records — one fixed-price offer per (collection, asset_id)."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ListingState(str, Enum):
    """Lifecycle of a listing key.

    ``SOLD`` is terminal for a record: it is never reactivated.  The new
    owner may list the same key again, which creates a fresh record.
    """

    UNLISTED = "unlisted"
    LISTED = "listed"
    SOLD = "sold"


class ListingKey(BaseModel):
    """Composite key identifying one asset inside one collection."""

    model_config = ConfigDict(frozen=True)

    collection: str
    asset_id: int = Field(ge=0)

    def __str__(self) -> str:
        return f"{self.collection}#{self.asset_id}"


class Listing(BaseModel):
    """A stored listing record.

    While ``active`` is True the marketplace holding account is the
    custodial owner of the asset.  After a sale the record stays with
    ``active=False`` so the last seller and price remain readable.

    Examples
    --------
    >>> listing = Listing(collection="punks", asset_id=5, seller="alice", price=100)
    >>> listing.state
    <ListingState.LISTED: 'listed'>
    >>> listing.key
    ListingKey(collection='punks', asset_id=5)
    """

    model_config = ConfigDict(frozen=True)

    collection: str
    asset_id: int = Field(ge=0)
    seller: str
    price: int = Field(gt=0)  # smallest currency unit
    active: bool = True

    @property
    def key(self) -> ListingKey:
        return ListingKey(collection=self.collection, asset_id=self.asset_id)

    @property
    def state(self) -> ListingState:
        return ListingState.LISTED if self.active else ListingState.SOLD
