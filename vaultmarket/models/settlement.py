"""Settlement value objects — fee splits, sale receipts, collection stats."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from vaultmarket.models.listings import ListingKey


class FeeSplit(BaseModel):
    """Division of a sale price into the administrator fee and seller proceeds."""

    model_config = ConfigDict(frozen=True)

    fee: int = Field(ge=0)
    proceeds: int = Field(ge=0)

    @property
    def total(self) -> int:
        return self.fee + self.proceeds


class SaleReceipt(BaseModel):
    """Everything a completed ``buy`` moved.

    ``refunded`` is the overpayment pushed back to the buyer; ``forfeited``
    is overpayment kept by the holding account when refunds are disabled.
    Exactly one of the two is non-zero when the buyer overpaid.
    """

    model_config = ConfigDict(frozen=True)

    key: ListingKey
    seller: str
    buyer: str
    price: int
    fee_percentage: int
    fee: int
    proceeds: int
    refunded: int = 0
    forfeited: int = 0


class CollectionStats(BaseModel):
    """Running listing/sale counters for one collection."""

    model_config = ConfigDict(frozen=True)

    collection: str
    total_listings: int = Field(default=0, ge=0)
    total_sales: int = Field(default=0, ge=0)
