"""Listing Registry — keyed store of listing records.

Only the stored seller may reprice or remove a listing, and only while it
is active.  A key with no record has a null seller, so every caller fails
the seller check for it.
"""

from __future__ import annotations

from vaultmarket.core.errors import AlreadyListed, InvalidPrice, NotListed, NotSeller
from vaultmarket.models.listings import Listing, ListingKey, ListingState


def _require_positive_price(price: int) -> None:
    if isinstance(price, bool) or not isinstance(price, int) or price <= 0:
        raise InvalidPrice(f"Price must be a positive integer, got {price!r}.")


class ListingRegistry:
    """In-memory listing records keyed by ``ListingKey``.

    Examples
    --------
    >>> registry = ListingRegistry()
    >>> registry.create_listing("punks", 5, "alice", 100).active
    True
    >>> registry.mark_sold("punks", 5).active
    False
    >>> registry.get("punks", 5).seller
    'alice'
    """

    def __init__(self) -> None:
        self._records: dict[ListingKey, Listing] = {}

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def check_listable(self, collection: str, asset_id: int, price: int) -> None:
        """Raise if a new listing for this key and price would be refused."""
        _require_positive_price(price)
        existing = self.get(collection, asset_id)
        if existing is not None and existing.active:
            raise AlreadyListed(f"{existing.key} is already listed.")

    def create_listing(
        self, collection: str, asset_id: int, seller: str, price: int
    ) -> Listing:
        """Store a new active record; replaces an inactive (sold) one."""
        self.check_listable(collection, asset_id, price)
        listing = Listing(
            collection=collection, asset_id=asset_id, seller=seller, price=price
        )
        self._records[listing.key] = listing
        return listing

    def set_price(
        self, collection: str, asset_id: int, caller: str, new_price: int
    ) -> Listing:
        _require_positive_price(new_price)
        listing = self._require_seller(collection, asset_id, caller)
        updated = listing.model_copy(update={"price": new_price})
        self._records[updated.key] = updated
        return updated

    def remove_listing(self, collection: str, asset_id: int, caller: str) -> Listing:
        """Erase the record; returns what was removed."""
        listing = self._require_seller(collection, asset_id, caller)
        del self._records[listing.key]
        return listing

    def mark_sold(self, collection: str, asset_id: int) -> Listing:
        """Deactivate a record after a verified sale, keeping seller and price."""
        listing = self.get(collection, asset_id)
        if listing is None or not listing.active:
            raise NotListed(f"{collection}#{asset_id} is not listed.")
        sold = listing.model_copy(update={"active": False})
        self._records[sold.key] = sold
        return sold

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, collection: str, asset_id: int) -> Listing | None:
        """Return the record for the key, or None.  Never raises."""
        if isinstance(asset_id, bool) or not isinstance(asset_id, int) or asset_id < 0:
            return None
        return self._records.get(ListingKey(collection=collection, asset_id=asset_id))

    def state_of(self, collection: str, asset_id: int) -> ListingState:
        listing = self.get(collection, asset_id)
        return listing.state if listing is not None else ListingState.UNLISTED

    def listings(
        self, collection: str | None = None, active_only: bool = False
    ) -> list[Listing]:
        """Return records sorted by key, optionally filtered."""
        results = [
            listing
            for listing in self._records.values()
            if (collection is None or listing.collection == collection)
            and (listing.active or not active_only)
        ]
        return sorted(results, key=lambda l: (l.collection, l.asset_id))

    def _require_seller(self, collection: str, asset_id: int, caller: str) -> Listing:
        listing = self.get(collection, asset_id)
        seller = listing.seller if listing is not None else None
        if seller is None or caller != seller:
            raise NotSeller(f"{caller!r} is not the seller of {collection}#{asset_id}.")
        if not listing.active:
            raise NotListed(f"{collection}#{asset_id} has already sold.")
        return listing

    # -- Unit of work ------------------------------------------------------

    def snapshot(self) -> dict[ListingKey, Listing]:
        return dict(self._records)

    def restore(self, state: dict[ListingKey, Listing]) -> None:
        self._records = dict(state)
