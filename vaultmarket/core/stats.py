"""Statistics Reporter — running listing and sale counters per collection.

Counters move with every registry transition: a listing adds one active
listing; a sale moves one from listings to sales; an unlisting removes one
listing.  Nothing is derived from asset identifiers or custody balances.
"""

from __future__ import annotations

from collections import Counter

from vaultmarket.models.settlement import CollectionStats


class StatisticsReporter:
    """Listing and sale counters, one pair per collection.

    Every ``record_*`` call returns the refreshed ``CollectionStats`` so the
    caller can announce it.  ``record_sold`` and ``record_unlisted`` refuse
    to take the listing counter below zero.

    Examples
    --------
    >>> reporter = StatisticsReporter()
    >>> reporter.record_listed("punks").total_listings
    1
    >>> reporter.record_sold("punks")
    CollectionStats(collection='punks', total_listings=0, total_sales=1)
    >>> reporter.count_sales("apes")
    0
    """

    def __init__(self) -> None:
        self._listings: Counter[str] = Counter()
        self._sales: Counter[str] = Counter()

    def record_listed(self, collection: str) -> CollectionStats:
        self._listings[collection] += 1
        return self.stats(collection)

    def record_sold(self, collection: str) -> CollectionStats:
        self._take_listing(collection)
        self._sales[collection] += 1
        return self.stats(collection)

    def record_unlisted(self, collection: str) -> CollectionStats:
        self._take_listing(collection)
        return self.stats(collection)

    def count_listings(self, collection: str) -> int:
        return self._listings[collection]

    def count_sales(self, collection: str) -> int:
        return self._sales[collection]

    def stats(self, collection: str) -> CollectionStats:
        return CollectionStats(
            collection=collection,
            total_listings=self._listings[collection],
            total_sales=self._sales[collection],
        )

    def collections(self) -> list[str]:
        return sorted(set(self._listings) | set(self._sales))

    def _take_listing(self, collection: str) -> None:
        if self._listings[collection] <= 0:
            raise RuntimeError(f"Listing counter for {collection!r} would go negative.")
        self._listings[collection] -= 1

    # -- Unit of work ------------------------------------------------------

    def snapshot(self) -> tuple[Counter[str], Counter[str]]:
        return Counter(self._listings), Counter(self._sales)

    def restore(self, state: tuple[Counter[str], Counter[str]]) -> None:
        listings, sales = state
        self._listings = Counter(listings)
        self._sales = Counter(sales)
