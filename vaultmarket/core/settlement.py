"""Settlement Engine — the single entry point for marketplace actions.

The engine wires the Fee Policy, Custodian, Listing Registry, Statistics
Reporter, and Notification Bus together and runs each action inside one
unit of work: either every effect lands or none does.

Per listing key the lifecycle is::

    UNLISTED --list--> LISTED --buy--> SOLD
                       LISTED --unlist--> UNLISTED

Ordering contract for ``buy``
-----------------------------
Recipient-controlled code may run whenever an asset or value is pushed.
``buy`` therefore finalizes the registry (record marked sold, counters
updated) before releasing the asset, and releases the asset before any
value leaves custody.  A recipient that re-enters the marketplace while
being paid only ever sees the finished sale.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any

from vaultmarket.config import MarketSettings
from vaultmarket.core.access import AdministratorCapability, SingleAdministrator
from vaultmarket.core.custodian import Custodian
from vaultmarket.core.errors import InsufficientPayment, NotListed, TransferRejected
from vaultmarket.core.fee_policy import FeePolicy
from vaultmarket.core.notification_bus import NotificationBus
from vaultmarket.core.production_guard import enforce_production_constraints
from vaultmarket.core.registry import ListingRegistry
from vaultmarket.core.stats import StatisticsReporter
from vaultmarket.core.trade_journal import TradeJournal
from vaultmarket.core.unit_of_work import Snapshotable, StagedRecords, UnitOfWork
from vaultmarket.models.events import (
    FeeChangedEvent,
    ListedEvent,
    PriceChangedEvent,
    SoldEvent,
    StatsUpdatedEvent,
    UnlistedEvent,
)
from vaultmarket.models.journal import JournalEntry
from vaultmarket.models.listings import Listing, ListingKey
from vaultmarket.models.settlement import CollectionStats, SaleReceipt
from vaultmarket.primitives.base import AssetLedger, PaymentLedger, PaymentTransferError

logger = logging.getLogger(__name__)


class SettlementEngine:
    """Runs list / buy / change_price / unlist / set_fee_percentage atomically.

    Parameters
    ----------
    assets:
        External asset ledger.  Rolled back with the action when it
        implements ``snapshot()``/``restore()``.
    payments:
        External payment ledger, same rollback rule.
    settings:
        Marketplace settings.  Defaults are read from the environment.
    access:
        Administrator capability.  Its ``administrator`` sets the fee and
        receives it.  Defaults to ``settings.administrator``.
    journal:
        Optional trade journal.  When omitted and ``settings.journal_path``
        is set, a journal is opened there.

    Examples
    --------
    >>> from vaultmarket.primitives import InMemoryAssetLedger, InMemoryPaymentLedger
    >>> assets, payments = InMemoryAssetLedger(), InMemoryPaymentLedger()
    >>> engine = SettlementEngine(assets, payments, MarketSettings())
    >>> assets.mint("punks", 5, "alice")
    >>> assets.set_approval_for_all("alice", engine.holding_account, "punks")
    >>> engine.list("punks", 5, "alice", 100).price
    100
    """

    def __init__(
        self,
        assets: AssetLedger,
        payments: PaymentLedger,
        settings: MarketSettings | None = None,
        *,
        access: AdministratorCapability | None = None,
        journal: TradeJournal | None = None,
    ) -> None:
        self.settings = settings or MarketSettings()

        # Fails hard if production constraints are violated
        enforce_production_constraints(self.settings)

        self._payments = payments
        self.access = access or SingleAdministrator(self.settings.administrator)
        self.fee_policy = FeePolicy(self.settings.fee_percentage, self.access)
        self.custodian = Custodian(assets, self.settings.holding_account)
        self.registry = ListingRegistry()
        self.stats = StatisticsReporter()

        self.unit_of_work = UnitOfWork()
        self.bus = NotificationBus(self.unit_of_work)
        for participant in (self.registry, self.fee_policy, self.stats):
            self.unit_of_work.register(participant)
        for primitive in (assets, payments):
            if isinstance(primitive, Snapshotable):
                self.unit_of_work.register(primitive)
            else:
                logger.warning(
                    "%s cannot snapshot; it must roll back failed actions itself.",
                    type(primitive).__name__,
                )

        if journal is None and self.settings.journal_path is not None:
            journal = TradeJournal(self.settings.journal_path)
        self.journal = journal
        self._pending_journal = StagedRecords()
        self.unit_of_work.register(self._pending_journal)
        self.unit_of_work.on_commit(self._flush_journal)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def list(self, collection: str, asset_id: int, seller: str, price: int) -> Listing:
        """Take custody of an asset and create an active listing."""
        label = f"{collection}#{asset_id}"
        with self.unit_of_work.atomic(f"list {label}"):
            self.registry.check_listable(collection, asset_id, price)
            self.custodian.take_custody(collection, asset_id, seller)
            listing = self.registry.create_listing(collection, asset_id, seller, price)
            self.bus.emit(
                ListedEvent(
                    collection=collection, seller=seller, asset_id=asset_id, price=price
                )
            )
            self._emit_stats(self.stats.record_listed(collection))
            self._record("list", listing.key, seller, {"price": price})

        logger.info("Listed %s by %s at %d.", label, seller, price)
        return listing

    def buy(
        self, collection: str, asset_id: int, buyer: str, attached_payment: int
    ) -> SaleReceipt:
        """Settle a sale of an active listing.

        The fee uses the fee percentage current at settlement time.  Any
        payment above the price is refunded to the buyer, or kept by the
        holding account when ``settings.refund_overpayment`` is off.
        """
        label = f"{collection}#{asset_id}"
        with self.unit_of_work.atomic(f"buy {label}"):
            listing = self.registry.get(collection, asset_id)
            if listing is None or not listing.active:
                raise NotListed(f"{label} is not listed.")
            if attached_payment < listing.price:
                raise InsufficientPayment(
                    f"{label} costs {listing.price}, got {attached_payment}."
                )

            holding = self.custodian.holding_account
            self._move_value(buyer, holding, attached_payment)
            fee_percentage = self.fee_policy.fee_percentage
            fee_split = self.fee_policy.split(listing.price)

            # Finalize internal state, then the asset, then value.
            self.registry.mark_sold(collection, asset_id)
            stats = self.stats.record_sold(collection)
            self.custodian.release_custody(collection, asset_id, buyer)
            self.bus.emit(
                SoldEvent(
                    collection=collection,
                    seller=listing.seller,
                    buyer=buyer,
                    asset_id=asset_id,
                    price=listing.price,
                )
            )
            self._emit_stats(stats)

            self._move_value(holding, self.access.administrator, fee_split.fee)
            self._move_value(holding, listing.seller, fee_split.proceeds)

            excess = attached_payment - listing.price
            refunded = forfeited = 0
            if excess and self.settings.refund_overpayment:
                self._move_value(holding, buyer, excess)
                refunded = excess
            elif excess:
                forfeited = excess

            receipt = SaleReceipt(
                key=listing.key,
                seller=listing.seller,
                buyer=buyer,
                price=listing.price,
                fee_percentage=fee_percentage,
                fee=fee_split.fee,
                proceeds=fee_split.proceeds,
                refunded=refunded,
                forfeited=forfeited,
            )
            self._record("buy", listing.key, buyer, receipt.model_dump(mode="json", exclude={"key"}))

        if forfeited:
            logger.warning("Buyer %s overpaid %s by %d; excess kept.", buyer, label, forfeited)
        logger.info(
            "Sold %s from %s to %s at %d (fee %d, proceeds %d).",
            label,
            listing.seller,
            buyer,
            listing.price,
            fee_split.fee,
            fee_split.proceeds,
        )
        return receipt

    def unlist(self, collection: str, asset_id: int, caller: str) -> Listing:
        """Erase a listing and return the asset to its seller."""
        label = f"{collection}#{asset_id}"
        with self.unit_of_work.atomic(f"unlist {label}"):
            removed = self.registry.remove_listing(collection, asset_id, caller)
            stats = self.stats.record_unlisted(collection)
            self.custodian.release_custody(collection, asset_id, caller)
            self.bus.emit(
                UnlistedEvent(collection=collection, seller=caller, asset_id=asset_id)
            )
            self._emit_stats(stats)
            self._record("unlist", removed.key, caller, {"price": removed.price})

        logger.info("Unlisted %s by %s.", label, caller)
        return removed

    def change_price(
        self, collection: str, asset_id: int, caller: str, new_price: int
    ) -> Listing:
        """Reprice an active listing.  Counters are unaffected."""
        label = f"{collection}#{asset_id}"
        with self.unit_of_work.atomic(f"change_price {label}"):
            updated = self.registry.set_price(collection, asset_id, caller, new_price)
            self.bus.emit(
                PriceChangedEvent(
                    collection=collection,
                    seller=caller,
                    asset_id=asset_id,
                    new_price=new_price,
                )
            )
            self._record("change_price", updated.key, caller, {"new_price": new_price})

        logger.info("Repriced %s to %d.", label, new_price)
        return updated

    def set_fee_percentage(self, caller: str, new_percentage: int) -> int:
        """Change the global fee; returns the previous percentage."""
        with self.unit_of_work.atomic("set_fee_percentage"):
            old = self.fee_policy.set_fee_percentage(caller, new_percentage)
            self.bus.emit(
                FeeChangedEvent(old_percentage=old, new_percentage=new_percentage)
            )
            self._record(
                "set_fee_percentage",
                None,
                caller,
                {"old_percentage": old, "new_percentage": new_percentage},
            )

        logger.info("Fee percentage changed %d -> %d by %s.", old, new_percentage, caller)
        return old

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def holding_account(self) -> str:
        return self.custodian.holding_account

    @property
    def administrator(self) -> str:
        return self.access.administrator

    @property
    def fee_percentage(self) -> int:
        return self.fee_policy.fee_percentage

    def get_listing(self, collection: str, asset_id: int) -> Listing | None:
        return self.registry.get(collection, asset_id)

    def count_listings(self, collection: str) -> int:
        return self.stats.count_listings(collection)

    def count_sales(self, collection: str) -> int:
        return self.stats.count_sales(collection)

    def collection_stats(self, collection: str) -> CollectionStats:
        return self.stats.stats(collection)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _move_value(self, sender: str, recipient: str, amount: int) -> None:
        if amount == 0:
            return
        try:
            self._payments.transfer(sender, recipient, amount)
        except PaymentTransferError as exc:
            raise TransferRejected(
                f"Payment of {amount} from {sender!r} to {recipient!r} rejected: {exc}"
            ) from exc

    def _emit_stats(self, stats: CollectionStats) -> None:
        self.bus.emit(
            StatsUpdatedEvent(
                collection=stats.collection,
                total_listings=stats.total_listings,
                total_sales=stats.total_sales,
            )
        )

    def _record(
        self, action: str, key: ListingKey | None, actor: str, details: dict[str, Any]
    ) -> None:
        if self.journal is None:
            return
        self._pending_journal.append(
            JournalEntry(
                action=action,
                collection=key.collection if key else "",
                asset_id=key.asset_id if key else None,
                actor=actor,
                details=details,
            )
        )

    def _flush_journal(self) -> None:
        for entry in self._pending_journal.drain():
            if self.journal is None:
                continue
            try:
                self.journal.append(entry)
            except sqlite3.Error:
                logger.exception(
                    "Journal write failed for committed %s by %s (%s).",
                    entry.action,
                    entry.actor,
                    entry.entry_id,
                )
