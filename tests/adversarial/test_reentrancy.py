"""Adversarial tests — recipients re-entering the marketplace mid-settlement.

A payment recipient's hook runs while ``buy`` is still in progress.  These
tests verify that:
1. A re-entrant ``buy``/``unlist`` sees the sale already finalized
2. Nested actions that succeed are kept when the outer sale commits
3. Nested actions are rolled back when the outer sale fails
"""

from __future__ import annotations

import pytest

from vaultmarket.core.errors import MarketError, NotListed, TransferRejected
from vaultmarket.models.events import EventKind


class TestReentrantObserver:
    def test_seller_reentry_sees_finalized_state(self, engine, assets, payments, listed):
        listed(5, 100)
        observed: dict = {}

        def seller_hook(sender: str, amount: int) -> None:
            record = engine.get_listing("punks", 5)
            observed["active"] = record.active
            observed["owner"] = assets.owner_of("punks", 5)
            observed["sales"] = engine.count_sales("punks")
            for name, attempt in (
                ("buy", lambda: engine.buy("punks", 5, "alice", 100)),
                ("unlist", lambda: engine.unlist("punks", 5, "alice")),
            ):
                try:
                    attempt()
                except MarketError as exc:
                    observed[name] = type(exc)

        payments.register_recipient("alice", seller_hook)
        engine.buy("punks", 5, "bob", 100)

        assert observed == {
            "active": False,
            "owner": "bob",
            "sales": 1,
            "buy": NotListed,
            "unlist": NotListed,
        }
        assert payments.balance_of("alice") == 98
        assert len(engine.bus.events(EventKind.SOLD)) == 1

    def test_admin_reentry_cannot_double_buy(self, engine, assets, payments, listed):
        listed(5, 100)
        payments.deposit("admin", 1_000)
        errors: list[type] = []

        def admin_hook(sender: str, amount: int) -> None:
            try:
                engine.buy("punks", 5, "admin", 100)
            except MarketError as exc:
                errors.append(type(exc))

        payments.register_recipient("admin", admin_hook)
        engine.buy("punks", 5, "bob", 100)

        assert errors == [NotListed]
        assert assets.owner_of("punks", 5) == "bob"
        assert payments.balance_of("admin") == 1_002

    def test_uncaught_reentry_error_aborts_sale(self, engine, assets, payments, listed):
        listed(5, 100)

        def seller_hook(sender: str, amount: int) -> None:
            engine.buy("punks", 5, "alice", 100)  # raises NotListed, not caught

        payments.register_recipient("alice", seller_hook)
        with pytest.raises(TransferRejected):
            engine.buy("punks", 5, "bob", 100)

        assert engine.get_listing("punks", 5).active is True
        assert assets.owner_of("punks", 5) == "vaultmarket"
        assert payments.balance_of("bob") == 10_000
        assert engine.count_sales("punks") == 0


class TestNestedActions:
    def test_nested_listing_commits_with_outer_sale(
        self, engine, assets, payments, listed, mint
    ):
        listed(5, 100)
        mint(6)

        def seller_hook(sender: str, amount: int) -> None:
            engine.list("punks", 6, "alice", 70)

        payments.register_recipient("alice", seller_hook)
        engine.buy("punks", 5, "bob", 100)

        assert engine.get_listing("punks", 6).active is True
        assert assets.owner_of("punks", 6) == "vaultmarket"
        assert engine.count_listings("punks") == 1
        assert engine.count_sales("punks") == 1
        kinds = [e.event_kind for e in engine.bus.events()]
        assert kinds == [
            EventKind.LISTED,
            EventKind.STATS_UPDATED,
            EventKind.SOLD,
            EventKind.STATS_UPDATED,
            EventKind.LISTED,
            EventKind.STATS_UPDATED,
        ]
        assert [e.sequence for e in engine.bus.events()] == [1, 2, 3, 4, 5, 6]

    def test_nested_listing_rolled_back_with_outer_failure(
        self, engine, assets, payments, listed, mint
    ):
        listed(5, 100)
        mint(6)
        events_before = len(engine.bus.events())

        def seller_hook(sender: str, amount: int) -> None:
            engine.list("punks", 6, "alice", 70)

        def buyer_hook(sender: str, amount: int) -> None:
            raise RuntimeError("refuses refunds")

        payments.register_recipient("alice", seller_hook)
        payments.register_recipient("bob", buyer_hook)
        with pytest.raises(TransferRejected):
            engine.buy("punks", 5, "bob", 150)

        assert engine.get_listing("punks", 6) is None
        assert assets.owner_of("punks", 6) == "alice"
        assert engine.get_listing("punks", 5).active is True
        assert engine.count_listings("punks") == 1
        assert engine.count_sales("punks") == 0
        assert payments.balance_of("alice") == 0
        assert len(engine.bus.events()) == events_before
