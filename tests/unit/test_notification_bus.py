"""Tests for the NotificationBus — staging, ordering, routing, codec."""

from __future__ import annotations

import json

import pytest

from vaultmarket.core.notification_bus import EventValidationError, NotificationBus
from vaultmarket.core.unit_of_work import UnitOfWork
from vaultmarket.models.events import (
    EventKind,
    ListedEvent,
    SoldEvent,
    StatsUpdatedEvent,
)


def _listed(asset_id: int = 5) -> ListedEvent:
    return ListedEvent(collection="punks", seller="alice", asset_id=asset_id, price=100)


class TestPublishing:
    def test_publishes_immediately_without_unit_of_work(self):
        bus = NotificationBus()
        bus.emit(_listed())
        events = bus.events()
        assert len(events) == 1
        assert events[0].sequence == 1
        assert events[0].payload_hash

    def test_sequence_is_strictly_increasing(self):
        bus = NotificationBus()
        for i in range(4):
            bus.emit(_listed(i))
        assert [e.sequence for e in bus.events()] == [1, 2, 3, 4]

    def test_filter_by_kind(self):
        bus = NotificationBus()
        bus.emit(_listed())
        bus.emit(StatsUpdatedEvent(collection="punks", total_listings=1, total_sales=0))
        assert len(bus.events(EventKind.STATS_UPDATED)) == 1
        assert len(bus.events(EventKind.SOLD)) == 0

    def test_subscriber_receives_published_event(self):
        bus = NotificationBus()
        seen: list = []
        bus.subscribe(EventKind.LISTED, seen.append)
        bus.emit(_listed())
        assert len(seen) == 1
        assert seen[0].sequence == 1

    def test_failing_subscriber_does_not_block_others(self):
        bus = NotificationBus()
        seen: list = []

        def broken(event):
            raise RuntimeError("subscriber bug")

        bus.subscribe(EventKind.LISTED, broken)
        bus.subscribe(EventKind.LISTED, seen.append)
        bus.emit(_listed())
        assert len(seen) == 1
        assert len(bus.events()) == 1


class TestStaging:
    def test_events_held_until_commit(self):
        uow = UnitOfWork()
        bus = NotificationBus(uow)
        with uow.atomic("list"):
            bus.emit(_listed())
            assert bus.events() == []
            assert bus.pending == 1
        assert len(bus.events()) == 1
        assert bus.pending == 0

    def test_rolled_back_events_never_published(self):
        uow = UnitOfWork()
        bus = NotificationBus(uow)
        with pytest.raises(RuntimeError):
            with uow.atomic("list"):
                bus.emit(_listed())
                raise RuntimeError("abort")
        assert bus.events() == []
        assert bus.pending == 0


class TestCodec:
    def test_receive_roundtrip_verifies_hash(self):
        bus = NotificationBus()
        bus.emit(
            SoldEvent(collection="punks", seller="alice", buyer="bob", asset_id=5, price=100)
        )
        original = bus.events()[0]
        received = bus.receive(bus.serialize(original))
        assert isinstance(received, SoldEvent)
        assert received == original

    def test_tampered_payload_rejected(self):
        bus = NotificationBus()
        bus.emit(_listed())
        data = json.loads(bus.serialize(bus.events()[0]))
        data["price"] = 1
        with pytest.raises(EventValidationError, match="hash"):
            bus.receive(json.dumps(data))

    def test_bytes_accepted(self):
        bus = NotificationBus()
        bus.emit(_listed())
        raw = bus.serialize(bus.events()[0]).encode("utf-8")
        assert bus.receive(raw).event_kind == EventKind.LISTED

    @pytest.mark.parametrize(
        "raw, message",
        [
            ("not json", "Invalid JSON"),
            ("[1, 2]", "JSON object"),
            ("{}", "Missing event_kind"),
            ('{"event_kind": "auction"}', "Unknown event_kind"),
            ('{"event_kind": "listed"}', "validation failed"),
        ],
    )
    def test_malformed_input(self, raw: str, message: str):
        with pytest.raises(EventValidationError, match=message):
            NotificationBus().receive(raw)
