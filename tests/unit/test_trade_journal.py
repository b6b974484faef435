"""Tests for the TradeJournal — append-only, hash-chained SQLite storage."""

from __future__ import annotations

from pathlib import Path

from vaultmarket.core.trade_journal import TradeJournal
from vaultmarket.models.journal import JournalEntry


def _entry(action: str = "list", asset_id: int | None = 1, collection: str = "punks") -> JournalEntry:
    return JournalEntry(
        action=action,
        collection=collection,
        asset_id=asset_id,
        actor="alice",
        details={"price": 100},
    )


class TestTradeJournal:
    def test_empty(self, journal: TradeJournal):
        assert journal.entries() == []
        assert len(journal) == 0
        assert journal.verify_chain() is True

    def test_append_links_entries(self, journal: TradeJournal):
        first = journal.append(_entry())
        second = journal.append(_entry("buy"))
        assert first.previous_entry_hash == ""
        assert second.previous_entry_hash == first.entry_hash
        assert len(journal) == 2

    def test_entries_roundtrip(self, journal: TradeJournal):
        sealed = journal.append(_entry())
        (loaded,) = journal.entries()
        assert loaded.entry_id == sealed.entry_id
        assert loaded.details == {"price": 100}
        assert loaded.entry_hash == sealed.entry_hash

    def test_filter_by_collection(self, journal: TradeJournal):
        journal.append(_entry(collection="punks"))
        journal.append(_entry(collection="apes"))
        journal.append(_entry("set_fee_percentage", asset_id=None, collection=""))
        assert [e.collection for e in journal.entries("apes")] == ["apes"]
        assert len(journal.entries()) == 3

    def test_verify_valid_chain(self, journal: TradeJournal):
        for action in ("list", "change_price", "buy"):
            journal.append(_entry(action))
        assert journal.verify_chain() is True

    def test_persists_across_instances(self, tmp_path: Path):
        db = tmp_path / "journal.db"
        TradeJournal(db).append(_entry())
        reopened = TradeJournal(db)
        assert len(reopened.entries()) == 1
        assert reopened.verify_chain() is True
