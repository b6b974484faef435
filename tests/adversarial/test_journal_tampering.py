"""Adversarial tests — trade journal tampering and chain integrity."""

from __future__ import annotations

import sqlite3

import pytest

from vaultmarket.core.trade_journal import JournalIntegrityError, TradeJournal
from vaultmarket.models.journal import JournalEntry


@pytest.fixture
def seeded(journal: TradeJournal) -> TradeJournal:
    for i in range(5):
        journal.append(
            JournalEntry(
                action="list",
                collection="punks",
                asset_id=i,
                actor="alice",
                details={"price": 100 + i},
            )
        )
    return journal


def _execute(journal: TradeJournal, sql: str) -> None:
    conn = sqlite3.connect(str(journal.db_path))
    conn.execute(sql)
    conn.commit()
    conn.close()


class TestJournalTamperDetection:
    def test_untouched_chain_is_valid(self, seeded: TradeJournal):
        assert seeded.verify_chain() is True

    def test_edited_details_detected(self, seeded: TradeJournal):
        _execute(
            seeded,
            "UPDATE trade_journal SET details_json = '{\"price\": 1}' WHERE asset_id = 2",
        )
        with pytest.raises(JournalIntegrityError, match="Tampered"):
            seeded.verify_chain()

    def test_deleted_entry_detected(self, seeded: TradeJournal):
        _execute(seeded, "DELETE FROM trade_journal WHERE asset_id = 1")
        with pytest.raises(JournalIntegrityError, match="Chain broken"):
            seeded.verify_chain()

    def test_corrupted_hash_detected(self, seeded: TradeJournal):
        _execute(seeded, "UPDATE trade_journal SET entry_hash = 'TAMPERED' WHERE asset_id = 4")
        with pytest.raises(JournalIntegrityError):
            seeded.verify_chain()
