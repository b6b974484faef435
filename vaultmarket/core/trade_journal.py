"""Append-only, hash-chained trade journal backed by SQLite.

Every committed marketplace action is recorded once.  Entries chain to the
previous entry's hash so any edit, deletion, or reordering is detectable
with ``verify_chain``.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime
from pathlib import Path

from vaultmarket.core.hasher import compute_entry_hash
from vaultmarket.models.journal import JournalEntry

# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

_CREATE_JOURNAL = """
CREATE TABLE IF NOT EXISTS trade_journal (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    entry_id            TEXT NOT NULL UNIQUE,
    action              TEXT NOT NULL,
    collection          TEXT NOT NULL DEFAULT '',
    asset_id            INTEGER,
    actor               TEXT NOT NULL,
    details_json        TEXT NOT NULL DEFAULT '{}',
    timestamp_utc       TEXT NOT NULL,
    previous_entry_hash TEXT NOT NULL DEFAULT '',
    entry_hash          TEXT NOT NULL UNIQUE
);
"""

_CREATE_IDX_COLLECTION = """
CREATE INDEX IF NOT EXISTS idx_collection ON trade_journal(collection, id);
"""


class JournalIntegrityError(RuntimeError):
    """Raised when the hash chain is broken."""


class TradeJournal:
    """Append-only record of committed actions.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file. Created if it does not exist.
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(_CREATE_JOURNAL)
            conn.execute(_CREATE_IDX_COLLECTION)
            conn.commit()

    # ------------------------------------------------------------------
    # Append-only write
    # ------------------------------------------------------------------

    def append(self, entry: JournalEntry) -> JournalEntry:
        """Seal *entry* onto the end of the chain and persist it."""
        previous_hash = self._get_latest_hash()

        entry_dict = entry.model_dump(mode="json")
        entry_dict["previous_entry_hash"] = previous_hash
        entry_dict["entry_hash"] = ""

        sealed = entry.model_copy(
            update={
                "previous_entry_hash": previous_hash,
                "entry_hash": compute_entry_hash(entry_dict),
            }
        )
        self._insert(sealed)
        return sealed

    def _insert(self, entry: JournalEntry) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO trade_journal
                    (entry_id, action, collection, asset_id, actor, details_json,
                     timestamp_utc, previous_entry_hash, entry_hash)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.entry_id,
                    entry.action,
                    entry.collection,
                    entry.asset_id,
                    entry.actor,
                    json.dumps(entry.details, sort_keys=True),
                    entry.timestamp_utc.isoformat()
                    if isinstance(entry.timestamp_utc, datetime)
                    else entry.timestamp_utc,
                    entry.previous_entry_hash,
                    entry.entry_hash,
                ),
            )
            conn.commit()

    def _get_latest_hash(self) -> str:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT entry_hash FROM trade_journal ORDER BY id DESC LIMIT 1"
            ).fetchone()
        return row[0] if row else ""

    # ------------------------------------------------------------------
    # Queries (read-only)
    # ------------------------------------------------------------------

    def entries(self, collection: str | None = None) -> list[JournalEntry]:
        """Return entries in commit order, optionally for one collection."""
        with self._connect() as conn:
            if collection is None:
                rows = conn.execute(
                    "SELECT * FROM trade_journal ORDER BY id ASC"
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM trade_journal WHERE collection = ? ORDER BY id ASC",
                    (collection,),
                ).fetchall()
        return [self._row_to_entry(row) for row in rows]

    def __len__(self) -> int:
        with self._connect() as conn:
            (count,) = conn.execute("SELECT COUNT(*) FROM trade_journal").fetchone()
        return count

    # ------------------------------------------------------------------
    # Chain verification
    # ------------------------------------------------------------------

    def verify_chain(self) -> bool:
        """Walk the whole journal and check every link and seal.

        Returns True if the chain is valid, raises JournalIntegrityError otherwise.
        """
        prev_hash = ""
        for entry in self.entries():
            if entry.previous_entry_hash != prev_hash:
                raise JournalIntegrityError(
                    f"Chain broken at entry {entry.entry_id}: "
                    f"expected previous_hash={prev_hash!r}, "
                    f"got {entry.previous_entry_hash!r}"
                )

            expected_hash = compute_entry_hash(entry.model_dump(mode="json"))
            if entry.entry_hash != expected_hash:
                raise JournalIntegrityError(
                    f"Tampered entry {entry.entry_id}: "
                    f"expected hash={expected_hash!r}, "
                    f"got {entry.entry_hash!r}"
                )

            prev_hash = entry.entry_hash

        return True

    @staticmethod
    def _row_to_entry(row: tuple) -> JournalEntry:
        (
            _id,
            entry_id,
            action,
            collection,
            asset_id,
            actor,
            details_json,
            timestamp_utc,
            previous_entry_hash,
            entry_hash,
        ) = row
        return JournalEntry(
            entry_id=entry_id,
            action=action,
            collection=collection,
            asset_id=asset_id,
            actor=actor,
            details=json.loads(details_json),
            timestamp_utc=timestamp_utc,
            previous_entry_hash=previous_entry_hash,
            entry_hash=entry_hash,
        )
