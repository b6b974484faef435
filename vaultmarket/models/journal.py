"""Trade journal entry model (append-only, hash-chained)."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class JournalEntry(BaseModel):
    """One committed marketplace action.

    ``action`` is the engine operation name (``list``, ``buy``, ...).
    ``collection`` and ``asset_id`` are empty/None for actions that are not
    scoped to a listing, such as a fee change.
    """

    model_config = ConfigDict(frozen=True)

    entry_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    action: str
    collection: str = ""
    asset_id: int | None = None
    actor: str
    details: dict[str, Any] = {}
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    previous_entry_hash: str = ""
    entry_hash: str = ""
