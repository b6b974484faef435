"""Notification bus — ordered, append-only log of marketplace events.

Events emitted inside an action are staged and published only when the
outermost action commits, so a rolled-back action is never observed.
Published events get a strictly increasing ``sequence`` and are routed to
subscribers registered for their kind.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable

from vaultmarket.core.hasher import compute_payload_hash
from vaultmarket.core.unit_of_work import StagedRecords, UnitOfWork
from vaultmarket.models.events import EVENT_TYPE_MAP, EventKind, MarketEventBase

logger = logging.getLogger(__name__)

EventHandler = Callable[[MarketEventBase], None]

# Fields that vary per emission and are excluded from the payload hash.
_UNHASHED_FIELDS = {"payload_hash", "event_id", "timestamp_utc", "sequence"}


class EventValidationError(ValueError):
    """Raised when a serialized event fails validation."""


class NotificationBus:
    """Stages, publishes, and routes marketplace events.

    Parameters
    ----------
    unit_of_work:
        When given, events emitted while an action is in progress are held
        until it commits and dropped if it rolls back.  Without one, events
        publish immediately.
    """

    def __init__(self, unit_of_work: UnitOfWork | None = None) -> None:
        self._handlers: dict[EventKind, list[EventHandler]] = {
            kind: [] for kind in EventKind
        }
        self._log: list[MarketEventBase] = []
        self._staged = StagedRecords()
        self._uow = unit_of_work
        if unit_of_work is not None:
            unit_of_work.register(self._staged)
            unit_of_work.on_commit(self.flush)

    def subscribe(self, kind: EventKind, handler: EventHandler) -> None:
        """Register a handler for a specific event kind."""
        self._handlers[kind].append(handler)

    # ------------------------------------------------------------------
    # Emit (hash + stage or publish)
    # ------------------------------------------------------------------

    def prepare(self, event: MarketEventBase) -> MarketEventBase:
        """Return *event* with its payload_hash set."""
        payload = event.model_dump(mode="json", exclude=_UNHASHED_FIELDS)
        return event.model_copy(update={"payload_hash": compute_payload_hash(payload)})

    def emit(self, event: MarketEventBase) -> None:
        prepared = self.prepare(event)
        if self._uow is not None and self._uow.in_progress:
            self._staged.append(prepared)
        else:
            self._publish(prepared)

    def flush(self) -> None:
        """Publish every staged event in emission order."""
        for event in self._staged.drain():
            self._publish(event)

    def _publish(self, event: MarketEventBase) -> None:
        published = event.model_copy(update={"sequence": len(self._log) + 1})
        self._log.append(published)
        for handler in self._handlers[published.event_kind]:
            try:
                handler(published)
            except Exception:
                # The action already committed; a subscriber cannot undo it.
                logger.exception(
                    "Handler %r failed on %s event #%d.",
                    handler,
                    published.event_kind.value,
                    published.sequence,
                )

    # ------------------------------------------------------------------
    # Log access
    # ------------------------------------------------------------------

    def events(self, kind: EventKind | None = None) -> list[MarketEventBase]:
        """Return published events in order, optionally of one kind."""
        if kind is None:
            return list(self._log)
        return [e for e in self._log if e.event_kind == kind]

    @property
    def pending(self) -> int:
        """Number of events staged by the action in progress."""
        return len(self._staged)

    def verify(self, event: MarketEventBase) -> bool:
        """Return True if *event*'s payload_hash matches its content."""
        return self.prepare(event).payload_hash == event.payload_hash

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    @staticmethod
    def serialize(event: MarketEventBase) -> str:
        return event.model_dump_json()

    def receive(self, raw_json: bytes | str) -> MarketEventBase:
        """Deserialize and validate a raw JSON event.

        Determines the model from ``event_kind`` and checks the payload hash.
        """
        if isinstance(raw_json, bytes):
            raw_json = raw_json.decode("utf-8")

        try:
            data = json.loads(raw_json)
        except json.JSONDecodeError as exc:
            raise EventValidationError(f"Invalid JSON: {exc}") from exc

        if not isinstance(data, dict):
            raise EventValidationError(
                f"Event must be a JSON object, got {type(data).__name__}"
            )

        kind_str = data.get("event_kind")
        if not kind_str:
            raise EventValidationError("Missing event_kind field")

        try:
            kind = EventKind(kind_str)
        except ValueError as exc:
            raise EventValidationError(f"Unknown event_kind: {kind_str!r}") from exc

        try:
            event = EVENT_TYPE_MAP[kind].model_validate(data)
        except Exception as exc:
            raise EventValidationError(f"Event validation failed: {exc}") from exc

        if event.payload_hash and not self.verify(event):
            raise EventValidationError(
                f"Payload hash mismatch for {kind_str} event {event.event_id}"
            )
        return event
