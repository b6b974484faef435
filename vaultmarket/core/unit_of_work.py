"""All-or-nothing execution of marketplace actions.

Every participant exposes ``snapshot()`` / ``restore(state)``.  Entering
``UnitOfWork.atomic`` takes a savepoint of every participant; if the block
raises, each participant is restored to that savepoint and the exception
propagates.  Savepoints nest, so an action re-entered from inside another
action (for example by a payment recipient) only undoes its own effects
when it fails, while a failure of the outer action undoes everything.

Commit hooks run once the outermost block exits cleanly.  A failing hook
is logged and the remaining hooks still run; the caller sees success.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class Snapshotable(Protocol):
    """Protocol for state that can be rolled back to a savepoint."""

    def snapshot(self) -> Any:
        """Return an opaque copy of the current state."""
        ...

    def restore(self, state: Any) -> None:
        """Replace the current state with a value returned by ``snapshot``."""
        ...


class StagedRecords:
    """A buffer of records produced inside a unit of work.

    Records are held back until the outermost action commits, then handed
    out once by ``drain``.  Rolling back truncates the buffer to its length
    at the savepoint.
    """

    def __init__(self) -> None:
        self._items: list[Any] = []

    def append(self, item: Any) -> None:
        self._items.append(item)

    def drain(self) -> list[Any]:
        items, self._items = self._items, []
        return items

    def __len__(self) -> int:
        return len(self._items)

    def snapshot(self) -> int:
        return len(self._items)

    def restore(self, state: int) -> None:
        del self._items[state:]


class UnitOfWork:
    """Coordinates savepoints across every registered participant."""

    def __init__(self) -> None:
        self._participants: list[Snapshotable] = []
        self._commit_hooks: list[Callable[[], None]] = []
        self._depth = 0

    def register(self, participant: Snapshotable) -> None:
        """Add a participant whose state is covered by every savepoint."""
        if not isinstance(participant, Snapshotable):
            raise TypeError(
                f"{type(participant).__name__} does not implement snapshot()/restore()"
            )
        self._participants.append(participant)

    def on_commit(self, hook: Callable[[], None]) -> None:
        """Run *hook* every time an outermost action commits."""
        self._commit_hooks.append(hook)

    @property
    def in_progress(self) -> bool:
        return self._depth > 0

    @property
    def depth(self) -> int:
        return self._depth

    @contextmanager
    def atomic(self, action: str) -> Iterator[None]:
        """Run the enclosed block as one indivisible action."""
        savepoint = [(p, p.snapshot()) for p in self._participants]
        self._depth += 1
        logger.debug("Savepoint for %s at depth %d.", action, self._depth)
        try:
            yield
        except Exception:
            for participant, state in reversed(savepoint):
                participant.restore(state)
            logger.warning("Rolled back %s at depth %d.", action, self._depth)
            raise
        finally:
            self._depth -= 1

        if self._depth == 0:
            for hook in self._commit_hooks:
                try:
                    hook()
                except Exception:
                    # The action already committed; a hook cannot undo it.
                    logger.exception("Commit hook %r failed after %s.", hook, action)
