"""Reference in-memory asset ledger.

Mirrors the usual non-fungible token rules: one owner per asset, per-asset
approvals and operator-wide approvals, pausable collections, and a
receiver callback on safe transfers.  Used by the tests and the demo CLI.
"""

from __future__ import annotations

import copy
import logging
from collections import Counter

from vaultmarket.primitives.base import AssetReceiver, AssetTransferError

logger = logging.getLogger(__name__)


class InMemoryAssetLedger:
    """Asset ownership keyed by ``(collection, asset_id)``.

    Examples
    --------
    >>> ledger = InMemoryAssetLedger()
    >>> ledger.mint("punks", 5, "alice")
    >>> ledger.owner_of("punks", 5)
    'alice'
    >>> ledger.balance_of("punks", "alice")
    1
    """

    def __init__(self) -> None:
        self._owners: dict[tuple[str, int], str] = {}
        self._approvals: dict[tuple[str, int], str] = {}
        # (collection, owner) -> operators approved for every asset
        self._operators: dict[tuple[str, str], set[str]] = {}
        self._paused: set[str] = set()
        self._receivers: dict[str, AssetReceiver] = {}

    # -- Administration ----------------------------------------------------

    def mint(self, collection: str, asset_id: int, owner: str) -> None:
        if asset_id < 0:
            raise AssetTransferError(f"Asset ids are non-negative, got {asset_id}.")
        key = (collection, asset_id)
        if key in self._owners:
            raise AssetTransferError(f"{collection}#{asset_id} already minted.")
        self._owners[key] = owner

    def pause(self, collection: str) -> None:
        self._paused.add(collection)

    def unpause(self, collection: str) -> None:
        self._paused.discard(collection)

    def register_receiver(self, account: str, receiver: AssetReceiver) -> None:
        self._receivers[account] = receiver

    # -- Approvals ---------------------------------------------------------

    def approve(self, owner: str, operator: str, collection: str, asset_id: int) -> None:
        if self._owners.get((collection, asset_id)) != owner:
            raise AssetTransferError(f"{owner!r} does not own {collection}#{asset_id}.")
        self._approvals[(collection, asset_id)] = operator

    def set_approval_for_all(
        self, owner: str, operator: str, collection: str, approved: bool = True
    ) -> None:
        operators = self._operators.setdefault((collection, owner), set())
        if approved:
            operators.add(operator)
        else:
            operators.discard(operator)

    def is_authorized(self, operator: str, collection: str, asset_id: int) -> bool:
        owner = self._owners.get((collection, asset_id))
        if owner is None:
            return False
        return (
            operator == owner
            or self._approvals.get((collection, asset_id)) == operator
            or operator in self._operators.get((collection, owner), set())
        )

    # -- Queries -----------------------------------------------------------

    def owner_of(self, collection: str, asset_id: int) -> str | None:
        return self._owners.get((collection, asset_id))

    def balance_of(self, collection: str, account: str) -> int:
        counts = Counter(
            owner for (coll, _), owner in self._owners.items() if coll == collection
        )
        return counts[account]

    # -- Transfer ----------------------------------------------------------

    def safe_transfer_from(
        self,
        operator: str,
        sender: str,
        recipient: str,
        collection: str,
        asset_id: int,
    ) -> None:
        key = (collection, asset_id)
        label = f"{collection}#{asset_id}"
        if collection in self._paused:
            raise AssetTransferError(f"Collection {collection!r} is paused.")
        if self._owners.get(key) != sender:
            raise AssetTransferError(f"{sender!r} does not own {label}.")
        if not self.is_authorized(operator, collection, asset_id):
            raise AssetTransferError(f"{operator!r} is not approved for {label}.")

        self._owners[key] = recipient
        prior_approval = self._approvals.pop(key, None)

        receiver = self._receivers.get(recipient)
        if receiver is not None and not receiver.on_asset_received(
            operator, sender, collection, asset_id
        ):
            self._owners[key] = sender
            if prior_approval is not None:
                self._approvals[key] = prior_approval
            raise AssetTransferError(f"{recipient!r} refused {label}.")
        logger.debug("Transferred %s %s -> %s.", label, sender, recipient)

    # -- Unit of work ------------------------------------------------------

    def snapshot(self) -> tuple:
        return (
            dict(self._owners),
            dict(self._approvals),
            copy.deepcopy(self._operators),
            set(self._paused),
        )

    def restore(self, state: tuple) -> None:
        owners, approvals, operators, paused = state
        self._owners = dict(owners)
        self._approvals = dict(approvals)
        self._operators = copy.deepcopy(operators)
        self._paused = set(paused)
