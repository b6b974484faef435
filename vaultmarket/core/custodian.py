"""Custodian — moves assets into and out of the marketplace holding account.

The holding account is the custodial owner of every actively listed asset.
Transfers go through the external asset ledger with the holding account
acting as operator, so the seller must have approved it beforehand.
"""

from __future__ import annotations

import logging

from vaultmarket.core.errors import TransferRejected
from vaultmarket.primitives.base import AssetLedger, AssetTransferError

logger = logging.getLogger(__name__)


class Custodian:
    """Two-way custody transfers plus the asset-receiver capability.

    Parameters
    ----------
    assets:
        The external asset ledger.
    holding_account:
        Identity of the marketplace holding account.  The custodian
        registers itself as that account's asset receiver.
    """

    def __init__(self, assets: AssetLedger, holding_account: str) -> None:
        self._assets = assets
        self._holding_account = holding_account
        # Keys currently being pulled into custody; only these are accepted.
        self._incoming: set[tuple[str, int]] = set()
        assets.register_receiver(holding_account, self)

    @property
    def holding_account(self) -> str:
        return self._holding_account

    def take_custody(self, collection: str, asset_id: int, owner: str) -> None:
        """Move the asset from *owner* into the holding account."""
        key = (collection, asset_id)
        self._incoming.add(key)
        try:
            self._transfer(owner, self._holding_account, collection, asset_id)
        finally:
            self._incoming.discard(key)
        logger.debug("Took custody of %s#%s from %s.", collection, asset_id, owner)

    def release_custody(self, collection: str, asset_id: int, to: str) -> None:
        """Move the asset from the holding account to *to*."""
        self._transfer(self._holding_account, to, collection, asset_id)
        logger.debug("Released custody of %s#%s to %s.", collection, asset_id, to)

    def holds(self, collection: str, asset_id: int) -> bool:
        return self._assets.owner_of(collection, asset_id) == self._holding_account

    def holdings(self, collection: str) -> int:
        """How many assets of *collection* the holding account owns."""
        return self._assets.balance_of(collection, self._holding_account)

    # -- AssetReceiver -----------------------------------------------------

    def on_asset_received(
        self, operator: str, sender: str, collection: str, asset_id: int
    ) -> bool:
        """Accept only pushes the marketplace itself initiated."""
        pulled = (collection, asset_id) in self._incoming
        if operator == self._holding_account and pulled:
            return True
        logger.warning(
            "Refusing unsolicited %s#%s from %s (operator %s).",
            collection,
            asset_id,
            sender,
            operator,
        )
        return False

    def _transfer(
        self, sender: str, recipient: str, collection: str, asset_id: int
    ) -> None:
        try:
            self._assets.safe_transfer_from(
                self._holding_account, sender, recipient, collection, asset_id
            )
        except AssetTransferError as exc:
            raise TransferRejected(
                f"Asset transfer of {collection}#{asset_id} "
                f"from {sender!r} to {recipient!r} rejected: {exc}"
            ) from exc
