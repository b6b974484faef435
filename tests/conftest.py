"""Shared test fixtures for vaultmarket."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from vaultmarket.config import MarketSettings
from vaultmarket.core.settlement import SettlementEngine
from vaultmarket.core.trade_journal import TradeJournal
from vaultmarket.models.listings import Listing
from vaultmarket.primitives import InMemoryAssetLedger, InMemoryPaymentLedger

COLLECTION = "punks"
ADMIN = "admin"
HOLDING = "vaultmarket"


@pytest.fixture
def settings() -> MarketSettings:
    """Deterministic settings that ignore the environment and any .env file."""
    return MarketSettings(
        _env_file=None,
        administrator=ADMIN,
        holding_account=HOLDING,
        fee_percentage=2,
    )


@pytest.fixture
def assets() -> InMemoryAssetLedger:
    return InMemoryAssetLedger()


@pytest.fixture
def payments() -> InMemoryPaymentLedger:
    ledger = InMemoryPaymentLedger()
    ledger.deposit("bob", 10_000)
    ledger.deposit("carol", 10_000)
    return ledger


@pytest.fixture
def engine(
    assets: InMemoryAssetLedger,
    payments: InMemoryPaymentLedger,
    settings: MarketSettings,
) -> SettlementEngine:
    """Provide a SettlementEngine wired to fresh in-memory ledgers."""
    return SettlementEngine(assets, payments, settings)


@pytest.fixture
def journal(tmp_path: Path) -> TradeJournal:
    """Provide a fresh TradeJournal backed by a temp SQLite database."""
    return TradeJournal(tmp_path / "journal.db")


@pytest.fixture
def mint(assets: InMemoryAssetLedger) -> Callable[..., None]:
    """Factory fixture: mint an asset and approve the holding account for it."""

    def _factory(asset_id: int, owner: str = "alice", collection: str = COLLECTION) -> None:
        assets.mint(collection, asset_id, owner)
        assets.set_approval_for_all(owner, HOLDING, collection)

    return _factory


@pytest.fixture
def listed(
    engine: SettlementEngine, mint: Callable[..., None]
) -> Callable[..., Listing]:
    """Factory fixture: mint, approve, and list an asset in one call."""

    def _factory(
        asset_id: int = 5,
        price: int = 100,
        seller: str = "alice",
        collection: str = COLLECTION,
    ) -> Listing:
        mint(asset_id, seller, collection)
        return engine.list(collection, asset_id, seller, price)

    return _factory
