"""vaultmarket: fixed-price marketplace for non-fungible assets.

Sellers deposit an asset into custody and set a price; a buyer pays at
least that price and the marketplace atomically splits it between the
administrator (fee) and the seller (proceeds) and releases the asset.

  - Listing Registry with seller-only mutation
  - Custodian over any asset ledger, with the asset-receiver capability
  - Fee Policy with floor arithmetic, administrator-gated changes
  - Settlement Engine: every action all-or-nothing, re-entrancy safe
  - Running per-collection statistics
  - Ordered notification log and an optional hash-chained trade journal
"""

__version__ = "0.1.0"
__description__ = "Fixed-price NFT marketplace with custody and fee settlement"

from vaultmarket.config import MarketSettings
from vaultmarket.core.settlement import SettlementEngine
from vaultmarket.cli.app import app as cli

__all__ = ["MarketSettings", "SettlementEngine", "cli", "__version__"]
