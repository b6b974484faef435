"""Marketplace settings — env-driven.

Centralized configuration using pydantic-settings. Reads from a .env file
and VAULTMARKET_* environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MarketSettings(BaseSettings):
    """Marketplace configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export VAULTMARKET_ADMINISTRATOR=treasury
        export VAULTMARKET_FEE_PERCENTAGE=3
        export VAULTMARKET_JOURNAL_PATH=/data/journal.db

    Or via .env file::

        VAULTMARKET_ENVIRONMENT=production
        VAULTMARKET_REFUND_OVERPAYMENT=false
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="VAULTMARKET_",
        env_file_encoding="utf-8",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # Identities
    administrator: str = "admin"          # fee recipient, sole fee-setter
    holding_account: str = "vaultmarket"  # custodial owner of listed assets

    # Settlement
    fee_percentage: int = Field(default=2, ge=0, lt=100)
    refund_overpayment: bool = True

    # Storage
    journal_path: Path | None = None

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"
