"""Production configuration guard — enforces hard constraints in production.

Runs once when a Settlement Engine is built and fails hard (raises
``ProductionConfigError``) if the settings could leave the marketplace
in an unsafe state.
"""

from __future__ import annotations

import logging

from vaultmarket.config import MarketSettings

logger = logging.getLogger(__name__)


class ProductionConfigError(RuntimeError):
    """Raised when production configuration constraints are violated.

    The marketplace cannot safely start in production with the current
    settings.  It must not be caught and ignored.
    """


def enforce_production_constraints(settings: MarketSettings) -> None:
    """Validate all production-critical configuration constraints.

    Constraints enforced
    --------------------
    1. Debug mode must be disabled.
    2. An administrator identity must be configured.
    3. The administrator must not be the holding account, otherwise fees
       would be paid into custody and be indistinguishable from escrow.

    Raises
    ------
    ProductionConfigError
        If any production constraint is violated.
    """
    if not settings.is_production:
        return

    violations: list[str] = []

    if settings.debug:
        violations.append(
            "debug=True is not allowed in production. "
            "Set VAULTMARKET_DEBUG=false."
        )

    if not settings.administrator:
        violations.append(
            "administrator is empty. Set VAULTMARKET_ADMINISTRATOR."
        )
    elif settings.administrator == settings.holding_account:
        violations.append(
            "administrator must differ from holding_account "
            f"({settings.holding_account!r})."
        )

    if violations:
        msg = "Production configuration violations:\n" + "\n".join(
            f"  - {v}" for v in violations
        )
        logger.critical(msg)
        raise ProductionConfigError(msg)

    logger.info("Production constraints verified.")
