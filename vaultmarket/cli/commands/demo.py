"""``vaultmarket demo`` — run the marketplace against in-memory ledgers.

Mints a small collection, lists it, reprices, sells (one exact payment and
one overpayment), unlists, changes the fee, and shows a rejected repeat
purchase, then prints the event log, listings, and balances.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from vaultmarket.config import MarketSettings
from vaultmarket.core.errors import MarketError
from vaultmarket.core.settlement import SettlementEngine
from vaultmarket.primitives import InMemoryAssetLedger, InMemoryPaymentLedger
from vaultmarket.monitor.renderer import MarketRenderer

console = Console()

COLLECTION = "demo-punks"
SELLER = "alice"
BUYER = "bob"


def demo_cmd(
    fee: int = typer.Option(
        None,
        "--fee",
        "-f",
        help="Initial fee percentage (defaults to VAULTMARKET_FEE_PERCENTAGE).",
    ),
    journal: Path = typer.Option(
        None,
        "--journal",
        "-j",
        help="Record committed actions to this journal database.",
    ),
) -> None:
    """Run the demo scenarios and print the resulting state."""
    overrides: dict = {}
    if fee is not None:
        overrides["fee_percentage"] = fee
    if journal is not None:
        overrides["journal_path"] = journal
    settings = MarketSettings(**overrides)

    assets = InMemoryAssetLedger()
    payments = InMemoryPaymentLedger()
    engine = SettlementEngine(assets, payments, settings)
    renderer = MarketRenderer(console=console)

    console.print()
    console.print(
        Panel(
            f"[bold]vaultmarket demo[/bold]\n\n"
            f"Administrator: {engine.administrator}   "
            f"Holding account: {engine.holding_account}   "
            f"Fee: {engine.fee_percentage}%",
            border_style="cyan",
            padding=(1, 2),
        )
    )

    for asset_id in range(3):
        assets.mint(COLLECTION, asset_id, SELLER)
    assets.set_approval_for_all(SELLER, engine.holding_account, COLLECTION)
    payments.deposit(BUYER, 1_000)

    steps = [
        ("alice lists #0 at 100", lambda: engine.list(COLLECTION, 0, SELLER, 100)),
        ("alice lists #1 at 250", lambda: engine.list(COLLECTION, 1, SELLER, 250)),
        ("alice lists #2 at 80", lambda: engine.list(COLLECTION, 2, SELLER, 80)),
        ("alice reprices #1 to 200", lambda: engine.change_price(COLLECTION, 1, SELLER, 200)),
        ("bob buys #0 paying 100", lambda: engine.buy(COLLECTION, 0, BUYER, 100)),
        (
            "admin raises the fee to 5%",
            lambda: engine.set_fee_percentage(engine.administrator, 5),
        ),
        ("bob buys #1 paying 220", lambda: engine.buy(COLLECTION, 1, BUYER, 220)),
        ("alice unlists #2", lambda: engine.unlist(COLLECTION, 2, SELLER)),
        ("bob buys #0 again", lambda: engine.buy(COLLECTION, 0, BUYER, 100)),
    ]
    for label, step in steps:
        try:
            step()
        except MarketError as exc:
            console.print(f"[red]x[/red] {label}: [bold red]{exc.code}[/bold red] {exc}")
        else:
            console.print(f"[green]✓[/green] {label}")

    console.print()
    console.print(renderer.events_table(engine.bus.events()))
    console.print(renderer.listings_table(engine.registry.listings(COLLECTION)))
    console.print(
        renderer.balances_table(
            {
                account: payments.balance_of(account)
                for account in (SELLER, BUYER, engine.administrator, engine.holding_account)
            }
        )
    )

    stats = engine.collection_stats(COLLECTION)
    console.print(
        Panel(
            f"[bold]Listings:[/bold] {stats.total_listings}   "
            f"[bold]Sales:[/bold] {stats.total_sales}   "
            f"[bold]Custody:[/bold] {engine.custodian.holdings(COLLECTION)}",
            title=f"[bold]{COLLECTION}[/bold]",
            border_style="green",
        )
    )
    if engine.journal is not None:
        console.print(f"[dim]Journal written to {engine.journal.db_path}[/dim]")
