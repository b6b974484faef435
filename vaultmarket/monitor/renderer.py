"""Rich terminal renderer for marketplace state.

Color scheme
------------
- green   : active listings, committed sales
- dim     : sold (inactive) records
- yellow  : price changes
- red     : unlistings
- cyan    : statistics and fee changes
"""

from __future__ import annotations

from collections.abc import Iterable

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from vaultmarket.models.events import EventKind, MarketEventBase
from vaultmarket.models.journal import JournalEntry
from vaultmarket.models.listings import Listing, ListingState

_STATE_ICONS: dict[ListingState, str] = {
    ListingState.LISTED: "[green]LISTED[/green]",
    ListingState.SOLD: "[dim]SOLD[/dim]",
    ListingState.UNLISTED: "[red]UNLISTED[/red]",
}

_EVENT_STYLES: dict[EventKind, str] = {
    EventKind.LISTED: "green",
    EventKind.SOLD: "bold green",
    EventKind.PRICE_CHANGED: "yellow",
    EventKind.UNLISTED: "red",
    EventKind.STATS_UPDATED: "cyan",
    EventKind.FEE_CHANGED: "bold cyan",
}

# Fields shared by every event; everything else is the event's payload.
_BASE_FIELDS = set(MarketEventBase.model_fields)


class MarketRenderer:
    """Renders marketplace state as Rich terminal output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def listings_table(self, listings: Iterable[Listing]) -> Table:
        table = Table(title="Listings", header_style="bold cyan", expand=True)
        table.add_column("Key", min_width=12)
        table.add_column("Seller")
        table.add_column("Price", justify="right")
        table.add_column("State", justify="center")
        for listing in listings:
            table.add_row(
                str(listing.key),
                listing.seller,
                str(listing.price),
                _STATE_ICONS[listing.state],
            )
        return table

    def events_table(self, events: Iterable[MarketEventBase]) -> Table:
        table = Table(title="Event Log", header_style="bold cyan", expand=True)
        table.add_column("#", style="dim", justify="right", width=4)
        table.add_column("Kind", min_width=14)
        table.add_column("Payload")
        for event in events:
            style = _EVENT_STYLES.get(event.event_kind, "")
            payload = event.model_dump(mode="json", exclude=_BASE_FIELDS)
            table.add_row(
                str(event.sequence),
                f"[{style}]{event.event_kind.value}[/{style}]",
                ", ".join(f"{k}={v}" for k, v in payload.items()),
            )
        return table

    def balances_table(self, balances: dict[str, int], title: str = "Balances") -> Table:
        table = Table(title=title, header_style="bold cyan")
        table.add_column("Account")
        table.add_column("Balance", justify="right")
        for account, amount in sorted(balances.items()):
            table.add_row(account, str(amount))
        return table

    def journal_table(self, entries: Iterable[JournalEntry]) -> Table:
        table = Table(title="Trade Journal", header_style="bold cyan", expand=True)
        table.add_column("Time", style="dim")
        table.add_column("Action")
        table.add_column("Key")
        table.add_column("Actor")
        table.add_column("Details")
        table.add_column("Hash", style="dim", width=14)
        for entry in entries:
            key = (
                f"{entry.collection}#{entry.asset_id}"
                if entry.asset_id is not None
                else "[dim]-[/dim]"
            )
            table.add_row(
                entry.timestamp_utc.strftime("%Y-%m-%d %H:%M:%S"),
                entry.action,
                key,
                entry.actor,
                ", ".join(f"{k}={v}" for k, v in sorted(entry.details.items())),
                entry.entry_hash[:12] + "...",
            )
        return table

    def print_chain_verification(self, valid: bool) -> None:
        if valid:
            self.console.print(
                Panel(
                    "[bold green]Journal hash chain is VALID[/bold green]",
                    border_style="green",
                )
            )
        else:
            self.console.print(
                Panel(
                    "[bold red]Journal hash chain is BROKEN[/bold red]\n"
                    "[dim]The journal may have been tampered with.[/dim]",
                    border_style="red",
                )
            )
