"""``vaultmarket journal`` — show the trade journal.

Lists committed actions from the SQLite journal, optionally for one
collection, and optionally verifies the hash chain first.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from vaultmarket.core.trade_journal import JournalIntegrityError, TradeJournal
from vaultmarket.monitor.renderer import MarketRenderer

console = Console()


def journal_cmd(
    journal_db: Path = typer.Option(
        Path(".vaultmarket/journal.db"),
        "--db",
        "-d",
        help="Path to the journal SQLite database.",
    ),
    collection: str = typer.Option(
        None,
        "--collection",
        "-c",
        help="Only show entries for this collection.",
    ),
    verify_chain: bool = typer.Option(
        False,
        "--verify",
        "-V",
        help="Verify the hash chain integrity before displaying.",
    ),
) -> None:
    """Show journal entries in commit order."""
    if not journal_db.exists():
        console.print(f"[bold red]Journal not found:[/bold red] {journal_db}")
        console.print("[dim]Record one with: vaultmarket demo --journal PATH[/dim]")
        raise typer.Exit(code=1)

    journal = TradeJournal(journal_db)
    renderer = MarketRenderer(console=console)

    if verify_chain:
        console.print("[bold cyan]Verifying hash chain...[/bold cyan]")
        try:
            renderer.print_chain_verification(journal.verify_chain())
        except JournalIntegrityError as exc:
            console.print(f"[bold red]Chain verification failed:[/bold red] {exc}")
            renderer.print_chain_verification(False)
            raise typer.Exit(code=2)

    entries = journal.entries(collection)
    if not entries:
        console.print("[dim]No journal entries.[/dim]")
        return
    console.print(renderer.journal_table(entries))
