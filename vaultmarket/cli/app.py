"""Main Typer application — imports and registers all CLI commands.

Entry point: ``vaultmarket`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from vaultmarket.cli.commands.demo import demo_cmd
from vaultmarket.cli.commands.journal_cmd import journal_cmd
from vaultmarket.config import MarketSettings

app = typer.Typer(
    name="vaultmarket",
    help="vaultmarket: fixed-price NFT marketplace with custody and fee settlement.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def configure(
    log_level: str = typer.Option(
        None, "--log-level", help="Override VAULTMARKET_LOG_LEVEL."
    ),
) -> None:
    """Configure logging before any command runs."""
    level = (log_level or MarketSettings().log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


# Register subcommands
app.command(name="demo", help="Run list / buy / unlist scenarios in memory.")(demo_cmd)
app.command(name="journal", help="Show the trade journal.")(journal_cmd)


@app.command(name="settings", help="Print the effective marketplace settings.")
def settings_cmd() -> None:
    """Print every setting after environment and .env overrides."""
    console = Console()
    settings = MarketSettings()
    table = Table(title="vaultmarket settings", header_style="bold cyan")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for name, value in settings.model_dump().items():
        table.add_row(name, "[dim]unset[/dim]" if value is None else str(value))
    console.print(table)
    if settings.is_production:
        console.print("[bold yellow]Production mode: guard constraints apply.[/bold yellow]")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
