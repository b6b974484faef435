"""vaultmarket CLI — Typer-based command-line interface.

Provides the ``vaultmarket`` command with subcommands for running the
settlement demo, inspecting the trade journal, and printing the effective
settings.

All output uses Rich for formatted terminal display.
"""
