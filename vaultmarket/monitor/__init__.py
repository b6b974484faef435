"""Read-only terminal views over marketplace state.

Modules
-------
renderer
    ``MarketRenderer`` turns listings, events, balances, and journal
    entries into Rich tables.  It never mutates what it displays.
"""
