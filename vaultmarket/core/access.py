"""Administrator capability.

"Is administrator" is modelled as an independent capability rather than a
base class, so any object with ``is_administrator`` can gate fee changes.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from vaultmarket.core.errors import NotAdministrator


@runtime_checkable
class AdministratorCapability(Protocol):
    """Protocol for the single identity that administers the market.

    ``administrator`` both sets the fee percentage and receives every fee.
    """

    @property
    def administrator(self) -> str:
        ...

    def is_administrator(self, identity: str) -> bool:
        ...


class SingleAdministrator:
    """Exactly one identity holds the administrator role."""

    def __init__(self, administrator: str) -> None:
        self._administrator = administrator

    @property
    def administrator(self) -> str:
        return self._administrator

    def is_administrator(self, identity: str) -> bool:
        return bool(identity) and identity == self._administrator


def require_administrator(access: AdministratorCapability, caller: str) -> None:
    """Raise ``NotAdministrator`` unless *caller* passes the capability check."""
    if not access.is_administrator(caller):
        raise NotAdministrator(f"{caller!r} is not the marketplace administrator.")
