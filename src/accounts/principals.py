"""In-memory principal types.

A principal is either management oversight or an individual account
manager. The account-manager variant carries the (optional) id of the
``AccountManager`` record it reports on; management carries no link at all.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Principal:
    email: str
    display_name: str = ""

    @property
    def role(self) -> str | None:
        return None


@dataclass(frozen=True)
class ManagementPrincipal(Principal):

    @property
    def role(self) -> str:
        return "MANAGEMENT"


@dataclass(frozen=True)
class AccountManagerPrincipal(Principal):
    linked_entity_id: int | None = None

    @property
    def role(self) -> str:
        return "AM"

    @property
    def is_linked(self) -> bool:
        return self.linked_entity_id is not None
