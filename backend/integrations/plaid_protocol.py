"""Contract between the sync services and the Plaid API.

The services only depend on :class:`PlaidClientProtocol`, so tests can
substitute an in-memory client for the real SDK wrapper.
"""

from dataclasses import dataclass, field
from typing import Protocol


@dataclass
class TransactionsSyncPage:
    """One page of /transactions/sync output.

    ``added`` and ``modified`` hold full Plaid transaction dicts;
    ``removed`` holds only the removed transaction ids.
    """

    added: list[dict] = field(default_factory=list)
    modified: list[dict] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    next_cursor: str = ""
    has_more: bool = False
    accounts: list[dict] = field(default_factory=list)  # accounts with current balances


class PlaidClientProtocol(Protocol):
    """Operations the sync pipeline needs from Plaid."""

    def is_configured(self) -> bool:
        """Return True if client credentials are present."""
        ...

    def create_link_token(
        self,
        client_user_id: str,
        products: list[str] | None = None,
        access_token: str | None = None,
    ) -> dict:
        """Create a Link token; returns ``link_token``, ``expiration``, ``request_id``."""
        ...

    def exchange_public_token(self, public_token: str) -> dict:
        """Exchange a public token; returns ``access_token`` and ``item_id``."""
        ...

    def get_item(self, access_token: str) -> dict:
        """Return the /item/get ``item`` object."""
        ...

    def get_institution(self, institution_id: str) -> dict:
        """Return the /institutions/get_by_id ``institution`` object."""
        ...

    def get_accounts(self, access_token: str) -> list[dict]:
        """Return the /accounts/get ``accounts`` list."""
        ...

    def sync_transactions(
        self, access_token: str, cursor: str | None = None
    ) -> TransactionsSyncPage:
        """Fetch one /transactions/sync page starting at ``cursor``."""
        ...

    def remove_item(self, access_token: str) -> None:
        """Revoke the access token via /item/remove."""
        ...
