"""PlaidService - single entry point to the Plaid sync pipeline.

Bundles the link, sync, webhook and item services around one Plaid client.
The API layer receives it through :func:`get_plaid_service`, which tests
override with a service built on a mock client.
"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from database import atomic
from integrations.plaid_client import PlaidClient
from integrations.plaid_protocol import PlaidClientProtocol
from models import PlaidItem, Transaction
from services.item_service import ItemService
from services.link_service import LinkService
from services.transaction_sync_service import SyncSummary, TransactionSyncService
from services.webhook_service import WebhookService


class PlaidService:
    """Capability object exposing the Plaid operations used by the API."""

    def __init__(self, client: PlaidClientProtocol):
        self.client = client
        self.links = LinkService(client)
        self.sync = TransactionSyncService(client)
        self.webhooks = WebhookService(self.sync)

    def is_configured(self) -> bool:
        return self.client.is_configured()

    # Link & exchange

    def create_link_token(
        self,
        db: Session,
        user_id: str,
        client_user_id: Optional[str] = None,
        products: Optional[list[str]] = None,
        item_id: Optional[str] = None,
    ) -> dict:
        return self.links.create_link_token(
            db, user_id, client_user_id=client_user_id, products=products, item_id=item_id
        )

    def get_link_token(self, db: Session, link_token_id: str, user_id: str):
        return self.links.get_link_token(db, link_token_id, user_id)

    def exchange_public_token(
        self,
        db: Session,
        public_token: str,
        user_id: str,
        item_id: Optional[str] = None,
    ) -> dict:
        return self.links.exchange_public_token(db, public_token, user_id, item_id=item_id)

    # Webhooks & sync

    def handle_webhook(self, db: Session, payload: dict) -> dict:
        return self.webhooks.handle_webhook(db, payload)

    def sync_transactions(self, db: Session, item_id: str, user_id: str) -> SyncSummary:
        """Sync one of the user's items, looked up by Plaid item id."""
        item = ItemService.get_by_external_id(db, item_id, user_id=user_id)
        return self.sync.sync_item(db, item)

    def list_transactions(
        self,
        db: Session,
        user_id: str,
        account_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        include_deleted: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Transaction], int]:
        return self.sync.list_transactions(
            db,
            user_id,
            account_id=account_id,
            start_date=start_date,
            end_date=end_date,
            include_deleted=include_deleted,
            limit=limit,
            offset=offset,
        )

    # Items

    def list_items(self, db: Session, user_id: Optional[str] = None) -> list[PlaidItem]:
        return ItemService.list_items(db, user_id)

    def repair_item(
        self, db: Session, item_id: str, user_id: str
    ) -> tuple[PlaidItem, bool]:
        """Confirm a successful update-mode re-link for an item."""
        item = ItemService.get_by_external_id(db, item_id, user_id=user_id)
        with atomic(db):
            repaired = ItemService.mark_repaired(db, item)
        return item, repaired

    def delete_item(self, db: Session, item_id: str, user_id: str) -> None:
        """Revoke the item with Plaid and delete it with everything under it."""
        item = ItemService.get_by_external_id(db, item_id, user_id=user_id)
        with atomic(db):
            ItemService.delete_item(db, item, client=self.client)


def get_plaid_service() -> PlaidService:
    """Dependency for injecting the Plaid service (overridable in tests)."""
    return PlaidService(PlaidClient())
