"""Webhook service - record and dispatch Plaid webhooks.

Every delivery is committed to ``plaid_webhooks`` before any processing so
the audit trail survives a failing handler. Exceptions from the handlers
propagate to the caller; Plaid redelivers on a non-2xx response and every
handler is safe to repeat.
"""

import logging

from sqlalchemy.orm import Session

from database import atomic
from models import WebhookEvent
from models.plaid_item import (
    ITEM_STATUS_ERROR,
    ITEM_STATUS_PENDING_EXPIRATION,
    ITEM_STATUS_REVOKED,
)
from services.item_service import ItemService
from services.transaction_sync_service import TransactionSyncService

logger = logging.getLogger(__name__)

WEBHOOK_TYPE_TRANSACTIONS = "TRANSACTIONS"
WEBHOOK_TYPE_ITEM = "ITEM"

# TRANSACTIONS codes that trigger a full incremental sync
SYNC_TRIGGER_CODES = frozenset(
    {
        "INITIAL_UPDATE",
        "HISTORICAL_UPDATE",
        "DEFAULT_UPDATE",
        "SYNC_UPDATES_AVAILABLE",
    }
)

# ITEM codes mapped to the status they move the item to
ITEM_STATUS_CODES: dict[str, str] = {
    "ERROR": ITEM_STATUS_ERROR,
    "PENDING_EXPIRATION": ITEM_STATUS_PENDING_EXPIRATION,
    "USER_PERMISSION_REVOKED": ITEM_STATUS_REVOKED,
}


class WebhookService:
    """Service for incoming Plaid webhooks."""

    def __init__(self, sync_service: TransactionSyncService):
        self._sync_service = sync_service

    def handle_webhook(self, db: Session, payload: dict) -> dict:
        """Record a webhook and dispatch it by type and code.

        Unknown types and codes are logged and acknowledged without touching
        any item.

        Args:
            db: Database session
            payload: Webhook JSON body as received

        Returns:
            ``{"success": True}``

        Raises:
            ItemNotFoundError: The referenced item is not stored.
            ProviderError: A triggered sync failed.
        """
        webhook_type = payload.get("webhook_type")
        webhook_code = payload.get("webhook_code")
        item_id = payload.get("item_id")

        self.record_event(db, payload)
        logger.info(
            "Received Plaid webhook %s/%s for item %s",
            webhook_type, webhook_code, item_id,
        )

        if webhook_type == WEBHOOK_TYPE_TRANSACTIONS:
            self._handle_transactions(db, webhook_code, item_id, payload)
        elif webhook_type == WEBHOOK_TYPE_ITEM:
            self._handle_item(db, webhook_code, item_id, payload)
        else:
            logger.warning("Unhandled webhook type: %s", webhook_type)

        return {"success": True}

    @staticmethod
    def record_event(db: Session, payload: dict) -> WebhookEvent:
        """Persist and commit the audit row for a delivery."""
        removed = payload.get("removed_transactions")
        event = WebhookEvent(
            item_id=payload.get("item_id"),
            webhook_type=payload.get("webhook_type"),
            webhook_code=payload.get("webhook_code"),
            error=payload.get("error"),
            new_transactions=payload.get("new_transactions"),
            removed_transactions=list(removed) if removed else None,
            payload=payload,
        )
        with atomic(db):
            db.add(event)
        return event

    def _handle_transactions(
        self, db: Session, webhook_code: str, item_id: str, payload: dict
    ) -> None:
        item = ItemService.get_by_external_id(db, item_id)

        if webhook_code in SYNC_TRIGGER_CODES:
            self._sync_service.sync_item(db, item)
        elif webhook_code == "TRANSACTIONS_REMOVED":
            self._sync_service.remove_transactions(
                db, list(payload.get("removed_transactions") or []), item=item
            )
        else:
            logger.warning("Unhandled TRANSACTIONS webhook code: %s", webhook_code)

    def _handle_item(
        self, db: Session, webhook_code: str, item_id: str, payload: dict
    ) -> None:
        item = ItemService.get_by_external_id(db, item_id)

        status = ITEM_STATUS_CODES.get(webhook_code)
        if status is not None:
            with atomic(db):
                ItemService.transition(db, item, status, error=payload.get("error"))
        elif webhook_code == "LOGIN_REPAIRED":
            logger.info(
                "Item %s reported LOGIN_REPAIRED; status stays %s until re-linked",
                item_id, item.status,
            )
        else:
            logger.warning("Unhandled ITEM webhook code: %s", webhook_code)
