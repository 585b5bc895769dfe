"""Item service - PlaidItem lookup, status transitions, and removal.

Item status is only changed here. Webhooks drive transitions through
:meth:`ItemService.transition`; the Link update-mode flow returns an item
to ``good`` through :meth:`ItemService.mark_repaired`.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from integrations.exceptions import ProviderError
from integrations.plaid_protocol import PlaidClientProtocol
from models import PlaidItem
from models.plaid_item import (
    ITEM_STATUS_ERROR,
    ITEM_STATUS_GOOD,
    ITEM_STATUS_PENDING_EXPIRATION,
    ITEM_STATUS_REVOKED,
)
from services.exceptions import ItemNotFoundError

logger = logging.getLogger(__name__)

# Transitions a webhook may cause. ``good`` is deliberately absent as a
# target: only an explicit update-mode success returns an item to good.
# ``revoked`` has no outgoing transitions.
WEBHOOK_TRANSITIONS: dict[str, frozenset[str]] = {
    ITEM_STATUS_GOOD: frozenset(
        {ITEM_STATUS_ERROR, ITEM_STATUS_PENDING_EXPIRATION, ITEM_STATUS_REVOKED}
    ),
    ITEM_STATUS_ERROR: frozenset({ITEM_STATUS_ERROR, ITEM_STATUS_REVOKED}),
    ITEM_STATUS_PENDING_EXPIRATION: frozenset(
        {ITEM_STATUS_ERROR, ITEM_STATUS_PENDING_EXPIRATION, ITEM_STATUS_REVOKED}
    ),
    ITEM_STATUS_REVOKED: frozenset(),
}

# States from which an update-mode re-link may restore ``good``.
REPAIRABLE_STATUSES = frozenset(
    {ITEM_STATUS_GOOD, ITEM_STATUS_ERROR, ITEM_STATUS_PENDING_EXPIRATION}
)


class ItemService:
    """Service for PlaidItem state."""

    @staticmethod
    def get_by_external_id(
        db: Session, item_id: str, user_id: Optional[str] = None
    ) -> PlaidItem:
        """Return the item with Plaid item id ``item_id``.

        When ``user_id`` is given, an item owned by someone else is treated
        as missing.

        Raises:
            ItemNotFoundError: If no such item is stored for the user.
        """
        query = db.query(PlaidItem).filter(PlaidItem.item_id == item_id)
        if user_id is not None:
            query = query.filter(PlaidItem.user_id == user_id)
        item = query.first()
        if item is None:
            raise ItemNotFoundError(item_id)
        return item

    @staticmethod
    def list_items(db: Session, user_id: Optional[str] = None) -> list[PlaidItem]:
        """List items, newest first, optionally restricted to one user."""
        query = db.query(PlaidItem)
        if user_id is not None:
            query = query.filter(PlaidItem.user_id == user_id)
        return query.order_by(PlaidItem.created_at.desc()).all()

    @staticmethod
    def transition(
        db: Session,
        item: PlaidItem,
        status: str,
        error: Optional[dict] = None,
    ) -> bool:
        """Apply a webhook-driven status change.

        Disallowed transitions (anything out of ``revoked``, or a webhook
        trying to set ``good``) are logged and ignored.

        Args:
            db: Database session (flushed, not committed)
            item: The item to update
            status: Target status
            error: Plaid error object, stored only for ``error``

        Returns:
            True if the item changed, False if the transition was ignored.
        """
        allowed = WEBHOOK_TRANSITIONS.get(item.status, frozenset())
        if status not in allowed:
            logger.warning(
                "Ignoring status transition %s -> %s for item %s",
                item.status, status, item.item_id,
            )
            return False

        previous = item.status
        item.status = status
        if status == ITEM_STATUS_ERROR:
            item.error = error
        db.flush()
        logger.info("Item %s status %s -> %s", item.item_id, previous, status)
        return True

    @staticmethod
    def mark_repaired(db: Session, item: PlaidItem) -> bool:
        """Return an item to ``good`` after a successful update-mode re-link.

        Returns:
            True if the item is now good, False if it was revoked.
        """
        if item.status not in REPAIRABLE_STATUSES:
            logger.warning(
                "Cannot repair item %s in status %s", item.item_id, item.status
            )
            return False
        previous = item.status
        item.status = ITEM_STATUS_GOOD
        item.error = None
        db.flush()
        if previous != ITEM_STATUS_GOOD:
            logger.info("Item %s repaired (%s -> good)", item.item_id, previous)
        return True

    @staticmethod
    def delete_item(
        db: Session,
        item: PlaidItem,
        client: Optional[PlaidClientProtocol] = None,
    ) -> None:
        """Remove an item together with its accounts, transactions and cursor.

        The access token is revoked with Plaid first when a client is given;
        a failure there is logged and the local delete proceeds.
        """
        if client is not None:
            try:
                client.remove_item(item.access_token)
            except ProviderError as e:
                logger.warning(
                    "Failed to remove Plaid item %s remotely (removing locally anyway): %s",
                    item.item_id, e,
                )

        db.delete(item)
        db.flush()
        logger.info("Deleted item %s", item.item_id)
