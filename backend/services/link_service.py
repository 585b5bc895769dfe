"""Link service - Plaid Link token issuance and public token exchange."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from database import atomic
from integrations.parsing_utils import parse_iso_datetime, to_decimal
from integrations.plaid_protocol import PlaidClientProtocol
from models import Account, LinkToken, PlaidItem
from services.exceptions import LinkTokenNotFoundError
from services.item_service import ItemService

logger = logging.getLogger(__name__)


def _str_or_none(value) -> Optional[str]:
    # SDK enums (AccountType etc.) stringify to their value
    return str(value) if value is not None else None


class LinkService:
    """Service for linking institutions through Plaid Link."""

    def __init__(self, client: PlaidClientProtocol):
        self._client = client

    def create_link_token(
        self,
        db: Session,
        user_id: str,
        client_user_id: Optional[str] = None,
        products: Optional[list[str]] = None,
        item_id: Optional[str] = None,
    ) -> dict:
        """Create a Link token for a user and record it.

        When ``item_id`` names one of the user's items, an update-mode token
        is created for re-authenticating it and ``products`` is ignored.
        Plaid failures propagate as provider exceptions.

        Args:
            db: Database session (flushed, not committed)
            user_id: Owner of the token
            client_user_id: Identifier passed to Plaid; defaults to ``user_id``
            products: Plaid products to initialize
            item_id: Plaid item id for update mode

        Returns:
            Dict with ``link_token``, ``expiration`` and ``request_id``

        Raises:
            ItemNotFoundError: ``item_id`` does not match an item of the user.
        """
        access_token = None
        if item_id:
            item = ItemService.get_by_external_id(db, item_id, user_id=user_id)
            access_token = item.access_token

        result = self._client.create_link_token(
            client_user_id or user_id,
            products=products,
            access_token=access_token,
        )

        token = LinkToken(
            user_id=user_id,
            link_token=result["link_token"],
            expiration=parse_iso_datetime(result.get("expiration")),
            request_id=result.get("request_id"),
        )
        db.add(token)
        db.flush()

        logger.info(
            "Created %s link token for user %s",
            "update-mode" if item_id else "new-item", user_id,
        )
        return {
            "link_token": token.link_token,
            "expiration": token.expiration,
            "request_id": token.request_id,
        }

    @staticmethod
    def get_link_token(db: Session, link_token_id: str, user_id: str) -> LinkToken:
        """Return a stored link token owned by the user.

        Raises:
            LinkTokenNotFoundError: No such token for this user.
        """
        token = (
            db.query(LinkToken)
            .filter(LinkToken.id == link_token_id, LinkToken.user_id == user_id)
            .first()
        )
        if token is None:
            raise LinkTokenNotFoundError(link_token_id)
        return token

    def exchange_public_token(
        self,
        db: Session,
        public_token: str,
        user_id: str,
        item_id: Optional[str] = None,
    ) -> dict:
        """Exchange a public token and store the item with its accounts.

        All Plaid calls are made before anything is written. The item row and
        every account row are then committed as one unit, so a failure leaves
        neither behind.

        If the exchanged item (or ``item_id``, in update mode) is already one
        of the user's items, its access token and institution are refreshed,
        accounts are upserted, and the item returns to ``good``.

        Returns:
            Dict with ``item_id``, ``institution_name`` and ``accounts``
        """
        exchange = self._client.exchange_public_token(public_token)
        access_token = exchange["access_token"]
        external_item_id = exchange["item_id"]

        remote_item = self._client.get_item(access_token)
        institution_id = remote_item.get("institution_id")
        institution_name = None
        if institution_id:
            institution = self._client.get_institution(institution_id)
            institution_name = institution.get("name")
        remote_accounts = self._client.get_accounts(access_token)

        lookup_id = item_id or external_item_id
        item = (
            db.query(PlaidItem)
            .filter(PlaidItem.item_id == lookup_id, PlaidItem.user_id == user_id)
            .first()
        )

        with atomic(db):
            if item is not None:
                item.access_token = access_token
                item.institution_id = institution_id or item.institution_id
                item.institution_name = institution_name or item.institution_name
                ItemService.mark_repaired(db, item)
                logger.info("Re-linked item %s for user %s", item.item_id, user_id)
            else:
                item = PlaidItem(
                    user_id=user_id,
                    item_id=lookup_id,
                    access_token=access_token,
                    institution_id=institution_id,
                    institution_name=institution_name,
                )
                db.add(item)
                db.flush()
                logger.info(
                    "Linked item %s (%s) for user %s",
                    item.item_id, institution_name, user_id,
                )

            accounts = [
                self._upsert_account(db, item, remote) for remote in remote_accounts
            ]
            db.flush()

        return {
            "item_id": item.item_id,
            "institution_name": item.institution_name,
            "accounts": accounts,
        }

    @staticmethod
    def _upsert_account(db: Session, item: PlaidItem, remote: dict) -> Account:
        account_id = remote["account_id"]
        account = db.query(Account).filter(Account.account_id == account_id).first()
        if account is None:
            account = Account(account_id=account_id, item_id=item.id, user_id=item.user_id)
            db.add(account)

        balances = remote.get("balances") or {}
        account.name = remote.get("name") or remote.get("official_name") or account_id
        account.official_name = remote.get("official_name")
        account.mask = remote.get("mask")
        account.type = _str_or_none(remote.get("type"))
        account.subtype = _str_or_none(remote.get("subtype"))
        account.balance_current = to_decimal(balances.get("current"))
        account.balance_available = to_decimal(balances.get("available"))
        account.balance_limit = to_decimal(balances.get("limit"))
        account.iso_currency_code = balances.get("iso_currency_code")
        return account
