"""Transaction sync service - cursor-based /transactions/sync reconciliation.

For one item the engine pages through /transactions/sync from the stored
cursor until ``has_more`` is false. Each page is applied in a single
database transaction together with the page's ``next_cursor``:

1. removed  -> soft-delete (``deleted = True``)
2. added    -> insert, or update if the id is already stored
3. modified -> update, skipped if the id is unknown
4. balances of any accounts returned with the page
5. cursor upsert

So the stored cursor always marks the end of the last fully applied page.
If a page fails, nothing from it is written and the next attempt resumes
from that cursor. Re-applying a page is harmless because every step is
keyed by Plaid's transaction id.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import or_
from sqlalchemy.orm import Session

from config import settings
from database import atomic
from integrations.parsing_utils import parse_date, to_decimal, to_jsonable
from integrations.plaid_protocol import PlaidClientProtocol, TransactionsSyncPage
from models import Account, PlaidItem, Transaction, TransactionCursor
from models.utils import utc_now
from services.exceptions import SyncLeaseLostError
from services.sync_lock import item_sync_lock, renew

logger = logging.getLogger(__name__)


@dataclass
class SyncSummary:
    """Counts of entries processed during a sync."""

    added: int = 0
    modified: int = 0
    removed: int = 0

    def __iadd__(self, other: "SyncSummary") -> "SyncSummary":
        self.added += other.added
        self.modified += other.modified
        self.removed += other.removed
        return self

    def to_dict(self) -> dict[str, int]:
        return {"added": self.added, "modified": self.modified, "removed": self.removed}


def transaction_fields(txn: dict) -> dict:
    """Extract stored columns from a Plaid transaction dict.

    Every field is read defensively so new or missing Plaid fields never
    break a sync; the complete object is kept in ``raw_data``. The amount
    keeps Plaid's sign (positive = outflow).
    """
    pfc = txn.get("personal_finance_category") or {}
    amount = to_decimal(txn.get("amount"))
    location = txn.get("location")
    return {
        "plaid_account_id": txn.get("account_id"),
        "category": pfc.get("primary"),
        "subcategory": pfc.get("detailed"),
        "transaction_type": txn.get("payment_channel"),
        "name": txn.get("name"),
        "merchant_name": txn.get("merchant_name"),
        "amount": amount if amount is not None else Decimal("0"),
        "iso_currency_code": (
            txn.get("iso_currency_code") or txn.get("unofficial_currency_code")
        ),
        "date": parse_date(txn.get("date")) or parse_date(txn.get("authorized_date")),
        "authorized_date": parse_date(txn.get("authorized_date")),
        "pending": bool(txn.get("pending", False)),
        "payment_channel": txn.get("payment_channel"),
        "location": to_jsonable(location) if location else None,
        "raw_data": to_jsonable(txn),
    }


class TransactionSyncService:
    """Service for syncing and reconciling Plaid transactions."""

    def __init__(self, client: PlaidClientProtocol):
        self._client = client

    # ------------------------------------------------------------------
    # Cursor
    # ------------------------------------------------------------------

    @staticmethod
    def get_cursor(db: Session, item: PlaidItem) -> str | None:
        """Return the stored cursor for an item, or None before the first sync."""
        row = db.get(TransactionCursor, item.id)
        return row.cursor if row else None

    @staticmethod
    def _upsert_cursor(db: Session, item_pk: str, cursor: str) -> None:
        now = utc_now()
        row = db.get(TransactionCursor, item_pk)
        if row is None:
            db.add(TransactionCursor(item_id=item_pk, cursor=cursor, last_synced_at=now))
        else:
            row.cursor = cursor
            row.last_synced_at = now
        db.flush()

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    def sync_item(self, db: Session, item: PlaidItem) -> SyncSummary:
        """Run a full incremental sync for one item.

        Holds the item's sync lease for the whole run and renews it in the
        same commit as each page.

        Raises:
            SyncInProgressError: Another sync of this item did not finish in time.
            SyncLeaseLostError: The lease expired mid-run and was taken over;
                the page in flight is not committed.
            ProviderError: A page request failed; pages already committed stay.
        """
        item_pk = item.id
        plaid_item_id = item.item_id
        access_token = item.access_token
        ttl = settings.SYNC_LOCK_TTL_SECONDS

        summary = SyncSummary()
        pages = 0
        with item_sync_lock(db, item_pk, ttl_seconds=ttl) as owner:
            cursor = self.get_cursor(db, item)
            logger.info(
                "Syncing transactions for item %s (%s)",
                plaid_item_id, "resuming" if cursor else "initial",
            )

            while True:
                page = self._client.sync_transactions(access_token, cursor)
                with atomic(db):
                    if not renew(db, item_pk, owner, ttl):
                        logger.warning(
                            "Lost sync lease for item %s after %d pages; aborting",
                            plaid_item_id, pages,
                        )
                        raise SyncLeaseLostError(item_pk)
                    summary += self.apply_page(db, item, page)
                    self._upsert_cursor(db, item_pk, page.next_cursor)
                pages += 1
                cursor = page.next_cursor
                if not page.has_more:
                    break

        logger.info(
            "Item %s synced: %d pages, %d added, %d modified, %d removed",
            plaid_item_id, pages, summary.added, summary.modified, summary.removed,
        )
        return summary

    def apply_page(
        self, db: Session, item: PlaidItem, page: TransactionsSyncPage
    ) -> SyncSummary:
        """Apply one sync page to the store (flushed, not committed).

        Removal runs first so that an id both removed and added within the
        same page ends up present.
        """
        self._soft_delete(db, page.removed, item_pk=item.id)

        account_map = {
            account.account_id: account.id
            for account in db.query(Account).filter(Account.item_id == item.id)
        }

        for txn in page.added:
            self._apply_added(db, item, txn, account_map)
        db.flush()

        for txn in page.modified:
            self._apply_modified(db, txn, account_map)

        self._update_balances(db, item, page.accounts)
        db.flush()

        return SyncSummary(
            added=len(page.added),
            modified=len(page.modified),
            removed=len(page.removed),
        )

    def remove_transactions(
        self, db: Session, transaction_ids: list[str], item: PlaidItem | None = None
    ) -> int:
        """Soft-delete transactions by Plaid id and commit.

        When ``item`` is given, only that item's rows are touched.

        Returns:
            Number of ids requested for removal.
        """
        if not transaction_ids:
            return 0
        with atomic(db):
            self._soft_delete(db, transaction_ids, item_pk=item.id if item else None)
        logger.info("Soft-deleted %d transactions", len(transaction_ids))
        return len(transaction_ids)

    @staticmethod
    def list_transactions(
        db: Session,
        user_id: str,
        account_id: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        include_deleted: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Transaction], int]:
        """List a user's transactions, newest first.

        Soft-deleted rows are excluded unless ``include_deleted`` is set.
        ``account_id`` may be either the internal or the Plaid account id.

        Returns:
            Tuple of (page of rows, total matching rows)
        """
        query = db.query(Transaction).filter(Transaction.user_id == user_id)
        if not include_deleted:
            query = query.filter(Transaction.deleted.is_(False))
        if account_id:
            query = query.filter(
                or_(
                    Transaction.account_id == account_id,
                    Transaction.plaid_account_id == account_id,
                )
            )
        if start_date:
            query = query.filter(Transaction.date >= start_date)
        if end_date:
            query = query.filter(Transaction.date <= end_date)

        total = query.count()
        rows = (
            query.order_by(Transaction.date.desc(), Transaction.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return rows, total

    # ------------------------------------------------------------------
    # Internal: per-entry application
    # ------------------------------------------------------------------

    @staticmethod
    def _soft_delete(
        db: Session, transaction_ids: list[str], item_pk: str | None = None
    ) -> int:
        if not transaction_ids:
            return 0
        query = db.query(Transaction).filter(Transaction.transaction_id.in_(transaction_ids))
        if item_pk is not None:
            query = query.filter(Transaction.item_id == item_pk)
        return query.update({"deleted": True}, synchronize_session="fetch")

    @staticmethod
    def _find(db: Session, transaction_id: str) -> Transaction | None:
        return (
            db.query(Transaction)
            .filter(Transaction.transaction_id == transaction_id)
            .first()
        )

    @staticmethod
    def _assign(
        row: Transaction, fields: dict, account_map: dict[str, str]
    ) -> None:
        for key, value in fields.items():
            setattr(row, key, value)
        row.account_id = account_map.get(fields["plaid_account_id"])
        row.deleted = False

    def _apply_added(
        self,
        db: Session,
        item: PlaidItem,
        txn: dict,
        account_map: dict[str, str],
    ) -> None:
        transaction_id = txn.get("transaction_id")
        if not transaction_id:
            logger.warning("Skipping added transaction without transaction_id on item %s", item.item_id)
            return

        fields = transaction_fields(txn)
        if fields["date"] is None:
            logger.warning("Skipping added transaction %s without a date", transaction_id)
            return

        existing = self._find(db, transaction_id)
        if existing is not None:
            logger.warning(
                "Added transaction %s already stored; updating instead", transaction_id
            )
            self._assign(existing, fields, account_map)
            return

        row = Transaction(
            transaction_id=transaction_id,
            item_id=item.id,
            user_id=item.user_id,
        )
        self._assign(row, fields, account_map)
        db.add(row)
        # Flush so a repeat of this id later in the page is found as existing.
        db.flush()

    def _apply_modified(
        self, db: Session, txn: dict, account_map: dict[str, str]
    ) -> None:
        transaction_id = txn.get("transaction_id")
        existing = self._find(db, transaction_id) if transaction_id else None
        if existing is None:
            logger.warning(
                "Modified transaction %s not found; skipping", transaction_id
            )
            return

        fields = transaction_fields(txn)
        if fields["date"] is None:
            fields["date"] = existing.date
        self._assign(existing, fields, account_map)

    @staticmethod
    def _update_balances(db: Session, item: PlaidItem, accounts: list[dict]) -> None:
        """Refresh stored balances from the accounts returned with a page."""
        if not accounts:
            return
        stored = {
            account.account_id: account
            for account in db.query(Account).filter(Account.item_id == item.id)
        }
        for remote in accounts:
            account = stored.get(remote.get("account_id"))
            if account is None:
                logger.debug(
                    "Balance for unknown account %s on item %s ignored",
                    remote.get("account_id"), item.item_id,
                )
                continue
            balances = remote.get("balances") or {}
            account.balance_current = to_decimal(balances.get("current"))
            account.balance_available = to_decimal(balances.get("available"))
            account.balance_limit = to_decimal(balances.get("limit"))
            account.iso_currency_code = (
                balances.get("iso_currency_code") or account.iso_currency_code
            )
