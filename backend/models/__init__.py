"""SQLAlchemy ORM models."""

from .account import Account
from .link_token import LinkToken
from .plaid_item import PlaidItem
from .sync_lock import SyncLock
from .transaction import Transaction
from .transaction_cursor import TransactionCursor
from .utils import generate_uuid
from .webhook_event import WebhookEvent

__all__ = ["Account", "LinkToken", "PlaidItem", "SyncLock", "Transaction", "TransactionCursor", "WebhookEvent", "generate_uuid"]
