"""TransactionCursor model - per-item /transactions/sync position."""

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from database import Base
from models.utils import utc_now


class TransactionCursor(Base):
    """The last ``next_cursor`` fully applied for an item.

    Keyed by item so there is at most one row per item.
    """

    __tablename__ = "plaid_transaction_cursors"

    item_id = Column(
        String(36), ForeignKey("plaid_items.id", ondelete="CASCADE"), primary_key=True
    )
    cursor = Column(Text, nullable=True)
    last_synced_at = Column(DateTime, default=utc_now)

    # Relationships
    item = relationship("PlaidItem", back_populates="cursor")
