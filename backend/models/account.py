"""Account model - a financial account owned by a Plaid Item."""

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utc_now


class Account(Base):
    """A bank, card, or loan account discovered under a PlaidItem.

    ``account_id`` is Plaid's identifier and is unique across all users.
    ``user_id`` duplicates the owning item's user for query convenience.
    """

    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    item_id = Column(
        String(36), ForeignKey("plaid_items.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(String, index=True, nullable=False)
    account_id = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    official_name = Column(String, nullable=True)
    mask = Column(String(4), nullable=True)  # last 4 digits
    type = Column(String, nullable=True)  # e.g., "depository", "credit"
    subtype = Column(String, nullable=True)  # e.g., "checking", "credit card"
    balance_current = Column(Numeric(18, 4), nullable=True)
    balance_available = Column(Numeric(18, 4), nullable=True)
    balance_limit = Column(Numeric(18, 4), nullable=True)
    iso_currency_code = Column(String(3), nullable=True)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(
        DateTime,
        default=utc_now,
        onupdate=utc_now,
    )

    # Relationships
    item = relationship("PlaidItem", back_populates="accounts")
    transactions = relationship("Transaction", back_populates="account")
