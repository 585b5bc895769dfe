"""Transaction model - a posted or pending ledger entry from Plaid."""

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utc_now


class Transaction(Base):
    """A transaction reported by /transactions/sync.

    ``amount`` keeps Plaid's sign convention unchanged: positive values are
    money leaving the account (debits), negative values are money coming in.

    Rows are never physically deleted by sync. Transactions Plaid reports as
    removed get ``deleted = True`` and drop out of default queries.
    """

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    transaction_id = Column(String, unique=True, index=True, nullable=False)
    item_id = Column(
        String(36), ForeignKey("plaid_items.id", ondelete="CASCADE"), nullable=False
    )
    account_id = Column(
        String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=True
    )
    plaid_account_id = Column(String, nullable=True)
    user_id = Column(String, index=True, nullable=False)
    category = Column(String, nullable=True)  # personal_finance_category.primary
    subcategory = Column(String, nullable=True)  # personal_finance_category.detailed
    transaction_type = Column(String, nullable=True)
    name = Column(String, nullable=True)
    merchant_name = Column(String, nullable=True)
    amount = Column(Numeric(18, 4), nullable=False)
    iso_currency_code = Column(String(3), nullable=True)
    date = Column(Date, nullable=False)
    authorized_date = Column(Date, nullable=True)
    pending = Column(Boolean, default=False, nullable=False)
    payment_channel = Column(String, nullable=True)
    location = Column(JSON, nullable=True)
    raw_data = Column(JSON, nullable=True)  # full Plaid transaction object
    deleted = Column(Boolean, default=False, nullable=False, index=True)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(
        DateTime,
        default=utc_now,
        onupdate=utc_now,
    )

    # Relationships
    item = relationship("PlaidItem", back_populates="transactions")
    account = relationship("Account", back_populates="transactions")
