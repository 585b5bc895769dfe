"""PlaidItem model - one linked institution connection."""

from sqlalchemy import JSON, Column, DateTime, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utc_now

ITEM_STATUS_GOOD = "good"
ITEM_STATUS_ERROR = "error"
ITEM_STATUS_PENDING_EXPIRATION = "pending_expiration"
ITEM_STATUS_REVOKED = "revoked"

ITEM_STATUSES = (
    ITEM_STATUS_GOOD,
    ITEM_STATUS_ERROR,
    ITEM_STATUS_PENDING_EXPIRATION,
    ITEM_STATUS_REVOKED,
)


class PlaidItem(Base):
    """A Plaid Item representing a linked financial institution.

    Each institution linked via Plaid Link gets its own access_token.
    ``item_id`` is Plaid's identifier and is unique across all users.
    Status changes go through ``ItemService`` only.
    """

    __tablename__ = "plaid_items"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String, index=True, nullable=False)
    item_id = Column(String, unique=True, index=True, nullable=False)
    access_token = Column(String, nullable=False)
    institution_id = Column(String, nullable=True)
    institution_name = Column(String, nullable=True)
    status = Column(String, nullable=False, default=ITEM_STATUS_GOOD)
    error = Column(JSON, nullable=True)  # Plaid error object from the last ERROR webhook
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(
        DateTime,
        default=utc_now,
        onupdate=utc_now,
    )

    # Relationships
    accounts = relationship(
        "Account", back_populates="item", cascade="all, delete-orphan"
    )
    transactions = relationship(
        "Transaction", back_populates="item", cascade="all, delete-orphan"
    )
    cursor = relationship(
        "TransactionCursor",
        back_populates="item",
        uselist=False,
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<PlaidItem {self.item_id} status={self.status}>"
