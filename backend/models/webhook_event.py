"""WebhookEvent model - append-only log of received Plaid webhooks."""

from sqlalchemy import JSON, Column, DateTime, Integer, String

from database import Base
from models.utils import generate_uuid, utc_now


class WebhookEvent(Base):
    """A single webhook delivery, stored before it is processed.

    ``item_id`` is Plaid's item id as received (no foreign key), so
    deliveries for unknown or deleted items are still recorded.
    """

    __tablename__ = "plaid_webhooks"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    item_id = Column(String, index=True, nullable=True)
    webhook_type = Column(String, nullable=True)
    webhook_code = Column(String, nullable=True)
    error = Column(JSON, nullable=True)
    new_transactions = Column(Integer, nullable=True)
    removed_transactions = Column(JSON, nullable=True)  # list[str] of transaction ids
    payload = Column(JSON, nullable=False)
    received_at = Column(DateTime, default=utc_now)
