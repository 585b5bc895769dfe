"""SyncLock model - advisory lease serializing syncs of one item."""

from sqlalchemy import Column, DateTime, String

from database import Base


class SyncLock(Base):
    """A lease held by the worker currently syncing ``item_id``.

    A lease past ``expires_at`` is considered abandoned and may be taken
    over by another worker.
    """

    __tablename__ = "plaid_sync_locks"

    item_id = Column(String(36), primary_key=True)
    owner = Column(String(36), nullable=False)
    acquired_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False)
