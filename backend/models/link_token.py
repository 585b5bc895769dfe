"""LinkToken model - Plaid Link session tokens issued to users."""

from sqlalchemy import Column, DateTime, String

from database import Base
from models.utils import generate_uuid, utc_now


class LinkToken(Base):
    """A link_token created for a user's Plaid Link session."""

    __tablename__ = "plaid_link_tokens"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String, index=True, nullable=False)
    link_token = Column(String, nullable=False)
    expiration = Column(DateTime, nullable=True)
    request_id = Column(String, nullable=True)
    created_at = Column(DateTime, default=utc_now)
