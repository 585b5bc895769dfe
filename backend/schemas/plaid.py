"""Pydantic schemas for the Plaid API."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class LinkTokenCreate(BaseModel):
    """Schema for requesting a Link token."""

    user_id: str
    client_user_id: Optional[str] = None
    products: Optional[list[str]] = None
    item_id: Optional[str] = None  # update mode for an existing item


class LinkTokenResponse(BaseModel):
    """Schema for a created Link token."""

    link_token: str
    expiration: Optional[datetime] = None
    request_id: Optional[str] = None


class StoredLinkTokenResponse(LinkTokenResponse):
    """Schema for a previously issued Link token."""

    id: str
    user_id: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ExchangeTokenRequest(BaseModel):
    """Schema for exchanging a Link public token."""

    public_token: str
    user_id: str
    item_id: Optional[str] = None


class AccountResponse(BaseModel):
    """Schema for an account under a linked item."""

    id: str
    account_id: str
    name: str
    official_name: Optional[str] = None
    mask: Optional[str] = None
    type: Optional[str] = None
    subtype: Optional[str] = None
    balance_current: Optional[Decimal] = None
    balance_available: Optional[Decimal] = None
    balance_limit: Optional[Decimal] = None
    iso_currency_code: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ExchangeTokenResponse(BaseModel):
    """Schema for the result of a token exchange."""

    item_id: str
    institution_name: Optional[str] = None
    accounts: list[AccountResponse] = Field(default_factory=list)


class PlaidItemResponse(BaseModel):
    """Schema for a linked item. The access token is never exposed."""

    id: str
    user_id: str
    item_id: str
    institution_id: Optional[str] = None
    institution_name: Optional[str] = None
    status: str
    error: Optional[dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SyncResponse(BaseModel):
    """Schema for the counts of a manual sync."""

    added: int
    modified: int
    removed: int


class WebhookResponse(BaseModel):
    success: bool


class TransactionResponse(BaseModel):
    """Schema for a stored transaction."""

    id: str
    transaction_id: str
    account_id: Optional[str] = None
    plaid_account_id: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    transaction_type: Optional[str] = None
    name: Optional[str] = None
    merchant_name: Optional[str] = None
    amount: Decimal
    iso_currency_code: Optional[str] = None
    date: date
    authorized_date: Optional[date] = None
    pending: bool
    payment_channel: Optional[str] = None
    location: Optional[dict[str, Any]] = None
    deleted: bool

    model_config = ConfigDict(from_attributes=True)


class TransactionListResponse(BaseModel):
    """Schema for a page of transactions."""

    transactions: list[TransactionResponse]
    total: int
