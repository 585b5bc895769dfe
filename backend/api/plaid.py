"""Plaid API endpoints.

Server-side endpoints for the Plaid Link flow (link tokens, public token
exchange), the webhook receiver, manual syncs, item management and the
transaction listing.
"""

import logging
from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database import get_db
from integrations.exceptions import ProviderError
from schemas.plaid import (
    AccountResponse,
    ExchangeTokenRequest,
    ExchangeTokenResponse,
    LinkTokenCreate,
    LinkTokenResponse,
    PlaidItemResponse,
    StoredLinkTokenResponse,
    SyncResponse,
    TransactionListResponse,
    TransactionResponse,
    WebhookResponse,
)
from services.exceptions import (
    ItemNotFoundError,
    LinkTokenNotFoundError,
    SyncInProgressError,
)
from services.plaid_service import PlaidService, get_plaid_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/plaid", tags=["plaid"])


def _require_configured(service: PlaidService) -> None:
    if not service.is_configured():
        raise HTTPException(status_code=400, detail="Plaid is not configured")


def _provider_error_detail(e: ProviderError, action: str) -> str:
    # Surface an actionable hint for the most common setup error
    if e.error_code == "INVALID_API_KEYS":
        return (
            "Plaid rejected the credentials. Check that PLAID_ENVIRONMENT "
            "matches your keys (sandbox or production)."
        )
    return f"Failed to {action}"


# ------------------------------------------------------------------
# Link & exchange
# ------------------------------------------------------------------


@router.post("/link-token", response_model=LinkTokenResponse)
def create_link_token(
    body: LinkTokenCreate,
    db: Session = Depends(get_db),
    service: PlaidService = Depends(get_plaid_service),
):
    """Create a Plaid Link token (update mode when ``item_id`` is given)."""
    _require_configured(service)

    try:
        result = service.create_link_token(
            db,
            body.user_id,
            client_user_id=body.client_user_id,
            products=body.products,
            item_id=body.item_id,
        )
        db.commit()
    except ItemNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ProviderError as e:
        logger.error("Failed to create Plaid link token: %s", e)
        raise HTTPException(
            status_code=500, detail=_provider_error_detail(e, "create link token")
        )
    return LinkTokenResponse(**result)


@router.get("/link-token/{link_token_id}", response_model=StoredLinkTokenResponse)
def get_link_token(
    link_token_id: str,
    user_id: str = Query(...),
    db: Session = Depends(get_db),
    service: PlaidService = Depends(get_plaid_service),
):
    """Fetch a previously issued Link token owned by the user."""
    try:
        return service.get_link_token(db, link_token_id, user_id)
    except LinkTokenNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/exchange-token", response_model=ExchangeTokenResponse)
def exchange_token(
    body: ExchangeTokenRequest,
    db: Session = Depends(get_db),
    service: PlaidService = Depends(get_plaid_service),
):
    """Exchange a Plaid Link public_token and store the item with its accounts."""
    _require_configured(service)

    try:
        result = service.exchange_public_token(
            db, body.public_token, body.user_id, item_id=body.item_id
        )
    except ProviderError as e:
        logger.error("Failed to exchange Plaid token: %s", e)
        raise HTTPException(
            status_code=500, detail=_provider_error_detail(e, "exchange token")
        )
    return ExchangeTokenResponse(
        item_id=result["item_id"],
        institution_name=result["institution_name"],
        accounts=[AccountResponse.model_validate(a) for a in result["accounts"]],
    )


# ------------------------------------------------------------------
# Webhook
# ------------------------------------------------------------------


@router.post("/webhook", response_model=WebhookResponse)
def receive_webhook(
    payload: dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    service: PlaidService = Depends(get_plaid_service),
):
    """Receive a Plaid webhook.

    Any non-2xx answer makes Plaid redeliver, which every handler tolerates.
    """
    try:
        return service.handle_webhook(db, payload)
    except ItemNotFoundError as e:
        logger.warning("Webhook for unknown item: %s", e.item_id)
        raise HTTPException(status_code=404, detail=str(e))
    except Exception:
        logger.exception(
            "Webhook %s/%s failed",
            payload.get("webhook_type"), payload.get("webhook_code"),
        )
        raise HTTPException(status_code=500, detail="Webhook processing failed")


# ------------------------------------------------------------------
# Items
# ------------------------------------------------------------------


@router.get("/items", response_model=list[PlaidItemResponse])
def list_items(
    user_id: Optional[str] = None,
    db: Session = Depends(get_db),
    service: PlaidService = Depends(get_plaid_service),
):
    """List linked Plaid items, optionally for one user."""
    return service.list_items(db, user_id)


@router.post("/items/{item_id}/sync", response_model=SyncResponse)
def sync_item(
    item_id: str,
    user_id: str = Query(...),
    db: Session = Depends(get_db),
    service: PlaidService = Depends(get_plaid_service),
):
    """Run an incremental transaction sync for one item."""
    try:
        summary = service.sync_transactions(db, item_id, user_id)
    except ItemNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SyncInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ProviderError as e:
        logger.error("Sync failed for item %s: %s", item_id, e)
        raise HTTPException(status_code=502, detail=str(e))
    return SyncResponse(**summary.to_dict())


@router.post("/items/{item_id}/repair", response_model=PlaidItemResponse)
def repair_item(
    item_id: str,
    user_id: str = Query(...),
    db: Session = Depends(get_db),
    service: PlaidService = Depends(get_plaid_service),
):
    """Mark an item healthy after a successful update-mode re-link."""
    try:
        item, repaired = service.repair_item(db, item_id, user_id)
    except ItemNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if not repaired:
        raise HTTPException(
            status_code=409, detail=f"Item {item_id} is {item.status} and cannot be repaired"
        )
    return item


@router.delete("/items/{item_id}")
def remove_item(
    item_id: str,
    user_id: str = Query(...),
    db: Session = Depends(get_db),
    service: PlaidService = Depends(get_plaid_service),
):
    """Remove a linked item (revokes with Plaid, then deletes locally)."""
    try:
        service.delete_item(db, item_id, user_id)
    except ItemNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"status": "ok", "item_id": item_id}


# ------------------------------------------------------------------
# Transactions
# ------------------------------------------------------------------


@router.get("/transactions", response_model=TransactionListResponse)
def list_transactions(
    user_id: str = Query(...),
    account_id: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    include_deleted: bool = False,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    service: PlaidService = Depends(get_plaid_service),
):
    """List a user's synced transactions, newest first."""
    rows, total = service.list_transactions(
        db,
        user_id,
        account_id=account_id,
        start_date=start_date,
        end_date=end_date,
        include_deleted=include_deleted,
        limit=limit,
        offset=offset,
    )
    return TransactionListResponse(
        transactions=[TransactionResponse.model_validate(row) for row in rows],
        total=total,
    )
