"""Test fixtures and sample data."""
import json
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from models import Account, PlaidItem, Transaction
from sqlalchemy.orm import Session

DATA_DIR = Path(__file__).parent / "data"


def load_json_fixture(name: str) -> dict:
    """Load a JSON payload from tests/fixtures/data."""
    with open(DATA_DIR / name, encoding="utf-8") as f:
        return json.load(f)


def create_plaid_item(
    db: Session,
    item_id: str = "item-1",
    user_id: str = "user-1",
    status: str = "good",
    access_token: str | None = None,
) -> PlaidItem:
    """Create and commit a PlaidItem.

    This is a helper function (not a fixture) for tests that need several
    items.
    """
    item = PlaidItem(
        user_id=user_id,
        item_id=item_id,
        access_token=access_token or f"access-sandbox-{item_id}",
        institution_id="ins_109508",
        institution_name="First Platypus Bank",
        status=status,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


@pytest.fixture
def plaid_item(db):
    """Create a healthy PlaidItem for user-1."""
    return create_plaid_item(db)


@pytest.fixture
def other_plaid_item(db):
    """Create a second PlaidItem belonging to another user."""
    return create_plaid_item(db, item_id="item-2", user_id="user-2")


@pytest.fixture
def account(db, plaid_item):
    """Create a checking account under plaid_item."""
    acc = Account(
        item_id=plaid_item.id,
        user_id=plaid_item.user_id,
        account_id="acc-checking",
        name="Plaid Checking",
        mask="0000",
        type="depository",
        subtype="checking",
        balance_current=Decimal("50.00"),
        iso_currency_code="USD",
    )
    db.add(acc)
    db.commit()
    db.refresh(acc)
    return acc


@pytest.fixture
def transaction(db, plaid_item, account):
    """Create a stored transaction on the checking account."""
    txn = Transaction(
        transaction_id="txn-existing",
        item_id=plaid_item.id,
        account_id=account.id,
        plaid_account_id=account.account_id,
        user_id=plaid_item.user_id,
        name="Coffee",
        amount=Decimal("4.5000"),
        iso_currency_code="USD",
        date=date(2024, 1, 10),
        pending=False,
        deleted=False,
    )
    db.add(txn)
    db.commit()
    db.refresh(txn)
    return txn
