"""Tests for LinkService link token creation and token exchange."""

from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from integrations.exceptions import ProviderAPIError, ProviderAuthError, ProviderConnectionError
from models import Account, LinkToken, PlaidItem
from services.exceptions import ItemNotFoundError, LinkTokenNotFoundError
from services.link_service import LinkService
from tests.fixtures import create_plaid_item
from tests.fixtures.mocks import SAMPLE_PLAID_ACCOUNTS, MockPlaidClient


class TestCreateLinkToken:
    def test_creates_and_records_token(self, db):
        mock = MockPlaidClient()
        result = LinkService(mock).create_link_token(db, "user-1")
        db.commit()

        assert result["link_token"] == "link-sandbox-test-token"
        assert result["request_id"] == "req-link-1"
        assert isinstance(result["expiration"], datetime)

        stored = db.query(LinkToken).one()
        assert stored.user_id == "user-1"
        assert stored.link_token == "link-sandbox-test-token"
        assert mock.link_token_calls == [
            {"client_user_id": "user-1", "products": None, "access_token": None}
        ]

    def test_passes_client_user_id_and_products(self, db):
        mock = MockPlaidClient()
        LinkService(mock).create_link_token(
            db, "user-1", client_user_id="opaque-1", products=["transactions"]
        )

        call = mock.link_token_calls[0]
        assert call["client_user_id"] == "opaque-1"
        assert call["products"] == ["transactions"]

    def test_update_mode_uses_item_access_token(self, db, plaid_item):
        mock = MockPlaidClient()
        LinkService(mock).create_link_token(db, "user-1", item_id="item-1")

        assert mock.link_token_calls[0]["access_token"] == plaid_item.access_token

    def test_update_mode_rejects_other_users_item(self, db, other_plaid_item):
        mock = MockPlaidClient()
        with pytest.raises(ItemNotFoundError):
            LinkService(mock).create_link_token(db, "user-1", item_id="item-2")
        assert mock.link_token_calls == []

    def test_provider_error_propagates_and_records_nothing(self, db):
        mock = MockPlaidClient(fail_on={"create_link_token"}, failure_type="api")
        with pytest.raises(ProviderAPIError):
            LinkService(mock).create_link_token(db, "user-1")
        assert db.query(LinkToken).count() == 0


class TestGetLinkToken:
    def test_returns_owned_token(self, db):
        service = LinkService(MockPlaidClient())
        service.create_link_token(db, "user-1")
        db.commit()
        token_id = db.query(LinkToken).one().id

        assert service.get_link_token(db, token_id, "user-1").id == token_id

    def test_other_user_cannot_read(self, db):
        service = LinkService(MockPlaidClient())
        service.create_link_token(db, "user-1")
        db.commit()
        token_id = db.query(LinkToken).one().id

        with pytest.raises(LinkTokenNotFoundError):
            service.get_link_token(db, token_id, "user-2")


class TestExchangePublicToken:
    def test_creates_item_with_accounts(self, db):
        result = LinkService(MockPlaidClient()).exchange_public_token(
            db, "public-sandbox-1", "user-1"
        )

        assert result["item_id"] == "item-sandbox-test"
        assert result["institution_name"] == "First Platypus Bank"
        assert len(result["accounts"]) == 2

        item = db.query(PlaidItem).one()
        assert item.user_id == "user-1"
        assert item.access_token == "access-sandbox-test"
        assert item.institution_id == "ins_109508"
        assert item.status == "good"

        checking = db.query(Account).filter_by(account_id="acc-checking").one()
        assert checking.item_id == item.id
        assert checking.user_id == "user-1"
        assert checking.mask == "0000"
        assert checking.subtype == "checking"
        assert checking.balance_current == Decimal("110")
        credit = db.query(Account).filter_by(account_id="acc-credit").one()
        assert credit.balance_limit == Decimal("2000")

    def test_accounts_failure_leaves_nothing(self, db):
        mock = MockPlaidClient(fail_on={"get_accounts"}, failure_type="connection")
        with pytest.raises(ProviderConnectionError):
            LinkService(mock).exchange_public_token(db, "public-sandbox-1", "user-1")

        db.rollback()
        assert db.query(PlaidItem).count() == 0
        assert db.query(Account).count() == 0

    def test_persistence_failure_rolls_back_item(self, db, monkeypatch):
        # Second account repeats the first id, violating the unique constraint
        accounts = [SAMPLE_PLAID_ACCOUNTS[0], dict(SAMPLE_PLAID_ACCOUNTS[0])]
        monkeypatch.setattr(LinkService, "_upsert_account", staticmethod(_insert_account))
        service = LinkService(MockPlaidClient(accounts=accounts))

        with pytest.raises(IntegrityError):
            service.exchange_public_token(db, "public-sandbox-1", "user-1")

        assert db.query(PlaidItem).count() == 0
        assert db.query(Account).count() == 0

    def test_update_mode_refreshes_token_and_repairs(self, db):
        item = create_plaid_item(db, item_id="item-sandbox-test", status="error")
        item.error = {"error_code": "ITEM_LOGIN_REQUIRED"}
        db.commit()
        mock = MockPlaidClient(
            exchange_result={"access_token": "access-new", "item_id": "item-sandbox-test"}
        )

        LinkService(mock).exchange_public_token(
            db, "public-sandbox-2", "user-1", item_id="item-sandbox-test"
        )

        db.refresh(item)
        assert db.query(PlaidItem).count() == 1
        assert item.access_token == "access-new"
        assert item.status == "good"
        assert item.error is None
        assert db.query(Account).filter_by(item_id=item.id).count() == 2

    def test_relink_upserts_accounts(self, db):
        service = LinkService(MockPlaidClient())
        service.exchange_public_token(db, "public-sandbox-1", "user-1")
        service.exchange_public_token(db, "public-sandbox-1", "user-1")

        assert db.query(PlaidItem).count() == 1
        assert db.query(Account).count() == 2

    def test_update_mode_keeps_revoked(self, db):
        item = create_plaid_item(db, item_id="item-sandbox-test", status="revoked")

        LinkService(MockPlaidClient()).exchange_public_token(
            db, "public-sandbox-2", "user-1", item_id="item-sandbox-test"
        )

        db.refresh(item)
        assert item.status == "revoked"

    def test_auth_error_propagates(self, db):
        mock = MockPlaidClient(fail_on={"exchange_public_token"}, failure_type="auth")
        with pytest.raises(ProviderAuthError):
            LinkService(mock).exchange_public_token(db, "public-bad", "user-1")


def _insert_account(db, item, remote):
    account = Account(
        account_id=remote["account_id"],
        item_id=item.id,
        user_id=item.user_id,
        name=remote["name"],
    )
    db.add(account)
    return account
