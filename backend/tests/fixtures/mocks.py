"""Mock Plaid client and sample Plaid payloads for tests."""

from integrations.exceptions import (
    ProviderAPIError,
    ProviderAuthError,
    ProviderConnectionError,
)
from integrations.plaid_protocol import TransactionsSyncPage


SAMPLE_PLAID_ACCOUNTS = [
    {
        "account_id": "acc-checking",
        "name": "Plaid Checking",
        "official_name": "Plaid Gold Standard 0% Interest Checking",
        "mask": "0000",
        "type": "depository",
        "subtype": "checking",
        "balances": {
            "current": 110.0,
            "available": 100.0,
            "limit": None,
            "iso_currency_code": "USD",
        },
    },
    {
        "account_id": "acc-credit",
        "name": "Plaid Credit Card",
        "official_name": "Plaid Diamond 12.5% APR Interest Credit Card",
        "mask": "3333",
        "type": "credit",
        "subtype": "credit card",
        "balances": {
            "current": 410.0,
            "available": None,
            "limit": 2000.0,
            "iso_currency_code": "USD",
        },
    },
]


def make_transaction(
    transaction_id: str,
    amount: float = 12.5,
    account_id: str = "acc-checking",
    date: str = "2024-01-15",
    **overrides,
) -> dict:
    """Build a Plaid transaction dict the way /transactions/sync returns it."""
    txn = {
        "transaction_id": transaction_id,
        "account_id": account_id,
        "amount": amount,
        "iso_currency_code": "USD",
        "unofficial_currency_code": None,
        "date": date,
        "authorized_date": date,
        "name": f"Purchase {transaction_id}",
        "merchant_name": "Tectra Inc",
        "pending": False,
        "payment_channel": "in store",
        "location": {"city": "San Francisco", "region": "CA", "country": "US"},
        "personal_finance_category": {
            "primary": "GENERAL_MERCHANDISE",
            "detailed": "GENERAL_MERCHANDISE_OTHER_GENERAL_MERCHANDISE",
        },
    }
    txn.update(overrides)
    return txn


def chain_pages(*pages: dict) -> dict[str | None, TransactionsSyncPage]:
    """Link page dicts into a cursor -> page script.

    Each page is a dict of ``added``/``modified``/``removed``/``accounts``.
    The first page answers the empty cursor, page ``n`` answers cursor
    ``"cursor-n-1"`` and returns ``"cursor-n"``; ``has_more`` is set on all
    but the last page.
    """
    script: dict[str | None, TransactionsSyncPage] = {}
    previous: str | None = None
    for index, page in enumerate(pages, start=1):
        next_cursor = f"cursor-{index}"
        script[previous] = TransactionsSyncPage(
            added=page.get("added", []),
            modified=page.get("modified", []),
            removed=page.get("removed", []),
            next_cursor=next_cursor,
            has_more=index < len(pages),
            accounts=page.get("accounts", []),
        )
        previous = next_cursor
    return script


class MockPlaidClient:
    """Mock Plaid client for testing.

    Implements the PlaidClientProtocol. Sync pages are scripted by the
    cursor they answer (see :func:`chain_pages`); requesting a cursor in
    ``fail_cursors`` raises ``failure_type`` instead. Every call is recorded.
    """

    def __init__(
        self,
        pages: dict[str | None, TransactionsSyncPage] | None = None,
        accounts: list[dict] | None = None,
        item: dict | None = None,
        institution: dict | None = None,
        should_fail: bool = False,
        fail_on: set[str] | None = None,
        fail_cursors: set[str | None] | None = None,
        failure_type: str = "generic",
        configured: bool = True,
        link_token: str = "link-sandbox-test-token",
        exchange_result: dict | None = None,
    ):
        self.pages = pages if pages is not None else {None: TransactionsSyncPage(next_cursor="cursor-1")}
        self.accounts = accounts if accounts is not None else SAMPLE_PLAID_ACCOUNTS
        self.item = item or {"item_id": "item-sandbox-test", "institution_id": "ins_109508"}
        self.institution = institution or {
            "institution_id": "ins_109508",
            "name": "First Platypus Bank",
        }
        self.should_fail = should_fail
        self.fail_on = fail_on or set()
        self.fail_cursors = fail_cursors or set()
        self.failure_type = failure_type
        self.configured = configured
        self.link_token = link_token
        self.exchange_result = exchange_result or {
            "access_token": "access-sandbox-test",
            "item_id": "item-sandbox-test",
        }

        self.link_token_calls: list[dict] = []
        self.sync_calls: list[tuple[str, str | None]] = []
        self.removed_tokens: list[str] = []

    def _maybe_fail(self, method: str) -> None:
        if self.should_fail or method in self.fail_on:
            self._raise_failure()

    def _raise_failure(self) -> None:
        """Raise the appropriate exception based on failure_type."""
        if self.failure_type == "auth":
            raise ProviderAuthError("Mock Plaid error", error_code="ITEM_LOGIN_REQUIRED")
        elif self.failure_type == "connection":
            raise ProviderConnectionError("Mock Plaid timeout")
        elif self.failure_type == "api":
            raise ProviderAPIError("Mock Plaid error", status_code=500)
        else:
            raise Exception("Mock Plaid error")

    def is_configured(self) -> bool:
        return self.configured

    def create_link_token(
        self,
        client_user_id: str,
        products: list[str] | None = None,
        access_token: str | None = None,
    ) -> dict:
        self._maybe_fail("create_link_token")
        self.link_token_calls.append(
            {
                "client_user_id": client_user_id,
                "products": products,
                "access_token": access_token,
            }
        )
        return {
            "link_token": self.link_token,
            "expiration": "2024-01-15T14:30:00Z",
            "request_id": "req-link-1",
        }

    def exchange_public_token(self, public_token: str) -> dict:
        self._maybe_fail("exchange_public_token")
        return dict(self.exchange_result)

    def get_item(self, access_token: str) -> dict:
        self._maybe_fail("get_item")
        return dict(self.item)

    def get_institution(self, institution_id: str) -> dict:
        self._maybe_fail("get_institution")
        return dict(self.institution)

    def get_accounts(self, access_token: str) -> list[dict]:
        self._maybe_fail("get_accounts")
        return [dict(a) for a in self.accounts]

    def sync_transactions(
        self, access_token: str, cursor: str | None = None
    ) -> TransactionsSyncPage:
        self.sync_calls.append((access_token, cursor))
        self._maybe_fail("sync_transactions")
        if cursor in self.fail_cursors:
            self._raise_failure()
        if cursor not in self.pages:
            raise ProviderAPIError(
                f"Unknown cursor {cursor!r}",
                error_code="INVALID_FIELD",
                status_code=400,
            )
        return self.pages[cursor]

    def remove_item(self, access_token: str) -> None:
        self._maybe_fail("remove_item")
        self.removed_tokens.append(access_token)
