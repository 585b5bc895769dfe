"""Plaid API client.

Thin wrapper around the plaid-python SDK covering the calls the sync
pipeline makes: Link token creation, public token exchange, item and
institution metadata, accounts, /transactions/sync paging, and item
removal.

Every SDK failure is translated into the typed exceptions in
:mod:`integrations.exceptions` so callers never see ``ApiException`` or
urllib3 errors directly.
"""

import json
import logging

from plaid import ApiException, Environment
from plaid.api.plaid_api import PlaidApi
from plaid.api_client import ApiClient
from plaid.configuration import Configuration
from plaid.model.accounts_get_request import AccountsGetRequest
from plaid.model.country_code import CountryCode
from plaid.model.institutions_get_by_id_request import InstitutionsGetByIdRequest
from plaid.model.item_get_request import ItemGetRequest
from plaid.model.item_public_token_exchange_request import ItemPublicTokenExchangeRequest
from plaid.model.item_remove_request import ItemRemoveRequest
from plaid.model.link_token_create_request import LinkTokenCreateRequest
from plaid.model.link_token_create_request_user import LinkTokenCreateRequestUser
from plaid.model.products import Products
from plaid.model.transactions_sync_request import TransactionsSyncRequest
from plaid.model.transactions_sync_request_options import TransactionsSyncRequestOptions
from urllib3.exceptions import HTTPError as Urllib3HTTPError

from config import settings
from integrations.exceptions import (
    ProviderAPIError,
    ProviderAuthError,
    ProviderConnectionError,
    ProviderDataError,
    ProviderError,
)
from integrations.plaid_protocol import TransactionsSyncPage

logger = logging.getLogger(__name__)

# Map PLAID_ENVIRONMENT setting to SDK host URLs.
# Plaid's Development environment is deprecated; only sandbox and production
# are supported.
_ENVIRONMENT_MAP: dict[str, str] = {
    "sandbox": Environment.Sandbox,
    "production": Environment.Production,
}

DEFAULT_PRODUCTS: tuple[str, ...] = ("auth", "transactions")

# Plaid error codes that mean the user has to re-authenticate the item.
_AUTH_ERROR_CODES = frozenset(
    {
        "INVALID_ACCESS_TOKEN",
        "ITEM_LOGIN_REQUIRED",
        "INVALID_API_KEYS",
        "ACCESS_NOT_GRANTED",
    }
)


class PlaidClient:
    """Wrapper around the Plaid API.

    Implements :class:`~integrations.plaid_protocol.PlaidClientProtocol`.
    """

    def __init__(
        self,
        client_id: str | None = None,
        secret: str | None = None,
        environment: str | None = None,
        page_timeout: float | None = None,
    ):
        self._client_id = client_id or settings.PLAID_CLIENT_ID
        self._secret = secret or settings.PLAID_SECRET
        self._environment = environment or settings.PLAID_ENVIRONMENT
        self._page_timeout = page_timeout or settings.PLAID_SYNC_PAGE_TIMEOUT

        # Lazily created on first use
        self._api: PlaidApi | None = None

    def _get_api(self) -> PlaidApi:
        """Return (and cache) a PlaidApi instance."""
        if self._api is None:
            env_key = self._environment.lower()
            host = _ENVIRONMENT_MAP.get(env_key)
            if host is None:
                logger.warning(
                    "Unknown PLAID_ENVIRONMENT=%r, falling back to sandbox. "
                    "Valid values: sandbox, production",
                    self._environment,
                )
                host = Environment.Sandbox
            logger.info(
                "Plaid API client: environment=%s, host=%s, client_id=<configured>",
                env_key,
                host,
            )
            configuration = Configuration(
                host=host,
                api_key={
                    "clientId": self._client_id,
                    "secret": self._secret,
                },
            )
            api_client = ApiClient(configuration)
            self._api = PlaidApi(api_client)
        return self._api

    def is_configured(self) -> bool:
        """Check if Plaid credentials are configured."""
        return bool(self._client_id) and bool(self._secret)

    def _call(self, endpoint: str, method, request, **kwargs):
        """Invoke an SDK method, translating failures into provider exceptions."""
        try:
            return method(request, **kwargs)
        except ApiException as e:
            raise self._map_plaid_error(e, endpoint) from e
        except Urllib3HTTPError as e:
            # Covers connect/read timeouts and exhausted retries.
            raise ProviderConnectionError(
                f"Plaid {endpoint} request failed: {e}"
            ) from e

    # ------------------------------------------------------------------
    # Link Token & Token Exchange
    # ------------------------------------------------------------------

    def create_link_token(
        self,
        client_user_id: str,
        products: list[str] | None = None,
        access_token: str | None = None,
    ) -> dict:
        """Create a Plaid Link token for the browser-based auth flow.

        Args:
            client_user_id: Stable, non-PII identifier of the end user.
            products: Plaid products to initialize. Defaults to auth +
                transactions. Ignored in update mode.
            access_token: When given, creates an update-mode token for
                re-authenticating that existing Item.

        Returns:
            Dict with ``link_token``, ``expiration`` and ``request_id``.
        """
        api = self._get_api()
        kwargs = {
            "user": LinkTokenCreateRequestUser(client_user_id=client_user_id),
            "client_name": settings.PLAID_CLIENT_NAME,
            "country_codes": [CountryCode(code) for code in settings.PLAID_COUNTRY_CODES],
            "language": "en",
        }
        if access_token:
            kwargs["access_token"] = access_token
        else:
            kwargs["products"] = [Products(p) for p in (products or DEFAULT_PRODUCTS)]
        if settings.PLAID_WEBHOOK_URL:
            kwargs["webhook"] = settings.PLAID_WEBHOOK_URL

        response = self._call(
            "link_token_create", api.link_token_create, LinkTokenCreateRequest(**kwargs)
        )
        return {
            "link_token": response["link_token"],
            "expiration": response["expiration"],
            "request_id": response["request_id"],
        }

    def exchange_public_token(self, public_token: str) -> dict:
        """Exchange a Plaid Link public_token for a permanent access_token.

        Returns:
            Dict with ``access_token`` and ``item_id``.
        """
        api = self._get_api()
        request = ItemPublicTokenExchangeRequest(public_token=public_token)
        response = self._call(
            "item_public_token_exchange", api.item_public_token_exchange, request
        )
        return {
            "access_token": response["access_token"],
            "item_id": response["item_id"],
        }

    def get_item(self, access_token: str) -> dict:
        """Return the Item object (item_id, institution_id, webhook, error)."""
        api = self._get_api()
        response = self._call(
            "item_get", api.item_get, ItemGetRequest(access_token=access_token)
        )
        return response.to_dict()["item"]

    def get_institution(self, institution_id: str) -> dict:
        """Return institution metadata (``institution_id``, ``name``, ...)."""
        api = self._get_api()
        request = InstitutionsGetByIdRequest(
            institution_id=institution_id,
            country_codes=[CountryCode(code) for code in settings.PLAID_COUNTRY_CODES],
        )
        response = self._call("institutions_get_by_id", api.institutions_get_by_id, request)
        return response.to_dict()["institution"]

    def get_accounts(self, access_token: str) -> list[dict]:
        """Return all accounts of an Item with their cached balances."""
        api = self._get_api()
        response = self._call(
            "accounts_get", api.accounts_get, AccountsGetRequest(access_token=access_token)
        )
        return response.to_dict().get("accounts", []) or []

    def remove_item(self, access_token: str) -> None:
        """Revoke an access token by calling Plaid's /item/remove endpoint."""
        api = self._get_api()
        self._call("item_remove", api.item_remove, ItemRemoveRequest(access_token=access_token))

    # ------------------------------------------------------------------
    # /transactions/sync
    # ------------------------------------------------------------------

    def sync_transactions(
        self, access_token: str, cursor: str | None = None
    ) -> TransactionsSyncPage:
        """Fetch a single page of transaction updates.

        A ``None`` or empty cursor requests the Item's full history from the
        beginning. The call is bounded by ``PLAID_SYNC_PAGE_TIMEOUT``; a
        timeout surfaces as a retriable :class:`ProviderConnectionError`.
        """
        api = self._get_api()
        kwargs = {
            "access_token": access_token,
            "options": TransactionsSyncRequestOptions(
                include_personal_finance_category=True,
            ),
        }
        if cursor:
            kwargs["cursor"] = cursor

        response = self._call(
            "transactions_sync",
            api.transactions_sync,
            TransactionsSyncRequest(**kwargs),
            _request_timeout=self._page_timeout,
        )
        data = response.to_dict()

        try:
            return TransactionsSyncPage(
                added=data.get("added", []) or [],
                modified=data.get("modified", []) or [],
                removed=[
                    r["transaction_id"]
                    for r in data.get("removed", []) or []
                    if r.get("transaction_id")
                ],
                next_cursor=data["next_cursor"],
                has_more=bool(data["has_more"]),
                accounts=data.get("accounts", []) or [],
            )
        except KeyError as e:
            raise ProviderDataError(
                f"Malformed transactions_sync response: missing {e}"
            ) from e

    # ------------------------------------------------------------------
    # Error mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _map_plaid_error(exc: ApiException, endpoint: str) -> ProviderError:
        """Map a Plaid ApiException to a typed ProviderError."""
        status = exc.status or 0
        message = f"Plaid {endpoint} failed: {exc.reason or exc}"

        # Try to extract error_code from the body
        error_code = ""
        try:
            body = json.loads(exc.body) if exc.body else {}
            error_code = body.get("error_code", "") or ""
            error_message = body.get("error_message", "")
            if error_message:
                message = f"Plaid error ({error_code}): {error_message}"
        except (ValueError, TypeError, AttributeError):
            pass

        logger.warning("Plaid %s returned HTTP %s %s", endpoint, status, error_code or "")

        if status in (401, 403) or error_code in _AUTH_ERROR_CODES:
            return ProviderAuthError(message, error_code=error_code)
        return ProviderAPIError(message, error_code=error_code, status_code=status or None)
