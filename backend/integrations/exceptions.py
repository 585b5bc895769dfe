"""Typed exception hierarchy for provider errors.

Provides structured exceptions for differentiated error handling
(auth errors vs transient network errors vs data issues).
"""


class ProviderError(Exception):
    """Base exception for all provider-related errors.

    Carries the provider name and, when the provider returned one, its
    machine-readable error code (e.g. Plaid's ``ITEM_LOGIN_REQUIRED``).
    """

    def __init__(self, message: str, provider_name: str = "Plaid", error_code: str = ""):
        self.provider_name = provider_name
        self.error_code = error_code
        super().__init__(message)

    @property
    def retriable(self) -> bool:
        return False


class ProviderAuthError(ProviderError):
    """Credentials or item login invalid (HTTP 401/403, ITEM_LOGIN_REQUIRED)."""

    pass


class ProviderConnectionError(ProviderError):
    """Network failures such as timeouts or refused connections.

    Retriable by default.
    """

    def __init__(
        self,
        message: str,
        provider_name: str = "Plaid",
        error_code: str = "",
        retriable: bool = True,
    ):
        self._retriable = retriable
        super().__init__(message, provider_name, error_code)

    @property
    def retriable(self) -> bool:
        return self._retriable


class ProviderAPIError(ProviderError):
    """HTTP 4xx/5xx responses from the provider API."""

    def __init__(
        self,
        message: str,
        provider_name: str = "Plaid",
        error_code: str = "",
        status_code: int | None = None,
    ):
        self.status_code = status_code
        super().__init__(message, provider_name, error_code)

    @property
    def retriable(self) -> bool:
        """429 (rate limit) and 5xx errors are generally retriable."""
        if self.status_code is None:
            return False
        return self.status_code == 429 or self.status_code >= 500


class ProviderDataError(ProviderError):
    """Malformed or unparseable response from the provider."""

    pass
