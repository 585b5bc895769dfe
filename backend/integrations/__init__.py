"""External API integrations.

This package contains:
- Plaid protocol: The contract the sync services depend on
- Plaid client: Integration with the Plaid API via plaid-python
- Provider exceptions: Typed errors raised by the client
"""

from integrations.exceptions import ProviderError
from integrations.plaid_protocol import PlaidClientProtocol, TransactionsSyncPage

__all__ = [
    "PlaidClientProtocol",
    "ProviderError",
    "TransactionsSyncPage",
]
