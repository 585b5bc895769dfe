"""API route handlers."""
from . import plaid

__all__ = ["plaid"]
