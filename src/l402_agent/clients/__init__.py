"""
Client module for L402 payment authorization.

Provides easy-to-use interfaces for accessing paywalled resources with
automatic invoice payment, credential caching and request replay.
"""

from .http_client import Http402Client, l402_fetch
from .cache import CredentialCache, get_default_cache, reset_default_cache
from .amounts import resolve_amount, amount_from_wallet, amount_from_body

__all__ = [
    "Http402Client",
    "l402_fetch",
    "CredentialCache",
    "get_default_cache",
    "reset_default_cache",
    "resolve_amount",
    "amount_from_wallet",
    "amount_from_body",
]
