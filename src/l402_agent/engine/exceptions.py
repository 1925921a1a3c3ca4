"""
Exception and Error Definitions Module

Defines the exception hierarchy for L402 challenge issuance, invoice payment
and credential caching. All exceptions inherit from L402Error for unified
exception handling.

Malformed headers and failed proof verification are NOT exceptions: they are
routine untrusted input and are reported as ``None`` / ``False`` by the codec
and verifier.

Exception Hierarchy:
    L402Error (root)
    ├── ConfigurationError
    ├── InvalidCredentialError
    ├── WalletError
    │   └── InvoiceCreationError
    ├── SettlementError
    └── AmountLimitExceededError
"""

from typing import Optional


class L402Error(Exception):
    """
    Root exception class for all project-specific exceptions.

    All custom exceptions should inherit from this class to enable
    unified exception handling and centralized error processing.
    """
    pass


class ConfigurationError(L402Error):
    """
    Raised when configuration is missing or invalid.

    This includes scenarios such as:
    - Gate created without a wallet
    - Non-positive or non-integer price
    - Unparseable environment variable values
    """
    pass


class InvalidCredentialError(L402Error):
    """
    Raised when a credential that does not verify is offered to the cache.

    The credential cache only ever holds proofs whose preimage hashes to
    their macaroon.
    """
    pass


class WalletError(L402Error):
    """
    Raised when the external wallet capability fails.

    This includes scenarios such as:
    - Wallet backend unreachable
    - Invoice payment rejected (no route, insufficient balance)
    - Unknown invoice
    """
    pass


class InvoiceCreationError(WalletError):
    """
    Raised by wallet adapters when a new invoice cannot be created.

    The server gate reports it as an internal error (500), never as a 402.
    """
    pass


class SettlementError(L402Error):
    """
    Raised when a payment attempt completes without yielding a preimage.

    Without the preimage there is no proof to replay the request with.
    """
    pass


class AmountLimitExceededError(L402Error):
    """
    Raised before paying when an invoice exceeds the client's spending cap.

    Attributes:
        amount_sats: Amount requested by the invoice
        max_amount_sats: Configured spending cap
    """

    def __init__(self, amount_sats: int, max_amount_sats: int, message: Optional[str] = None):
        self.amount_sats = amount_sats
        self.max_amount_sats = max_amount_sats
        super().__init__(
            message
            or f"L402 invoice amount ({amount_sats} sats) exceeds max_amount_sats ({max_amount_sats} sats)"
        )
