"""
Abstract Base Class for Wallet Adapters

Defines the interface every Lightning wallet backend (in-memory mock, LNbits,
...) must implement. The L402 gate and client orchestrator only ever talk to
this interface: how money actually moves is the adapter's business.

Core Class:
    - WalletAdapter: create, pay and (optionally) decode invoices

Server-side usage needs ``create_invoice``; client-side usage needs
``pay_invoice`` and, for spending caps, ``decode_invoice``.
"""

from abc import ABC, abstractmethod

from ..schemas.payments import InvoiceRequest, CreatedInvoice, PaidInvoice, DecodedInvoice


class WalletAdapter(ABC):
    """
    Abstract Base Class for Lightning wallet backends.

    Key Responsibilities:
    1. create_invoice: Issue an invoice whose payment hash becomes the L402 macaroon
    2. pay_invoice: Settle an invoice and reveal its preimage
    3. decode_invoice: Read the amount of an invoice before paying (optional)

    Failures must be raised (WalletError or a subclass), never returned as
    empty results, except for a payment that settles without a preimage,
    which is reported as ``PaidInvoice(preimage=None)``.

    Example Implementation:
        class MyWallet(WalletAdapter):
            async def create_invoice(self, request):
                ...
            async def pay_invoice(self, invoice):
                ...
    """

    @abstractmethod
    async def create_invoice(self, request: InvoiceRequest) -> CreatedInvoice:
        """
        Create a new invoice.

        Args:
            request: Amount, description and expiry of the invoice.

        Returns:
            CreatedInvoice: Invoice string and its payment hash.

        Raises:
            InvoiceCreationError: If the backend cannot issue the invoice.
        """
        pass

    @abstractmethod
    async def pay_invoice(self, invoice: str) -> PaidInvoice:
        """
        Pay an invoice.

        Args:
            invoice: Bolt11 invoice string.

        Returns:
            PaidInvoice: Payment outcome carrying the preimage.

        Raises:
            WalletError: If the payment fails.
        """
        pass

    async def decode_invoice(self, invoice: str) -> DecodedInvoice:
        """
        Decode an invoice without paying it.

        Optional capability; adapters that cannot decode leave this default,
        and clients fall back to other ways of learning the amount.

        Raises:
            NotImplementedError: If the adapter has no decoder.
        """
        raise NotImplementedError(f"{type(self).__name__} cannot decode invoices")

    @property
    def supports_decode(self) -> bool:
        """Whether the adapter overrides decode_invoice."""
        return type(self).decode_invoice is not WalletAdapter.decode_invoice
