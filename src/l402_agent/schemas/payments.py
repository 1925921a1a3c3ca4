"""
Payment Schema Models

Models exchanged with wallet adapters (invoice creation, payment, decoding)
and the client-side records derived from a successful payment.

Flow:
1. Gate asks the wallet for an invoice (InvoiceRequest -> CreatedInvoice)
2. Client pays the invoice (PaidInvoice carries the preimage)
3. Client reports the payment (PaymentReceipt) and caches it (L402Credential)
"""

from typing import Optional

from pydantic import Field

from .bases import CanonicalModel, FrozenModel


# ============================================================================
# Wallet capability
# ============================================================================

class InvoiceRequest(CanonicalModel):
    """Parameters for creating a new invoice.

    Attributes:
        amount_sats: Invoice amount in satoshis.
        description: Invoice memo.
        expiry: Invoice expiry in seconds.
    """
    amount_sats: int = Field(..., gt=0, alias="amountSats")
    description: str = Field(default="")
    expiry: int = Field(default=600, gt=0, description="Invoice expiry in seconds")


class CreatedInvoice(CanonicalModel):
    """Invoice returned by the wallet.

    Attributes:
        invoice: Bolt11 payment request.
        payment_hash: Hex payment hash; used as the L402 macaroon.
    """
    invoice: str
    payment_hash: str = Field(..., alias="paymentHash")


class PaidInvoice(CanonicalModel):
    """Outcome of paying an invoice.

    A missing preimage means the payment produced no usable proof.
    """
    preimage: Optional[str] = None
    payment_hash: Optional[str] = Field(default=None, alias="paymentHash")


class DecodedInvoice(CanonicalModel):
    """Fields decoded from an invoice; amount is None for amountless invoices."""
    amount_sats: Optional[int] = Field(default=None, alias="amountSats")
    payment_hash: Optional[str] = Field(default=None, alias="paymentHash")
    description: Optional[str] = None


# ============================================================================
# Client-side payment records
# ============================================================================

class PaymentReceipt(CanonicalModel):
    """Facts handed to the client's on_payment callback."""
    invoice: str
    preimage: str
    amount_sats: Optional[int] = Field(default=None, alias="amountSats")


class L402Credential(FrozenModel):
    """A verified proof of payment kept for reuse.

    Attributes:
        macaroon: Payment hash (hex).
        preimage: Payment preimage (hex).
        expires_at: Epoch seconds after which the credential is stale. None
            lets the cache apply its default TTL.
    """
    macaroon: str
    preimage: str
    expires_at: Optional[float] = Field(default=None, alias="expiresAt")
