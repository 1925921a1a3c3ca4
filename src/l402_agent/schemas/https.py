"""
HTTP Request/Response Schema Models for the L402 protocol

This module defines the Pydantic models used on the HTTP boundary between
client and server in the L402 payment flow.

The main payment flow consists of:
1. Client requests a protected resource without proof
2. Server answers 402 with a WWW-Authenticate challenge and a JSON payload
3. Client pays the invoice and replays the request with an Authorization proof
4. Server verifies the proof and exposes L402Context to the route handler
"""

from typing import Optional

from pydantic import Field

from .bases import CanonicalModel, FrozenModel


# ============================================================================
# Request Headers
# ============================================================================

class ClientRequestHeader(CanonicalModel):
    """HTTP request headers attached by the client on replay.

    Attributes:
        authorization: L402 proof header value.
    """
    authorization: Optional[str] = Field(default=None, alias="Authorization")


# ============================================================================
# Server's 402 Payment Required Response
# ============================================================================

class Server402ResponsePayload(CanonicalModel):
    """JSON body of a 402 Payment Required response.

    Duplicates the challenge header so that clients which cannot decode
    invoices can still read the price.

    Attributes:
        error: Always "Payment Required".
        amount_sats: Price of the resource.
        description: Invoice memo.
        invoice: Invoice to pay.
        payment_hash: Payment hash (also the macaroon).
    """
    error: str = Field(default="Payment Required")
    amount_sats: int = Field(..., alias="amountSats")
    description: str
    invoice: str
    payment_hash: str = Field(..., alias="paymentHash")


class ServerErrorPayload(CanonicalModel):
    """JSON body of a 500 response when no invoice could be created."""
    error: str = Field(default="Failed to create invoice")
    message: str = Field(default="")


# ============================================================================
# Verified payment facts
# ============================================================================

class L402Context(FrozenModel):
    """Verified payment facts attached to an admitted request.

    Attributes:
        payment_hash: Lower-cased payment hash from the proof.
        preimage: Lower-cased preimage from the proof.
        amount_sats: Configured price of the protected resource.
    """
    payment_hash: str = Field(..., alias="paymentHash")
    preimage: str
    amount_sats: int = Field(..., alias="amountSats")
