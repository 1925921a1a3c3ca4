from .bases import CanonicalModel, FrozenModel
from .headers import (
    L402_SCHEME,
    L402Challenge,
    L402Proof,
    encode_challenge,
    decode_challenge,
    encode_proof,
    decode_proof,
)
from .https import ClientRequestHeader, Server402ResponsePayload, ServerErrorPayload, L402Context
from .payments import (
    InvoiceRequest,
    CreatedInvoice,
    PaidInvoice,
    DecodedInvoice,
    PaymentReceipt,
    L402Credential,
)

__all__ = [
    "CanonicalModel",
    "FrozenModel",
    "L402_SCHEME",
    "L402Challenge",
    "L402Proof",
    "encode_challenge",
    "decode_challenge",
    "encode_proof",
    "decode_proof",
    "ClientRequestHeader",
    "Server402ResponsePayload",
    "ServerErrorPayload",
    "L402Context",
    "InvoiceRequest",
    "CreatedInvoice",
    "PaidInvoice",
    "DecodedInvoice",
    "PaymentReceipt",
    "L402Credential",
]
