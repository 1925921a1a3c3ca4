"""
l402-agent: L402 paywalls and auto-paying clients.

Server side, paywall a FastAPI route:

    app = Http402Server(wallet=wallet)

    @app.get("/api/quote")
    @app.payment_required(amount_sats=5)
    async def quote(request):
        return {"paid": request.state.l402.amount_sats}

Client side, pay and replay automatically:

    async with Http402Client(wallet=wallet, max_amount_sats=100) as client:
        response = await client.get("https://api.example.com/api/quote")
"""

from .engine.exceptions import (
    L402Error,
    ConfigurationError,
    InvalidCredentialError,
    WalletError,
    InvoiceCreationError,
    SettlementError,
    AmountLimitExceededError,
)
from .schemas import (
    L402Challenge,
    L402Proof,
    L402Credential,
    L402Context,
    PaymentReceipt,
    encode_challenge,
    decode_challenge,
    encode_proof,
    decode_proof,
)
from .adapters import WalletAdapter, MockWallet, LNbitsWallet
from .servers import Http402Server, L402Gate, GateDecision, GateOutcome, verify_preimage
from .clients import Http402Client, l402_fetch, CredentialCache, get_default_cache, reset_default_cache

__version__ = "0.1.0"

__all__ = [
    "L402Error",
    "ConfigurationError",
    "InvalidCredentialError",
    "WalletError",
    "InvoiceCreationError",
    "SettlementError",
    "AmountLimitExceededError",
    "L402Challenge",
    "L402Proof",
    "L402Credential",
    "L402Context",
    "PaymentReceipt",
    "encode_challenge",
    "decode_challenge",
    "encode_proof",
    "decode_proof",
    "WalletAdapter",
    "MockWallet",
    "LNbitsWallet",
    "Http402Server",
    "L402Gate",
    "GateDecision",
    "GateOutcome",
    "verify_preimage",
    "Http402Client",
    "l402_fetch",
    "CredentialCache",
    "get_default_cache",
    "reset_default_cache",
]
