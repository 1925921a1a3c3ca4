"""
LNbits Wallet Adapter

Talks to an LNbits instance over its REST API:

    POST /api/v1/payments           {"out": false, "amount", "memo", "expiry"}  create invoice
    POST /api/v1/payments           {"out": true, "bolt11"}                       pay invoice
    GET  /api/v1/payments/{hash}                                                 payment status + preimage
    POST /api/v1/payments/decode    {"data": bolt11}                             decode invoice

Receiving only needs an invoice key; paying needs the wallet's admin key.

Dependencies:
    - httpx: Async HTTP client
"""

import logging
from typing import Any, Dict, Optional

import httpx

from ..config import LNbitsSettings
from ..engine.exceptions import InvoiceCreationError, WalletError
from ..schemas.payments import InvoiceRequest, CreatedInvoice, PaidInvoice, DecodedInvoice
from .bases import WalletAdapter

logger = logging.getLogger(__name__)


class LNbitsWallet(WalletAdapter):
    """
    LNbits-backed wallet.

    Example:
        wallet = LNbitsWallet.from_env()
        created = await wallet.create_invoice(InvoiceRequest(amount_sats=5))
        ...
        await wallet.aclose()
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        request_timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            url: Base URL of the LNbits instance.
            api_key: Invoice or admin key of the wallet.
            request_timeout: HTTP timeout in seconds.
            client: Pre-built httpx client (tests inject a MockTransport here).
        """
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=url.rstrip("/"),
            timeout=request_timeout,
        )
        self._headers = {"X-Api-Key": api_key, "Content-Type": "application/json"}

    @classmethod
    def from_env(cls) -> "LNbitsWallet":
        """Build the adapter from LNBITS_* environment variables."""
        settings = LNbitsSettings.from_env()
        return cls(settings.url, settings.api_key, request_timeout=settings.request_timeout)

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this adapter created it."""
        if self._owns_client:
            await self._client.aclose()

    async def _call(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        response = await self._client.request(method, path, json=json, headers=self._headers)
        response.raise_for_status()
        return response.json()

    async def create_invoice(self, request: InvoiceRequest) -> CreatedInvoice:
        try:
            data = await self._call("POST", "/api/v1/payments", json={
                "out": False,
                "amount": request.amount_sats,
                "memo": request.description,
                "expiry": request.expiry,
            })
        except (httpx.HTTPError, ValueError) as e:
            raise InvoiceCreationError(f"LNbits invoice creation failed: {e}") from e

        invoice = data.get("payment_request") or data.get("bolt11")
        payment_hash = data.get("payment_hash")
        if not invoice or not payment_hash:
            raise InvoiceCreationError("LNbits response is missing payment_request or payment_hash")

        return CreatedInvoice(invoice=invoice, payment_hash=payment_hash)

    async def pay_invoice(self, invoice: str) -> PaidInvoice:
        try:
            data = await self._call("POST", "/api/v1/payments", json={"out": True, "bolt11": invoice})
            payment_hash = data.get("payment_hash")
            if not payment_hash:
                raise WalletError("LNbits payment response is missing payment_hash")
            status = await self._call("GET", f"/api/v1/payments/{payment_hash}")
        except (httpx.HTTPError, ValueError) as e:
            raise WalletError(f"LNbits payment failed: {e}") from e

        if not status.get("paid"):
            logger.warning("LNbits payment %s not settled", payment_hash)
            return PaidInvoice(preimage=None, payment_hash=payment_hash)

        return PaidInvoice(preimage=status.get("preimage"), payment_hash=payment_hash)

    async def decode_invoice(self, invoice: str) -> DecodedInvoice:
        try:
            data = await self._call("POST", "/api/v1/payments/decode", json={"data": invoice})
        except (httpx.HTTPError, ValueError) as e:
            raise WalletError(f"LNbits decode failed: {e}") from e

        amount_msat = data.get("amount_msat")
        return DecodedInvoice(
            amount_sats=amount_msat // 1000 if amount_msat is not None else None,
            payment_hash=data.get("payment_hash"),
            description=data.get("description"),
        )
