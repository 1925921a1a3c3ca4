"""
HTTP 402 Payment Flow Middleware

Provides a transparent layer over httpx that automatically handles L402
402 Payment Required responses: pay the invoice, remember the proof, replay
the request.
"""

import inspect
import logging
import time
from typing import Any, Callable, Dict, Optional

import httpx

from ..config import ClientSettings
from ..engine.exceptions import AmountLimitExceededError, SettlementError, WalletError
from ..schemas.headers import L402Challenge, decode_challenge, encode_proof
from ..schemas.https import ClientRequestHeader
from ..schemas.payments import L402Credential, PaymentReceipt
from ..servers.security import verify_preimage
from .amounts import resolve_amount
from .cache import CredentialCache, get_default_cache

logger = logging.getLogger(__name__)

# Statuses meaning "the proof we sent was not accepted"
_REJECTED_STATUSES = (401, 402)


class Http402Client(httpx.AsyncClient):
    """
    Extended httpx.AsyncClient with automatic L402 payment handling.

    Every request goes through the same cycle:
    1. Reuse a cached credential for the resource, if any
    2. Otherwise (or if the server rejects it) send the bare request
    3. On 402 with an L402 challenge: check the spending cap, pay the
       invoice, cache the proof
    4. Replay the original request once with ``Authorization: L402 <macaroon>:<preimage>``

    A 402 after the replay is returned to the caller; nothing is paid twice
    within one call.

    Fully compatible with httpx.AsyncClient - supports all methods, properties,
    and can be used as an async context manager.

    Usage:
        ```python
        async with Http402Client(wallet=wallet, max_amount_sats=100) as client:
            response = await client.get("https://api.example.com/data")
        ```
    """

    def __init__(
        self,
        wallet: Any = None,
        max_amount_sats: Optional[int] = None,
        on_payment: Optional[Callable[[PaymentReceipt], Any]] = None,
        cache: Optional[CredentialCache] = None,
        use_cache: bool = True,
        cache_ttl_seconds: Optional[float] = None,
        cache_by_method: bool = False,
        **kwargs
    ):
        """
        Initialize client with optional payment capability.

        Args:
            wallet: Wallet adapter paying invoices; without it 402s are returned as-is
            max_amount_sats: Spending cap per request
            on_payment: Callback (sync or async) receiving a PaymentReceipt after each payment
            cache: Credential cache (default: the shared default cache)
            use_cache: Disable credential caching entirely when False
            cache_ttl_seconds: Lifetime of cached credentials (default: the cache's TTL)
            cache_by_method: Scope cached credentials by HTTP method
            **kwargs: All standard httpx.AsyncClient arguments (timeout, headers, transport, etc.)
        """
        super().__init__(**kwargs)
        self._wallet = wallet
        self._max_amount_sats = max_amount_sats
        self._on_payment = on_payment
        self._cache: Optional[CredentialCache] = None
        if use_cache:
            self._cache = cache if cache is not None else get_default_cache()
        self._owns_cache = False
        self._cache_ttl_seconds = cache_ttl_seconds
        self._cache_by_method = cache_by_method

    @classmethod
    def from_env(cls, wallet: Any = None, **kwargs) -> "Http402Client":
        """
        Build a client whose policy comes from L402_* environment variables.

        The client owns a private cache sized from the settings and closes it
        in ``aclose``.
        """
        settings = ClientSettings.from_env()
        cache = None
        if settings.cache_enabled:
            cache = CredentialCache(
                max_size=settings.cache_max_size,
                default_ttl_seconds=settings.cache_ttl_seconds,
            )
        client = cls(
            wallet=wallet,
            max_amount_sats=settings.max_amount_sats,
            cache=cache,
            use_cache=settings.cache_enabled,
            **kwargs
        )
        client._owns_cache = cache is not None
        return client

    @property
    def cache(self) -> Optional[CredentialCache]:
        return self._cache

    async def aclose(self) -> None:
        await super().aclose()
        self._close_owned_cache()

    async def __aexit__(self, *exc_info) -> None:
        await super().__aexit__(*exc_info)
        self._close_owned_cache()

    def _close_owned_cache(self) -> None:
        if self._owns_cache and self._cache is not None:
            self._cache.close()

    # =========================================================================
    # Override httpx.AsyncClient.request to add 402 handling
    # =========================================================================

    async def request(
        self,
        method: str,
        url: httpx.URL | str,
        **kwargs
    ) -> httpx.Response:
        """
        Execute HTTP request with automatic L402 handling.

        Overrides httpx.AsyncClient.request() to intercept 402 responses.
        All other httpx methods (get, post, etc.) automatically use this.

        Raises:
            AmountLimitExceededError: Invoice amount above max_amount_sats.
            WalletError: The wallet failed to pay.
            SettlementError: The payment returned no preimage.
        """
        return await self._execute_with_402_handling(method, url, **kwargs)

    # =========================================================================
    # Core 402 Handling Logic
    # =========================================================================

    async def _execute_with_402_handling(
        self,
        method: str,
        url: httpx.URL | str,
        **kwargs
    ) -> httpx.Response:
        resource = self._merge_url(url)
        scope = method if self._cache_by_method else None

        if self._cache is not None:
            credential = self._cache.get(resource, scope)
            if credential is not None:
                response = await super().request(
                    method, url, **self._with_proof(kwargs, credential.macaroon, credential.preimage)
                )
                if response.status_code not in _REJECTED_STATUSES:
                    return response
                logger.warning(
                    "Cached L402 credential for %s rejected (%s), paying again",
                    resource, response.status_code,
                )
                self._cache.invalidate(resource, scope)

        response = await super().request(method, url, **kwargs)
        if response.status_code != 402:
            return response

        challenge = decode_challenge(response.headers.get("www-authenticate"))
        if challenge is None:
            logger.debug("402 from %s without an L402 challenge", resource)
            return response
        if self._wallet is None:
            return response

        preimage = await self._handle_402_response(challenge, response, resource, scope)

        return await super().request(method, url, **self._with_proof(kwargs, challenge.macaroon, preimage))

    async def _handle_402_response(
        self,
        challenge: L402Challenge,
        response: httpx.Response,
        resource: httpx.URL,
        scope: Optional[str]
    ) -> str:
        """
        Enforce the spending cap, pay the invoice, cache the proof and report
        the payment.

        The proof is cached before ``on_payment`` runs, so a failing callback
        never loses a paid credential.

        Returns:
            The payment preimage (hex).
        """
        amount: Optional[int] = None
        if self._max_amount_sats is not None:
            amount = await resolve_amount(self._wallet, challenge.invoice, response)
            if amount is not None and amount > self._max_amount_sats:
                raise AmountLimitExceededError(amount, self._max_amount_sats)

        preimage = await self._pay_invoice(challenge.invoice)
        logger.info("Paid L402 invoice for %s", challenge.macaroon)
        self._store_credential(resource, scope, challenge, preimage)

        if self._on_payment is not None:
            if amount is None:
                amount = await resolve_amount(self._wallet, challenge.invoice, response)
            result = self._on_payment(
                PaymentReceipt(invoice=challenge.invoice, preimage=preimage, amount_sats=amount)
            )
            if inspect.isawaitable(result):
                await result

        return preimage

    async def _pay_invoice(self, invoice: str) -> str:
        try:
            paid = await self._wallet.pay_invoice(invoice)
        except WalletError:
            raise
        except Exception as e:
            raise WalletError(f"L402 invoice payment failed: {e}") from e

        if isinstance(paid, dict):
            preimage = paid.get("preimage")
        else:
            preimage = getattr(paid, "preimage", None)

        if not preimage:
            raise SettlementError("L402 payment succeeded but no preimage was returned")
        return preimage

    def _store_credential(
        self,
        resource: httpx.URL,
        scope: Optional[str],
        challenge: L402Challenge,
        preimage: str
    ) -> None:
        if self._cache is None:
            return
        if not verify_preimage(preimage, challenge.macaroon):
            logger.warning("Preimage does not match macaroon for %s, not caching", resource)
            return

        expires_at = None
        if self._cache_ttl_seconds is not None:
            expires_at = time.time() + self._cache_ttl_seconds
        self._cache.set(
            resource,
            L402Credential(macaroon=challenge.macaroon, preimage=preimage, expires_at=expires_at),
            scope,
        )

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def _with_proof(
        self,
        kwargs: Dict[str, Any],
        macaroon: str,
        preimage: str
    ) -> Dict[str, Any]:
        """
        Copy request kwargs with the L402 proof injected into the headers.

        Uses ClientRequestHeader model to ensure proper formatting.
        """
        header_model = ClientRequestHeader(authorization=encode_proof(macaroon, preimage))
        auth_headers = header_model.model_dump(by_alias=True, exclude_none=True)

        headers = httpx.Headers(kwargs.get("headers"))
        headers.update(auth_headers)
        return {**kwargs, "headers": headers}


async def l402_fetch(
    url: httpx.URL | str,
    method: str = "GET",
    wallet: Any = None,
    max_amount_sats: Optional[int] = None,
    on_payment: Optional[Callable[[PaymentReceipt], Any]] = None,
    cache: Optional[CredentialCache] = None,
    client_kwargs: Optional[Dict[str, Any]] = None,
    **request_kwargs
) -> httpx.Response:
    """
    One-shot L402-aware request.

    Caches credentials only when a cache is passed explicitly. The response
    body is read before the temporary client closes.

    Args:
        url: Resource URL
        method: HTTP method
        wallet: Wallet adapter paying invoices
        max_amount_sats: Spending cap
        on_payment: Payment callback
        cache: Optional credential cache
        client_kwargs: Extra httpx.AsyncClient arguments (transport, timeout, ...)
        **request_kwargs: Arguments of the request itself (headers, json, ...)
    """
    async with Http402Client(
        wallet=wallet,
        max_amount_sats=max_amount_sats,
        on_payment=on_payment,
        cache=cache,
        use_cache=cache is not None,
        **(client_kwargs or {})
    ) as client:
        return await client.request(method, url, **request_kwargs)
