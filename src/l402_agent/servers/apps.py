"""
L402 Payment Protocol Server - Event-driven FastAPI wrapper.

Provides a simple interface for paywalling FastAPI routes with L402 and
observing the gate through typed events.
"""

import inspect
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..config import DEFAULT_EXPIRY_SECONDS, GateSettings
from ..engine.events import EventBus, BaseEvent
from ..engine.exceptions import ConfigurationError
from .flows import setup_event_bus
from .gate import L402Gate


class Http402Server(FastAPI):
    """FastAPI server with L402 paywall support."""

    def __init__(
        self,
        wallet,
        default_expiry_seconds: int = DEFAULT_EXPIRY_SECONDS,
        **fastapi_kwargs
    ):
        """Initialize L402 payment server.

        Args:
            wallet: Wallet adapter used to issue invoices for every paywalled route
            default_expiry_seconds: Challenge expiry used when a route does not set one
            **fastapi_kwargs: FastAPI arguments (title, version, etc.)

        Raises:
            ConfigurationError: If no wallet is given.
        """
        if wallet is None:
            raise ConfigurationError("Http402Server requires a wallet")

        self.wallet = wallet
        self.default_expiry_seconds = default_expiry_seconds
        self.event_bus: EventBus = setup_event_bus()

        super().__init__(**fastapi_kwargs)

    def gate(
        self,
        amount_sats: int,
        description: Optional[str] = None,
        expiry_seconds: Optional[int] = None,
    ) -> L402Gate:
        """Build a gate sharing this server's wallet and event bus.

        Args:
            amount_sats: Price in satoshis
            description: Invoice memo
            expiry_seconds: Challenge expiry (default: server default)
        """
        return L402Gate(
            wallet=self.wallet,
            amount_sats=amount_sats,
            description=description,
            expiry_seconds=self.default_expiry_seconds if expiry_seconds is None else expiry_seconds,
            event_bus=self.event_bus,
        )

    def subscribe(self, event_class: type[BaseEvent], handler: Callable) -> None:
        """Register event handler.

        Args:
            event_class: Event type to handle
            handler: Async function(event, deps) -> Optional[BaseEvent]
        """
        self.event_bus.subscribe(event_class, handler)

    def add_hook(self, event_class: type[BaseEvent], hook: Callable) -> None:
        """Register event hook for side effects.

        Args:
            event_class: Event type to hook into
            hook: Async function(event, deps) -> None

        Example:
            ```python
            async def log_event(event, deps):
                logger.info("event: %r", event)

            app.add_hook(Http402PaymentEvent, log_event)
            ```
        """
        self.event_bus.hook(event_class, hook)

    def hook(self, event_class: type[BaseEvent]) -> Callable:
        """Decorator for registering event hooks.

        Args:
            event_class: Event type to hook into

        Example:
            @app.hook(AuthorizationSuccessEvent)
            async def on_paid_access(event, deps):
                await record_revenue(event.context.amount_sats)
        """
        def decorator(hook_func: Callable) -> Callable:
            self.event_bus.hook(event_class, hook_func)
            return hook_func
        return decorator

    def payment_required(
        self,
        amount_sats: Optional[int] = None,
        description: Optional[str] = None,
        expiry_seconds: Optional[int] = None,
    ) -> Callable:
        """Decorator to paywall a route.

        Returns 402 with an L402 challenge when no valid proof is presented,
        500 when no invoice can be created, and otherwise calls the handler
        with the request; ``request.state.l402`` holds the L402Context.

        Example:
            ```python
            @app.get("/api/quote")
            @app.payment_required(amount_sats=5)
            async def quote(request):
                return {"paid": request.state.l402.amount_sats}
            ```

        Without ``amount_sats`` the price, description and expiry come from
        L402_PRICE_SATS, L402_DESCRIPTION and L402_EXPIRY_SECONDS; explicit
        arguments win over the environment.

        Raises:
            ConfigurationError: If no price is given and L402_PRICE_SATS is
                missing or invalid.
        """
        if amount_sats is None:
            settings = GateSettings.from_env()
            amount_sats = settings.amount_sats
            description = description or settings.description
            if expiry_seconds is None and "expiry_seconds" in settings.model_fields_set:
                expiry_seconds = settings.expiry_seconds

        gate = self.gate(amount_sats, description=description, expiry_seconds=expiry_seconds)

        def decorator(route_handler: Callable) -> Callable:
            async def wrapper(request: Request):
                decision = await gate.evaluate(request.headers.get("authorization"))

                if decision.admitted:
                    request.state.l402 = decision.context
                    result = route_handler(request)
                    if inspect.isawaitable(result):
                        result = await result
                    return result

                return JSONResponse(
                    status_code=decision.status_code,
                    content=decision.body,
                    headers=decision.headers,
                )

            wrapper.__name__ = route_handler.__name__
            wrapper.__doc__ = route_handler.__doc__
            wrapper.gate = gate
            return wrapper

        return decorator
