"""
Event-driven system with typed events and clear data flow.

Events carry their own data, handlers return next events, and dependencies
are injected separately from business data. The L402 gate is expressed as
such a chain:

    RequestInitEvent
        ├── AuthorizationSuccessEvent                (valid proof: admitted)
        └── ChallengeRequiredEvent
                ├── Http402PaymentEvent              (challenge issued)
                └── InvoiceFailedEvent               (wallet failure: 500)
"""

import asyncio
import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Callable, Optional, Awaitable, AsyncGenerator

from pydantic import BaseModel, ConfigDict

from ..schemas.headers import L402Challenge, encode_challenge
from ..schemas.https import L402Context, Server402ResponsePayload

if TYPE_CHECKING:
    from ..adapters.bases import WalletAdapter
    from ..servers.pending import PendingObligationTable

# ==================== Base Event ====================

class BaseEvent(ABC):
    """Base class for all events in the system."""

    @abstractmethod
    def __repr__(self) -> str:
        """String representation of the event."""
        pass


# ==================== Trigger Events (External) ====================

class RequestInitEvent(BaseModel, BaseEvent):
    """External trigger: a request reached a protected resource."""
    authorization: Optional[str] = None

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def __repr__(self) -> str:
        return "RequestInitEvent(authorization=***)"


# ==================== Intermediate Events ====================

class ChallengeRequiredEvent(BaseModel, BaseEvent):
    """No usable proof: a fresh invoice must be issued.

    ``reason`` is for logs and hooks only; it is never sent to the caller.
    """
    reason: str

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def __repr__(self) -> str:
        return f"ChallengeRequiredEvent(reason={self.reason})"


# ==================== Result Events ====================

class AuthorizationSuccessEvent(BaseModel, BaseEvent):
    """Result: proof verified, request admitted."""
    context: L402Context
    status_code: int = 200

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def __repr__(self) -> str:
        return f"AuthorizationSuccessEvent(payment_hash={self.context.payment_hash})"


class Http402PaymentEvent(BaseModel, BaseEvent):
    """Result: payment required - challenge header and 402 payload."""
    challenge: L402Challenge
    payload: Server402ResponsePayload
    status_code: int = 402

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @property
    def www_authenticate(self) -> str:
        """Encoded WWW-Authenticate header value."""
        return encode_challenge(self.challenge.invoice, self.challenge.macaroon)

    def __repr__(self) -> str:
        return f"Http402PaymentEvent(payment_hash={self.challenge.macaroon})"


class InvoiceFailedEvent(BaseModel, BaseEvent):
    """Result: the wallet could not create an invoice."""
    error_message: str
    status_code: int = 500

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def __repr__(self) -> str:
        return f"InvoiceFailedEvent(error={self.error_message})"


class BreakEvent(BaseModel, BaseEvent):
    """Internal event to break the event chain."""
    break_reason: str = ""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def __repr__(self) -> str:
        return "BreakEvent()"


# ==================== Dependencies Container ====================

@dataclass(frozen=True)
class Dependencies:
    """Container for infrastructure dependencies of one gate (read-only)."""
    wallet: Optional["WalletAdapter"] = None
    amount_sats: int = 0
    description: str = ""
    expiry_seconds: int = 600
    pending: Optional["PendingObligationTable"] = None


# ==================== Event Bus ====================

EventHandlerFunc = Callable[[BaseEvent, Dependencies], Awaitable[Optional[BaseEvent]]]
EventHookFunc = Callable[[BaseEvent, Dependencies], Awaitable[None]]


class EventBus:
    """Event dispatcher for publishing and subscribing to events."""

    def __init__(self) -> None:
        """Initialize with empty subscribers and hooks."""
        self._subscribers: Dict[type, list[EventHandlerFunc]] = {}
        self._hooks: Dict[type, list[EventHookFunc]] = {}

    def subscribe(self, event_class: type[BaseEvent], handler: EventHandlerFunc) -> None:
        """
        Register an async handler for the given event class.
        Multiple handlers can be subscribed to the same event type and run in parallel.

        Args:
            event_class: The event class to subscribe to.
            handler: The async handler function to call when the event is published.

        Raises:
            TypeError: If handler is not a coroutine function.
        """
        if not inspect.iscoroutinefunction(handler):
            raise TypeError(f"Handler must be a coroutine function, got {type(handler).__name__}")

        if event_class not in self._subscribers:
            self._subscribers[event_class] = []
        self._subscribers[event_class].append(handler)

    def hook(self, event_class: type[BaseEvent], hook_func: EventHookFunc) -> None:
        """
        Register a hook for the given event class.
        Hooks are executed before subscribers when the event is dispatched.

        Args:
            event_class: The event class to hook into.
            hook_func: The hook function to call when the event is published.
        """
        if not inspect.iscoroutinefunction(hook_func):
            raise TypeError(f"Handler must be a coroutine function, got {type(hook_func).__name__}")

        if event_class not in self._hooks:
            self._hooks[event_class] = []
        self._hooks[event_class].append(hook_func)

    async def dispatch(self, event: BaseEvent, deps: Dependencies) -> AsyncGenerator[Optional[BaseEvent], None]:
        """
        Dispatch an event to all registered hooks and subscribers.
        Hooks run first, then all subscribers run in parallel.

        Args:
            event: The event to dispatch.
            deps: Dependencies container with injected services.

        Yields:
            Results from all subscribers as they complete. Yields nothing if no subscribers are registered.
        """
        hooks = self._hooks.get(type(event), [])
        await asyncio.gather(*(hook(event, deps) for hook in hooks))

        handlers = self._subscribers.get(type(event), [])
        if not handlers:
            return

        tasks = [handler(event, deps) for handler in handlers]
        for coro in asyncio.as_completed(tasks):
            result = await coro
            yield result
