from .events import (
    BaseEvent,
    RequestInitEvent,
    ChallengeRequiredEvent,
    AuthorizationSuccessEvent,
    Http402PaymentEvent,
    InvoiceFailedEvent,
    BreakEvent,
    Dependencies,
    EventBus,
)
from .executors import EventChain
from .exceptions import (
    L402Error,
    ConfigurationError,
    InvalidCredentialError,
    WalletError,
    InvoiceCreationError,
    SettlementError,
    AmountLimitExceededError,
)

__all__ = [
    "BaseEvent",
    "RequestInitEvent",
    "ChallengeRequiredEvent",
    "AuthorizationSuccessEvent",
    "Http402PaymentEvent",
    "InvoiceFailedEvent",
    "BreakEvent",
    "Dependencies",
    "EventBus",
    "EventChain",
    "L402Error",
    "ConfigurationError",
    "InvalidCredentialError",
    "WalletError",
    "InvoiceCreationError",
    "SettlementError",
    "AmountLimitExceededError",
]
