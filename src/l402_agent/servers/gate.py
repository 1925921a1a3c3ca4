"""
L402 Gate - framework-agnostic paywall state machine.

One gate protects one priced resource. For every incoming request the HTTP
framework hands the Authorization header to ``evaluate`` and gets back one of
three outcomes:

    ADMITTED    valid proof; verified payment facts in ``decision.context``
    CHALLENGED  402 with a fresh WWW-Authenticate challenge
    ERROR       500; the wallet could not create an invoice

Admission never depends on server-side state: any proof whose preimage hashes
to its macaroon is accepted, even one issued before a restart.
"""

import logging
import time
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError

from ..config import DEFAULT_EXPIRY_SECONDS, DEFAULT_PENDING_SWEEP_THRESHOLD
from ..engine.events import (
    EventBus,
    Dependencies,
    RequestInitEvent,
    AuthorizationSuccessEvent,
    Http402PaymentEvent,
    InvoiceFailedEvent,
)
from ..engine.exceptions import ConfigurationError
from ..engine.executors import EventChain
from ..schemas.https import L402Context, ServerErrorPayload
from .flows import setup_event_bus
from .pending import PendingObligationTable

if TYPE_CHECKING:
    from ..adapters.bases import WalletAdapter

logger = logging.getLogger(__name__)


class GateOutcome(str, Enum):
    """Observable outcomes of a gate evaluation."""
    ADMITTED = "admitted"
    CHALLENGED = "challenged"
    ERROR = "error"


class GateDecision(BaseModel):
    """Result of evaluating one request against a gate.

    Attributes:
        outcome: Admitted, challenged or error.
        status_code: HTTP status to answer with (200, 402 or 500).
        headers: Response headers (WWW-Authenticate on challenges).
        body: JSON body for 402/500 responses.
        context: Verified payment facts when admitted.
    """
    outcome: GateOutcome
    status_code: int
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Optional[Dict[str, Any]] = None
    context: Optional[L402Context] = None

    @property
    def admitted(self) -> bool:
        return self.outcome is GateOutcome.ADMITTED


class GateOptions(BaseModel):
    """Validated gate configuration."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    wallet: Any
    amount_sats: StrictInt = Field(..., gt=0)
    description: Optional[str] = None
    expiry_seconds: StrictInt = Field(default=DEFAULT_EXPIRY_SECONDS, gt=0)


class L402Gate:
    """Paywall for a single priced resource."""

    def __init__(
        self,
        wallet: "WalletAdapter",
        amount_sats: int,
        description: Optional[str] = None,
        expiry_seconds: int = DEFAULT_EXPIRY_SECONDS,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], float] = time.time,
        pending_sweep_threshold: int = DEFAULT_PENDING_SWEEP_THRESHOLD,
    ):
        """Initialize the gate.

        Args:
            wallet: Wallet adapter able to create invoices.
            amount_sats: Price in satoshis (positive integer).
            description: Invoice memo (default: "L402 payment: <amount> sats").
            expiry_seconds: Invoice/challenge expiry (default: 600).
            event_bus: Shared event bus (default: new bus with built-in handlers).
            clock: Time source for the pending obligation table.
            pending_sweep_threshold: Pending table size that triggers cleanup.

        Raises:
            ConfigurationError: If the wallet is missing or the price is not a positive integer.
        """
        if wallet is None:
            raise ConfigurationError("L402Gate requires a wallet")
        try:
            options = GateOptions(
                wallet=wallet,
                amount_sats=amount_sats,
                description=description,
                expiry_seconds=expiry_seconds,
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid L402 gate options: {e}") from e

        self.wallet = options.wallet
        self.amount_sats = options.amount_sats
        self.description = options.description or f"L402 payment: {options.amount_sats} sats"
        self.expiry_seconds = options.expiry_seconds
        self.pending = PendingObligationTable(sweep_threshold=pending_sweep_threshold, clock=clock)
        self.event_bus = event_bus or setup_event_bus()
        self.depends = Dependencies(
            wallet=self.wallet,
            amount_sats=self.amount_sats,
            description=self.description,
            expiry_seconds=self.expiry_seconds,
            pending=self.pending,
        )

    async def evaluate(self, authorization: Optional[str]) -> GateDecision:
        """
        Run the gate state machine for one request.

        Args:
            authorization: Raw Authorization header value (may be None).

        Returns:
            GateDecision describing how to answer the request.
        """
        event_chain = EventChain(self.event_bus, self.depends)
        executor = event_chain.execute(RequestInitEvent(authorization=authorization))

        async for event in executor:
            if isinstance(event, AuthorizationSuccessEvent):
                logger.debug("L402 proof accepted for %s", event.context.payment_hash)
                return GateDecision(
                    outcome=GateOutcome.ADMITTED,
                    status_code=event.status_code,
                    context=event.context,
                )

            if isinstance(event, Http402PaymentEvent):
                return GateDecision(
                    outcome=GateOutcome.CHALLENGED,
                    status_code=event.status_code,
                    headers={"WWW-Authenticate": event.www_authenticate},
                    body=event.payload.to_dict(),
                )

            if isinstance(event, InvoiceFailedEvent):
                return GateDecision(
                    outcome=GateOutcome.ERROR,
                    status_code=event.status_code,
                    body=ServerErrorPayload(message=event.error_message).to_dict(),
                )

        return GateDecision(
            outcome=GateOutcome.ERROR,
            status_code=500,
            body=ServerErrorPayload(error="Payment verification failed").to_dict(),
        )
