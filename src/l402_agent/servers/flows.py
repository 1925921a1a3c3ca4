"""
Built-in event handlers for the L402 gate.

Implements the gate state machine: proof verification -> admission, or
invoice creation -> challenge (or internal error when the wallet fails).
"""

import logging

from ..engine.events import (
    EventBus,
    Dependencies,
    RequestInitEvent,
    ChallengeRequiredEvent,
    AuthorizationSuccessEvent,
    Http402PaymentEvent,
    InvoiceFailedEvent,
)
from ..schemas.headers import L402Challenge, decode_proof
from ..schemas.https import L402Context, Server402ResponsePayload
from ..schemas.payments import InvoiceRequest
from .security import verify_preimage

logger = logging.getLogger(__name__)


# ==================== Event Handlers ====================

async def handle_request_init(
    event: RequestInitEvent,
    deps: Dependencies
) -> AuthorizationSuccessEvent | ChallengeRequiredEvent:
    """Admit the request if it carries a proof that verifies."""
    proof = decode_proof(event.authorization)
    if proof is None:
        reason = "Missing authorization" if not event.authorization else "Malformed L402 authorization"
        return ChallengeRequiredEvent(reason=reason)

    payment_hash = proof.macaroon.lower()
    if not verify_preimage(proof.preimage, payment_hash):
        return ChallengeRequiredEvent(reason="Preimage does not match payment hash")

    return AuthorizationSuccessEvent(
        context=L402Context(
            payment_hash=payment_hash,
            preimage=proof.preimage.lower(),
            amount_sats=deps.amount_sats,
        )
    )


async def handle_issue_challenge(
    event: ChallengeRequiredEvent,
    deps: Dependencies
) -> Http402PaymentEvent | InvoiceFailedEvent:
    """Create a fresh invoice and turn it into a 402 challenge."""
    try:
        created = await deps.wallet.create_invoice(
            InvoiceRequest(
                amount_sats=deps.amount_sats,
                description=deps.description,
                expiry=deps.expiry_seconds,
            )
        )
    except Exception as e:
        logger.exception("Invoice creation failed")
        return InvoiceFailedEvent(error_message=str(e) or type(e).__name__)

    if deps.pending is not None:
        deps.pending.record(created.payment_hash, created.invoice, deps.amount_sats, deps.expiry_seconds)
        deps.pending.sweep_if_oversized()

    logger.info("L402 challenge issued (%s sats, hash %s): %s", deps.amount_sats, created.payment_hash, event.reason)
    return Http402PaymentEvent(
        challenge=L402Challenge(invoice=created.invoice, macaroon=created.payment_hash),
        payload=Server402ResponsePayload(
            amount_sats=deps.amount_sats,
            description=deps.description,
            invoice=created.invoice,
            payment_hash=created.payment_hash,
        ),
    )


# ==================== Event Bus Setup ====================

def setup_event_bus() -> EventBus:
    """Initialize event bus with the built-in gate handlers."""
    event_bus = EventBus()

    event_bus.subscribe(RequestInitEvent, handle_request_init)
    event_bus.subscribe(ChallengeRequiredEvent, handle_issue_challenge)

    return event_bus
