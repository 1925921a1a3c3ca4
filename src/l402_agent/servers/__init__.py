from .apps import Http402Server
from .gate import L402Gate, GateDecision, GateOutcome
from .pending import PendingObligation, PendingObligationTable
from .security import verify_preimage, payment_hash_for, generate_preimage

__all__ = [
    "Http402Server",
    "L402Gate",
    "GateDecision",
    "GateOutcome",
    "PendingObligation",
    "PendingObligationTable",
    "verify_preimage",
    "payment_hash_for",
    "generate_preimage",
]
