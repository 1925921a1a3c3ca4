"""
Pending Obligation Table

Server-side bookkeeping of issued challenges, keyed by payment hash. The
table is never consulted to admit a request (admission only recomputes the
preimage hash), it only keeps track of what was issued and drops records
once they expire.

Cleanup is opportunistic: the gate calls ``sweep_if_oversized`` after each
insertion, and expired records are only removed once the table has grown
past its soft bound.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ..config import DEFAULT_PENDING_SWEEP_THRESHOLD


@dataclass(frozen=True)
class PendingObligation:
    """An issued, not yet expired challenge."""
    invoice: str
    amount_sats: int
    created_at: float
    expires_at: float


class PendingObligationTable:
    """Lock-protected map of payment hash -> PendingObligation."""

    def __init__(
        self,
        sweep_threshold: int = DEFAULT_PENDING_SWEEP_THRESHOLD,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Args:
            sweep_threshold: Size above which an insertion triggers a sweep.
            clock: Time source (epoch seconds).
        """
        self.sweep_threshold = sweep_threshold
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, PendingObligation] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, payment_hash: str) -> bool:
        with self._lock:
            return payment_hash.lower() in self._entries

    def record(self, payment_hash: str, invoice: str, amount_sats: int, expiry_seconds: int) -> PendingObligation:
        """
        Register a newly issued challenge.

        Args:
            payment_hash: Hex payment hash (stored lower-cased).
            invoice: Invoice handed to the caller.
            amount_sats: Invoice amount.
            expiry_seconds: Lifetime of the challenge.

        Returns:
            The stored PendingObligation.
        """
        now = self._clock()
        obligation = PendingObligation(
            invoice=invoice,
            amount_sats=amount_sats,
            created_at=now,
            expires_at=now + expiry_seconds,
        )
        with self._lock:
            self._entries[payment_hash.lower()] = obligation
        return obligation

    def get(self, payment_hash: str) -> Optional[PendingObligation]:
        with self._lock:
            return self._entries.get(payment_hash.lower())

    def sweep(self) -> int:
        """
        Remove every expired obligation.

        Returns:
            Number of removed records.
        """
        now = self._clock()
        with self._lock:
            expired = [h for h, o in self._entries.items() if now > o.expires_at]
            for payment_hash in expired:
                del self._entries[payment_hash]
        return len(expired)

    def sweep_if_oversized(self) -> int:
        """Sweep only when the table is larger than the threshold."""
        with self._lock:
            oversized = len(self._entries) > self.sweep_threshold
        return self.sweep() if oversized else 0
