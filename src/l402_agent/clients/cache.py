"""
L402 Credential Cache

Stores paid L402 credentials (macaroon + preimage) so that repeated requests
to the same resource are not paid twice. Credentials are keyed by resource
identity: origin + path, query string dropped, optionally scoped by HTTP
method. Two query strings against the same path share one credential.

Bounds:
    - size: at capacity, the oldest inserted entry is evicted
    - time: entries past ``expires_at`` are invisible to ``get`` and are
      reclaimed by a background sweeper thread (every 60s by default)

The L402 challenge carries no expiry, so ``expires_at`` is a client-side
guess (default TTL one hour) and a cached credential may be rejected by the
server before it expires here; callers invalidate it in that case.
"""

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import httpx

from ..config import DEFAULT_CACHE_MAX_SIZE, DEFAULT_CACHE_TTL_SECONDS, DEFAULT_SWEEP_INTERVAL_SECONDS
from ..engine.exceptions import InvalidCredentialError
from ..schemas.payments import L402Credential
from ..servers.security import verify_preimage

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A stored credential and the time it was stored."""
    credential: L402Credential
    stored_at: float


class CredentialCache:
    """
    Bounded, time-expiring map of resource identity -> L402Credential.

    Thread-safe: one lock guards the table, shared with the sweeper thread.

    Usage:
        with CredentialCache(max_size=100) as cache:
            cache.set("https://api.example.com/data", credential)
            cache.get("https://api.example.com/data?page=2")  # same entry
    """

    def __init__(
        self,
        max_size: int = DEFAULT_CACHE_MAX_SIZE,
        default_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.time,
        start_sweeper: bool = True,
    ):
        """
        Args:
            max_size: Maximum number of cached credentials.
            default_ttl_seconds: Lifetime given to credentials stored without expires_at.
            sweep_interval_seconds: Period of the background sweep.
            clock: Time source (epoch seconds).
            start_sweeper: Start the background sweeper thread.
        """
        if max_size <= 0:
            raise ValueError("max_size must be positive")

        self.max_size = max_size
        self.default_ttl_seconds = default_ttl_seconds
        self.sweep_interval_seconds = sweep_interval_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()

        self._stop = threading.Event()
        self._sweeper: Optional[threading.Thread] = None
        if start_sweeper:
            self._sweeper = threading.Thread(
                target=self._sweep_loop,
                name="l402-credential-sweeper",
                daemon=True,
            )
            self._sweeper.start()

    # =========================================================================
    # Keys
    # =========================================================================

    @staticmethod
    def key(url: httpx.URL | str, method: Optional[str] = None) -> str:
        """
        Derive the cache key of a resource.

        Args:
            url: Absolute resource URL.
            method: Optional HTTP method scope.

        Returns:
            ``"<scheme>://<host>[:port]<path>"``, prefixed with ``"<METHOD>:"``
            when a method is given.
        """
        parsed = httpx.URL(str(url))
        origin = f"{parsed.scheme}://{parsed.host}"
        if parsed.port is not None:
            origin = f"{origin}:{parsed.port}"
        normalized = f"{origin}{parsed.path}"
        return f"{method.upper()}:{normalized}" if method else normalized

    # =========================================================================
    # Public API
    # =========================================================================

    def get(self, url: httpx.URL | str, method: Optional[str] = None) -> Optional[L402Credential]:
        """
        Return the credential cached for a resource, if still valid.

        Expired entries are evicted on access.
        """
        k = self.key(url, method)
        now = self._clock()
        with self._lock:
            entry = self._entries.get(k)
            if entry is None:
                return None
            if self._is_expired(entry, now):
                del self._entries[k]
                return None
            return entry.credential

    def has(self, url: httpx.URL | str, method: Optional[str] = None) -> bool:
        """Whether a valid credential is cached for the resource."""
        return self.get(url, method) is not None

    def set(self, url: httpx.URL | str, credential: L402Credential, method: Optional[str] = None) -> None:
        """
        Store a credential for a resource.

        Overwrites any existing entry for the same key. When the cache is
        full, the oldest inserted entry is evicted first.

        Raises:
            InvalidCredentialError: If the preimage does not hash to the macaroon.
        """
        if not verify_preimage(credential.preimage, credential.macaroon):
            raise InvalidCredentialError("Refusing to cache a credential whose preimage does not verify")

        k = self.key(url, method)
        now = self._clock()
        if credential.expires_at is None:
            credential = credential.model_copy(update={"expires_at": now + self.default_ttl_seconds})

        with self._lock:
            if k in self._entries:
                del self._entries[k]
            elif len(self._entries) >= self.max_size:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Credential cache full, evicted %s", evicted)
            self._entries[k] = CacheEntry(credential=credential, stored_at=now)

    def invalidate(self, url: httpx.URL | str, method: Optional[str] = None) -> None:
        """Remove the credential of a resource (e.g. after the server rejected it)."""
        k = self.key(url, method)
        with self._lock:
            self._entries.pop(k, None)

    def clear(self) -> None:
        """Remove every cached credential."""
        with self._lock:
            self._entries.clear()

    def sweep(self) -> int:
        """
        Remove every expired entry.

        Returns:
            Number of removed entries.
        """
        now = self._clock()
        with self._lock:
            expired = [k for k, entry in self._entries.items() if self._is_expired(entry, now)]
            for k in expired:
                del self._entries[k]
        if expired:
            logger.debug("Credential cache sweep removed %d entries", len(expired))
        return len(expired)

    def stats(self) -> Dict[str, int]:
        """Current size and capacity."""
        with self._lock:
            return {"size": len(self._entries), "max_size": self.max_size}

    def close(self) -> None:
        """Stop the background sweeper. Cached entries are kept. Idempotent."""
        self._stop.set()
        sweeper, self._sweeper = self._sweeper, None
        if sweeper is not None and sweeper is not threading.current_thread():
            sweeper.join(timeout=self.sweep_interval_seconds)

    @property
    def closed(self) -> bool:
        return self._stop.is_set()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __enter__(self) -> "CredentialCache":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # =========================================================================
    # Internals
    # =========================================================================

    @staticmethod
    def _is_expired(entry: CacheEntry, now: float) -> bool:
        expires_at = entry.credential.expires_at
        return expires_at is not None and now >= expires_at

    def _sweep_loop(self) -> None:
        while not self._stop.wait(self.sweep_interval_seconds):
            self.sweep()


# =============================================================================
# Default shared instance
# =============================================================================

_default_cache: Optional[CredentialCache] = None
_default_cache_lock = threading.Lock()


def get_default_cache() -> CredentialCache:
    """Return the process-wide cache, creating it on first use."""
    global _default_cache
    with _default_cache_lock:
        if _default_cache is None:
            _default_cache = CredentialCache()
        return _default_cache


def reset_default_cache() -> None:
    """Close and drop the process-wide cache."""
    global _default_cache
    with _default_cache_lock:
        if _default_cache is not None:
            _default_cache.close()
        _default_cache = None
