"""
Tests for the L402 credential cache.
Tests: 1) Resource keys 2) Size bound 3) Time bound 4) Verification on insert 5) Lifecycle
"""
import time

import pytest

from l402_agent.clients import CredentialCache, get_default_cache, reset_default_cache
from l402_agent.engine.exceptions import InvalidCredentialError
from l402_agent.schemas import L402Credential
from l402_agent.servers.security import generate_preimage, payment_hash_for


def fresh_credential(**kwargs) -> L402Credential:
    preimage = generate_preimage()
    return L402Credential(macaroon=payment_hash_for(preimage), preimage=preimage, **kwargs)


class TestKey:

    def test_query_and_fragment_are_dropped(self):
        assert CredentialCache.key("https://api.test/data?page=2#top") == "https://api.test/data"

    def test_explicit_port_is_kept(self):
        assert CredentialCache.key("http://localhost:8000/api/ping") == "http://localhost:8000/api/ping"

    def test_method_scope(self):
        assert CredentialCache.key("https://api.test/data", "post") == "POST:https://api.test/data"


class TestGetSet:

    def test_query_strings_share_one_entry(self, cache, credential):
        cache.set("https://api.test/data?page=1", credential)
        assert cache.get("https://api.test/data?page=2").preimage == credential.preimage
        assert cache.has("https://api.test/data")

    def test_method_scoped_entries_are_separate(self, cache, credential):
        cache.set("https://api.test/data", credential, "GET")
        assert cache.get("https://api.test/data", "GET") is not None
        assert cache.get("https://api.test/data", "POST") is None
        assert cache.get("https://api.test/data") is None

    def test_missing_expiry_gets_default_ttl(self, cache, clock, credential):
        cache.set("https://api.test/data", credential)
        stored = cache.get("https://api.test/data")
        assert stored.expires_at == clock.now + cache.default_ttl_seconds

    def test_explicit_expiry_is_kept(self, cache, clock, credential):
        expiring = credential.model_copy(update={"expires_at": clock.now + 5})
        cache.set("https://api.test/data", expiring)
        assert cache.get("https://api.test/data").expires_at == clock.now + 5

    def test_rejects_credential_that_does_not_verify(self, cache, payment_hash):
        with pytest.raises(InvalidCredentialError):
            cache.set("https://api.test/data", L402Credential(macaroon=payment_hash, preimage="00" * 32))
        assert len(cache) == 0

    def test_rejects_preimage_with_whitespace(self, cache):
        preimage = "11" * 32
        spaced = L402Credential(macaroon=payment_hash_for(preimage), preimage=" ".join(["11"] * 32))
        with pytest.raises(InvalidCredentialError):
            cache.set("https://api.test/data", spaced)
        assert len(cache) == 0

    def test_invalidate_and_clear(self, cache, credential):
        cache.set("https://api.test/a", credential)
        cache.set("https://api.test/b", credential)

        cache.invalidate("https://api.test/a?x=1")
        assert not cache.has("https://api.test/a")
        assert cache.has("https://api.test/b")

        cache.clear()
        assert cache.stats() == {"size": 0, "max_size": cache.max_size}


class TestSizeBound:

    def test_oldest_entry_is_evicted(self, clock):
        cache = CredentialCache(max_size=3, clock=clock, start_sweeper=False)
        for i in range(4):
            cache.set(f"https://api.test/{i}", fresh_credential())

        assert len(cache) == 3
        assert not cache.has("https://api.test/0")
        assert all(cache.has(f"https://api.test/{i}") for i in (1, 2, 3))

    def test_overwrite_does_not_evict(self, clock):
        cache = CredentialCache(max_size=2, clock=clock, start_sweeper=False)
        cache.set("https://api.test/a", fresh_credential())
        cache.set("https://api.test/b", fresh_credential())
        cache.set("https://api.test/a", fresh_credential())

        assert len(cache) == 2
        cache.set("https://api.test/c", fresh_credential())
        # "a" was re-inserted after "b", so "b" is now the oldest
        assert not cache.has("https://api.test/b")
        assert cache.has("https://api.test/a")

    def test_max_size_must_be_positive(self):
        with pytest.raises(ValueError):
            CredentialCache(max_size=0, start_sweeper=False)


class TestTimeBound:

    def test_past_expiry_is_never_returned(self, cache, clock, credential):
        cache.set("https://api.test/data", credential.model_copy(update={"expires_at": clock.now - 1}))
        assert cache.get("https://api.test/data") is None
        assert len(cache) == 0

    def test_expiry_instant_counts_as_expired(self, cache, clock, credential):
        cache.set("https://api.test/data", credential.model_copy(update={"expires_at": clock.now + 10}))
        clock.advance(10)
        assert not cache.has("https://api.test/data")

    def test_sweep_removes_expired_entries(self, cache, clock):
        cache.set("https://api.test/short", fresh_credential(expires_at=clock.now + 1))
        cache.set("https://api.test/long", fresh_credential(expires_at=clock.now + 100))

        clock.advance(50)
        assert cache.sweep() == 1
        assert len(cache) == 1
        assert cache.has("https://api.test/long")

    def test_background_sweeper(self):
        cache = CredentialCache(sweep_interval_seconds=0.05)
        try:
            cache.set("https://api.test/data", fresh_credential(expires_at=time.time() + 0.05))
            deadline = time.time() + 2
            while len(cache) and time.time() < deadline:
                time.sleep(0.05)
            assert len(cache) == 0
        finally:
            cache.close()


class TestLifecycle:

    def test_close_is_idempotent(self):
        cache = CredentialCache(sweep_interval_seconds=0.05)
        cache.close()
        cache.close()
        assert cache.closed

    def test_close_keeps_entries(self, credential):
        with CredentialCache(sweep_interval_seconds=0.05) as cache:
            cache.set("https://api.test/data", credential)
        assert cache.closed
        assert cache.has("https://api.test/data")

    def test_default_cache_is_shared(self):
        first = get_default_cache()
        assert get_default_cache() is first

        reset_default_cache()
        assert first.closed
        assert get_default_cache() is not first
