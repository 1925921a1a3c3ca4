import hashlib

import pytest

from l402_agent.adapters import MockWallet
from l402_agent.clients import CredentialCache, reset_default_cache
from l402_agent.schemas import L402Credential

PREIMAGE = "00" * 31 + "01"
PAYMENT_HASH = hashlib.sha256(bytes.fromhex(PREIMAGE)).hexdigest()


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def _drop_default_cache():
    yield
    reset_default_cache()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def wallet():
    return MockWallet()


@pytest.fixture
def cache(clock):
    cache = CredentialCache(clock=clock, start_sweeper=False)
    yield cache
    cache.close()


@pytest.fixture
def credential():
    return L402Credential(macaroon=PAYMENT_HASH, preimage=PREIMAGE)


@pytest.fixture
def preimage():
    return PREIMAGE


@pytest.fixture
def payment_hash():
    return PAYMENT_HASH
