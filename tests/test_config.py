"""
Tests for environment-driven settings.
"""
import pytest

from l402_agent.config import ClientSettings, GateSettings, LNbitsSettings
from l402_agent.engine.exceptions import ConfigurationError

_VARS = [
    "L402_PRICE_SATS",
    "L402_DESCRIPTION",
    "L402_EXPIRY_SECONDS",
    "L402_MAX_AMOUNT_SATS",
    "L402_CACHE_ENABLED",
    "L402_CACHE_MAX_SIZE",
    "L402_CACHE_TTL_SECONDS",
    "LNBITS_URL",
    "LNBITS_API_KEY",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


class TestGateSettings:

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("L402_PRICE_SATS", "21")
        monkeypatch.setenv("L402_DESCRIPTION", "haiku")
        settings = GateSettings.from_env()

        assert settings.amount_sats == 21
        assert settings.description == "haiku"
        assert settings.expiry_seconds == 600

    def test_price_is_required(self):
        with pytest.raises(ConfigurationError):
            GateSettings.from_env()

    @pytest.mark.parametrize("value", ["0", "-10", "ten"])
    def test_invalid_price(self, monkeypatch, value):
        monkeypatch.setenv("L402_PRICE_SATS", value)
        with pytest.raises(ConfigurationError):
            GateSettings.from_env()


class TestClientSettings:

    def test_defaults(self):
        settings = ClientSettings.from_env()
        assert settings.max_amount_sats is None
        assert settings.cache_enabled is True
        assert settings.cache_max_size == 1000
        assert settings.cache_ttl_seconds == 3600

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("L402_MAX_AMOUNT_SATS", "100")
        monkeypatch.setenv("L402_CACHE_ENABLED", "off")
        monkeypatch.setenv("L402_CACHE_MAX_SIZE", "10")
        monkeypatch.setenv("L402_CACHE_TTL_SECONDS", "30")
        settings = ClientSettings.from_env()

        assert settings.max_amount_sats == 100
        assert settings.cache_enabled is False
        assert settings.cache_max_size == 10
        assert settings.cache_ttl_seconds == 30

    def test_blank_values_fall_back_to_defaults(self, monkeypatch):
        monkeypatch.setenv("L402_MAX_AMOUNT_SATS", "  ")
        assert ClientSettings.from_env().max_amount_sats is None

    def test_invalid_boolean(self, monkeypatch):
        monkeypatch.setenv("L402_CACHE_ENABLED", "maybe")
        with pytest.raises(ConfigurationError, match="L402_CACHE_ENABLED"):
            ClientSettings.from_env()


def test_lnbits_settings(monkeypatch):
    monkeypatch.setenv("LNBITS_URL", "https://lnbits.example")
    monkeypatch.setenv("LNBITS_API_KEY", "k")
    settings = LNbitsSettings.from_env()
    assert settings.url == "https://lnbits.example"
    assert settings.request_timeout == 60.0


def test_lnbits_settings_missing_key(monkeypatch):
    monkeypatch.setenv("LNBITS_URL", "https://lnbits.example")
    with pytest.raises(ConfigurationError):
        LNbitsSettings.from_env()
