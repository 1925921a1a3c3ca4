"""
Configuration Management

Settings for the gate, the auto-paying client and the LNbits wallet backend,
loaded from environment variables (a local ``.env`` file is read on import).

Environment Variables:
    Gate:
        - L402_PRICE_SATS: Price per protected resource (required for the gate)
        - L402_DESCRIPTION: Invoice memo
        - L402_EXPIRY_SECONDS: Invoice/challenge expiry (default 600)
    Client:
        - L402_MAX_AMOUNT_SATS: Spending cap per request (unset = no cap)
        - L402_CACHE_ENABLED: "true"/"false" (default true)
        - L402_CACHE_MAX_SIZE: Cached credentials kept (default 1000)
        - L402_CACHE_TTL_SECONDS: Client-assigned credential lifetime (default 3600)
    LNbits:
        - LNBITS_URL: Base URL of the LNbits instance
        - LNBITS_API_KEY: Wallet key (invoice key to receive, admin key to pay)
"""

import os
from typing import Any, Dict, Optional

import dotenv
from pydantic import BaseModel, Field, ValidationError

from .engine.exceptions import ConfigurationError

dotenv.load_dotenv()

DEFAULT_EXPIRY_SECONDS = 600
DEFAULT_CACHE_MAX_SIZE = 1000
DEFAULT_CACHE_TTL_SECONDS = 3600
DEFAULT_SWEEP_INTERVAL_SECONDS = 60
DEFAULT_PENDING_SWEEP_THRESHOLD = 100

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _env(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return value.strip()


def _env_bool(name: str) -> Optional[bool]:
    value = _env(name)
    if value is None:
        return None
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {value!r}")


def _build(model: type, values: Dict[str, Any]):
    """Validate collected values, dropping unset ones so model defaults apply."""
    try:
        return model(**{k: v for k, v in values.items() if v is not None})
    except ValidationError as e:
        raise ConfigurationError(f"Invalid {model.__name__}: {e}") from e


class GateSettings(BaseModel):
    """Pricing of a protected resource."""
    amount_sats: int = Field(..., gt=0, description="Price in satoshis")
    description: Optional[str] = Field(default=None, description="Invoice memo")
    expiry_seconds: int = Field(default=DEFAULT_EXPIRY_SECONDS, gt=0, description="Challenge expiry")

    @classmethod
    def from_env(cls) -> "GateSettings":
        """
        Load gate settings from L402_* environment variables.

        Raises:
            ConfigurationError: If L402_PRICE_SATS is missing or any value is invalid.
        """
        return _build(cls, {
            "amount_sats": _env("L402_PRICE_SATS"),
            "description": _env("L402_DESCRIPTION"),
            "expiry_seconds": _env("L402_EXPIRY_SECONDS"),
        })


class ClientSettings(BaseModel):
    """Auto-pay policy of the client."""
    max_amount_sats: Optional[int] = Field(default=None, gt=0, description="Spending cap per request")
    cache_enabled: bool = Field(default=True)
    cache_max_size: int = Field(default=DEFAULT_CACHE_MAX_SIZE, gt=0)
    cache_ttl_seconds: float = Field(default=DEFAULT_CACHE_TTL_SECONDS, gt=0)

    @classmethod
    def from_env(cls) -> "ClientSettings":
        """
        Load client settings from L402_* environment variables.

        Raises:
            ConfigurationError: If any value is invalid.
        """
        return _build(cls, {
            "max_amount_sats": _env("L402_MAX_AMOUNT_SATS"),
            "cache_enabled": _env_bool("L402_CACHE_ENABLED"),
            "cache_max_size": _env("L402_CACHE_MAX_SIZE"),
            "cache_ttl_seconds": _env("L402_CACHE_TTL_SECONDS"),
        })


class LNbitsSettings(BaseModel):
    """Connection settings of an LNbits wallet."""
    url: str = Field(..., description="LNbits base URL")
    api_key: str = Field(..., description="LNbits wallet key")
    request_timeout: float = Field(default=60.0, gt=0)

    @classmethod
    def from_env(cls) -> "LNbitsSettings":
        """
        Load LNbits settings from LNBITS_URL / LNBITS_API_KEY.

        Raises:
            ConfigurationError: If either variable is missing.
        """
        return _build(cls, {
            "url": _env("LNBITS_URL"),
            "api_key": _env("LNBITS_API_KEY"),
        })
