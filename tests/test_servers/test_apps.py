"""
Tests for the FastAPI integration (Http402Server.payment_required).
"""
from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi import Request

from l402_agent.engine.events import AuthorizationSuccessEvent, Http402PaymentEvent
from l402_agent.engine.exceptions import ConfigurationError, InvoiceCreationError
from l402_agent.schemas import decode_challenge, encode_proof
from l402_agent.servers import Http402Server


def build_app(wallet) -> Http402Server:
    app = Http402Server(wallet=wallet, title="test")

    @app.get("/")
    async def index():
        return {"free": True}

    @app.get("/api/quote")
    @app.payment_required(amount_sats=5, description="quote")
    async def quote(request: Request):
        return {"paid": request.state.l402.amount_sats, "hash": request.state.l402.payment_hash}

    @app.get("/api/sync")
    @app.payment_required(amount_sats=1)
    def sync_route(request: Request):
        return {"sync": True}

    return app


@pytest.fixture
def client(wallet):
    app = build_app(wallet)
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")


def test_server_requires_wallet():
    with pytest.raises(ConfigurationError):
        Http402Server(wallet=None)


@pytest.mark.asyncio
async def test_free_route_is_untouched(client):
    async with client:
        response = await client.get("/")
    assert response.status_code == 200
    assert response.json() == {"free": True}


@pytest.mark.asyncio
async def test_paywalled_route_returns_challenge(client):
    async with client:
        response = await client.get("/api/quote")

    assert response.status_code == 402
    challenge = decode_challenge(response.headers["www-authenticate"])
    body = response.json()
    assert body["error"] == "Payment Required"
    assert body["amountSats"] == 5
    assert body["description"] == "quote"
    assert body["invoice"] == challenge.invoice
    assert body["paymentHash"] == challenge.macaroon


@pytest.mark.asyncio
async def test_paid_request_reaches_handler(client, wallet):
    async with client:
        challenged = await client.get("/api/quote")
        challenge = decode_challenge(challenged.headers["www-authenticate"])
        paid = await wallet.pay_invoice(challenge.invoice)

        response = await client.get(
            "/api/quote",
            headers={"Authorization": encode_proof(challenge.macaroon, paid.preimage)},
        )

    assert response.status_code == 200
    assert response.json() == {"paid": 5, "hash": challenge.macaroon}


@pytest.mark.asyncio
async def test_sync_handler(client, preimage, payment_hash):
    async with client:
        response = await client.get("/api/sync", headers={"Authorization": encode_proof(payment_hash, preimage)})
    assert response.json() == {"sync": True}


@pytest.mark.asyncio
async def test_invalid_proof_gets_new_challenge(client, payment_hash):
    async with client:
        response = await client.get("/api/quote", headers={"Authorization": encode_proof(payment_hash, "ab" * 32)})
    assert response.status_code == 402
    assert decode_challenge(response.headers["www-authenticate"]) is not None


@pytest.mark.asyncio
async def test_invoice_failure_is_500():
    wallet = AsyncMock()
    wallet.create_invoice.side_effect = InvoiceCreationError("node offline")
    app = build_app(wallet)

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/api/quote")

    assert response.status_code == 500
    assert "www-authenticate" not in response.headers
    assert response.json() == {"error": "Failed to create invoice", "message": "node offline"}


@pytest.mark.asyncio
async def test_hooks_observe_gate_events(wallet, preimage, payment_hash):
    app = build_app(wallet)
    seen = []

    @app.hook(Http402PaymentEvent)
    async def on_challenge(event, deps):
        seen.append(("challenge", deps.amount_sats))

    async def on_success(event, deps):
        seen.append(("success", event.context.amount_sats))

    app.add_hook(AuthorizationSuccessEvent, on_success)

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        await client.get("/api/quote")
        await client.get("/api/quote", headers={"Authorization": encode_proof(payment_hash, preimage)})

    assert seen == [("challenge", 5), ("success", 5)]


def test_decorated_route_exposes_gate(wallet):
    app = Http402Server(wallet=wallet)

    @app.payment_required(amount_sats=21, description="haiku", expiry_seconds=60)
    async def haiku(request: Request):
        """Paid haiku."""

    assert haiku.__name__ == "haiku"
    assert haiku.__doc__ == "Paid haiku."
    assert haiku.gate.amount_sats == 21
    assert haiku.gate.expiry_seconds == 60
    assert haiku.gate.event_bus is app.event_bus


class TestEnvironmentPricing:

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in ("L402_PRICE_SATS", "L402_DESCRIPTION", "L402_EXPIRY_SECONDS"):
            monkeypatch.delenv(name, raising=False)

    @pytest.mark.asyncio
    async def test_price_from_environment(self, monkeypatch, wallet):
        monkeypatch.setenv("L402_PRICE_SATS", "13")
        monkeypatch.setenv("L402_DESCRIPTION", "fortune")
        monkeypatch.setenv("L402_EXPIRY_SECONDS", "90")
        app = Http402Server(wallet=wallet)

        @app.get("/api/fortune")
        @app.payment_required()
        async def fortune(request: Request):
            return {"fortune": True}

        assert fortune.gate.amount_sats == 13
        assert fortune.gate.expiry_seconds == 90

        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/api/fortune")

        assert response.status_code == 402
        assert response.json()["amountSats"] == 13
        assert response.json()["description"] == "fortune"

    def test_explicit_arguments_win(self, monkeypatch, wallet):
        monkeypatch.setenv("L402_PRICE_SATS", "13")
        monkeypatch.setenv("L402_DESCRIPTION", "fortune")
        app = Http402Server(wallet=wallet)

        @app.payment_required(description="custom", expiry_seconds=30)
        async def route(request: Request):
            pass

        assert route.gate.amount_sats == 13
        assert route.gate.description == "custom"
        assert route.gate.expiry_seconds == 30

    def test_missing_price_is_a_configuration_error(self, wallet):
        app = Http402Server(wallet=wallet)
        with pytest.raises(ConfigurationError):
            app.payment_required()


def test_explicit_zero_expiry_is_rejected(wallet):
    app = Http402Server(wallet=wallet, default_expiry_seconds=600)
    with pytest.raises(ConfigurationError):
        app.payment_required(amount_sats=1, expiry_seconds=0)


def test_env_price_without_env_expiry_uses_server_default(monkeypatch, wallet):
    monkeypatch.setenv("L402_PRICE_SATS", "2")
    monkeypatch.delenv("L402_EXPIRY_SECONDS", raising=False)
    app = Http402Server(wallet=wallet, default_expiry_seconds=120)

    @app.payment_required()
    async def route(request: Request):
        pass

    assert route.gate.expiry_seconds == 120
    assert app.gate(1).expiry_seconds == 120
