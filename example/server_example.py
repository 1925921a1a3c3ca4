import logging
import os

from fastapi import Request

from l402_agent import Http402Server, LNbitsWallet, MockWallet
from l402_agent.engine.events import AuthorizationSuccessEvent, Http402PaymentEvent, InvoiceFailedEvent

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("l402_example.server")

# Real invoices when LNbits is configured, in-memory ones otherwise
wallet = LNbitsWallet.from_env() if os.getenv("LNBITS_URL") else MockWallet()

app = Http402Server(
    wallet=wallet,
    title="L402 Demo API",
)


# Optional: Add event hooks for custom logic
@app.hook(Http402PaymentEvent)
async def on_challenge(event, deps):
    logger.info("Challenge issued: %s sats, hash %s", deps.amount_sats, event.challenge.macaroon)


@app.hook(AuthorizationSuccessEvent)
async def on_paid_access(event, deps):
    logger.info("Paid access: %s sats, hash %s", event.context.amount_sats, event.context.payment_hash)


@app.hook(InvoiceFailedEvent)
async def on_invoice_failed(event, deps):
    logger.error("Invoice creation failed: %s", event.error_message)


@app.get("/")
async def index():
    """Free endpoint listing the priced ones."""
    return {
        "endpoints": {
            "/api/ping": "1 sat",
            "/api/quote": "5 sats",
            "/api/haiku": "21 sats",
        }
    }


@app.get("/api/ping")
@app.payment_required(amount_sats=1, description="ping")
async def ping(request: Request):
    return {"pong": True}


@app.get("/api/quote")
@app.payment_required(amount_sats=5, description="Quote of the day")
async def quote(request: Request):
    return {
        "quote": "Running bitcoin.",
        "paid_sats": request.state.l402.amount_sats,
    }


@app.get("/api/haiku")
@app.payment_required(amount_sats=21, description="A haiku")
async def haiku(request: Request):
    return {
        "haiku": ["Invoice in the header", "a preimage comes back", "the door swings open"],
        "payment_hash": request.state.l402.payment_hash,
    }


# Priced from L402_PRICE_SATS / L402_DESCRIPTION / L402_EXPIRY_SECONDS
if os.getenv("L402_PRICE_SATS"):
    @app.get("/api/fortune")
    @app.payment_required()
    async def fortune(request: Request):
        return {"fortune": "A small payment opens a large door."}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="localhost", port=8000, log_level="info")
