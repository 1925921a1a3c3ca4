import asyncio
import logging
import os

import httpx

from l402_agent import Http402Client, LNbitsWallet, PaymentReceipt

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

BASE_URL = os.getenv("L402_DEMO_URL", "http://localhost:8000")


def on_payment(receipt: PaymentReceipt) -> None:
    print(f"Paid {receipt.amount_sats} sats, preimage {receipt.preimage[:16]}...")


async def run(client: Http402Client) -> None:
    for path in ("/", "/api/ping", "/api/quote", "/api/haiku", "/api/haiku"):
        response = await client.get(path)
        print(path, response.status_code, response.json())


async def main():
    if os.getenv("LNBITS_URL"):
        # Pay the server over Lightning with an LNbits admin key
        wallet = LNbitsWallet.from_env()
        async with Http402Client(
            wallet=wallet,
            max_amount_sats=50,
            on_payment=on_payment,
            base_url=BASE_URL,
            timeout=httpx.Timeout(60.0, read=120.0),
        ) as client:
            await run(client)
        await wallet.aclose()
        return

    # Without a node: run the demo server in-process, sharing its mock wallet
    from server_example import app, wallet

    async with Http402Client(
        wallet=wallet,
        max_amount_sats=50,
        on_payment=on_payment,
        transport=httpx.ASGITransport(app=app),
        base_url="http://demo",
    ) as client:
        await run(client)


if __name__ == "__main__":
    asyncio.run(main())
