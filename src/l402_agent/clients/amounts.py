"""
Invoice amount resolution for spending caps.

The amount of an L402 challenge is learned best-effort, in order:

1. ``amount_from_wallet``: the wallet's own ``decode_invoice``
2. ``amount_from_body``: the ``amountSats`` field of the 402 JSON body

``resolve_amount`` never raises; it returns None when neither strategy
yields an amount, in which case no cap can be enforced.
"""

import inspect
import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


def _as_amount(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value < 0:
        return None
    return int(value)


async def amount_from_wallet(wallet: Any, invoice: str) -> Optional[int]:
    """
    Ask the wallet to decode the invoice amount.

    Args:
        wallet: Wallet adapter; wallets without ``decode_invoice`` are skipped.
            Sync and async decoders are both accepted.
        invoice: Invoice to decode.

    Returns:
        Amount in satoshis, or None when the wallet cannot tell.
    """
    decode = getattr(wallet, "decode_invoice", None)
    if decode is None:
        return None

    try:
        decoded = decode(invoice)
        if inspect.isawaitable(decoded):
            decoded = await decoded
    except NotImplementedError:
        return None
    except Exception as e:
        logger.debug("Invoice decode failed, amount unknown: %s", e)
        return None

    if isinstance(decoded, dict):
        return _as_amount(decoded.get("amount_sats", decoded.get("amountSats")))
    return _as_amount(getattr(decoded, "amount_sats", None))


def amount_from_body(response: httpx.Response) -> Optional[int]:
    """
    Read ``amountSats`` from a 402 response body.

    Args:
        response: The 402 response (already read).

    Returns:
        Amount in satoshis, or None when the body is not JSON or lacks the field.
    """
    try:
        body = response.json()
    except ValueError:
        return None

    if not isinstance(body, dict):
        return None
    return _as_amount(body.get("amountSats"))


async def resolve_amount(wallet: Any, invoice: str, response: httpx.Response) -> Optional[int]:
    """
    Determine the amount of a challenge, wallet decode first, body second.

    Args:
        wallet: Wallet adapter of the client.
        invoice: Invoice from the challenge.
        response: The 402 response carrying the challenge.

    Returns:
        Amount in satoshis, or None if it cannot be determined.
    """
    amount = await amount_from_wallet(wallet, invoice)
    if amount is not None:
        return amount
    return amount_from_body(response)
