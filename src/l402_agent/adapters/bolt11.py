"""
Bolt11 human-readable-part helpers.

Only the amount encoded in the invoice prefix is read here; the signed data
part is never parsed. ``lnbc500n1...`` is 500 nano-BTC, i.e. 50 sats.
"""

import re
from typing import Optional

_HRP_RE = re.compile(r"^ln(bcrt|bc|tbs|tb|sb)(\d*)([munp]?)1", re.IGNORECASE)

# millisatoshis per unit of each multiplier
_MSAT_PER_UNIT = {
    "": 100_000_000_000,
    "m": 100_000_000,
    "u": 100_000,
    "n": 100,
}


def amount_msat_from_invoice(invoice: str) -> Optional[int]:
    """
    Read the amount (millisatoshis) from a bolt11 invoice prefix.

    Args:
        invoice: Bolt11 invoice string.

    Returns:
        Amount in millisatoshis, or None for amountless or unrecognized invoices.
    """
    if not isinstance(invoice, str):
        return None

    match = _HRP_RE.match(invoice.strip())
    if not match or not match.group(2):
        return None

    value = int(match.group(2))
    multiplier = match.group(3).lower()

    if multiplier == "p":
        # pico-BTC must land on whole millisatoshis
        if value % 10:
            return None
        return value // 10
    return value * _MSAT_PER_UNIT[multiplier]


def amount_sats_from_invoice(invoice: str) -> Optional[int]:
    """
    Read the amount (satoshis, rounded down) from a bolt11 invoice prefix.

    Args:
        invoice: Bolt11 invoice string.

    Returns:
        Amount in satoshis, or None when the invoice carries no amount.
    """
    msat = amount_msat_from_invoice(invoice)
    if msat is None:
        return None
    return msat // 1000
