"""
L402 Header Codec

Encodes and decodes the two header values of the L402 protocol:

    WWW-Authenticate: L402 invoice="<invoice>", macaroon="<payment-hash-hex>"
    Authorization:    L402 <payment-hash-hex>:<preimage-hex>

In this scheme the macaroon IS the payment hash of the invoice, so a proof is
checked by hashing the preimage (see ``servers.security.verify_preimage``).

Headers arrive from untrusted peers: every decoder returns ``None`` on
malformed input instead of raising.
"""

import re
from typing import Optional

from pydantic import Field

from .bases import FrozenModel

L402_SCHEME = "L402"

_PREFIX = f"{L402_SCHEME.lower()} "
_HEX_RE = re.compile(r"[0-9a-fA-F]+")
_INVOICE_RE = re.compile(r'invoice="([^"]+)"', re.IGNORECASE)
_MACAROON_RE = re.compile(r'macaroon="([^"]+)"', re.IGNORECASE)


class L402Challenge(FrozenModel):
    """Challenge carried by a 402 response.

    Attributes:
        invoice: Payment target the payer has to settle (bolt11 string).
        macaroon: Payment hash (hex) identifying the obligation.
    """
    invoice: str = Field(..., description="Invoice to pay")
    macaroon: str = Field(..., description="Payment hash the preimage must hash to")


class L402Proof(FrozenModel):
    """Proof of payment presented by a caller.

    Attributes:
        macaroon: Payment hash (hex) of the settled invoice.
        preimage: Preimage (hex) revealed by settling the invoice.
    """
    macaroon: str = Field(..., description="Payment hash (hex)")
    preimage: str = Field(..., description="Payment preimage (hex)")


def _strip_scheme(header: Optional[str]) -> Optional[str]:
    if not header or not isinstance(header, str):
        return None
    trimmed = header.strip()
    if trimmed[:len(_PREFIX)].lower() != _PREFIX:
        return None
    return trimmed[len(_PREFIX):]


def _is_hex(value: str) -> bool:
    return _HEX_RE.fullmatch(value) is not None


def encode_challenge(invoice: str, macaroon: str) -> str:
    """
    Build the WWW-Authenticate header value for a 402 response.

    Args:
        invoice: Bolt11 invoice string.
        macaroon: Payment hash (hex).

    Returns:
        Header value, e.g. ``L402 invoice="lnbc...", macaroon="ab12..."``.
    """
    return f'{L402_SCHEME} invoice="{invoice}", macaroon="{macaroon}"'


def decode_challenge(header: Optional[str]) -> Optional[L402Challenge]:
    """
    Parse a WWW-Authenticate header value into an L402Challenge.

    The scheme token and field names are matched case-insensitively and the
    order of the two fields is not significant.

    Args:
        header: Raw header value (may be None).

    Returns:
        L402Challenge, or None when the scheme or either field is missing.
    """
    rest = _strip_scheme(header)
    if rest is None:
        return None

    invoice_match = _INVOICE_RE.search(rest)
    macaroon_match = _MACAROON_RE.search(rest)
    if not invoice_match or not macaroon_match:
        return None

    return L402Challenge(invoice=invoice_match.group(1), macaroon=macaroon_match.group(1))


def encode_proof(macaroon: str, preimage: str) -> str:
    """
    Build the Authorization header value carrying a proof of payment.

    Args:
        macaroon: Payment hash (hex).
        preimage: Payment preimage (hex).

    Returns:
        Header value, e.g. ``L402 ab12...:cd34...``.
    """
    return f"{L402_SCHEME} {macaroon}:{preimage}"


def decode_proof(header: Optional[str]) -> Optional[L402Proof]:
    """
    Parse an Authorization header value into an L402Proof.

    The token after the scheme is split on the first ``:``. Both halves must
    be non-empty and consist of hex digits only.

    Args:
        header: Raw header value (may be None).

    Returns:
        L402Proof, or None when the header is not a well-formed L402 proof.
    """
    rest = _strip_scheme(header)
    if rest is None:
        return None

    macaroon, sep, preimage = rest.strip().partition(":")
    if not sep or not macaroon or not preimage:
        return None
    if not _is_hex(macaroon) or not _is_hex(preimage):
        return None

    return L402Proof(macaroon=macaroon, preimage=preimage)
