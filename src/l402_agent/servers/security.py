import hashlib
import hmac
import re
import secrets
from typing import Any

_HEX_RE = re.compile(r"(?:[0-9a-fA-F]{2})+")


def generate_preimage(length: int = 32) -> str:
    """
    Generate a random payment preimage.

    Args:
        length: Number of random bytes.

    Returns:
        Hex-encoded preimage.
    """
    return secrets.token_hex(length)


def payment_hash_for(preimage: str) -> str:
    """
    Compute the payment hash (sha256, hex) of a hex-encoded preimage.

    Args:
        preimage: Hex-encoded preimage.

    Returns:
        Lower-case hex digest.

    Raises:
        ValueError: If preimage is not an even-length run of hex digits.
    """
    if _HEX_RE.fullmatch(preimage) is None:
        raise ValueError(f"Not a hex-encoded preimage: {preimage!r}")
    return hashlib.sha256(bytes.fromhex(preimage)).hexdigest()


def verify_preimage(preimage: Any, payment_hash: Any) -> bool:
    """
    Check that a preimage hashes to the expected payment hash.

    Never raises: malformed hex, empty strings and non-string input all
    verify as False.

    Args:
        preimage: Hex-encoded preimage.
        payment_hash: Hex-encoded expected payment hash (any case).

    Returns:
        True if sha256(preimage) == payment_hash.
    """
    if not isinstance(preimage, str) or not isinstance(payment_hash, str):
        return False
    if not preimage:
        return False

    try:
        actual = payment_hash_for(preimage)
    except ValueError:
        return False

    return hmac.compare_digest(actual.encode(), payment_hash.lower().encode())
