"""
Tests for the wire payload models (aliases and canonical serialization).
"""
import json

import pytest
from pydantic import ValidationError

from l402_agent.schemas import (
    InvoiceRequest,
    L402Context,
    L402Credential,
    Server402ResponsePayload,
    ServerErrorPayload,
)


def test_402_payload_uses_camel_case_keys():
    payload = Server402ResponsePayload(
        amount_sats=5,
        description="quote",
        invoice="lnbc50n1p",
        payment_hash="ab12",
    )
    assert payload.to_dict() == {
        "error": "Payment Required",
        "amountSats": 5,
        "description": "quote",
        "invoice": "lnbc50n1p",
        "paymentHash": "ab12",
    }


def test_payload_accepts_aliases():
    payload = Server402ResponsePayload(amountSats=1, description="d", invoice="i", paymentHash="h")
    assert payload.amount_sats == 1
    assert payload.payment_hash == "h"


def test_error_payload_defaults():
    assert ServerErrorPayload(message="down").to_dict() == {
        "error": "Failed to create invoice",
        "message": "down",
    }


def test_canonical_json_is_sorted_and_compact():
    context = L402Context(payment_hash="ab", preimage="cd", amount_sats=3)
    canonical = context.to_canonical_json()
    assert canonical == '{"amountSats":3,"paymentHash":"ab","preimage":"cd"}'
    assert json.loads(canonical)["amountSats"] == 3


@pytest.mark.parametrize("amount", [0, -1])
def test_invoice_request_rejects_non_positive_amount(amount):
    with pytest.raises(ValidationError):
        InvoiceRequest(amount_sats=amount)


def test_credential_expiry_defaults_to_none():
    assert L402Credential(macaroon="ab", preimage="cd").expires_at is None
