import pytest

from l402_agent.adapters.bolt11 import amount_msat_from_invoice, amount_sats_from_invoice


@pytest.mark.parametrize("invoice, sats", [
    ("lnbc500n1pabcdef", 50),
    ("lnbc10n1pabcdef", 1),
    ("lnbc2500u1pabcdef", 250_000),
    ("lnbc1m1pabcdef", 100_000),
    ("lnbc1bitcoin1pabcdef", None),
    ("lntb210n1pabcdef", 21),
    ("lnbcrt50n1pabcdef", 5),
    ("LNBC500N1PABCDEF", 50),
    ("lnbc1pabcdef", None),
])
def test_amount_sats_from_invoice(invoice, sats):
    assert amount_sats_from_invoice(invoice) == sats


def test_whole_bitcoin_amount():
    assert amount_msat_from_invoice("lnbc11pabc") == 100_000_000_000
    assert amount_sats_from_invoice("lnbc21pabc") == 200_000_000


def test_pico_amounts():
    assert amount_msat_from_invoice("lnbc10p1pabc") == 1
    assert amount_msat_from_invoice("lnbc15p1pabc") is None


@pytest.mark.parametrize("invoice", ["", "not-an-invoice", None, 123])
def test_unrecognized_invoice(invoice):
    assert amount_msat_from_invoice(invoice) is None
