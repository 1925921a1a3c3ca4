from .bases import WalletAdapter
from .bolt11 import amount_msat_from_invoice, amount_sats_from_invoice
from .mock import MockWallet, MockInvoice
from .lnbits import LNbitsWallet

__all__ = [
    "WalletAdapter",
    "amount_msat_from_invoice",
    "amount_sats_from_invoice",
    "MockWallet",
    "MockInvoice",
    "LNbitsWallet",
]
