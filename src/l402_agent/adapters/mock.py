"""
In-memory Mock Wallet

A single MockWallet instance plays both sides of a Lightning payment: the
gate uses it to issue invoices and the client uses the same instance to pay
them. Paying an invoice the wallet issued reveals its real preimage, so the
whole L402 flow (challenge -> pay -> replay -> verify) runs end to end
without a node.

Usage:
    wallet = MockWallet()
    created = await wallet.create_invoice(InvoiceRequest(amount_sats=21))
    paid = await wallet.pay_invoice(created.invoice)
    assert verify_preimage(paid.preimage, created.payment_hash)
"""

import logging
import secrets
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from ..engine.exceptions import InvoiceCreationError, WalletError
from ..schemas.payments import InvoiceRequest, CreatedInvoice, PaidInvoice, DecodedInvoice
from ..servers.security import generate_preimage, payment_hash_for
from .bases import WalletAdapter
from .bolt11 import amount_sats_from_invoice

logger = logging.getLogger(__name__)

_BECH32_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"


@dataclass
class MockInvoice:
    """Ledger record of an invoice issued by the mock wallet."""
    invoice: str
    payment_hash: str
    preimage: str
    amount_sats: int
    description: str
    expires_at: float
    settled: bool = False


@dataclass
class MockWallet(WalletAdapter):
    """
    In-memory wallet issuing and settling its own invoices.

    Attributes:
        balance_sats: Spendable balance; None means unlimited.
        network_prefix: Bolt11 prefix of issued invoices ("lnbc", "lntb", ...).
        clock: Time source for invoice expiry.
        invoices: Issued invoices keyed by invoice string.
        payments: Invoices paid through this wallet, in order.
    """
    balance_sats: Optional[int] = None
    network_prefix: str = "lnbc"
    clock: Callable[[], float] = time.time
    invoices: Dict[str, MockInvoice] = field(default_factory=dict)
    payments: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._lock = threading.Lock()

    def _encode_invoice(self, amount_sats: int) -> str:
        data = "".join(secrets.choice(_BECH32_CHARSET) for _ in range(52))
        # 1 sat == 10 nano-BTC
        return f"{self.network_prefix}{amount_sats * 10}n1p{data}"

    async def create_invoice(self, request: InvoiceRequest) -> CreatedInvoice:
        if request.amount_sats <= 0:
            raise InvoiceCreationError("Invoice amount must be positive")

        preimage = generate_preimage()
        record = MockInvoice(
            invoice=self._encode_invoice(request.amount_sats),
            payment_hash=payment_hash_for(preimage),
            preimage=preimage,
            amount_sats=request.amount_sats,
            description=request.description,
            expires_at=self.clock() + request.expiry,
        )
        with self._lock:
            self.invoices[record.invoice] = record

        logger.debug("Mock invoice issued: %s sats, hash %s", record.amount_sats, record.payment_hash)
        return CreatedInvoice(invoice=record.invoice, payment_hash=record.payment_hash)

    async def pay_invoice(self, invoice: str) -> PaidInvoice:
        with self._lock:
            record = self.invoices.get(invoice)
            if record is None:
                raise WalletError("Unknown invoice")
            if record.settled:
                raise WalletError("Invoice already paid")
            if self.clock() > record.expires_at:
                raise WalletError("Invoice expired")
            if self.balance_sats is not None:
                if self.balance_sats < record.amount_sats:
                    raise WalletError(
                        f"Insufficient balance: {self.balance_sats} < {record.amount_sats} sats"
                    )
                self.balance_sats -= record.amount_sats

            record.settled = True
            self.payments.append(invoice)

        logger.debug("Mock invoice paid: %s sats, hash %s", record.amount_sats, record.payment_hash)
        return PaidInvoice(preimage=record.preimage, payment_hash=record.payment_hash)

    async def decode_invoice(self, invoice: str) -> DecodedInvoice:
        record = self.invoices.get(invoice)
        if record is not None:
            return DecodedInvoice(
                amount_sats=record.amount_sats,
                payment_hash=record.payment_hash,
                description=record.description,
            )
        return DecodedInvoice(amount_sats=amount_sats_from_invoice(invoice))
